# backEnd/app/routes/cliente.py
from fastapi import APIRouter, Depends, status

from ..database import RegistroConexiones, get_registro
from ..schemas.cliente import ClienteCreate, ClienteUpdate
from ..services import cliente_service
from ..utils.respuestas import responder

router = APIRouter(
    prefix="/api/clientes",
    tags=["clientes"]
)


# --- Clientes (replicados en todas las sedes) ---
@router.get("/")
async def read_clientes(registro: RegistroConexiones = Depends(get_registro)):
    return responder(await cliente_service.obtener_clientes(registro))


@router.get("/{cedula}")
async def read_cliente(cedula: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await cliente_service.obtener_cliente(registro, cedula))


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_cliente(cliente: ClienteCreate, registro: RegistroConexiones = Depends(get_registro)):
    """Inserta el cliente en cada sede; el detalle por sede indica dónde quedó pendiente."""
    return responder(await cliente_service.crear_cliente(registro, cliente), status.HTTP_201_CREATED)


@router.put("/{cedula}")
async def update_cliente(cedula: str, cliente: ClienteUpdate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await cliente_service.actualizar_cliente(registro, cedula, cliente))


@router.delete("/{cedula}")
async def delete_cliente(cedula: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await cliente_service.eliminar_cliente(registro, cedula))
