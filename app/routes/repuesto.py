# backEnd/app/routes/repuesto.py
from fastapi import APIRouter, Depends, status

from ..database import RegistroConexiones, get_registro
from ..schemas.repuesto import RepuestoCreate, RepuestoUpdate
from ..services import repuesto_service
from ..utils.respuestas import responder

router = APIRouter(
    prefix="/api/repuestos",
    tags=["repuestos"]
)


@router.get("/")
async def read_repuestos(registro: RegistroConexiones = Depends(get_registro)):
    """Une los repuestos de todas las sedes que respondan."""
    return responder(await repuesto_service.obtener_todos_repuestos(registro))


@router.get("/sede/{sede}")
async def read_repuestos_sede(sede: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await repuesto_service.obtener_repuestos_por_sede(registro, sede))


@router.get("/{id_repuesto}/{sede}")
async def read_repuesto(id_repuesto: int, sede: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await repuesto_service.obtener_repuesto(registro, sede, id_repuesto))


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_repuesto(repuesto: RepuestoCreate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await repuesto_service.crear_repuesto(registro, repuesto), status.HTTP_201_CREATED)


@router.put("/{id_repuesto}")
async def update_repuesto(id_repuesto: int, repuesto: RepuestoUpdate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await repuesto_service.actualizar_repuesto(registro, id_repuesto, repuesto))


@router.delete("/{id_repuesto}/{sede}")
async def delete_repuesto(id_repuesto: int, sede: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await repuesto_service.eliminar_repuesto(registro, id_repuesto, sede))
