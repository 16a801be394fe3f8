# backEnd/app/routes/empleado.py
from fastapi import APIRouter, Depends, status

from ..database import RegistroConexiones, get_registro
from ..schemas.empleado import EmpleadoCreate, EmpleadoUpdate, NominaUpdate, TransferenciaEmpleado
from ..services import empleado_service
from ..utils.respuestas import responder

router = APIRouter(
    prefix="/api/empleados",
    tags=["empleados"]
)


# --- Lecturas ---
@router.get("/")
async def read_empleados(registro: RegistroConexiones = Depends(get_registro)):
    return responder(await empleado_service.obtener_empleados(registro))


@router.get("/nomina")
async def read_nomina(registro: RegistroConexiones = Depends(get_registro)):
    return responder(await empleado_service.obtener_nomina_completa(registro))


@router.get("/sede/{sede}")
async def read_empleados_sede(sede: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await empleado_service.obtener_empleados_por_sede(registro, sede))


# --- Escrituras (información fragmentada + nómina replicada) ---
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_empleado(empleado: EmpleadoCreate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await empleado_service.crear_empleado_completo(registro, empleado), status.HTTP_201_CREATED)


@router.put("/nomina/{cedula}")
async def update_nomina(cedula: str, nomina: NominaUpdate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await empleado_service.actualizar_nomina(registro, cedula, nomina))


@router.post("/{cedula}/transferir")
async def transfer_empleado(
    cedula: str,
    transferencia: TransferenciaEmpleado,
    registro: RegistroConexiones = Depends(get_registro),
):
    return responder(await empleado_service.transferir_empleado(registro, cedula, transferencia.sede_destino))


@router.put("/{cedula}")
async def update_empleado(cedula: str, empleado: EmpleadoUpdate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await empleado_service.actualizar_empleado(registro, cedula, empleado))


@router.delete("/{cedula}")
async def delete_empleado(cedula: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await empleado_service.eliminar_empleado(registro, cedula))
