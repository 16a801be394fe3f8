# backEnd/app/routes/estado.py
from fastapi import APIRouter, Depends

from ..database import RegistroConexiones, get_registro
from ..services import resumen_service
from ..utils.respuestas import responder

router = APIRouter(
    prefix="/api",
    tags=["Estado"]
)


@router.get("/status")
def estado_conexiones(registro: RegistroConexiones = Depends(get_registro)):
    """Estado del último intento de conexión de cada sede (no vuelve a conectar)."""
    resumen = registro.resumen()
    return {
        "success": True,
        "message": f"{resumen['summary']['connected']} de {resumen['summary']['total']} sedes conectadas",
        "data": resumen,
    }


@router.get("/diagnostico")
async def diagnostico(registro: RegistroConexiones = Depends(get_registro)):
    return responder(await resumen_service.diagnosticar(registro))


@router.get("/diagnostico/{sede}")
async def diagnostico_sede(sede: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await resumen_service.diagnosticar_sede(registro, sede))
