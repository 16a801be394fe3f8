# backEnd/app/routes/reportes.py
from fastapi import APIRouter, Depends

from ..database import RegistroConexiones, get_registro
from ..services import resumen_service
from ..utils.respuestas import responder

router = APIRouter(
    prefix="/api",
    tags=["Reportes"]
)


@router.get("/resumen-sedes")
async def resumen_sedes(registro: RegistroConexiones = Depends(get_registro)):
    return responder(await resumen_service.obtener_resumen_por_sedes(registro))


@router.get("/estadisticas")
async def estadisticas(registro: RegistroConexiones = Depends(get_registro)):
    return responder(await resumen_service.obtener_estadisticas(registro))
