# backEnd/app/routes/reparacion.py
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from ..database import RegistroConexiones, get_registro
from ..schemas.reparacion import ReparacionCreate, ReparacionUpdate
from ..services import reparacion_service
from ..utils.respuestas import responder

router = APIRouter(
    prefix="/api/reparaciones",
    tags=["reparaciones"]
)


@router.get("/")
async def read_reparaciones(registro: RegistroConexiones = Depends(get_registro)):
    return responder(await reparacion_service.obtener_todas_reparaciones(registro))


@router.get("/sede/{sede}")
async def read_reparaciones_sede(sede: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await reparacion_service.obtener_reparaciones_por_sede(registro, sede))


@router.get("/{id_reparacion}/repuestos")
async def read_repuestos_reparacion(
    id_reparacion: int,
    sede: Optional[str] = Query(None, description="Sede de la reparación; si se omite se busca en todas"),
    registro: RegistroConexiones = Depends(get_registro),
):
    return responder(await reparacion_service.obtener_repuestos_de_reparacion(registro, id_reparacion, sede))


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_reparacion(reparacion: ReparacionCreate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await reparacion_service.crear_reparacion(registro, reparacion), status.HTTP_201_CREATED)


@router.put("/{id_reparacion}")
async def update_reparacion(
    id_reparacion: int,
    reparacion: ReparacionUpdate,
    registro: RegistroConexiones = Depends(get_registro),
):
    return responder(await reparacion_service.actualizar_reparacion(registro, id_reparacion, reparacion))


@router.delete("/{id_reparacion}")
async def delete_reparacion(
    id_reparacion: int,
    sede: Optional[str] = Query(None, description="Sede de la reparación; si se omite se busca en todas"),
    registro: RegistroConexiones = Depends(get_registro),
):
    return responder(await reparacion_service.eliminar_reparacion(registro, id_reparacion, sede))
