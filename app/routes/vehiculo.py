# backEnd/app/routes/vehiculo.py
from fastapi import APIRouter, Depends, status

from ..database import RegistroConexiones, get_registro
from ..schemas.vehiculo import VehiculoCreate, VehiculoUpdate
from ..services import vehiculo_service
from ..utils.respuestas import responder

router = APIRouter(
    prefix="/api/vehiculos",
    tags=["vehiculos"]
)


@router.get("/")
async def read_vehiculos(registro: RegistroConexiones = Depends(get_registro)):
    return responder(await vehiculo_service.obtener_vehiculos(registro))


@router.get("/{placa}")
async def read_vehiculo(placa: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await vehiculo_service.obtener_vehiculo(registro, placa))


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_vehiculo(vehiculo: VehiculoCreate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await vehiculo_service.crear_vehiculo(registro, vehiculo), status.HTTP_201_CREATED)


@router.put("/{placa}")
async def update_vehiculo(placa: str, vehiculo: VehiculoUpdate, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await vehiculo_service.actualizar_vehiculo(registro, placa, vehiculo))


@router.delete("/{placa}")
async def delete_vehiculo(placa: str, registro: RegistroConexiones = Depends(get_registro)):
    return responder(await vehiculo_service.eliminar_vehiculo(registro, placa))
