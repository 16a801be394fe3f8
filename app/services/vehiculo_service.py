# backEnd/app/services/vehiculo_service.py
from typing import Any, Dict, List
import logging

from sqlalchemy.orm import Session

from ..models import Cliente
from ..models.enums import Entidad
from ..schemas.respuesta import Respuesta
from ..schemas.vehiculo import VehiculoCreate, VehiculoUpdate
from ..utils.filas import fila_a_dict, ordenar_consulta
from .agregacion import consulta_por, leer_replicada
from .clasificador import RegistroNoEncontrado, SedesInaccesibles
from .replicacion import actualizar, eliminar, escribir_en_todas, insertar

logger = logging.getLogger(__name__)


def _con_propietario(db: Session, modelo) -> List[Dict[str, Any]]:
    query = (
        db.query(modelo, Cliente.nombre_cliente, Cliente.apellido_cliente)
        .outerjoin(Cliente, Cliente.cedula_cliente == modelo.cedula_cliente)
    )
    resultado = []
    for vehiculo, nombre, apellido in ordenar_consulta(query, modelo).all():
        fila = fila_a_dict(vehiculo)
        fila["nombre_cliente"] = nombre
        fila["apellido_cliente"] = apellido
        resultado.append(fila)
    return resultado


async def obtener_vehiculos(registro) -> Respuesta:
    try:
        sede, vehiculos = await leer_replicada(registro, Entidad.vehiculo, _con_propietario)
    except SedesInaccesibles as e:
        return Respuesta(success=False, message=e.message, data=[], errorDetails=e.error_details())
    return Respuesta(
        success=True,
        message=f"{len(vehiculos)} vehículos encontrados (sede {sede.value})",
        data=vehiculos,
    )


async def obtener_vehiculo(registro, placa: str) -> Respuesta:
    _, filas = await leer_replicada(registro, Entidad.vehiculo, consulta_por(placa=placa))
    if not filas:
        raise RegistroNoEncontrado(f"Vehículo con placa {placa} no encontrado")
    return Respuesta(success=True, message="Vehículo encontrado", data=filas[0])


async def crear_vehiculo(registro, vehiculo_data: VehiculoCreate) -> Respuesta:
    valores = vehiculo_data.model_dump()
    logger.info(f"Creando vehículo {valores['placa']} en todas las sedes")
    replicacion = await escribir_en_todas(registro, Entidad.vehiculo, insertar(valores))
    return Respuesta(
        success=replicacion.overall_success,
        message=replicacion.mensaje("Vehículo creado"),
        data=valores if replicacion.overall_success else None,
        detalles=replicacion.detalles(),
    )


async def actualizar_vehiculo(registro, placa: str, vehiculo_data: VehiculoUpdate) -> Respuesta:
    valores = vehiculo_data.model_dump()
    replicacion = await escribir_en_todas(registro, Entidad.vehiculo, actualizar({"placa": placa}, valores))
    if replicacion.overall_success and replicacion.filas_afectadas == 0:
        raise RegistroNoEncontrado(f"Vehículo con placa {placa} no encontrado en ninguna sede")
    return Respuesta(
        success=replicacion.overall_success,
        message=replicacion.mensaje("Vehículo actualizado"),
        data={"placa": placa, **valores},
        detalles=replicacion.detalles(),
    )


async def eliminar_vehiculo(registro, placa: str) -> Respuesta:
    replicacion = await escribir_en_todas(registro, Entidad.vehiculo, eliminar({"placa": placa}))
    if replicacion.overall_success and replicacion.filas_afectadas == 0:
        raise RegistroNoEncontrado(f"Vehículo con placa {placa} no encontrado en ninguna sede")
    return Respuesta(
        success=replicacion.overall_success,
        message=replicacion.mensaje("Vehículo eliminado"),
        data={"placa": placa},
        detalles=replicacion.detalles(),
    )
