# backEnd/app/services/cliente_service.py
import logging

from ..models.enums import Entidad
from ..schemas.cliente import ClienteCreate, ClienteUpdate
from ..schemas.respuesta import Respuesta
from .agregacion import consulta_por, leer_replicada
from .clasificador import RegistroNoEncontrado, SedesInaccesibles
from .replicacion import actualizar, eliminar, escribir_en_todas, insertar

logger = logging.getLogger(__name__)


async def obtener_clientes(registro) -> Respuesta:
    """Clientes replicados: basta con la primera sede que responda."""
    try:
        sede, clientes = await leer_replicada(registro, Entidad.cliente)
    except SedesInaccesibles as e:
        return Respuesta(success=False, message=e.message, data=[], errorDetails=e.error_details())
    return Respuesta(
        success=True,
        message=f"{len(clientes)} clientes encontrados (sede {sede.value})",
        data=clientes,
    )


async def obtener_cliente(registro, cedula: str) -> Respuesta:
    _, filas = await leer_replicada(registro, Entidad.cliente, consulta_por(cedula_cliente=cedula))
    if not filas:
        raise RegistroNoEncontrado(f"Cliente con cédula {cedula} no encontrado")
    return Respuesta(success=True, message="Cliente encontrado", data=filas[0])


async def crear_cliente(registro, cliente_data: ClienteCreate) -> Respuesta:
    valores = cliente_data.model_dump()
    logger.info(f"Creando cliente {valores['cedula_cliente']} en todas las sedes")
    replicacion = await escribir_en_todas(registro, Entidad.cliente, insertar(valores))
    return Respuesta(
        success=replicacion.overall_success,
        message=replicacion.mensaje("Cliente creado"),
        data=valores if replicacion.overall_success else None,
        detalles=replicacion.detalles(),
    )


async def actualizar_cliente(registro, cedula: str, cliente_data: ClienteUpdate) -> Respuesta:
    valores = cliente_data.model_dump()
    replicacion = await escribir_en_todas(
        registro, Entidad.cliente, actualizar({"cedula_cliente": cedula}, valores)
    )
    if replicacion.overall_success and replicacion.filas_afectadas == 0:
        raise RegistroNoEncontrado(f"Cliente con cédula {cedula} no encontrado en ninguna sede")
    return Respuesta(
        success=replicacion.overall_success,
        message=replicacion.mensaje("Cliente actualizado"),
        data={"cedula_cliente": cedula, **valores},
        detalles=replicacion.detalles(),
    )


async def eliminar_cliente(registro, cedula: str) -> Respuesta:
    replicacion = await escribir_en_todas(registro, Entidad.cliente, eliminar({"cedula_cliente": cedula}))
    if replicacion.overall_success and replicacion.filas_afectadas == 0:
        raise RegistroNoEncontrado(f"Cliente con cédula {cedula} no encontrado en ninguna sede")
    return Respuesta(
        success=replicacion.overall_success,
        message=replicacion.mensaje("Cliente eliminado"),
        data={"cedula_cliente": cedula},
        detalles=replicacion.detalles(),
    )
