# backEnd/app/services/repuesto_service.py
import logging

from ..models.enums import Entidad
from ..schemas.repuesto import RepuestoCreate, RepuestoUpdate
from ..schemas.respuesta import Respuesta
from ..utils.filas import fila_a_dict, siguiente_id
from .agregacion import consulta_por, leer_todas, leer_una
from .clasificador import DatosInvalidos, RegistroNoEncontrado, SedesInaccesibles
from .fragmentacion import EnrutadorFragmentos
from .nodos import en_sede

logger = logging.getLogger(__name__)


async def obtener_repuestos_por_sede(registro, sede: str) -> Respuesta:
    repuestos = await leer_una(registro, Entidad.repuesto, sede)
    return Respuesta(success=True, message=f"{len(repuestos)} repuestos en la sede", data=repuestos)


async def obtener_todos_repuestos(registro) -> Respuesta:
    try:
        lectura = await leer_todas(registro, Entidad.repuesto)
    except SedesInaccesibles as e:
        return Respuesta(success=False, message=e.message, data=[], errorDetails=e.error_details())
    return Respuesta(
        success=True,
        message=f"{len(lectura.filas)} repuestos obtenidos de {len(lectura.sedes_consultadas)} sede(s)",
        data=lectura.filas,
        detalles=lectura.detalles(),
    )


async def obtener_repuesto(registro, sede: str, id_repuesto: int) -> Respuesta:
    filas = await leer_una(registro, Entidad.repuesto, sede, consulta_por(id_repuesto=id_repuesto))
    if not filas:
        raise RegistroNoEncontrado(f"Repuesto {id_repuesto} no encontrado en la sede {sede}")
    return Respuesta(success=True, message="Repuesto encontrado", data=filas[0])


async def crear_repuesto(registro, repuesto_data: RepuestoCreate) -> Respuesta:
    sede, modelo = EnrutadorFragmentos(registro.sedes).fragmento(Entidad.repuesto, repuesto_data.sede_taller)
    valores = repuesto_data.model_dump(exclude={"sede_taller"})

    def _crear(db):
        repuesto = modelo(
            id_repuesto=siguiente_id(db, modelo, "id_repuesto"),
            sede_taller=sede.value,
            **valores,
        )
        db.add(repuesto)
        db.flush()
        return fila_a_dict(repuesto)

    creado = await en_sede(registro, sede, _crear)
    logger.info(f"Repuesto {creado['id_repuesto']} creado en {sede.value}")
    return Respuesta(success=True, message=f"Repuesto creado en {sede.value}", data=creado)


async def actualizar_repuesto(registro, id_repuesto: int, repuesto_data: RepuestoUpdate) -> Respuesta:
    sede, modelo = EnrutadorFragmentos(registro.sedes).fragmento(Entidad.repuesto, repuesto_data.sede_taller)
    valores = repuesto_data.model_dump(exclude={"sede_taller"}, exclude_none=True)
    if not valores:
        raise DatosInvalidos("No se indicó ningún campo para actualizar")

    def _actualizar(db):
        repuesto = db.query(modelo).filter(modelo.id_repuesto == id_repuesto).first()
        if repuesto is None:
            return None
        for campo, valor in valores.items():
            setattr(repuesto, campo, valor)
        db.flush()
        return fila_a_dict(repuesto)

    actualizado = await en_sede(registro, sede, _actualizar)
    if actualizado is None:
        raise RegistroNoEncontrado(f"Repuesto {id_repuesto} no encontrado en la sede {sede.value}")
    return Respuesta(success=True, message=f"Repuesto actualizado en {sede.value}", data=actualizado)


async def eliminar_repuesto(registro, id_repuesto: int, sede: str) -> Respuesta:
    sede_valida, modelo = EnrutadorFragmentos(registro.sedes).fragmento(Entidad.repuesto, sede)

    def _eliminar(db):
        return db.query(modelo).filter(modelo.id_repuesto == id_repuesto).delete(synchronize_session=False)

    # Un repuesto usado en reparaciones produce ForeignKeyViolation en la sede
    eliminados = await en_sede(registro, sede_valida, _eliminar)
    if not eliminados:
        raise RegistroNoEncontrado(f"Repuesto {id_repuesto} no encontrado en la sede {sede_valida.value}")
    return Respuesta(
        success=True,
        message=f"Repuesto eliminado de {sede_valida.value}",
        data={"id_repuesto": id_repuesto, "sede_taller": sede_valida.value},
    )
