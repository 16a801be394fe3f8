# backEnd/app/services/reparacion_service.py
"""
Reparaciones fragmentadas por sede. La reparación, sus detalles y el descuento de stock
de los repuestos usados son una transacción local de la sede dueña: todas las tablas
involucradas viven en el mismo nodo, así que no se necesita coordinador distribuido.
"""
from collections import OrderedDict
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from ..models.enums import Entidad, SedeEnum
from ..schemas.reparacion import ReparacionCreate, ReparacionUpdate
from ..schemas.respuesta import Respuesta
from ..utils.filas import fila_a_dict, siguiente_id
from .agregacion import consulta_por, leer_todas, leer_una, localizar
from .clasificador import DatosInvalidos, RegistroNoEncontrado, SedesInaccesibles
from .fragmentacion import EnrutadorFragmentos
from .nodos import en_sede

logger = logging.getLogger(__name__)


def _modelos_de_sede(registro, sede):
    enrutador = EnrutadorFragmentos(registro.sedes)
    sede_valida, reparacion = enrutador.fragmento(Entidad.reparacion, sede)
    _, detalle = enrutador.fragmento(Entidad.reparacion_detalle, sede_valida)
    _, repuesto = enrutador.fragmento(Entidad.repuesto, sede_valida)
    return sede_valida, reparacion, detalle, repuesto


async def obtener_reparaciones_por_sede(registro, sede: str) -> Respuesta:
    reparaciones = await leer_una(registro, Entidad.reparacion, sede)
    return Respuesta(success=True, message=f"{len(reparaciones)} reparaciones en la sede", data=reparaciones)


async def obtener_todas_reparaciones(registro) -> Respuesta:
    try:
        lectura = await leer_todas(registro, Entidad.reparacion)
    except SedesInaccesibles as e:
        return Respuesta(success=False, message=e.message, data=[], errorDetails=e.error_details())
    return Respuesta(
        success=True,
        message=f"{len(lectura.filas)} reparaciones encontradas",
        data=lectura.filas,
        detalles=lectura.detalles(),
    )


async def crear_reparacion(registro, reparacion_data: ReparacionCreate) -> Respuesta:
    sede, modelo, modelo_detalle, modelo_repuesto = _modelos_de_sede(registro, reparacion_data.sede_taller)

    # Un mismo repuesto repetido en el formulario se suma en un solo detalle
    cantidades: Dict[int, int] = OrderedDict()
    for detalle in reparacion_data.repuestos:
        cantidades[detalle.id_repuesto] = cantidades.get(detalle.id_repuesto, 0) + detalle.cantidad_usada

    valores = reparacion_data.model_dump(exclude={"sede_taller", "repuestos"})

    def _crear(db: Session) -> Dict[str, Any]:
        repuestos = {}
        for id_repuesto, cantidad in cantidades.items():
            repuesto = db.query(modelo_repuesto).filter(modelo_repuesto.id_repuesto == id_repuesto).first()
            if repuesto is None:
                raise DatosInvalidos(f"El repuesto {id_repuesto} no existe en la sede {sede.value}")
            if repuesto.cantidad_repuesto < cantidad:
                raise DatosInvalidos(
                    f"Stock insuficiente para {repuesto.nombre_repuesto}: "
                    f"disponible {repuesto.cantidad_repuesto}, solicitado {cantidad}"
                )
            repuestos[id_repuesto] = repuesto

        reparacion = modelo(
            id_reparacion=siguiente_id(db, modelo, "id_reparacion"),
            sede_taller=sede.value,
            **valores,
        )
        db.add(reparacion)
        db.flush()

        detalles = []
        for id_repuesto, cantidad in cantidades.items():
            db.add(modelo_detalle(
                id_reparacion=reparacion.id_reparacion,
                id_repuesto=id_repuesto,
                cantidad_usada=cantidad,
            ))
            repuestos[id_repuesto].cantidad_repuesto -= cantidad
            detalles.append({"id_repuesto": id_repuesto, "cantidad_usada": cantidad})
        db.flush()

        creada = fila_a_dict(reparacion)
        creada["repuestos"] = detalles
        return creada

    creada = await en_sede(registro, sede, _crear)
    logger.info(
        f"Reparación {creada['id_reparacion']} creada en {sede.value} con {len(creada['repuestos'])} repuesto(s)"
    )
    return Respuesta(success=True, message=f"Reparación creada en {sede.value}", data=creada)


async def actualizar_reparacion(registro, id_reparacion: int, reparacion_data: ReparacionUpdate) -> Respuesta:
    sede, modelo = EnrutadorFragmentos(registro.sedes).fragmento(Entidad.reparacion, reparacion_data.sede_taller)
    valores = reparacion_data.model_dump(exclude={"sede_taller"}, exclude_none=True)
    if not valores:
        raise DatosInvalidos("No se indicó ningún campo para actualizar")

    def _actualizar(db: Session) -> Optional[Dict[str, Any]]:
        reparacion = db.query(modelo).filter(modelo.id_reparacion == id_reparacion).first()
        if reparacion is None:
            return None
        for campo, valor in valores.items():
            setattr(reparacion, campo, valor)
        db.flush()
        return fila_a_dict(reparacion)

    actualizada = await en_sede(registro, sede, _actualizar)
    if actualizada is None:
        raise RegistroNoEncontrado(f"Reparación {id_reparacion} no encontrada en la sede {sede.value}")
    return Respuesta(success=True, message=f"Reparación actualizada en {sede.value}", data=actualizada)


async def _sede_de_reparacion(registro, id_reparacion: int, sede: Optional[str]) -> SedeEnum:
    if sede is not None:
        sede_valida, _ = EnrutadorFragmentos(registro.sedes).fragmento(Entidad.reparacion, sede)
        return sede_valida
    encontrada, _ = await localizar(registro, Entidad.reparacion, consulta_por(id_reparacion=id_reparacion))
    if encontrada is None:
        raise RegistroNoEncontrado(f"Reparación {id_reparacion} no encontrada en ninguna sede")
    return encontrada


async def eliminar_reparacion(registro, id_reparacion: int, sede: Optional[str] = None) -> Respuesta:
    """
    Elimina la reparación de la sede que la guarda: primero sus detalles y luego la
    reparación, en una transacción local. Sin sede, se busca en orden del registro.
    """
    sede_valida = await _sede_de_reparacion(registro, id_reparacion, sede)
    _, modelo, modelo_detalle, _ = _modelos_de_sede(registro, sede_valida)

    def _eliminar(db: Session):
        detalles = (
            db.query(modelo_detalle)
            .filter(modelo_detalle.id_reparacion == id_reparacion)
            .delete(synchronize_session=False)
        )
        reparaciones = db.query(modelo).filter(modelo.id_reparacion == id_reparacion).delete(synchronize_session=False)
        return detalles, reparaciones

    detalles, reparaciones = await en_sede(registro, sede_valida, _eliminar)
    if not reparaciones:
        raise RegistroNoEncontrado(f"Reparación {id_reparacion} no encontrada en la sede {sede_valida.value}")
    logger.info(f"Reparación {id_reparacion} eliminada de {sede_valida.value} ({detalles} detalle(s))")
    return Respuesta(
        success=True,
        message=(
            f"Reparación {id_reparacion} eliminada de {sede_valida.value}; "
            f"{detalles} detalle(s) de repuestos eliminados"
        ),
        data={"id_reparacion": id_reparacion, "sede_taller": sede_valida.value, "detalles_eliminados": detalles},
    )


async def obtener_repuestos_de_reparacion(registro, id_reparacion: int, sede: Optional[str] = None) -> Respuesta:
    sede_valida = await _sede_de_reparacion(registro, id_reparacion, sede)
    _, _, modelo_detalle, modelo_repuesto = _modelos_de_sede(registro, sede_valida)

    def _consultar(db: Session) -> List[Dict[str, Any]]:
        filas = (
            db.query(modelo_detalle, modelo_repuesto)
            .join(modelo_repuesto, modelo_repuesto.id_repuesto == modelo_detalle.id_repuesto)
            .filter(modelo_detalle.id_reparacion == id_reparacion)
            .order_by(modelo_detalle.id_repuesto)
            .all()
        )
        resultado = []
        for detalle, repuesto in filas:
            fila = fila_a_dict(detalle)
            fila.update(
                nombre_repuesto=repuesto.nombre_repuesto,
                descripcion_repuesto=repuesto.descripcion_repuesto,
                precio_unitario=repuesto.precio_unitario,
                sede_taller=repuesto.sede_taller,
            )
            resultado.append(fila)
        return resultado

    repuestos = await en_sede(registro, sede_valida, _consultar)
    return Respuesta(
        success=True,
        message=f"{len(repuestos)} repuestos encontrados para la reparación {id_reparacion}",
        data=repuestos,
    )
