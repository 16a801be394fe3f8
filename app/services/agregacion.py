# backEnd/app/services/agregacion.py
"""
Agregador de lecturas sobre fragmentos.

`leer_una` consulta la sede dueña; `leer_todas` consulta en paralelo cada sede dueña de
fragmentos y concatena los resultados en el orden del registro (sin reordenar entre
sedes). Una sede caída aporta cero filas y queda anotada en los detalles; solo si
ninguna sede responde la lectura falla.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
import asyncio
import logging

from sqlalchemy.orm import Session

from ..models.enums import Entidad, SedeEnum, TipoFallo
from ..schemas.respuesta import ResultadoSede
from ..utils.filas import filas_a_dicts, ordenar_consulta
from .clasificador import FalloSede, SedeSinConexion, SedesInaccesibles
from .fragmentacion import EnrutadorFragmentos, normalizar_sede
from .nodos import en_sede

logger = logging.getLogger(__name__)

Consulta = Callable[[Session, type], List[Dict[str, Any]]]


def consulta_completa(db: Session, modelo) -> List[Dict[str, Any]]:
    return filas_a_dicts(ordenar_consulta(db.query(modelo), modelo).all())


def _etiquetar(filas: List[Dict[str, Any]], sede: SedeEnum) -> List[Dict[str, Any]]:
    # Procedencia: solo si la tabla no trae ya su sede_taller
    for fila in filas:
        if not fila.get("sede_taller"):
            fila["sede_taller"] = sede.value
    return filas


class ResultadoLectura:
    def __init__(self, filas: List[Dict[str, Any]], por_sede: Dict[SedeEnum, ResultadoSede]):
        self.filas = filas
        self.por_sede = por_sede

    @property
    def sedes_consultadas(self) -> List[SedeEnum]:
        return [sede for sede, resultado in self.por_sede.items() if resultado.success]

    def detalles(self) -> Dict[str, ResultadoSede]:
        return {sede.value: resultado for sede, resultado in self.por_sede.items()}


async def _consultar(registro, sede: SedeEnum, modelo, consulta: Consulta) -> List[Dict[str, Any]]:
    return await en_sede(registro, sede, lambda db: consulta(db, modelo))


async def leer_una(
    registro,
    entidad: Entidad,
    sede: Union[SedeEnum, str],
    consulta: Optional[Consulta] = None,
) -> List[Dict[str, Any]]:
    """Lee de una sola sede. Los fallos de la sede se propagan como FalloSede."""
    enrutador = EnrutadorFragmentos(registro.sedes)
    if enrutador.es_replicada(entidad):
        sede_valida = normalizar_sede(sede, registro.sedes)
        modelo = enrutador.resolver(entidad).modelo(sede_valida)
    else:
        resolucion = enrutador.resolver(entidad, sede)
        sede_valida = resolucion.sedes[0]
        modelo = resolucion.modelo(sede_valida)

    filas = await _consultar(registro, sede_valida, modelo, consulta or consulta_completa)
    if enrutador.es_replicada(entidad):
        return filas
    return _etiquetar(filas, sede_valida)


async def leer_todas(
    registro,
    entidad: Entidad,
    consulta: Optional[Consulta] = None,
) -> ResultadoLectura:
    """Une las filas de todas las sedes dueñas de fragmentos que respondan."""
    resolucion = EnrutadorFragmentos(registro.sedes).resolver(entidad)
    consulta = consulta or consulta_completa

    async def _leer(sede: SedeEnum) -> Tuple[List[Dict[str, Any]], ResultadoSede]:
        try:
            filas = await _consultar(registro, sede, resolucion.modelo(sede), consulta)
        except FalloSede as e:
            logger.warning(f"Sede {sede.value} omitida al leer {entidad.value}: {e.message}")
            texto = "Sin conexión" if isinstance(e, SedeSinConexion) else e.message
            return [], ResultadoSede(success=False, error=texto, tipo_error=e.tipo)
        return _etiquetar(filas, sede), ResultadoSede(success=True, filas_afectadas=len(filas))

    resultados = await asyncio.gather(*(_leer(sede) for sede in resolucion.sedes), return_exceptions=True)

    filas: List[Dict[str, Any]] = []
    por_sede: Dict[SedeEnum, ResultadoSede] = {}
    for sede, resultado in zip(resolucion.sedes, resultados):
        if isinstance(resultado, BaseException):
            if not isinstance(resultado, Exception):
                raise resultado
            logger.error(f"Error inesperado leyendo {entidad.value} en {sede.value}: {resultado!r}")
            por_sede[sede] = ResultadoSede(success=False, error=str(resultado), tipo_error=TipoFallo.desconocido)
            continue
        filas_sede, estado = resultado
        filas.extend(filas_sede)
        por_sede[sede] = estado

    lectura = ResultadoLectura(filas, por_sede)
    if not lectura.sedes_consultadas:
        raise SedesInaccesibles(
            f"No se pudo conectar a ninguna sede para obtener {entidad.value}",
            {sede.value: r.error for sede, r in por_sede.items()},
        )
    logger.info(f"{len(filas)} registros de {entidad.value} obtenidos de {len(lectura.sedes_consultadas)} sede(s)")
    return lectura


async def leer_replicada(
    registro,
    entidad: Entidad,
    consulta: Optional[Consulta] = None,
) -> Tuple[SedeEnum, List[Dict[str, Any]]]:
    """Los datos replicados se leen de la primera sede que responda, en orden del registro."""
    resolucion = EnrutadorFragmentos(registro.sedes).resolver(entidad)
    consulta = consulta or consulta_completa
    fallos = {}
    for sede in resolucion.sedes:
        try:
            filas = await _consultar(registro, sede, resolucion.modelo(sede), consulta)
        except FalloSede as e:
            logger.warning(f"No se pudo leer {entidad.value} desde {sede.value}, intentando siguiente...")
            fallos[sede.value] = e.message
            continue
        logger.info(f"{len(filas)} registros de {entidad.value} obtenidos desde {sede.value} (datos replicados)")
        return sede, filas

    raise SedesInaccesibles(f"No se pudo conectar a ninguna sede para obtener {entidad.value}", fallos)


def consulta_por(**filtros) -> Consulta:
    """Consulta por igualdad de columnas, con el orden natural del modelo."""
    def _consulta(db: Session, modelo) -> List[Dict[str, Any]]:
        return filas_a_dicts(ordenar_consulta(db.query(modelo).filter_by(**filtros), modelo).all())
    return _consulta


class BusquedaFragmentos:
    """Sedes dueñas con filas que cumplen la consulta y sedes que no respondieron."""

    def __init__(self, encontradas: Dict[SedeEnum, List[Dict[str, Any]]], fallos: Dict[SedeEnum, FalloSede]):
        self.encontradas = encontradas
        self.fallos = fallos

    @property
    def completa(self) -> bool:
        return not self.fallos

    def primer_fallo(self) -> Optional[FalloSede]:
        return next(iter(self.fallos.values()), None)


async def buscar_en_fragmentos(registro, entidad: Entidad, consulta: Consulta) -> BusquedaFragmentos:
    """
    Consulta todas las sedes dueñas de fragmentos y devuelve cada sede con resultados,
    en orden del registro. Una sede caída no cuenta como "sin resultados": queda en
    `fallos` para que el llamador decida.
    """
    sedes = EnrutadorFragmentos(registro.sedes).sedes_fragmento()

    async def _buscar(sede: SedeEnum):
        try:
            return await leer_una(registro, entidad, sede, consulta)
        except FalloSede as e:
            logger.warning(f"Sede {sede.value} no respondió al buscar {entidad.value}: {e.message}")
            return e

    resultados = await asyncio.gather(*(_buscar(sede) for sede in sedes))

    encontradas: Dict[SedeEnum, List[Dict[str, Any]]] = {}
    fallos: Dict[SedeEnum, FalloSede] = {}
    for sede, resultado in zip(sedes, resultados):
        if isinstance(resultado, FalloSede):
            fallos[sede] = resultado
        elif resultado:
            encontradas[sede] = resultado
    return BusquedaFragmentos(encontradas, fallos)


async def localizar(
    registro,
    entidad: Entidad,
    consulta: Consulta,
) -> Tuple[Optional[SedeEnum], List[Dict[str, Any]]]:
    """
    Busca un registro fragmentado y devuelve la primera sede (orden del registro) con
    resultados. Los ids de fragmentos solo son únicos dentro de su sede, así que la sede
    encontrada es parte de la respuesta.

    Sin resultados: si ninguna sede respondió se lanza SedesInaccesibles; si solo
    algunas fallaron se relanza el fallo de la primera, porque el registro podría estar
    en ella. (None, []) solo cuando todas respondieron y ninguna lo tiene.
    """
    busqueda = await buscar_en_fragmentos(registro, entidad, consulta)
    if busqueda.encontradas:
        sede = next(iter(busqueda.encontradas))
        return sede, busqueda.encontradas[sede]
    if busqueda.fallos:
        sedes = EnrutadorFragmentos(registro.sedes).sedes_fragmento()
        if len(busqueda.fallos) == len(sedes):
            raise SedesInaccesibles(
                f"No se pudo conectar a ninguna sede para buscar {entidad.value}",
                {sede.value: fallo.message for sede, fallo in busqueda.fallos.items()},
            )
        raise busqueda.primer_fallo()
    return None, []
