# backEnd/app/services/replicacion.py
"""
Coordinador de escrituras replicadas.

No es una transacción distribuida: cada sede confirma por su cuenta y el fallo de una
no detiene ni deshace a las demás. La escritura se considera exitosa si al menos una
sede la aplicó; el detalle por sede permite detectar la réplica incompleta.
"""
from typing import Any, Callable, Dict, List, Optional, Sequence
import asyncio
import logging

from sqlalchemy.orm import Session

from ..models.enums import Entidad, SedeEnum, TipoFallo
from ..schemas.respuesta import ResultadoSede
from .clasificador import FalloSede, SedeSinConexion
from .fragmentacion import EnrutadorFragmentos
from .nodos import en_sede

logger = logging.getLogger(__name__)

OperacionEscritura = Callable[[Session, type], Optional[int]]


class ResultadoReplicacion:
    def __init__(self, entidad: Entidad, por_sede: Dict[SedeEnum, ResultadoSede]):
        self.entidad = entidad
        self.por_sede = por_sede

    @property
    def overall_success(self) -> bool:
        return any(resultado.success for resultado in self.por_sede.values())

    @property
    def exitosas(self) -> List[SedeEnum]:
        return [sede for sede, resultado in self.por_sede.items() if resultado.success]

    @property
    def filas_afectadas(self) -> int:
        return sum(r.filas_afectadas or 0 for r in self.por_sede.values() if r.success)

    def detalles(self) -> Dict[str, ResultadoSede]:
        return {sede.value: resultado for sede, resultado in self.por_sede.items()}

    def mensaje(self, accion: str) -> str:
        total = len(self.por_sede)
        exitosas = self.exitosas
        if not exitosas:
            return f"Error: {accion} falló en las {total} sede(s)"
        resumen = f"{accion} en {len(exitosas)} de {total} sede(s): {', '.join(s.value for s in exitosas)}"
        fallidas = [s.value for s, r in self.por_sede.items() if not r.success]
        if fallidas:
            resumen += f" (pendiente en {', '.join(fallidas)})"
        return resumen


def _resultado_fallido(error: FalloSede) -> ResultadoSede:
    texto = "Sin conexión" if isinstance(error, SedeSinConexion) else error.message
    return ResultadoSede(success=False, error=texto, tipo_error=error.tipo)


async def escribir_en_todas(
    registro,
    entidad: Entidad,
    operacion: OperacionEscritura,
    sedes: Optional[Sequence[SedeEnum]] = None,
) -> ResultadoReplicacion:
    """
    Aplica `operacion(db, modelo)` en cada réplica, en paralelo, y reúne el resultado de
    cada sede en el orden del registro. La operación devuelve las filas afectadas o None.
    """
    resolucion = EnrutadorFragmentos(registro.sedes).resolver(entidad)
    objetivos = list(sedes) if sedes is not None else resolucion.sedes

    async def _escribir(sede: SedeEnum) -> ResultadoSede:
        modelo = resolucion.modelo(sede)
        try:
            filas = await en_sede(registro, sede, lambda db: operacion(db, modelo))
        except FalloSede as e:
            logger.warning(f"Réplica de {entidad.value} fallida en {sede.value}: {e.message}")
            return _resultado_fallido(e)
        return ResultadoSede(success=True, filas_afectadas=filas)

    resultados = await asyncio.gather(*(_escribir(sede) for sede in objetivos), return_exceptions=True)

    por_sede: Dict[SedeEnum, ResultadoSede] = {}
    for sede, resultado in zip(objetivos, resultados):
        if isinstance(resultado, BaseException):
            if not isinstance(resultado, Exception):
                raise resultado
            logger.error(f"Error inesperado replicando {entidad.value} en {sede.value}: {resultado!r}")
            resultado = ResultadoSede(success=False, error=str(resultado), tipo_error=TipoFallo.desconocido)
        por_sede[sede] = resultado

    replicacion = ResultadoReplicacion(entidad, por_sede)
    logger.info(
        f"Replicación de {entidad.value}: {len(replicacion.exitosas)} de {len(por_sede)} sede(s) exitosas"
    )
    return replicacion


def insertar(valores: Dict[str, Any]) -> OperacionEscritura:
    def _operacion(db: Session, modelo) -> int:
        db.add(modelo(**valores))
        db.flush()
        return 1
    return _operacion


def actualizar(filtros: Dict[str, Any], valores: Dict[str, Any]) -> OperacionEscritura:
    def _operacion(db: Session, modelo) -> int:
        return db.query(modelo).filter_by(**filtros).update(valores, synchronize_session=False)
    return _operacion


def eliminar(filtros: Dict[str, Any]) -> OperacionEscritura:
    def _operacion(db: Session, modelo) -> int:
        return db.query(modelo).filter_by(**filtros).delete(synchronize_session=False)
    return _operacion
