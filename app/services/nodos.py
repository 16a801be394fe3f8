# backEnd/app/services/nodos.py
from typing import Callable, TypeVar
import asyncio
import logging

from sqlalchemy.orm import Session

from ..models.enums import SedeEnum
from .clasificador import ErrorOperacion, FalloSede, SedeSinConexion, clasificar, es_error_de_sede

logger = logging.getLogger(__name__)

T = TypeVar('T')


def ejecutar_en_sede(registro, sede: SedeEnum, operacion: Callable[[Session], T]) -> T:
    """
    Ejecuta `operacion` en una sesión de la sede y confirma la transacción local.

    Cualquier error del driver se clasifica aquí, una sola vez, y se relanza como
    FalloSede. Una sede sin conexión registrada produce SedeSinConexion sin intentar nada.
    """
    fabrica = registro.get(sede)
    if fabrica is None:
        raise SedeSinConexion(sede)

    db = fabrica()
    try:
        resultado = operacion(db)
        db.commit()
        return resultado
    except ErrorOperacion:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        if es_error_de_sede(e):
            fallo = FalloSede(sede, clasificar(e))
            logger.warning(f"Fallo en {sede.value} ({fallo.tipo.value}): {fallo.clasificacion.detalle}")
            raise fallo from e
        raise
    finally:
        db.close()


async def en_sede(registro, sede: SedeEnum, operacion: Callable[[Session], T]) -> T:
    """Versión asíncrona: la sesión síncrona corre en un hilo para no bloquear el loop."""
    return await asyncio.to_thread(ejecutar_en_sede, registro, sede, operacion)
