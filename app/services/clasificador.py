# backEnd/app/services/clasificador.py
"""
Clasificación de fallos de las sedes y excepciones de las operaciones distribuidas.

El motor relacional reporta la misma condición con formas muy distintas (varios
códigos significan "coordinador de transacciones distribuidas no disponible"), por
eso la clasificación mira códigos numéricos y fragmentos del mensaje, no el tipo de
la excepción. Se clasifica una sola vez, justo después de la llamada a la sede; el
resto del código solo ve `FalloSede` con su `TipoFallo`.
"""
import re
from typing import Any, Dict, Optional

from fastapi import status
from sqlalchemy.exc import DBAPIError, DisconnectionError, SQLAlchemyError

from ..models.enums import SedeEnum, TipoFallo
from ..schemas.estado import Clasificacion

# Códigos de SQL Server (número de error nativo o SQLSTATE de ODBC)
CODIGOS_DTC = {"7391", "7392", "8501", "8522", "8524"}
CODIGOS_UNICIDAD = {"2601", "2627"}
CODIGOS_FK = {"547"}
CODIGOS_CONEXION = {"53", "258", "10053", "10054", "10060", "10061", "11001", "08001", "08S01", "HYT00"}

MENSAJES_DTC = (
    "transaction manager",
    "distributed transaction",
    "msdtc",
    "ms dtc",
    "unable to begin a distributed transaction",
)
MENSAJES_UNICIDAD = (
    "unique constraint",
    "duplicate key",
    "violation of primary key",
    "violation of unique key",
)
MENSAJES_FK = (
    "foreign key constraint",
    "reference constraint",
)
MENSAJES_CONEXION = (
    "unable to open database file",
    "communication link failure",
    "login timeout expired",
    "tcp provider",
    "server was not found",
    "could not connect",
    "connection refused",
    "connection reset",
    "timed out",
    "sin conexión",
)

_PATRON_CODIGO = re.compile(r"\(([0-9A-Z]{2,5})\)|\[([0-9A-Z]{5})\]")
_PATRON_ARGUMENTO = re.compile(r"^(\d+|[0-9A-Z]{5})$")


def _extraer_codigos(error: BaseException) -> set:
    codigos = set()
    origen = getattr(error, "orig", None)
    argumentos = list(getattr(origen, "args", ()) or ())
    for argumento in argumentos:
        if isinstance(argumento, int):
            codigos.add(str(argumento))
        elif isinstance(argumento, str) and _PATRON_ARGUMENTO.match(argumento):
            codigos.add(argumento)
    # Solo el mensaje del driver: str(error) incluye la sentencia y sus parámetros
    for encontrado in _PATRON_CODIGO.findall(str(origen or error)):
        codigos.update(c for c in encontrado if c)
    return codigos


def clasificar(error: BaseException) -> Clasificacion:
    """Traduce un error crudo de una sede a la taxonomía de fallos distribuidos."""
    if isinstance(error, FalloSede):
        return error.clasificacion

    detalle = str(getattr(error, "orig", None) or error)
    mensaje = detalle.lower()
    codigos = _extraer_codigos(error)

    def _codigo(conjunto) -> Optional[str]:
        return next((c for c in sorted(codigos) if c in conjunto), None)

    # El DTC va primero: una escritura sobre una vista distribuida puede fallar
    # con un mensaje de conexión que en realidad viene del coordinador.
    codigo = _codigo(CODIGOS_DTC)
    if codigo or any(fragmento in mensaje for fragmento in MENSAJES_DTC):
        return Clasificacion(tipo=TipoFallo.dtc_no_disponible, detalle=detalle, codigo=codigo)

    codigo = _codigo(CODIGOS_FK)
    if codigo or any(fragmento in mensaje for fragmento in MENSAJES_FK):
        return Clasificacion(tipo=TipoFallo.violacion_fk, detalle=detalle, codigo=codigo)

    codigo = _codigo(CODIGOS_UNICIDAD)
    if codigo or any(fragmento in mensaje for fragmento in MENSAJES_UNICIDAD):
        return Clasificacion(tipo=TipoFallo.violacion_unica, detalle=detalle, codigo=codigo)

    codigo = _codigo(CODIGOS_CONEXION)
    if (
        codigo
        or isinstance(error, (DisconnectionError, ConnectionError, TimeoutError))
        or (isinstance(error, DBAPIError) and error.connection_invalidated)
        or any(fragmento in mensaje for fragmento in MENSAJES_CONEXION)
    ):
        return Clasificacion(tipo=TipoFallo.sin_conexion, detalle=detalle, codigo=codigo)

    return Clasificacion(tipo=TipoFallo.desconocido, detalle=detalle, codigo=next(iter(sorted(codigos)), None))


MENSAJES_USUARIO = {
    TipoFallo.sin_conexion: "No hay conexión disponible a la sede {sede}",
    TipoFallo.dtc_no_disponible: (
        "Error de transacción distribuida en {sede} (DTC desactivado): habilite el servicio "
        "MSDTC y las transacciones remotas en el servidor de la sede"
    ),
    TipoFallo.violacion_fk: "Referencia inválida en {sede}: el registro relacionado no existe",
    TipoFallo.violacion_unica: "Ya existe un registro con esa clave en {sede}",
    TipoFallo.desconocido: "Error en la sede {sede}: {detalle}",
}

CODIGOS_HTTP = {
    TipoFallo.sin_conexion: status.HTTP_503_SERVICE_UNAVAILABLE,
    TipoFallo.dtc_no_disponible: status.HTTP_503_SERVICE_UNAVAILABLE,
    TipoFallo.violacion_fk: status.HTTP_400_BAD_REQUEST,
    TipoFallo.violacion_unica: status.HTTP_409_CONFLICT,
    TipoFallo.desconocido: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ErrorOperacion(Exception):
    """Base de los errores que las rutas convierten en el sobre {success: false}."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    tipo: Optional[TipoFallo] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def error_details(self) -> Dict[str, Any]:
        return {"tipo": self.__class__.__name__}


class SedeInvalida(ErrorOperacion):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, sede: Any, permitidas=None):
        permitidas = permitidas or ("NORTE", "SUR")
        super().__init__(f"Sede inválida: {sede}. Debe ser {' o '.join(permitidas)}")
        self.sede = sede

    def error_details(self) -> Dict[str, Any]:
        return {"tipo": "InvalidBranch", "sede": str(self.sede)}


class ClaveDuplicada(ErrorOperacion):
    status_code = status.HTTP_409_CONFLICT
    tipo = TipoFallo.violacion_unica

    def error_details(self) -> Dict[str, Any]:
        return {"tipo": "DuplicateKey"}


class RegistroNoEncontrado(ErrorOperacion):
    status_code = status.HTTP_404_NOT_FOUND

    def error_details(self) -> Dict[str, Any]:
        return {"tipo": "NotFound"}


class DatosInvalidos(ErrorOperacion):
    status_code = status.HTTP_400_BAD_REQUEST


class FalloSede(ErrorOperacion):
    """Fallo ya clasificado de una sede concreta."""

    def __init__(self, sede: SedeEnum, clasificacion: Clasificacion):
        self.sede = sede
        self.clasificacion = clasificacion
        self.tipo = clasificacion.tipo
        self.status_code = CODIGOS_HTTP[clasificacion.tipo]
        super().__init__(
            MENSAJES_USUARIO[clasificacion.tipo].format(sede=sede.value, detalle=clasificacion.detalle)
        )

    def error_details(self) -> Dict[str, Any]:
        return {
            "tipo": self.clasificacion.tipo.value,
            "codigo": self.clasificacion.codigo,
            "sede": self.sede.value,
            "detalle": self.clasificacion.detalle,
        }


class SedeSinConexion(FalloSede):
    def __init__(self, sede: SedeEnum):
        super().__init__(sede, Clasificacion(tipo=TipoFallo.sin_conexion, detalle="Sin conexión"))


class SedesInaccesibles(ErrorOperacion):
    """Ninguna de las sedes objetivo respondió."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    tipo = TipoFallo.sin_conexion

    def __init__(self, message: str, fallos: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.fallos = fallos or {}

    def error_details(self) -> Dict[str, Any]:
        return {"tipo": TipoFallo.sin_conexion.value, "sedes": self.fallos}


def es_error_de_sede(error: BaseException) -> bool:
    return isinstance(error, (SQLAlchemyError, OSError, TimeoutError))
