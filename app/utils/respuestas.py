from fastapi import status
from fastapi.responses import JSONResponse

from ..models.enums import TipoFallo
from ..schemas.respuesta import Respuesta
from ..services.clasificador import CODIGOS_HTTP

TIPOS_FALLO = {tipo.value: tipo for tipo in TipoFallo}


def codigo_de_fallo(respuesta: Respuesta) -> int:
    """
    Código HTTP de un sobre fallido: el del primer fallo clasificado por sede o, sin
    detalle por sede, el del tipo indicado en errorDetails. Sin ninguno de los dos, 503.
    """
    for resultado in (respuesta.detalles or {}).values():
        if not resultado.success and resultado.tipo_error is not None:
            return CODIGOS_HTTP[resultado.tipo_error]
    tipo = TIPOS_FALLO.get((respuesta.errorDetails or {}).get("tipo"))
    if tipo is not None:
        return CODIGOS_HTTP[tipo]
    return status.HTTP_503_SERVICE_UNAVAILABLE


def responder(respuesta: Respuesta, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    if not respuesta.success:
        status_code = codigo_de_fallo(respuesta)
    return JSONResponse(status_code=status_code, content=respuesta.como_dict())
