# backEnd/app/schemas/respuesta.py
from typing import Any, Dict, Generic, Optional, TypeVar
from pydantic import BaseModel

from ..models.enums import TipoFallo

T = TypeVar('T')


class ResultadoSede(BaseModel):
    """Resultado de una operación en una sede concreta."""
    success: bool
    error: Optional[str] = None
    tipo_error: Optional[TipoFallo] = None
    filas_afectadas: Optional[int] = None


class Respuesta(BaseModel, Generic[T]):
    """Sobre uniforme que reciben las rutas HTTP: {success, message, data}."""
    success: bool
    message: str
    data: Optional[T] = None
    # Resultado por sede en escrituras replicadas y lecturas distribuidas
    detalles: Optional[Dict[str, ResultadoSede]] = None
    # Solo para diagnóstico: clasificación del error original
    errorDetails: Optional[Dict[str, Any]] = None

    def como_dict(self) -> Dict[str, Any]:
        contenido = self.model_dump(mode="json")
        for clave in ("detalles", "errorDetails"):
            if contenido.get(clave) is None:
                contenido.pop(clave, None)
        return contenido
