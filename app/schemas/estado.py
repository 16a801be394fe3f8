# backEnd/app/schemas/estado.py
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel

from ..models.enums import SedeEnum, TipoFallo


class ResultadoConexion(BaseModel):
    sede: SedeEnum
    ok: bool
    motivo: Optional[str] = None


class Clasificacion(BaseModel):
    """Resultado de clasificar un error de una sede."""
    tipo: TipoFallo
    detalle: str
    codigo: Optional[str] = None


class DiagnosticoSede(BaseModel):
    sede: SedeEnum
    connected: bool
    timestamp: datetime
    tablas: List[str] = []
    # Registros por tabla esperada; None si la tabla no existe en la sede
    conteos: Dict[str, Optional[int]] = {}
    total_registros: Optional[int] = None
    error: Optional[str] = None
    tipo_error: Optional[TipoFallo] = None
