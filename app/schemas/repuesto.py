# backEnd/app/schemas/repuesto.py
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional


class RepuestoBase(BaseModel):
    nombre_repuesto: str = Field(..., min_length=1, max_length=100)
    descripcion_repuesto: Optional[str] = Field(None, max_length=255)
    cantidad_repuesto: int = Field(0, ge=0, description="Stock disponible en la sede")
    precio_unitario: Decimal = Field(Decimal('0.00'), ge=0, max_digits=10, decimal_places=2)


class RepuestoCreate(RepuestoBase):
    sede_taller: str


class RepuestoUpdate(BaseModel):
    # La sede identifica el fragmento; el id solo es único dentro de ella
    sede_taller: str
    nombre_repuesto: Optional[str] = Field(None, min_length=1, max_length=100)
    descripcion_repuesto: Optional[str] = Field(None, max_length=255)
    cantidad_repuesto: Optional[int] = Field(None, ge=0)
    precio_unitario: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
