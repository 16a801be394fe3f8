# backEnd/app/schemas/reparacion.py
from datetime import date
from decimal import Decimal
from pydantic import AliasChoices, BaseModel, Field
from typing import List, Optional


class DetalleReparacionCreate(BaseModel):
    id_repuesto: int
    cantidad_usada: int = Field(1, gt=0, validation_alias=AliasChoices("cantidad_usada", "cantidad"))


class ReparacionBase(BaseModel):
    placa: str = Field(..., min_length=1, max_length=10, validation_alias=AliasChoices("placa", "placa_vehiculo"))
    fecha_reparacion: date = Field(default_factory=date.today)
    descripcion: Optional[str] = Field(None, max_length=255, validation_alias=AliasChoices("descripcion", "descripcion_problema"))
    precio_total: Decimal = Field(Decimal('0.00'), ge=0, max_digits=10, decimal_places=2)


class ReparacionCreate(ReparacionBase):
    sede_taller: str
    repuestos: List[DetalleReparacionCreate] = Field(default_factory=list)


class ReparacionUpdate(BaseModel):
    sede_taller: str
    placa: Optional[str] = Field(None, min_length=1, max_length=10, validation_alias=AliasChoices("placa", "placa_vehiculo"))
    fecha_reparacion: Optional[date] = None
    descripcion: Optional[str] = Field(None, max_length=255, validation_alias=AliasChoices("descripcion", "descripcion_problema"))
    precio_total: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
