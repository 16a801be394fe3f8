# backEnd/app/schemas/empleado.py
from datetime import date
from decimal import Decimal
from pydantic import AliasChoices, BaseModel, Field
from typing import Optional


class NominaBase(BaseModel):
    fecha_comienzo: date = Field(..., validation_alias=AliasChoices("fecha_comienzo", "fecha_inicio"))
    salario: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class NominaUpdate(NominaBase):
    pass


class EmpleadoCreate(NominaBase):
    cedula_empleado: str = Field(..., min_length=1, max_length=10)
    nombre_empleado: str = Field(..., min_length=1, max_length=100)
    sede_taller: str = Field(..., description="NORTE o SUR; define el fragmento dueño de la información")


class EmpleadoUpdate(BaseModel):
    nombre_empleado: Optional[str] = Field(None, min_length=1, max_length=100)
    # Si cambia respecto a la sede guardada, el empleado se transfiere
    sede_taller: Optional[str] = None
    fecha_comienzo: Optional[date] = Field(None, validation_alias=AliasChoices("fecha_comienzo", "fecha_inicio"))
    salario: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class TransferenciaEmpleado(BaseModel):
    sede_destino: str
