# backEnd/app/schemas/vehiculo.py
from pydantic import AliasChoices, BaseModel, Field
from typing import Optional


class VehiculoBase(BaseModel):
    cedula_cliente: str = Field(..., min_length=1, max_length=10)
    marca: str = Field(..., min_length=1, max_length=50)
    modelo: str = Field(..., min_length=1, max_length=50)
    # El formulario web envía "año"
    anio: Optional[int] = Field(None, ge=1900, le=2100, validation_alias=AliasChoices("anio", "año"))


class VehiculoCreate(VehiculoBase):
    placa: str = Field(..., min_length=1, max_length=10)


class VehiculoUpdate(VehiculoBase):
    pass
