# backEnd/app/schemas/cliente.py
from pydantic import AliasChoices, BaseModel, Field
from typing import Optional


class ClienteBase(BaseModel):
    nombre_cliente: str = Field(..., min_length=1, max_length=50, validation_alias=AliasChoices("nombre_cliente", "nombre"))
    apellido_cliente: str = Field(..., min_length=1, max_length=50, validation_alias=AliasChoices("apellido_cliente", "apellido"))
    zona: Optional[str] = Field(None, max_length=50)


class ClienteCreate(ClienteBase):
    cedula_cliente: str = Field(..., min_length=1, max_length=10, validation_alias=AliasChoices("cedula_cliente", "cedula"))


class ClienteUpdate(ClienteBase):
    pass
