# backEnd/app/models/cliente.py
from sqlalchemy import Column, String
from .base import Base


class Cliente(Base):
    """Cliente replicado en todas las sedes."""
    __tablename__ = "Cliente"
    __orden__ = ("apellido_cliente", "nombre_cliente")

    cedula_cliente = Column(String(10), primary_key=True)
    nombre_cliente = Column(String(50), nullable=False)
    apellido_cliente = Column(String(50), nullable=False)
    zona = Column(String(50))
