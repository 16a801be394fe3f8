# backEnd/app/models/vehiculo.py
from sqlalchemy import Column, Integer, String, ForeignKey
from .base import Base


class Vehiculo(Base):
    """Vehículo replicado; su cliente debe existir en la misma sede."""
    __tablename__ = "Vehiculo"
    __orden__ = ("marca", "modelo")

    placa = Column(String(10), primary_key=True)
    cedula_cliente = Column(String(10), ForeignKey("Cliente.cedula_cliente"), nullable=False)
    marca = Column(String(50), nullable=False)
    modelo = Column(String(50), nullable=False)
    anio = Column(Integer)
