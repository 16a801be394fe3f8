# backEnd/app/models/reparacion.py
from sqlalchemy import Column, Integer, String, Date, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import declared_attr
from .base import Base


class ReparacionMixin:
    __orden__ = ("-fecha_reparacion",)  # Más recientes primero

    id_reparacion = Column(Integer, primary_key=True, autoincrement=False)
    sede_taller = Column(String(10), nullable=False)
    fecha_reparacion = Column(Date, nullable=False)
    descripcion = Column(String(255))
    precio_total = Column(Numeric(10, 2), nullable=False, default=0)

    @declared_attr
    def placa(cls):
        return Column(String(10), ForeignKey("Vehiculo.placa"), nullable=False)


class ReparacionNorte(ReparacionMixin, Base):
    __tablename__ = "Reparacion_norte"
    __table_args__ = (CheckConstraint("precio_total >= 0", name="ck_reparacion_norte_precio"),)


class ReparacionSur(ReparacionMixin, Base):
    __tablename__ = "Reparacion_sur"
    __table_args__ = (CheckConstraint("precio_total >= 0", name="ck_reparacion_sur_precio"),)


# El detalle referencia reparación y repuesto de su misma sede
class ReparacionDetalleNorte(Base):
    __tablename__ = "Reparacion_detalle_norte"
    __orden__ = ("id_repuesto",)
    __table_args__ = (CheckConstraint("cantidad_usada > 0", name="ck_detalle_norte_cantidad"),)

    id_reparacion = Column(Integer, ForeignKey("Reparacion_norte.id_reparacion"), primary_key=True)
    id_repuesto = Column(Integer, ForeignKey("Repuesto_norte.id_repuesto"), primary_key=True)
    cantidad_usada = Column(Integer, nullable=False)


class ReparacionDetalleSur(Base):
    __tablename__ = "Reparacion_detalle_sur"
    __orden__ = ("id_repuesto",)
    __table_args__ = (CheckConstraint("cantidad_usada > 0", name="ck_detalle_sur_cantidad"),)

    id_reparacion = Column(Integer, ForeignKey("Reparacion_sur.id_reparacion"), primary_key=True)
    id_repuesto = Column(Integer, ForeignKey("Repuesto_sur.id_repuesto"), primary_key=True)
    cantidad_usada = Column(Integer, nullable=False)
