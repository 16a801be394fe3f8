# backEnd/app/models/repuesto.py
from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from sqlalchemy.orm import declared_attr
from .base import Base


class RepuestoMixin:
    """
    Repuesto fragmentado por sede. El id_repuesto solo es único dentro de su sede:
    el mismo número puede existir en Norte y en Sur para artículos distintos.
    """
    __orden__ = ("nombre_repuesto",)

    id_repuesto = Column(Integer, primary_key=True, autoincrement=False)
    sede_taller = Column(String(10), nullable=False)
    nombre_repuesto = Column(String(100), nullable=False)
    descripcion_repuesto = Column(String(255))
    cantidad_repuesto = Column(Integer, nullable=False, default=0)
    precio_unitario = Column(Numeric(10, 2), nullable=False, default=0)

    @declared_attr
    def __table_args__(cls):
        return (
            CheckConstraint("cantidad_repuesto >= 0", name=f"ck_{cls.__tablename__}_cantidad"),
            CheckConstraint("precio_unitario >= 0", name=f"ck_{cls.__tablename__}_precio"),
        )


class RepuestoNorte(RepuestoMixin, Base):
    __tablename__ = "Repuesto_norte"


class RepuestoSur(RepuestoMixin, Base):
    __tablename__ = "Repuesto_sur"
