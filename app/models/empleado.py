# backEnd/app/models/empleado.py
from sqlalchemy import Column, String, Date, Numeric
from .base import Base


class EmpleadoNomina(Base):
    """Parte vertical replicada del empleado (datos salariales)."""
    __tablename__ = "Empleado_nomina"
    __orden__ = ("cedula_empleado",)

    cedula_empleado = Column(String(10), primary_key=True)
    fecha_comienzo = Column(Date, nullable=False)
    salario = Column(Numeric(10, 2), nullable=False)


class EmpleadoInformacionMixin:
    """Parte vertical fragmentada horizontalmente por sede_taller."""
    __orden__ = ("nombre_empleado",)

    cedula_empleado = Column(String(10), primary_key=True)
    nombre_empleado = Column(String(100), nullable=False)
    sede_taller = Column(String(10), nullable=False)


class EmpleadoInformacionNorte(EmpleadoInformacionMixin, Base):
    __tablename__ = "Empleado_informacion_norte"


class EmpleadoInformacionSur(EmpleadoInformacionMixin, Base):
    __tablename__ = "Empleado_informacion_sur"
