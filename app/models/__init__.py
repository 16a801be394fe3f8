#aqui se el __init__.py para importar los modelos de todas las sedes
from .base import Base
from .enums import SedeEnum, SEDES_FRAGMENTO, ModoDistribucion, Entidad, TipoFallo
from .cliente import Cliente
from .vehiculo import Vehiculo
from .empleado import EmpleadoNomina, EmpleadoInformacionNorte, EmpleadoInformacionSur
from .repuesto import RepuestoNorte, RepuestoSur
from .reparacion import ReparacionNorte, ReparacionSur, ReparacionDetalleNorte, ReparacionDetalleSur

# Tablas replicadas: existen en cada sede, incluida la central
MODELOS_REPLICADOS = (Cliente, Vehiculo, EmpleadoNomina)

# Tablas fragmentadas propias de cada sede
MODELOS_FRAGMENTO = {
    SedeEnum.NORTE: (EmpleadoInformacionNorte, RepuestoNorte, ReparacionNorte, ReparacionDetalleNorte),
    SedeEnum.SUR: (EmpleadoInformacionSur, RepuestoSur, ReparacionSur, ReparacionDetalleSur),
}


def tablas_de_sede(sede: SedeEnum):
    """Tablas físicas que debe exponer el almacén de una sede."""
    modelos = MODELOS_REPLICADOS + MODELOS_FRAGMENTO.get(sede, ())
    return [modelo.__table__ for modelo in modelos]
