from enum import Enum


class SedeEnum(str, Enum):
    NORTE = "NORTE"
    SUR = "SUR"
    CENTRAL = "CENTRAL"


# Sedes que poseen fragmentos horizontales (la central solo replica)
SEDES_FRAGMENTO = (SedeEnum.NORTE, SedeEnum.SUR)


class ModoDistribucion(str, Enum):
    replicado = "replicado"
    fragmentado = "fragmentado"


class Entidad(str, Enum):
    cliente = "Cliente"
    vehiculo = "Vehiculo"
    empleado_nomina = "Empleado_nomina"
    empleado_informacion = "Empleado_informacion"
    repuesto = "Repuesto"
    reparacion = "Reparacion"
    reparacion_detalle = "ReparacionDetalle"


class TipoFallo(str, Enum):
    sin_conexion = "ConnectivityLost"
    dtc_no_disponible = "DistributedTxUnsupported"
    violacion_fk = "ForeignKeyViolation"
    violacion_unica = "UniqueViolation"
    desconocido = "Unknown"
