# backEnd/app/services/fragmentacion.py
"""
Enrutador de fragmentos: decide qué sedes atiende cada entidad y con qué tabla física.

- Entidades replicadas: todas las sedes configuradas, sin importar la sede indicada.
- Entidades fragmentadas: solo la sede indicada; sin sede, todas las sedes dueñas
  de fragmentos (consultas "obtener todos").
"""
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..models import (
    Cliente, Vehiculo, EmpleadoNomina,
    EmpleadoInformacionNorte, EmpleadoInformacionSur,
    RepuestoNorte, RepuestoSur,
    ReparacionNorte, ReparacionSur,
    ReparacionDetalleNorte, ReparacionDetalleSur,
)
from ..models.enums import Entidad, ModoDistribucion, SedeEnum, SEDES_FRAGMENTO
from .clasificador import SedeInvalida

REPLICADAS = {
    Entidad.cliente: Cliente,
    Entidad.vehiculo: Vehiculo,
    Entidad.empleado_nomina: EmpleadoNomina,
}

FRAGMENTADAS = {
    Entidad.empleado_informacion: {SedeEnum.NORTE: EmpleadoInformacionNorte, SedeEnum.SUR: EmpleadoInformacionSur},
    Entidad.repuesto: {SedeEnum.NORTE: RepuestoNorte, SedeEnum.SUR: RepuestoSur},
    Entidad.reparacion: {SedeEnum.NORTE: ReparacionNorte, SedeEnum.SUR: ReparacionSur},
    Entidad.reparacion_detalle: {SedeEnum.NORTE: ReparacionDetalleNorte, SedeEnum.SUR: ReparacionDetalleSur},
}


def normalizar_sede(valor: Union[SedeEnum, str, None], permitidas: Sequence[SedeEnum] = SEDES_FRAGMENTO) -> SedeEnum:
    """Convierte 'Norte', 'norte ', SedeEnum.NORTE... en SedeEnum; rechaza lo demás con SedeInvalida."""
    if valor is None:
        raise SedeInvalida(valor, [s.value for s in permitidas])
    texto = str(getattr(valor, "value", valor)).strip().upper()
    try:
        sede = SedeEnum(texto)
    except ValueError:
        raise SedeInvalida(valor, [s.value for s in permitidas]) from None
    if sede not in permitidas:
        raise SedeInvalida(valor, [s.value for s in permitidas])
    return sede


class Resolucion:
    """Destino de una operación: modo, sedes objetivo y modelo (tabla) por sede."""

    def __init__(self, entidad: Entidad, modo: ModoDistribucion, modelos: Dict[SedeEnum, type]):
        self.entidad = entidad
        self.modo = modo
        self.modelos = modelos

    @property
    def sedes(self) -> List[SedeEnum]:
        return list(self.modelos)

    @property
    def tablas(self) -> Dict[SedeEnum, str]:
        return {sede: modelo.__tablename__ for sede, modelo in self.modelos.items()}

    def modelo(self, sede: SedeEnum):
        return self.modelos[sede]

    def __repr__(self):
        return f"Resolucion({self.entidad.value}, {self.modo.value}, {[s.value for s in self.sedes]})"


class EnrutadorFragmentos:
    def __init__(self, sedes_configuradas: Sequence[SedeEnum]):
        self.sedes_configuradas = list(sedes_configuradas)

    def es_replicada(self, entidad: Entidad) -> bool:
        return entidad in REPLICADAS

    def sedes_fragmento(self) -> List[SedeEnum]:
        return [sede for sede in self.sedes_configuradas if sede in SEDES_FRAGMENTO]

    def resolver(self, entidad: Entidad, sede: Optional[Union[SedeEnum, str]] = None) -> Resolucion:
        if entidad in REPLICADAS:
            modelo = REPLICADAS[entidad]
            return Resolucion(
                entidad,
                ModoDistribucion.replicado,
                {s: modelo for s in self.sedes_configuradas},
            )

        tablas = FRAGMENTADAS[entidad]
        permitidas = self.sedes_fragmento()
        if sede is not None:
            sede_valida = normalizar_sede(sede, permitidas)
            return Resolucion(entidad, ModoDistribucion.fragmentado, {sede_valida: tablas[sede_valida]})
        return Resolucion(entidad, ModoDistribucion.fragmentado, {s: tablas[s] for s in permitidas})

    def fragmento(self, entidad: Entidad, sede: Union[SedeEnum, str]) -> Tuple[SedeEnum, type]:
        """Sede dueña validada y modelo de su tabla para una entidad fragmentada."""
        resolucion = self.resolver(entidad, sede)
        sede_valida = resolucion.sedes[0]
        return sede_valida, resolucion.modelo(sede_valida)
