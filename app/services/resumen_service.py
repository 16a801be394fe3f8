# backEnd/app/services/resumen_service.py
"""
Reportes consolidados. Los conteos replicados (clientes, vehículos, nómina) se toman
una sola vez, de la primera sede que responda en orden del registro; los fragmentados
(empleados, repuestos, reparaciones, ingresos) se suman entre sedes.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Union
import asyncio
import logging

from sqlalchemy import func, inspect
from sqlalchemy.orm import Session

from ..models import Cliente, EmpleadoNomina, Vehiculo, tablas_de_sede
from ..models.enums import Entidad, SedeEnum, TipoFallo
from ..schemas.estado import DiagnosticoSede
from ..schemas.respuesta import Respuesta, ResultadoSede
from .clasificador import FalloSede, SedeSinConexion
from .fragmentacion import EnrutadorFragmentos, normalizar_sede
from .nodos import en_sede

logger = logging.getLogger(__name__)


def _contar(db: Session, modelo) -> int:
    return db.query(func.count()).select_from(modelo).scalar() or 0


def _conteos(enrutador: EnrutadorFragmentos, sede: SedeEnum):
    empleados = enrutador.fragmento(Entidad.empleado_informacion, sede)[1]
    repuestos = enrutador.fragmento(Entidad.repuesto, sede)[1]
    reparaciones = enrutador.fragmento(Entidad.reparacion, sede)[1]

    def _consulta(db: Session) -> Dict[str, Any]:
        ingresos = db.query(func.coalesce(func.sum(reparaciones.precio_total), 0)).scalar()
        return {
            "clientes": _contar(db, Cliente),
            "vehiculos": _contar(db, Vehiculo),
            "empleados_nomina": _contar(db, EmpleadoNomina),
            "empleados": _contar(db, empleados),
            "repuestos": _contar(db, repuestos),
            "reparaciones": _contar(db, reparaciones),
            "ingresos": Decimal(str(ingresos or 0)),
        }
    return _consulta


async def _conteos_por_sede(registro) -> Dict[SedeEnum, Union[Dict[str, Any], FalloSede]]:
    enrutador = EnrutadorFragmentos(registro.sedes)
    sedes = enrutador.sedes_fragmento()

    async def _de_sede(sede: SedeEnum):
        try:
            return await en_sede(registro, sede, _conteos(enrutador, sede))
        except FalloSede as e:
            logger.warning(f"Sede {sede.value} excluida del resumen: {e.message}")
            return e

    resultados = await asyncio.gather(*(_de_sede(sede) for sede in sedes))
    return dict(zip(sedes, resultados))


def _detalle_fallo(fallo: FalloSede) -> ResultadoSede:
    texto = "Sin conexión" if isinstance(fallo, SedeSinConexion) else fallo.message
    return ResultadoSede(success=False, error=texto, tipo_error=fallo.tipo)


async def obtener_estadisticas(registro) -> Respuesta:
    por_sede = await _conteos_por_sede(registro)

    estadisticas: Dict[str, Any] = {
        "total_clientes": 0,
        "total_vehiculos": 0,
        "total_empleados": 0,
        "total_repuestos": 0,
        "total_reparaciones": 0,
        "ingresos_totales": Decimal("0"),
        "detalles_por_sede": {},
    }
    detalles: Dict[str, ResultadoSede] = {}
    replicados_de = None

    for sede, conteos in por_sede.items():
        if isinstance(conteos, FalloSede):
            estadisticas["detalles_por_sede"][sede.value] = {"error": conteos.message}
            detalles[sede.value] = _detalle_fallo(conteos)
            continue
        detalles[sede.value] = ResultadoSede(success=True)
        if replicados_de is None:
            replicados_de = sede
            estadisticas["total_clientes"] = conteos["clientes"]
            estadisticas["total_vehiculos"] = conteos["vehiculos"]
            estadisticas["total_empleados"] = conteos["empleados_nomina"]
        estadisticas["total_repuestos"] += conteos["repuestos"]
        estadisticas["total_reparaciones"] += conteos["reparaciones"]
        estadisticas["ingresos_totales"] += conteos["ingresos"]
        estadisticas["detalles_por_sede"][sede.value] = {
            "clientes": conteos["clientes"],
            "vehiculos": conteos["vehiculos"],
            "empleados": conteos["empleados"],
            "repuestos": conteos["repuestos"],
            "reparaciones": conteos["reparaciones"],
            "ingresos": conteos["ingresos"],
        }

    if replicados_de is None:
        return Respuesta(
            success=False,
            message="No se pudo conectar a ninguna sede para obtener estadísticas",
            data=estadisticas,
            detalles=detalles,
        )
    return Respuesta(
        success=True,
        message=f"Estadísticas distribuidas obtenidas (datos replicados de {replicados_de.value})",
        data=estadisticas,
        detalles=detalles,
    )


async def obtener_resumen_por_sedes(registro) -> Respuesta:
    por_sede = await _conteos_por_sede(registro)

    resumen: List[Dict[str, Any]] = []
    detalles: Dict[str, ResultadoSede] = {}
    replicados_contados = False
    for sede, conteos in por_sede.items():
        fila = {
            "sede_taller": sede.value,
            "nombre_taller": f"Taller POLI-CAR {sede.value}",
            "total_clientes": 0,
            "total_vehiculos": 0,
            "total_empleados": 0,
            "total_repuestos": 0,
            "total_reparaciones": 0,
            "ingresos_totales": Decimal("0"),
        }
        if isinstance(conteos, FalloSede):
            detalles[sede.value] = _detalle_fallo(conteos)
        else:
            detalles[sede.value] = ResultadoSede(success=True)
            # Clientes y vehículos están replicados: se cuentan en una sola sede
            if not replicados_contados:
                fila["total_clientes"] = conteos["clientes"]
                fila["total_vehiculos"] = conteos["vehiculos"]
                replicados_contados = True
            fila["total_empleados"] = conteos["empleados"]
            fila["total_repuestos"] = conteos["repuestos"]
            fila["total_reparaciones"] = conteos["reparaciones"]
            fila["ingresos_totales"] = conteos["ingresos"]
        resumen.append(fila)

    totales = {
        campo: sum(fila[campo] for fila in resumen)
        for campo in ("total_clientes", "total_vehiculos", "total_empleados", "total_reparaciones")
    }
    return Respuesta(
        success=replicados_contados,
        message="Resumen obtenido exitosamente" if replicados_contados
        else "No se pudo conectar a ninguna sede para obtener el resumen",
        data={"resumen_por_sedes": resumen, "totales": totales},
        detalles=detalles,
    )


def _diagnostico(sede: SedeEnum):
    def _consulta(db: Session) -> Dict[str, Any]:
        existentes = set(inspect(db.get_bind()).get_table_names())
        conteos = {}
        for tabla in tablas_de_sede(sede):
            if tabla.name in existentes:
                conteos[tabla.name] = db.query(func.count()).select_from(tabla).scalar()
            else:
                conteos[tabla.name] = None
        return {"tablas": sorted(existentes), "conteos": conteos}
    return _consulta


async def diagnosticar_sede(registro, sede: Union[SedeEnum, str]) -> Respuesta:
    """Sonda en vivo de una sede: tablas presentes y registros por tabla esperada."""
    sede_valida = normalizar_sede(sede, registro.sedes)
    ahora = datetime.now(timezone.utc)
    try:
        resultado = await en_sede(registro, sede_valida, _diagnostico(sede_valida))
    except FalloSede as e:
        diagnostico = DiagnosticoSede(
            sede=sede_valida, connected=False, timestamp=ahora, error=e.message, tipo_error=e.tipo
        )
        return Respuesta(
            success=False,
            message=f"Sede {sede_valida.value} no disponible",
            data=diagnostico,
            errorDetails=e.error_details(),
        )

    faltantes = [tabla for tabla, total in resultado["conteos"].items() if total is None]
    diagnostico = DiagnosticoSede(
        sede=sede_valida,
        connected=True,
        timestamp=ahora,
        tablas=resultado["tablas"],
        conteos=resultado["conteos"],
        total_registros=sum(total for total in resultado["conteos"].values() if total is not None),
    )
    if faltantes:
        return Respuesta(
            success=False,
            message=f"Sede {sede_valida.value} conectada, faltan tablas: {', '.join(faltantes)}",
            data=diagnostico,
            errorDetails={"tipo": TipoFallo.desconocido.value, "tablas_faltantes": faltantes},
        )
    return Respuesta(success=True, message=f"Sede {sede_valida.value} operativa", data=diagnostico)


async def diagnosticar(registro) -> Respuesta:
    diagnosticos = await asyncio.gather(*(diagnosticar_sede(registro, sede) for sede in registro.sedes))
    return Respuesta(
        success=all(d.success for d in diagnosticos),
        message="Diagnóstico completado",
        data={d.data.sede.value: d.data for d in diagnosticos},
    )
