"""
PRUEBAS DE CAJA BLANCA - Reportes consolidados y diagnóstico de sedes
"""
import asyncio
from datetime import date
from decimal import Decimal

import pytest

from app.models import (
    Cliente,
    EmpleadoInformacionNorte,
    EmpleadoInformacionSur,
    ReparacionSur,
    RepuestoNorte,
    RepuestoSur,
    Vehiculo,
)
from app.config import Settings
from app.database import RegistroConexiones
from app.models.enums import SedeEnum
from app.services import resumen_service
from app.services.clasificador import SedeInvalida
from app.utils.respuestas import responder

from conftest import URL_MEMORIA, sembrar


@pytest.fixture
def datos_distribuidos(registro):
    for sede in registro.sedes:
        sembrar(
            registro, sede,
            Cliente(cedula_cliente="1", nombre_cliente="Ana", apellido_cliente="Diaz"),
            Cliente(cedula_cliente="2", nombre_cliente="Beto", apellido_cliente="Paz"),
            Vehiculo(placa="ABC123", cedula_cliente="1", marca="Toyota", modelo="Corolla"),
        )
    sembrar(
        registro, SedeEnum.NORTE,
        EmpleadoInformacionNorte(cedula_empleado="10", nombre_empleado="Luis", sede_taller="NORTE"),
        RepuestoNorte(id_repuesto=1, sede_taller="NORTE", nombre_repuesto="Filtro", cantidad_repuesto=1),
    )
    sembrar(
        registro, SedeEnum.SUR,
        EmpleadoInformacionSur(cedula_empleado="20", nombre_empleado="Eva", sede_taller="SUR"),
        EmpleadoInformacionSur(cedula_empleado="21", nombre_empleado="Rosa", sede_taller="SUR"),
        RepuestoSur(id_repuesto=1, sede_taller="SUR", nombre_repuesto="Aceite", cantidad_repuesto=1),
        RepuestoSur(id_repuesto=2, sede_taller="SUR", nombre_repuesto="Correa", cantidad_repuesto=1),
        ReparacionSur(id_reparacion=1, placa="ABC123", sede_taller="SUR",
                      fecha_reparacion=date(2024, 1, 1), precio_total=Decimal("40.00")),
    )
    return registro


class TestEstadisticas:

    def test_replicados_una_vez_fragmentados_sumados(self, datos_distribuidos):
        respuesta = asyncio.run(resumen_service.obtener_estadisticas(datos_distribuidos))

        datos = respuesta.data
        assert respuesta.success is True
        assert datos["total_clientes"] == 2
        assert datos["total_vehiculos"] == 1
        assert datos["total_repuestos"] == 3
        assert datos["total_reparaciones"] == 1
        assert datos["ingresos_totales"] == Decimal("40.00")
        assert datos["detalles_por_sede"]["SUR"]["empleados"] == 2

    def test_replicados_de_la_sede_disponible(self, registro_sur_caido):
        sembrar(registro_sur_caido, SedeEnum.NORTE, Cliente(cedula_cliente="1", nombre_cliente="A", apellido_cliente="B"))

        respuesta = asyncio.run(resumen_service.obtener_estadisticas(registro_sur_caido))

        assert respuesta.data["total_clientes"] == 1
        assert "error" in respuesta.data["detalles_por_sede"]["SUR"]
        assert respuesta.detalles["SUR"].success is False

    def test_sin_sedes(self, registro_sin_sedes):
        respuesta = asyncio.run(resumen_service.obtener_estadisticas(registro_sin_sedes))
        assert respuesta.success is False


class TestResumenPorSedes:

    def test_resumen(self, datos_distribuidos):
        respuesta = asyncio.run(resumen_service.obtener_resumen_por_sedes(datos_distribuidos))

        norte, sur = respuesta.data["resumen_por_sedes"]
        assert norte["nombre_taller"] == "Taller POLI-CAR NORTE"
        assert norte["total_clientes"] == 2
        assert sur["total_clientes"] == 0
        assert sur["total_empleados"] == 2
        assert respuesta.data["totales"] == {
            "total_clientes": 2,
            "total_vehiculos": 1,
            "total_empleados": 3,
            "total_reparaciones": 1,
        }


class TestDiagnostico:

    def test_sede_operativa(self, datos_distribuidos):
        respuesta = asyncio.run(resumen_service.diagnosticar_sede(datos_distribuidos, "sur"))

        assert respuesta.success is True
        assert respuesta.data.connected is True
        assert respuesta.data.conteos["Repuesto_sur"] == 2
        assert "Repuesto_norte" not in respuesta.data.conteos

    def test_sede_caida(self, registro_sur_caido):
        respuesta = asyncio.run(resumen_service.diagnosticar_sede(registro_sur_caido, "SUR"))

        assert respuesta.success is False
        assert respuesta.data.connected is False
        assert respuesta.errorDetails["tipo"] == "ConnectivityLost"

    def test_central_solo_tablas_replicadas(self, registro_con_central):
        respuesta = asyncio.run(resumen_service.diagnosticar_sede(registro_con_central, "CENTRAL"))

        assert set(respuesta.data.conteos) == {"Cliente", "Vehiculo", "Empleado_nomina"}

    def test_sede_no_configurada(self, registro):
        with pytest.raises(SedeInvalida):
            asyncio.run(resumen_service.diagnosticar_sede(registro, "CENTRAL"))

    def test_diagnostico_de_todas(self, registro_sur_caido):
        respuesta = asyncio.run(resumen_service.diagnosticar(registro_sur_caido))

        assert respuesta.success is False
        assert respuesta.data["NORTE"].connected is True
        assert respuesta.data["SUR"].connected is False

    def test_sede_sin_tablas_no_es_caida(self):
        """Conectada pero sin esquema: error del almacén (500), no falta de conexión (503)."""
        registro = RegistroConexiones({SedeEnum.NORTE: URL_MEMORIA, SedeEnum.SUR: URL_MEMORIA}, Settings())
        registro.initialize()

        respuesta = asyncio.run(resumen_service.diagnosticar_sede(registro, "NORTE"))
        response = responder(respuesta)

        assert respuesta.success is False
        assert respuesta.data.connected is True
        assert response.status_code == 500
        registro.close_all()
