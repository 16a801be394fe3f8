"""
PRUEBAS DE CAJA BLANCA - Reparaciones (fragmento con detalle y stock local)
"""
import asyncio
from datetime import date
from decimal import Decimal

import pytest

from app.models import (
    Cliente,
    ReparacionDetalleNorte,
    ReparacionDetalleSur,
    ReparacionNorte,
    ReparacionSur,
    RepuestoNorte,
    RepuestoSur,
    Vehiculo,
)
from app.models.enums import SedeEnum, TipoFallo
from app.schemas.reparacion import ReparacionCreate, ReparacionUpdate
from app.services import reparacion_service
from app.services.clasificador import DatosInvalidos, FalloSede, RegistroNoEncontrado

from conftest import contar, sembrar


def _base_replicada(registro):
    for sede in registro.sedes:
        sembrar(
            registro, sede,
            Cliente(cedula_cliente="0101010101", nombre_cliente="Ana", apellido_cliente="Diaz"),
            Vehiculo(placa="ABC123", cedula_cliente="0101010101", marca="Toyota", modelo="Corolla", anio=2020),
        )


@pytest.fixture
def taller(registro):
    _base_replicada(registro)
    sembrar(
        registro, SedeEnum.NORTE,
        RepuestoNorte(id_repuesto=1, sede_taller="NORTE", nombre_repuesto="Filtro",
                      cantidad_repuesto=10, precio_unitario=Decimal("5.00")),
        RepuestoNorte(id_repuesto=2, sede_taller="NORTE", nombre_repuesto="Aceite",
                      cantidad_repuesto=3, precio_unitario=Decimal("20.00")),
    )
    sembrar(
        registro, SedeEnum.SUR,
        RepuestoSur(id_repuesto=1, sede_taller="SUR", nombre_repuesto="Bujía",
                    cantidad_repuesto=8, precio_unitario=Decimal("3.00")),
        RepuestoSur(id_repuesto=2, sede_taller="SUR", nombre_repuesto="Correa",
                    cantidad_repuesto=4, precio_unitario=Decimal("15.00")),
    )
    return registro


class TestCrearReparacionCajaBlanca:
    """
    CAJA BLANCA: crear_reparacion

    Rutas:
    1. Repuesto inexistente en la sede → DatosInvalidos, nada se guarda
    2. Stock insuficiente → DatosInvalidos, nada se guarda
    3. Vehículo inexistente → ForeignKeyViolation en la sede
    4. Creación → id local, detalles y stock descontado en una transacción
    """

    def test_rama_1_repuesto_de_otra_sede(self, taller):
        datos = ReparacionCreate(sede_taller="NORTE", placa="ABC123", repuestos=[{"id_repuesto": 7, "cantidad": 1}])

        with pytest.raises(DatosInvalidos):
            asyncio.run(reparacion_service.crear_reparacion(taller, datos))

        assert contar(taller, SedeEnum.NORTE, ReparacionNorte) == 0

    def test_rama_2_stock_insuficiente(self, taller):
        datos = ReparacionCreate(
            sede_taller="NORTE",
            placa="ABC123",
            repuestos=[{"id_repuesto": 1, "cantidad_usada": 2}, {"id_repuesto": 2, "cantidad_usada": 4}],
        )

        with pytest.raises(DatosInvalidos) as exc_info:
            asyncio.run(reparacion_service.crear_reparacion(taller, datos))

        assert "Stock insuficiente" in exc_info.value.message
        assert contar(taller, SedeEnum.NORTE, RepuestoNorte, id_repuesto=1, cantidad_repuesto=10) == 1

    def test_rama_3_vehiculo_inexistente(self, taller):
        datos = ReparacionCreate(sede_taller="SUR", placa="NOEXISTE")

        with pytest.raises(FalloSede) as exc_info:
            asyncio.run(reparacion_service.crear_reparacion(taller, datos))

        assert exc_info.value.tipo == TipoFallo.violacion_fk
        assert exc_info.value.status_code == 400

    def test_rama_4_creacion_con_detalles(self, taller):
        datos = ReparacionCreate(
            sede_taller="SUR",
            placa_vehiculo="ABC123",
            descripcion_problema="Cambio de correa",
            precio_total=Decimal("45.00"),
            repuestos=[
                {"id_repuesto": 2, "cantidad": 1},
                {"id_repuesto": 1, "cantidad": 2},
                {"id_repuesto": 2, "cantidad": 1},
            ],
        )

        respuesta = asyncio.run(reparacion_service.crear_reparacion(taller, datos))

        assert respuesta.data["id_reparacion"] == 1
        assert respuesta.data["sede_taller"] == "SUR"
        assert respuesta.data["repuestos"] == [
            {"id_repuesto": 2, "cantidad_usada": 2},
            {"id_repuesto": 1, "cantidad_usada": 2},
        ]
        assert contar(taller, SedeEnum.SUR, RepuestoSur, id_repuesto=2, cantidad_repuesto=2) == 1
        assert contar(taller, SedeEnum.SUR, RepuestoSur, id_repuesto=1, cantidad_repuesto=6) == 1
        assert contar(taller, SedeEnum.SUR, ReparacionDetalleSur) == 2
        assert contar(taller, SedeEnum.NORTE, ReparacionNorte) == 0


class TestEliminarReparacion:

    @pytest.fixture
    def reparacion_7_en_sur(self, taller):
        sembrar(
            taller, SedeEnum.SUR,
            ReparacionSur(id_reparacion=7, placa="ABC123", sede_taller="SUR",
                          fecha_reparacion=date(2024, 5, 1), precio_total=Decimal("30.00")),
        )
        sembrar(
            taller, SedeEnum.SUR,
            ReparacionDetalleSur(id_reparacion=7, id_repuesto=1, cantidad_usada=1),
            ReparacionDetalleSur(id_reparacion=7, id_repuesto=2, cantidad_usada=2),
        )
        return taller

    def test_elimina_detalles_primero(self, reparacion_7_en_sur):
        respuesta = asyncio.run(reparacion_service.eliminar_reparacion(reparacion_7_en_sur, 7))

        assert respuesta.success is True
        assert respuesta.data["sede_taller"] == "SUR"
        assert respuesta.data["detalles_eliminados"] == 2
        assert "2 detalle(s)" in respuesta.message
        assert contar(reparacion_7_en_sur, SedeEnum.SUR, ReparacionDetalleSur, id_reparacion=7) == 0
        assert contar(reparacion_7_en_sur, SedeEnum.SUR, ReparacionSur, id_reparacion=7) == 0

    def test_eliminar_inexistente(self, taller):
        with pytest.raises(RegistroNoEncontrado):
            asyncio.run(reparacion_service.eliminar_reparacion(taller, 99))

    def test_repuestos_de_reparacion(self, reparacion_7_en_sur):
        respuesta = asyncio.run(reparacion_service.obtener_repuestos_de_reparacion(reparacion_7_en_sur, 7))

        assert [r["nombre_repuesto"] for r in respuesta.data] == ["Bujía", "Correa"]
        assert all(r["sede_taller"] == "SUR" for r in respuesta.data)

    def test_por_sede_solo_su_fragmento(self, reparacion_7_en_sur):
        sur = asyncio.run(reparacion_service.obtener_reparaciones_por_sede(reparacion_7_en_sur, "sur"))
        norte = asyncio.run(reparacion_service.obtener_reparaciones_por_sede(reparacion_7_en_sur, "NORTE"))

        assert [r["id_reparacion"] for r in sur.data] == [7]
        assert norte.data == []

    def test_actualizar_en_su_sede(self, reparacion_7_en_sur):
        datos = ReparacionUpdate(sede_taller="SUR", descripcion="Revisión general")

        respuesta = asyncio.run(reparacion_service.actualizar_reparacion(reparacion_7_en_sur, 7, datos))

        assert respuesta.data["descripcion"] == "Revisión general"

    def test_todas_ordenadas_por_fecha(self, reparacion_7_en_sur):
        sembrar(
            reparacion_7_en_sur, SedeEnum.SUR,
            ReparacionSur(id_reparacion=8, placa="ABC123", sede_taller="SUR",
                          fecha_reparacion=date(2024, 6, 1), precio_total=Decimal("10.00")),
        )

        respuesta = asyncio.run(reparacion_service.obtener_todas_reparaciones(reparacion_7_en_sur))

        assert [r["id_reparacion"] for r in respuesta.data] == [8, 7]
        assert contar(reparacion_7_en_sur, SedeEnum.NORTE, ReparacionDetalleNorte) == 0
