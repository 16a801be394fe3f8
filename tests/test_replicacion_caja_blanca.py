"""
PRUEBAS DE CAJA BLANCA - Escrituras replicadas (clientes y vehículos)
Objetivo: convergencia con todas las sedes disponibles y visibilidad de la réplica
parcial cuando alguna sede falla.
"""
import asyncio

import pytest

from app.models import Cliente, Vehiculo
from app.models.enums import Entidad, SedeEnum, TipoFallo
from app.schemas.cliente import ClienteCreate, ClienteUpdate
from app.schemas.vehiculo import VehiculoCreate, VehiculoUpdate
from app.services import cliente_service, vehiculo_service
from app.services.clasificador import RegistroNoEncontrado
from app.services.replicacion import escribir_en_todas, insertar

from conftest import contar, cortar_sede, sembrar

ANA = {"cedula": "0101010101", "nombre": "Ana", "apellido": "Diaz", "zona": "Norte"}


def _cliente_ana():
    return Cliente(cedula_cliente="0101010101", nombre_cliente="Ana", apellido_cliente="Diaz", zona="Norte")


class TestCrearClienteCajaBlanca:

    def test_replica_en_todas_las_sedes(self, registro):
        """Con ambas sedes disponibles la fila queda idéntica en cada una."""
        respuesta = asyncio.run(cliente_service.crear_cliente(registro, ClienteCreate(**ANA)))

        assert respuesta.success is True
        assert respuesta.detalles["NORTE"].success is True
        assert respuesta.detalles["SUR"].success is True
        for sede in (SedeEnum.NORTE, SedeEnum.SUR):
            assert contar(registro, sede, Cliente, cedula_cliente="0101010101", nombre_cliente="Ana") == 1

        listado = asyncio.run(cliente_service.obtener_clientes(registro))
        assert [c["cedula_cliente"] for c in listado.data].count("0101010101") == 1

    def test_replica_parcial_es_exito_con_detalle(self, registro_sur_caido):
        respuesta = asyncio.run(cliente_service.crear_cliente(registro_sur_caido, ClienteCreate(**ANA)))

        assert respuesta.success is True
        assert respuesta.detalles["NORTE"].success is True
        assert respuesta.detalles["SUR"].success is False
        assert respuesta.detalles["SUR"].tipo_error == TipoFallo.sin_conexion
        assert "1 de 2" in respuesta.message
        assert "pendiente en SUR" in respuesta.message

    def test_fallo_en_todas_las_sedes(self, registro_sin_sedes):
        respuesta = asyncio.run(cliente_service.crear_cliente(registro_sin_sedes, ClienteCreate(**ANA)))

        assert respuesta.success is False
        assert respuesta.data is None
        assert respuesta.message.startswith("Error:")

    def test_duplicado_se_reporta_por_sede(self, registro):
        sembrar(registro, SedeEnum.SUR, _cliente_ana())

        respuesta = asyncio.run(cliente_service.crear_cliente(registro, ClienteCreate(**ANA)))

        # NORTE no lo tenía: la escritura allí no se deshace
        assert respuesta.success is True
        assert respuesta.detalles["SUR"].tipo_error == TipoFallo.violacion_unica
        assert contar(registro, SedeEnum.NORTE, Cliente) == 1

    def test_sede_perdida_despues_de_iniciar(self, registro):
        cortar_sede(registro, SedeEnum.SUR)

        respuesta = asyncio.run(cliente_service.crear_cliente(registro, ClienteCreate(**ANA)))

        assert respuesta.success is True
        assert respuesta.detalles["SUR"].tipo_error == TipoFallo.sin_conexion

    def test_replica_tambien_en_central(self, registro_con_central):
        respuesta = asyncio.run(cliente_service.crear_cliente(registro_con_central, ClienteCreate(**ANA)))

        assert list(respuesta.detalles) == ["NORTE", "SUR", "CENTRAL"]
        assert contar(registro_con_central, SedeEnum.CENTRAL, Cliente) == 1


class TestActualizarEliminarCliente:

    def test_actualizar_en_todas(self, registro):
        for sede in (SedeEnum.NORTE, SedeEnum.SUR):
            sembrar(registro, sede, _cliente_ana())

        datos = ClienteUpdate(nombre="Ana María", apellido="Diaz", zona="Sur")
        respuesta = asyncio.run(cliente_service.actualizar_cliente(registro, "0101010101", datos))

        assert respuesta.success is True
        assert respuesta.detalles["NORTE"].filas_afectadas == 1
        assert contar(registro, SedeEnum.SUR, Cliente, nombre_cliente="Ana María", zona="Sur") == 1

    def test_actualizar_inexistente(self, registro):
        datos = ClienteUpdate(nombre="X", apellido="Y")
        with pytest.raises(RegistroNoEncontrado):
            asyncio.run(cliente_service.actualizar_cliente(registro, "9999999999", datos))

    def test_eliminar_en_todas(self, registro):
        for sede in (SedeEnum.NORTE, SedeEnum.SUR):
            sembrar(registro, sede, _cliente_ana())

        respuesta = asyncio.run(cliente_service.eliminar_cliente(registro, "0101010101"))

        assert respuesta.success is True
        assert contar(registro, SedeEnum.NORTE, Cliente) == 0
        assert contar(registro, SedeEnum.SUR, Cliente) == 0

    def test_obtener_cliente_desde_primera_replica(self, registro_sur_caido):
        sembrar(registro_sur_caido, SedeEnum.NORTE, _cliente_ana())

        respuesta = asyncio.run(cliente_service.obtener_cliente(registro_sur_caido, "0101010101"))

        assert respuesta.data["nombre_cliente"] == "Ana"

    def test_obtener_clientes_sin_sedes(self, registro_sin_sedes):
        respuesta = asyncio.run(cliente_service.obtener_clientes(registro_sin_sedes))

        assert respuesta.success is False
        assert respuesta.data == []


class TestVehiculos:

    def test_vehiculo_con_sur_caido(self, registro_sur_caido):
        sembrar(registro_sur_caido, SedeEnum.NORTE, _cliente_ana())
        datos = VehiculoCreate(placa="ABC123", cedula_cliente="0101010101", marca="Toyota", modelo="Corolla", anio=2020)

        respuesta = asyncio.run(vehiculo_service.crear_vehiculo(registro_sur_caido, datos))

        assert respuesta.success is True
        assert respuesta.detalles["NORTE"].success is True
        assert respuesta.detalles["SUR"].success is False
        assert contar(registro_sur_caido, SedeEnum.NORTE, Vehiculo, placa="ABC123") == 1

    def test_propietario_inexistente_es_violacion_fk(self, registro):
        datos = VehiculoCreate(placa="XYZ999", cedula_cliente="0000000000", marca="Kia", modelo="Rio")

        respuesta = asyncio.run(vehiculo_service.crear_vehiculo(registro, datos))

        assert respuesta.success is False
        assert respuesta.detalles["NORTE"].tipo_error == TipoFallo.violacion_fk
        assert respuesta.detalles["SUR"].tipo_error == TipoFallo.violacion_fk

    def test_acepta_anio_con_enie(self):
        datos = VehiculoCreate(**{"placa": "P1", "cedula_cliente": "1", "marca": "M", "modelo": "X", "año": 2019})
        assert datos.anio == 2019

    def test_listado_incluye_propietario(self, registro):
        sembrar(
            registro, SedeEnum.NORTE,
            _cliente_ana(),
            Vehiculo(placa="ABC123", cedula_cliente="0101010101", marca="Toyota", modelo="Corolla", anio=2020),
        )

        respuesta = asyncio.run(vehiculo_service.obtener_vehiculos(registro))

        assert respuesta.data[0]["nombre_cliente"] == "Ana"
        assert respuesta.data[0]["placa"] == "ABC123"

    def test_actualizar_y_eliminar_en_todas(self, registro):
        for sede in registro.sedes:
            sembrar(
                registro, sede,
                _cliente_ana(),
                Vehiculo(placa="ABC123", cedula_cliente="0101010101", marca="Toyota", modelo="Corolla", anio=2020),
            )
        datos = VehiculoUpdate(cedula_cliente="0101010101", marca="Toyota", modelo="Yaris", anio=2021)

        actualizado = asyncio.run(vehiculo_service.actualizar_vehiculo(registro, "ABC123", datos))

        assert actualizado.success is True
        for sede in registro.sedes:
            assert contar(registro, sede, Vehiculo, placa="ABC123", modelo="Yaris", anio=2021) == 1

        eliminado = asyncio.run(vehiculo_service.eliminar_vehiculo(registro, "ABC123"))

        assert eliminado.success is True
        for sede in registro.sedes:
            assert contar(registro, sede, Vehiculo) == 0

    def test_eliminar_placa_inexistente(self, registro):
        with pytest.raises(RegistroNoEncontrado):
            asyncio.run(vehiculo_service.eliminar_vehiculo(registro, "NOEXISTE"))


class TestCoordinador:

    def test_error_inesperado_queda_aislado(self, registro):
        """Una excepción fuera de la taxonomía en una sede no aborta a las demás."""
        def _operacion(db, modelo):
            if db.get_bind() is registro._engines[SedeEnum.SUR]:
                raise RuntimeError("fallo inesperado")
            return insertar({
                "cedula_cliente": "1", "nombre_cliente": "A", "apellido_cliente": "B", "zona": None,
            })(db, modelo)

        replicacion = asyncio.run(escribir_en_todas(registro, Entidad.cliente, _operacion))

        assert replicacion.overall_success is True
        assert replicacion.exitosas == [SedeEnum.NORTE]
        assert replicacion.por_sede[SedeEnum.SUR].tipo_error == TipoFallo.desconocido
