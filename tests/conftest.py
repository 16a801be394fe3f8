"""
Configuración global para todas las pruebas pytest

Cada sede es una base SQLite en memoria independiente (StaticPool), con el esquema
creado desde los modelos. Una sede "caída" apunta a un archivo imposible de abrir.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.config import Settings
from app.database import RegistroConexiones, get_registro
from app.main import app
from app.models.enums import SedeEnum

URL_MEMORIA = "sqlite://"
URL_INACCESIBLE = "sqlite:////nonexistent_dir_policar/sede.db"


def crear_registro(urls):
    """Registro inicializado; las sedes conectadas reciben su esquema."""
    registro = RegistroConexiones(urls, Settings())
    registro.initialize()
    registro.crear_esquema()
    return registro


def sembrar(registro, sede, *objetos):
    """Inserta filas directamente en una sede, sin pasar por los servicios."""
    db = registro.get(sede)()
    try:
        db.add_all(objetos)
        db.commit()
    finally:
        db.close()


def contar(registro, sede, clase, **filtros):
    """Filas de `clase` en una sede; los filtros son columnas (incluida `modelo` de Vehiculo)."""
    db = registro.get(sede)()
    try:
        return db.query(clase).filter_by(**filtros).count()
    finally:
        db.close()


def cortar_sede(registro, sede):
    """
    Simula una sede que se conectó al iniciar y luego perdió la conexión:
    sus sesiones apuntan a una base que no se puede abrir.
    """
    registro._sesiones[sede] = sessionmaker(bind=create_engine(URL_INACCESIBLE), expire_on_commit=False)


@pytest.fixture
def registro():
    """NORTE y SUR disponibles."""
    registro = crear_registro({SedeEnum.NORTE: URL_MEMORIA, SedeEnum.SUR: URL_MEMORIA})
    yield registro
    registro.close_all()


@pytest.fixture
def registro_sur_caido():
    """NORTE disponible; SUR no pudo conectarse al iniciar."""
    registro = crear_registro({SedeEnum.NORTE: URL_MEMORIA, SedeEnum.SUR: URL_INACCESIBLE})
    yield registro
    registro.close_all()


@pytest.fixture
def registro_sin_sedes():
    """Ninguna sede disponible."""
    registro = crear_registro({SedeEnum.NORTE: URL_INACCESIBLE, SedeEnum.SUR: URL_INACCESIBLE})
    yield registro
    registro.close_all()


@pytest.fixture
def registro_con_central():
    """NORTE, SUR y la sede central (solo réplicas)."""
    registro = crear_registro({
        SedeEnum.NORTE: URL_MEMORIA,
        SedeEnum.SUR: URL_MEMORIA,
        SedeEnum.CENTRAL: URL_MEMORIA,
    })
    yield registro
    registro.close_all()


def _cliente_http(registro):
    app.dependency_overrides[get_registro] = lambda: registro
    with TestClient(app) as client:
        yield client
    # Limpiar overrides después del test
    app.dependency_overrides.clear()


@pytest.fixture
def client(registro):
    """Cliente HTTP de pruebas con el registro sano inyectado."""
    yield from _cliente_http(registro)


@pytest.fixture
def client_sur_caido(registro_sur_caido):
    yield from _cliente_http(registro_sur_caido)


@pytest.fixture
def client_sin_sedes(registro_sin_sedes):
    yield from _cliente_http(registro_sin_sedes)
