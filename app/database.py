# backEnd/app/database.py
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union
import logging

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings
from .models import Base, tablas_de_sede
from .models.enums import SedeEnum
from .schemas.estado import ResultadoConexion

logger = logging.getLogger(__name__)

URLS_MEMORIA = {"sqlite://", "sqlite:///:memory:", "sqlite+pysqlite://", "sqlite+pysqlite:///:memory:"}


def _activar_claves_foraneas(dbapi_connection, connection_record):
    # SQLite no valida FOREIGN KEY si no se activa por conexión
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def crear_engine(url: str, settings: Settings) -> Engine:
    """
    Crea el engine de una sede.

    - SQLite en memoria (pruebas): StaticPool para que todas las sesiones compartan la misma base.
    - SQLite en archivo: sin pool especial.
    - SQL Server / PostgreSQL: pool con pre-ping, igual que la base principal del backend.
    """
    if url in URLS_MEMORIA:
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    elif url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        connect_args = {"timeout": settings.connect_timeout} if url.startswith("mssql") else {}
        engine = create_engine(
            url,
            pool_size=settings.pool_size,          # Conexiones activas máximas en el pool
            max_overflow=settings.max_overflow,    # Conexiones adicionales si pool_size se agota
            pool_pre_ping=True,                    # Verifica conexiones antes de usarlas
            connect_args=connect_args,
        )

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _activar_claves_foraneas)
    return engine


class EstadoSede:
    """Estado de conectividad de una sede según el último intento de conexión."""
    def __init__(self, sede: SedeEnum):
        self.sede = sede
        self.conectada = False
        self.ultima_verificacion: Optional[datetime] = None
        self.motivo: Optional[str] = None


class RegistroConexiones:
    """
    Registro de conexiones por sede. Es el contexto que se inyecta en cada servicio:
    guarda un engine y una fábrica de sesiones por sede conectada, y el estado del
    último intento de conexión de cada una.

    La conexión se intenta una sola vez al iniciar; no hay reconexión automática.
    """

    def __init__(self, urls: Dict[SedeEnum, Optional[str]], settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._urls = dict(urls)
        # Orden fijo de iteración: NORTE, SUR, CENTRAL
        self._sedes = [sede for sede in SedeEnum if sede in self._urls]
        self._engines: Dict[SedeEnum, Engine] = {}
        self._sesiones: Dict[SedeEnum, sessionmaker] = {}
        self._estado = {sede: EstadoSede(sede) for sede in self._sedes}

    @classmethod
    def desde_settings(cls, settings: Optional[Settings] = None) -> "RegistroConexiones":
        settings = settings or get_settings()
        return cls(settings.urls_sedes, settings)

    @property
    def sedes(self) -> List[SedeEnum]:
        return list(self._sedes)

    def _como_sede(self, sede: Union[SedeEnum, str]) -> Optional[SedeEnum]:
        try:
            sede = SedeEnum(str(getattr(sede, "value", sede)).strip().upper())
        except ValueError:
            return None
        return sede if sede in self._estado else None

    def _descartar(self, sede: SedeEnum):
        engine = self._engines.pop(sede, None)
        self._sesiones.pop(sede, None)
        if engine is not None:
            engine.dispose()

    def connect(self, sede: Union[SedeEnum, str]) -> ResultadoConexion:
        sede_valida = self._como_sede(sede)
        if sede_valida is None:
            raise ValueError(f"Sede no configurada: {sede}")

        estado = self._estado[sede_valida]
        estado.ultima_verificacion = datetime.now(timezone.utc)
        self._descartar(sede_valida)

        url = self._urls.get(sede_valida)
        if not url:
            estado.conectada = False
            estado.motivo = "URL no configurada"
            logger.warning(f"Sede {sede_valida.value} sin URL configurada")
            return ResultadoConexion(sede=sede_valida, ok=False, motivo=estado.motivo)

        engine = None
        try:
            engine = crear_engine(url, self._settings)
            with engine.connect() as conexion:
                conexion.execute(text("SELECT 1"))
        # Driver no instalado (ImportError) o URL mal formada (ValueError) también dejan
        # la sede sin conexión; las demás sedes se intentan igual
        except (SQLAlchemyError, OSError, ImportError, ValueError) as e:
            if engine is not None:
                engine.dispose()
            estado.conectada = False
            estado.motivo = str(e)
            logger.warning(f"Error conectando a {sede_valida.value}: {e}")
            return ResultadoConexion(sede=sede_valida, ok=False, motivo=estado.motivo)

        self._engines[sede_valida] = engine
        self._sesiones[sede_valida] = sessionmaker(
            bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        estado.conectada = True
        estado.motivo = None
        logger.info(f"Conectado a {sede_valida.value}: {engine.url.render_as_string(hide_password=True)}")
        return ResultadoConexion(sede=sede_valida, ok=True)

    def initialize(self) -> Dict[str, bool]:
        """Intenta conectar cada sede por separado; el fallo de una no detiene a las demás."""
        logger.info("Inicializando conexiones a las sedes POLI-CAR...")
        for sede in self._sedes:
            self.connect(sede)
        logger.info(f"Inicialización de conexiones completada: {self.status()}")
        return self.status()

    def get(self, sede: Union[SedeEnum, str]) -> Optional[sessionmaker]:
        sede_valida = self._como_sede(sede)
        if sede_valida is None:
            return None
        return self._sesiones.get(sede_valida)

    def status(self) -> Dict[str, bool]:
        return {sede.value: self._estado[sede].conectada for sede in self._sedes}

    def resumen(self) -> dict:
        conexiones = self.status()
        conectadas = sum(1 for ok in conexiones.values() if ok)
        return {
            "connections": conexiones,
            "sedes": [
                {
                    "sede": estado.sede.value,
                    "conectada": estado.conectada,
                    "ultima_verificacion": estado.ultima_verificacion,
                    "motivo": estado.motivo,
                }
                for estado in self._estado.values()
            ],
            "summary": {
                "total": len(conexiones),
                "connected": conectadas,
                "disconnected": len(conexiones) - conectadas,
            },
        }

    def crear_esquema(self):
        """Crea las tablas de cada sede conectada (desarrollo y pruebas)."""
        for sede, engine in self._engines.items():
            Base.metadata.create_all(bind=engine, tables=tablas_de_sede(sede))
            logger.info(f"Esquema verificado en {sede.value}")

    def close_all(self):
        logger.info("Cerrando conexiones...")
        for sede in list(self._engines):
            self._descartar(sede)
            estado = self._estado[sede]
            estado.conectada = False
            estado.motivo = "Conexión cerrada"
            logger.info(f"Conexión {sede.value} cerrada")


def get_registro(request: Request) -> RegistroConexiones:
    """Dependencia FastAPI: el registro vive en app.state y se crea en el arranque."""
    return request.app.state.registro
