# backEnd/app/config.py
from functools import lru_cache
from typing import Dict, Optional
from dotenv import load_dotenv
import os

from .models.enums import SedeEnum

load_dotenv()


class Settings:
    """Configuración de las sedes POLI-CAR leída desde variables de entorno (.env)."""

    def __init__(self):
        self.urls_sedes: Dict[SedeEnum, Optional[str]] = {
            SedeEnum.NORTE: os.getenv("POLICAR_NORTE_URL"),
            SedeEnum.SUR: os.getenv("POLICAR_SUR_URL"),
        }
        # La sede central es opcional: solo se registra si tiene URL
        central_url = os.getenv("POLICAR_CENTRAL_URL")
        if central_url:
            self.urls_sedes[SedeEnum.CENTRAL] = central_url

        self.pool_size = int(os.getenv("POLICAR_POOL_SIZE", "10"))
        self.max_overflow = int(os.getenv("POLICAR_MAX_OVERFLOW", "20"))
        self.connect_timeout = int(os.getenv("POLICAR_CONNECT_TIMEOUT", "30"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        # Solo para desarrollo: crea las tablas de cada sede al iniciar
        self.crear_esquema = os.getenv("POLICAR_CREAR_ESQUEMA", "0").lower() in ("1", "true", "yes")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
