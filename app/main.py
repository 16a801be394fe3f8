from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.database import RegistroConexiones
from app.routes import cliente, vehiculo, empleado, repuesto, reparacion, reportes, estado
from app.schemas.respuesta import Respuesta
from app.services.clasificador import ErrorOperacion

settings = get_settings()

# --- Logging ---
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# --- Ciclo de vida: registro de conexiones a las sedes ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    registro = RegistroConexiones.desde_settings(settings)
    registro.initialize()
    if settings.crear_esquema:
        registro.crear_esquema()
    app.state.registro = registro
    logger.info(f"Servidor POLI-CAR listo. Sedes: {registro.status()}")
    try:
        yield
    finally:
        registro.close_all()


# --- Creación de la Aplicación FastAPI ---
app = FastAPI(
    title="POLI-CAR Sistema Distribuido",
    description="API de datos distribuidos (replicación y fragmentación) de los talleres POLI-CAR.",
    version="1.0.0",
    lifespan=lifespan,
)

# --- Middlewares ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Errores de operación -> sobre {success: false} ---
@app.exception_handler(ErrorOperacion)
async def error_operacion_handler(request: Request, exc: ErrorOperacion):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rechazada: {exc.message}")
    respuesta = Respuesta(success=False, message=exc.message, data=None, errorDetails=exc.error_details())
    return JSONResponse(status_code=exc.status_code, content=respuesta.como_dict())


@app.get("/")
def root():
    return {"message": "POLI-CAR API distribuida", "docs": "/docs"}


# --- Inclusión de Routers de la API ---
app.include_router(estado.router)
app.include_router(cliente.router)
app.include_router(vehiculo.router)
app.include_router(empleado.router)
app.include_router(repuesto.router)
app.include_router(reparacion.router)
app.include_router(reportes.router)
