"""
Manejadores de eventos de inicio y cierre de la aplicacion.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI
from loguru import logger

from akemisflow.core.config import settings
from akemisflow.infrastructure.database.session import init_db, close_db


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa recursos al inicio de la aplicacion."""
        try:
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
            logger.info(f"Entorno: {settings.ENVIRONMENT}")

            # Validar configuracion critica
            _validate_config()

            # Inicializar base de datos (crea tablas si no existen)
            await init_db()
            logger.info("Base de datos inicializada")

            # Configurar logging adicional
            app.state.log_sink_id = logger.add(
                settings.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=settings.LOG_LEVEL
            )

            logger.success("Aplicacion iniciada correctamente")

        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def _validate_config() -> None:
    """Valida que la configuracion critica este presente."""
    warnings = []

    if not settings.airwallex_configured:
        warnings.append(
            "AIRWALLEX_CLIENT_ID / AIRWALLEX_API_KEY no configuradas - la sincronizacion fallara al autenticar"
        )
    if "postgres" not in settings.effective_database_url:
        warnings.append("DATABASE_URL no apunta a Postgres - el motor de sync no podra ejecutarse")

    # Mostrar advertencias
    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")

        # Cerrar conexiones de base de datos
        await close_db()
        logger.info("Conexiones de base de datos cerradas")

        logger.success("Aplicacion cerrada correctamente")

        sink_id = getattr(app.state, "log_sink_id", None)
        if sink_id is not None:
            logger.remove(sink_id)
            app.state.log_sink_id = None

    return shutdown


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Ciclo de vida de la aplicacion: startup antes de servir, shutdown al cerrar."""
    await startup_handler(app)()
    try:
        yield
    finally:
        await shutdown_handler(app)()
