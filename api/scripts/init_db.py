"""
Script para inicializar la base de datos.

Crea las tablas de entidades sincronizables (contractors, suppliers, contacts)
si no existen. En produccion preferir `alembic upgrade head`.
"""
import asyncio
import sys
from pathlib import Path

from loguru import logger

# La carpeta "api" contiene el paquete raíz `akemisflow/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

from akemisflow.core.config import settings
from akemisflow.infrastructure.database.session import init_db, close_db


async def main():
    """Función principal para inicializar la base de datos."""
    logger.info(f"Inicializando base de datos ({settings.DATABASE_HOST}/{settings.DATABASE_NAME})...")

    try:
        await init_db()
        logger.success("Base de datos inicializada correctamente")
    except Exception as e:
        logger.error(f"Error al inicializar base de datos: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
