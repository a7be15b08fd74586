"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from akemisflow.application.use_cases.sync_use_cases import AirwallexSyncUseCases
from akemisflow.infrastructure.database.session import get_db


async def get_sync_use_cases(
    db: AsyncSession = Depends(get_db)
) -> AirwallexSyncUseCases:
    """
    Dependencia para obtener los casos de uso de sincronizacion con Airwallex.

    Args:
        db: Sesion de base de datos

    Returns:
        AirwallexSyncUseCases: Instancia de casos de uso de sync
    """
    return AirwallexSyncUseCases(db)
