"""
Endpoints para sincronizacion con Airwallex.
Permite disparar la reconciliacion por categoria desde la UI y consultar su estado.

Los errores de dominio (categoria invalida, entidad inexistente o no vinculada)
se propagan como AppException y los responde el handler global.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from loguru import logger

from akemisflow.application.dto.sync_dto import LinkedEntityDTO, SyncResultDTO, SyncSummaryDTO
from akemisflow.application.use_cases.sync_use_cases import AirwallexSyncUseCases
from akemisflow.api.v1.dependencies.use_case_deps import get_sync_use_cases


router = APIRouter(prefix="/sync/airwallex", tags=["Sync"])


@router.get(
    "/{category}/summary",
    response_model=SyncSummaryDTO,
    summary="Resumen del estado de sync de una categoria"
)
async def get_sync_summary(
    category: str,
    use_cases: AirwallexSyncUseCases = Depends(get_sync_use_cases),
) -> SyncSummaryDTO:
    """Conteo de entidades por estado de sincronizacion."""
    return await use_cases.get_summary(category)


@router.get(
    "/{category}/linked",
    response_model=List[LinkedEntityDTO],
    summary="Entidades vinculadas a Airwallex"
)
async def list_linked_entities(
    category: str,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    use_cases: AirwallexSyncUseCases = Depends(get_sync_use_cases),
) -> List[LinkedEntityDTO]:
    """Lista las entidades con ID externo, ultimas sincronizadas primero."""
    return await use_cases.list_linked(category, limit=limit, offset=offset)


@router.post(
    "/{category}",
    response_model=SyncResultDTO,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="Sincronizar una categoria desde Airwallex"
)
async def sync_category(
    category: str,
    use_cases: AirwallexSyncUseCases = Depends(get_sync_use_cases),
) -> SyncResultDTO:
    """
    Ejecuta la reconciliacion completa de la categoria.

    La sincronizacion:
    - Recorre toda la paginacion de Airwallex
    - Crea o actualiza cada entidad (errores aislados por registro)
    - Reporta conflictos de datos (gana Airwallex)
    - Usa un lock para evitar ejecuciones concurrentes

    Una corrida con errores parciales responde 200 con `success=false`.
    """
    result = await use_cases.run_sync(category)
    logger.info(f"Sync {category} desde API: {result.message}")
    return result


@router.post(
    "/{category}/{entity_id}",
    response_model=SyncResultDTO,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="Re-sincronizar una entidad vinculada"
)
async def sync_single_entity(
    category: str,
    entity_id: str,
    use_cases: AirwallexSyncUseCases = Depends(get_sync_use_cases),
) -> SyncResultDTO:
    """Vuelve a traer el registro externo de una entidad y la actualiza."""
    return await use_cases.sync_entity(category, entity_id)
