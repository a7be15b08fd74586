"""
Casos de uso para la sincronizacion con Airwallex.

El motor de sync es sincrono (requests + psycopg); aqui se ejecuta en un
thread separado para no bloquear el event loop.
"""
import asyncio
from typing import Callable, List

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from akemisflow.application.dto.sync_dto import LinkedEntityDTO, SyncResultDTO, SyncSummaryDTO
from akemisflow.core.config import settings
from akemisflow.infrastructure.external.airwallex_sync.entity_mappings import get_entity_sync_config
from akemisflow.infrastructure.external.airwallex_sync.sync_service import (
    AirwallexSyncService,
    build_from_settings,
)
from akemisflow.infrastructure.external.airwallex_sync.types import SyncResult
from akemisflow.infrastructure.repositories.entity_repository import EntitySyncRepository


def build_sync_service() -> AirwallexSyncService:
    """Construye el motor desde la configuracion global."""
    service, _, _ = build_from_settings(settings)
    return service


def _result_message(result: SyncResult) -> str:
    if result.fatal_error:
        return f"Sincronizacion interrumpida: {result.fatal_error}"
    if result.cancelled:
        return "Sincronizacion cancelada"
    message = (
        f"Sincronizacion completada: {result.new_count} nuevo(s), "
        f"{result.updated_count} actualizado(s)"
    )
    if result.errors:
        message += f", {len(result.errors)} error(es)"
    return message


def to_result_dto(result: SyncResult) -> SyncResultDTO:
    payload = result.to_dict()
    payload["success"] = result.success
    payload["message"] = _result_message(result)
    return SyncResultDTO.model_validate(payload)


class AirwallexSyncUseCases:
    """Casos de uso de sincronizacion y consulta de estado por categoria."""

    def __init__(
        self,
        db: AsyncSession,
        service_factory: Callable[[], AirwallexSyncService] = build_sync_service,
    ):
        self.db = db
        self.repository = EntitySyncRepository(db)
        self._service_factory = service_factory

    async def run_sync(self, category: str) -> SyncResultDTO:
        """
        Sincroniza todas las entidades de la categoria desde Airwallex.

        Raises:
            UnknownCategoryException: categoria invalida.
        """
        config = get_entity_sync_config(category)
        logger.info(f"Iniciando sincronizacion Airwallex de {config.category.value} desde API")

        service = self._service_factory()
        result = await asyncio.to_thread(lambda: service.run_once(config=config))
        return to_result_dto(result)

    async def sync_entity(self, category: str, entity_id: str) -> SyncResultDTO:
        """
        Re-sincroniza una sola entidad ya vinculada.

        Raises:
            UnknownCategoryException, EntityNotFoundException, ValidationException
        """
        config = get_entity_sync_config(category)
        logger.info(f"Resync Airwallex de {config.entity_label} {entity_id}")

        service = self._service_factory()
        result = await asyncio.to_thread(lambda: service.sync_one(config=config, entity_id=entity_id))
        return to_result_dto(result)

    async def get_summary(self, category: str) -> SyncSummaryDTO:
        config = get_entity_sync_config(category)
        counts = await self.repository.get_sync_summary(config)
        return SyncSummaryDTO(category=config.category.value, **counts)

    async def list_linked(self, category: str, limit: int = 100, offset: int = 0) -> List[LinkedEntityDTO]:
        config = get_entity_sync_config(category)
        rows = await self.repository.list_linked(config, limit=limit, offset=offset)
        return [
            LinkedEntityDTO(
                id=row.id,
                first_name=row.first_name,
                last_name=row.last_name,
                company=row.company,
                email=row.email,
                external_id=getattr(row, config.link_column),
                sync_status=row.airwallex_sync_status,
                last_sync_at=row.airwallex_last_sync_at,
                sync_error=row.airwallex_sync_error,
                bank_account_currency=row.bank_account_currency,
            )
            for row in rows
        ]
