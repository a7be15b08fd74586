"""
Repositorio de lectura del estado de sincronizacion con Airwallex.
Alimenta los endpoints de resumen y de entidades vinculadas.
"""
from typing import Dict, List, Type

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from akemisflow.infrastructure.database.models import (
    AirwallexSyncMixin,
    ContactModel,
    ContractorModel,
    SupplierModel,
)
from akemisflow.infrastructure.external.airwallex_sync.sync_config import EntitySyncConfig
from akemisflow.shared.constants.sync_constants import SyncStatus


_MODELS_BY_TABLE: Dict[str, Type[AirwallexSyncMixin]] = {
    "contractors": ContractorModel,
    "suppliers": SupplierModel,
    "contacts": ContactModel,
}


class EntitySyncRepository:
    """Consultas de solo lectura sobre las tablas sincronizables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _scoped(self, config: EntitySyncConfig, query):
        """Aplica el alcance de la categoria (clientes vs. resto de contactos)."""
        model = _MODELS_BY_TABLE[config.target_table]
        scope = config.email_scope
        if scope:
            column = getattr(model, scope.column)
            if scope.exclude:
                query = query.where(or_(column.is_(None), column.not_in(scope.values)))
            else:
                query = query.where(column.in_(scope.values))
        return query

    async def get_sync_summary(self, config: EntitySyncConfig) -> Dict[str, int]:
        """
        Cuenta las entidades de la categoria por estado de sync.

        Returns:
            Dict con total, linked y un contador por cada SyncStatus
            (las filas sin estado cuentan como NONE).
        """
        model = _MODELS_BY_TABLE[config.target_table]
        link_column = getattr(model, config.link_column)

        by_status = await self.db.execute(
            self._scoped(
                config,
                select(model.airwallex_sync_status, func.count()).group_by(model.airwallex_sync_status),
            )
        )
        counts = {status.value: 0 for status in SyncStatus}
        total = 0
        for raw_status, count in by_status.all():
            key = raw_status or SyncStatus.NONE.value
            counts[key] = counts.get(key, 0) + count
            total += count

        linked = await self.db.execute(
            self._scoped(config, select(func.count()).select_from(model).where(link_column.isnot(None)))
        )

        return {
            "total": total,
            "linked": linked.scalar_one(),
            "synced": counts[SyncStatus.SYNCED.value],
            "pending": counts[SyncStatus.PENDING.value],
            "errors": counts[SyncStatus.ERROR.value],
            "never_synced": counts[SyncStatus.NONE.value],
        }

    async def list_linked(self, config: EntitySyncConfig, limit: int = 100, offset: int = 0) -> List:
        """
        Lista las entidades vinculadas a Airwallex, ultimas sincronizadas primero.
        """
        model = _MODELS_BY_TABLE[config.target_table]
        link_column = getattr(model, config.link_column)

        query = self._scoped(
            config,
            select(model)
            .where(link_column.isnot(None))
            .order_by(model.airwallex_last_sync_at.desc(), model.id)
            .limit(limit)
            .offset(offset),
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
