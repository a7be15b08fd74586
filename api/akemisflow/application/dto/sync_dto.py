"""
DTOs de la sincronizacion con Airwallex.
Definen la estructura de datos que el API devuelve al frontend.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Serializa en camelCase (contrato del frontend) y acepta snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SyncConflictDTO(_CamelModel):
    entity_id: str
    entity_name: str
    external_id: str
    field: str
    local_value: Optional[str] = None
    external_value: Optional[str] = None
    resolution: str
    conflict_type: str = "DATA_MISMATCH"


class SyncErrorDTO(_CamelModel):
    external_id: Optional[str] = Field(None, description="None para errores de la corrida completa")
    message: str


class SyncedEntityDTO(_CamelModel):
    id: str
    name: str
    status: str
    external_id: Optional[str] = None
    email: Optional[str] = None
    entity_type: Optional[str] = None
    currency: Optional[str] = None
    last_sync_at: Optional[datetime] = None


class SyncResultDTO(_CamelModel):
    """Resultado agregado de una corrida (o de un resync individual)."""

    category: str
    success: bool
    message: str
    total_fetched: int = 0
    new_count: int = 0
    updated_count: int = 0
    conflicts: List[SyncConflictDTO] = Field(default_factory=list)
    errors: List[SyncErrorDTO] = Field(default_factory=list)
    synced_entities: List[SyncedEntityDTO] = Field(default_factory=list)
    fatal_error: Optional[str] = None
    cancelled: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class SyncSummaryDTO(_CamelModel):
    """Conteo de entidades de una categoria por estado de sync."""

    category: str
    total: int
    linked: int
    synced: int
    pending: int
    errors: int
    never_synced: int


class LinkedEntityDTO(_CamelModel):
    """Entidad local vinculada a un registro de Airwallex."""

    id: str
    first_name: str
    last_name: str
    company: Optional[str] = None
    email: str
    external_id: str
    sync_status: Optional[str] = None
    last_sync_at: Optional[datetime] = None
    sync_error: Optional[str] = None
    bank_account_currency: Optional[str] = None
