"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .sync_dto import (
    SyncConflictDTO,
    SyncErrorDTO,
    SyncedEntityDTO,
    SyncResultDTO,
    SyncSummaryDTO,
    LinkedEntityDTO,
)

__all__ = [
    "SyncConflictDTO",
    "SyncErrorDTO",
    "SyncedEntityDTO",
    "SyncResultDTO",
    "SyncSummaryDTO",
    "LinkedEntityDTO",
]
