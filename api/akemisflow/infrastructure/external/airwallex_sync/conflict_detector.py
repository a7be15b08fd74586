"""
Deteccion de conflictos entre una entidad local y los datos entrantes de Airwallex.

Los conflictos son solo informativos (auditoria): nunca bloquean el UPDATE,
que aplica la politica por defecto (gana Airwallex).
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from akemisflow.shared.constants.sync_constants import CONFLICT_FIELDS, ConflictResolution

from .field_transformer import display_name
from .types import SyncConflict


def _normalized(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def detect_conflicts(
    existing: Mapping[str, Any],
    incoming: Mapping[str, Any],
    *,
    external_id: str,
    fields: Iterable[str] = CONFLICT_FIELDS,
) -> list[SyncConflict]:
    """
    Compara los campos sensibles. Hay conflicto solo si ambos lados tienen
    valor y son distintos; la ausencia en cualquiera de los lados no cuenta.
    """
    conflicts: list[SyncConflict] = []
    entity_id = str(existing.get("id", ""))
    entity_name = display_name(dict(existing))

    for field_name in fields:
        local_value = _normalized(existing.get(field_name))
        external_value = _normalized(incoming.get(field_name))
        if not local_value or not external_value or local_value == external_value:
            continue
        conflicts.append(
            SyncConflict(
                entity_id=entity_id,
                entity_name=entity_name,
                external_id=external_id,
                field=field_name,
                local_value=existing.get(field_name),
                external_value=incoming.get(field_name),
                resolution=ConflictResolution.USE_AIRWALLEX,
            )
        )
    return conflicts
