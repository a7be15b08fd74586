"""
Configuracion de una sincronizacion (recurso Airwallex -> tabla local).

La idea es que aqui tengas control total de:
- recurso origen en Airwallex (beneficiaries / counterparties)
- tabla destino en Postgres y su campo de enlace
- transformacion del payload
- alcance del lookup secundario por email
- valores fijos que solo se escriben al crear

Este modulo no realiza I/O: solo define configuracion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from akemisflow.shared.constants.sync_constants import EntityCategory

from .field_transformer import TransformedEntity

TransformFn = Callable[..., TransformedEntity]
CreateFieldsFn = Callable[[TransformedEntity], dict[str, Any]]


@dataclass(frozen=True)
class EmailScope:
    """
    Restringe una categoria a un subconjunto de filas de su tabla.

    Con `exclude=False` solo entran filas cuyo `column` esta en `values`
    (p.ej. contactos de tipo cliente). Con `exclude=True` entran las demas,
    incluidas las filas con `column` NULL (p.ej. contactos que no son clientes
    dentro de la tabla compartida `contacts`).
    """

    column: str
    values: tuple[str, ...]
    exclude: bool = False

    def matches(self, value: Any) -> bool:
        if self.exclude:
            return value not in self.values
        return value in self.values


@dataclass(frozen=True)
class EntitySyncConfig:
    """
    Config de una categoria de entidades.

    NOTA sobre el enlace:
    - link_column guarda el ID externo. Una vez escrito, el motor nunca lo
      reasigna a otro ID.
    - El lookup por email es un segundo paso explicito y solo considera filas
      con link_column vacio.
    """

    category: EntityCategory
    entity_label: str
    resource: str
    target_table: str
    link_column: str
    transform: TransformFn
    target_schema: str = "public"
    email_fallback: bool = True
    email_scope: Optional[EmailScope] = None
    create_fields: Optional[CreateFieldsFn] = None
    create_defaults: Mapping[str, Any] = field(default_factory=dict)

    def transform_payload(self, payload: dict[str, Any], *, synced_at: datetime) -> TransformedEntity:
        return self.transform(payload, synced_at=synced_at)

    @property
    def lock_namespace(self) -> str:
        return f"airwallex_sync:{self.category.value}"
