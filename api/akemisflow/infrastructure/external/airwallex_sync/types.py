"""
Tipos y utilidades puras para el motor de sincronizacion Airwallex.

Se mantienen libres de I/O para poder testearlos facilmente.

Los payloads de Airwallex son profundamente opcionales: cada seccion anidada
(address, bank_details, additional_info) se parsea a su propia estructura y la
presencia se verifica en cada paso. Un payload con forma inesperada levanta
TransformError en vez de propagar AttributeError/TypeError desde el mapeo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from akemisflow.shared.constants.sync_constants import (
    ConflictResolution,
    EntityCategory,
    EntityType,
    SyncStatus,
)
from akemisflow.shared.exceptions.sync import TransformError


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normaliza datetime a UTC (aware)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(raw: str) -> datetime:
    """
    Parsea ISO8601 tal como lo devuelve Airwallex (p.ej. "2025-12-16T10:15:00+0000"
    o con sufijo "Z").
    """
    value = raw.strip().replace("Z", "+00:00")
    # Airwallex a veces devuelve offsets sin ':' ("+0000")
    if len(value) >= 5 and value[-5] in "+-" and value[-4:].isdigit():
        value = f"{value[:-2]}:{value[-2:]}"
    return ensure_utc(datetime.fromisoformat(value))


# ---------------------------------------------------------------------------
# Lectura defensiva de payloads
# ---------------------------------------------------------------------------

def _section(data: Mapping[str, Any], key: str, owner_id: Optional[str]) -> Optional[Mapping[str, Any]]:
    """Retorna la seccion anidada `key` o None; falla si existe pero no es un objeto."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise TransformError(
            f"El campo '{key}' deberia ser un objeto y es {type(value).__name__}",
            external_id=owner_id,
        )
    return value


def _text(data: Mapping[str, Any], key: str, owner_id: Optional[str]) -> Optional[str]:
    """Lee un campo escalar como texto. Vacio o ausente -> None."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or isinstance(value, (dict, list, tuple, set)):
        raise TransformError(
            f"El campo '{key}' deberia ser texto y es {type(value).__name__}",
            external_id=owner_id,
        )
    text = str(value).strip()
    return text or None


def _text_list(data: Mapping[str, Any], key: str, owner_id: Optional[str]) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise TransformError(
            f"El campo '{key}' deberia ser una lista y es {type(value).__name__}",
            external_id=owner_id,
        )
    return tuple(str(v) for v in value if v is not None and str(v).strip())


# ---------------------------------------------------------------------------
# Secciones anidadas
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExternalAddress:
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    country_code: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Optional[Mapping[str, Any]], owner_id: Optional[str]) -> Optional["ExternalAddress"]:
        if data is None:
            return None
        return cls(
            street_address=_text(data, "street_address", owner_id),
            city=_text(data, "city", owner_id),
            state=_text(data, "state", owner_id),
            # Beneficiarios usan "postcode", contrapartes "postal_code"
            postcode=_text(data, "postcode", owner_id) or _text(data, "postal_code", owner_id),
            country_code=_text(data, "country_code", owner_id),
        )


@dataclass(frozen=True)
class ExternalBankDetails:
    account_name: Optional[str] = None
    account_number: Optional[str] = None
    account_currency: Optional[str] = None
    bank_name: Optional[str] = None
    swift_code: Optional[str] = None
    iban: Optional[str] = None
    bank_country_code: Optional[str] = None
    local_clearing_system: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Optional[Mapping[str, Any]], owner_id: Optional[str]) -> Optional["ExternalBankDetails"]:
        if data is None:
            return None
        return cls(**{name: _text(data, name, owner_id) for name in cls.__dataclass_fields__})


@dataclass(frozen=True)
class ExternalAdditionalInfo:
    personal_email: Optional[str] = None
    personal_nationality: Optional[str] = None
    personal_occupation: Optional[str] = None
    personal_id_number: Optional[str] = None
    personal_first_name_in_chinese: Optional[str] = None
    personal_last_name_in_chinese: Optional[str] = None
    legal_rep_first_name: Optional[str] = None
    legal_rep_last_name: Optional[str] = None
    legal_rep_email: Optional[str] = None
    legal_rep_mobile_number: Optional[str] = None
    legal_rep_nationality: Optional[str] = None
    legal_rep_occupation: Optional[str] = None
    legal_rep_id_type: Optional[str] = None
    legal_rep_address: Optional[ExternalAddress] = None
    business_registration_number: Optional[str] = None
    business_registration_type: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Optional[Mapping[str, Any]], owner_id: Optional[str]) -> Optional["ExternalAdditionalInfo"]:
        if data is None:
            return None
        values: dict[str, Any] = {
            name: _text(data, name, owner_id)
            for name in cls.__dataclass_fields__
            if name != "legal_rep_address"
        }
        values["legal_rep_address"] = ExternalAddress.from_payload(
            _section(data, "legal_rep_address", owner_id), owner_id
        )
        return cls(**values)


# ---------------------------------------------------------------------------
# Registros externos
# ---------------------------------------------------------------------------

def _parse_entity_type(raw: Optional[str], owner_id: Optional[str]) -> EntityType:
    if raw is None:
        raise TransformError("El registro no contiene 'entity_type'", external_id=owner_id)
    normalized = raw.upper()
    # Las contrapartes usan INDIVIDUAL para personas fisicas
    if normalized == "INDIVIDUAL":
        return EntityType.PERSONAL
    try:
        return EntityType(normalized)
    except ValueError as e:
        raise TransformError(f"entity_type desconocido: {raw}", external_id=owner_id) from e


def _require_mapping(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise TransformError(f"Se esperaba un objeto JSON y se recibio {type(payload).__name__}")
    return payload


@dataclass(frozen=True)
class ExternalBeneficiary:
    """Beneficiario de Airwallex (entidad a la que se le envian fondos)."""

    external_id: str
    entity_type: EntityType
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    nickname: Optional[str] = None
    payer_entity_type: Optional[str] = None
    address: Optional[ExternalAddress] = None
    bank_details: Optional[ExternalBankDetails] = None
    additional_info: Optional[ExternalAdditionalInfo] = None
    payment_methods: tuple[str, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "ExternalBeneficiary":
        data = _require_mapping(payload)
        external_id = _text(data, "beneficiary_id", None) or _text(data, "id", None)
        if not external_id:
            raise TransformError("Airwallex devolvio un beneficiario sin 'beneficiary_id'")

        body = _section(data, "beneficiary", external_id)
        if body is None:
            raise TransformError("El beneficiario no contiene la seccion 'beneficiary'", external_id=external_id)

        return cls(
            external_id=external_id,
            entity_type=_parse_entity_type(_text(body, "entity_type", external_id), external_id),
            first_name=_text(body, "first_name", external_id),
            last_name=_text(body, "last_name", external_id),
            company_name=_text(body, "company_name", external_id),
            nickname=_text(data, "nickname", external_id),
            payer_entity_type=_text(data, "payer_entity_type", external_id),
            address=ExternalAddress.from_payload(_section(body, "address", external_id), external_id),
            bank_details=ExternalBankDetails.from_payload(_section(body, "bank_details", external_id), external_id),
            additional_info=ExternalAdditionalInfo.from_payload(
                _section(body, "additional_info", external_id), external_id
            ),
            payment_methods=_text_list(data, "payment_methods", external_id),
            raw=data,
        )


@dataclass(frozen=True)
class ExternalCounterparty:
    """Contraparte de Airwallex (entidad que nos envia fondos)."""

    external_id: str
    entity_type: EntityType
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[ExternalAddress] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "ExternalCounterparty":
        data = _require_mapping(payload)
        external_id = _text(data, "id", None)
        if not external_id:
            raise TransformError("Airwallex devolvio una contraparte sin 'id'")

        contact = _section(data, "contact_details", external_id) or {}
        return cls(
            external_id=external_id,
            entity_type=_parse_entity_type(_text(data, "entity_type", external_id) or "INDIVIDUAL", external_id),
            name=_text(data, "name", external_id),
            email=_text(contact, "email", external_id) or _text(data, "email", external_id),
            phone=_text(contact, "phone_number", external_id) or _text(data, "phone_number", external_id),
            address=ExternalAddress.from_payload(_section(data, "address", external_id), external_id),
            raw=data,
        )


ExternalRecord = Union[ExternalBeneficiary, ExternalCounterparty]


# ---------------------------------------------------------------------------
# Mapeo y resultados
# ---------------------------------------------------------------------------

Transform = Callable[[Any], Any]


@dataclass(frozen=True)
class FieldMapping:
    """
    Define el mapeo de un atributo del registro externo a una columna local.

    - source: ruta de atributos separada por puntos (p.ej. "bank_details.iban")
    - column: nombre de la columna en Postgres
    - transform: funcion opcional para transformar el valor antes de persistir
    """

    source: str
    column: str
    transform: Optional[Transform] = None


@dataclass(frozen=True)
class Page:
    """Una pagina del listado paginado por cursor."""

    items: list[dict[str, Any]]
    has_more: bool
    next_cursor: Optional[str]


@dataclass(frozen=True)
class SyncConflict:
    entity_id: str
    entity_name: str
    external_id: str
    field: str
    local_value: Any
    external_value: Any
    resolution: ConflictResolution = ConflictResolution.USE_AIRWALLEX
    conflict_type: str = "DATA_MISMATCH"

    def to_dict(self) -> dict[str, Any]:
        return {
            "entityId": self.entity_id,
            "entityName": self.entity_name,
            "externalId": self.external_id,
            "field": self.field,
            "localValue": self.local_value,
            "externalValue": self.external_value,
            "resolution": self.resolution.value,
            "conflictType": self.conflict_type,
        }


@dataclass(frozen=True)
class SyncError:
    """Error registrado en una corrida. external_id es None para errores de la corrida."""

    external_id: Optional[str]
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"externalId": self.external_id, "message": self.message}


@dataclass(frozen=True)
class SyncedEntitySummary:
    id: str
    name: str
    status: SyncStatus
    external_id: Optional[str] = None
    email: Optional[str] = None
    entity_type: Optional[str] = None
    currency: Optional[str] = None
    last_sync_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "externalId": self.external_id,
            "email": self.email,
            "entityType": self.entity_type,
            "currency": self.currency,
            "lastSyncAt": self.last_sync_at.isoformat() if self.last_sync_at else None,
        }


@dataclass
class SyncResult:
    """Resultado agregado de una corrida (incluso si termino parcialmente)."""

    category: EntityCategory
    total_fetched: int = 0
    new_count: int = 0
    updated_count: int = 0
    conflicts: list[SyncConflict] = field(default_factory=list)
    errors: list[SyncError] = field(default_factory=list)
    synced_entities: list[SyncedEntitySummary] = field(default_factory=list)
    fatal_error: Optional[str] = None
    cancelled: bool = False
    started_at: datetime = field(default_factory=utc_now)
    finished_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.fatal_error is None and not self.errors

    def add_error(self, external_id: Optional[str], message: str) -> None:
        self.errors.append(SyncError(external_id=external_id, message=message))

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "totalFetched": self.total_fetched,
            "newCount": self.new_count,
            "updatedCount": self.updated_count,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "errors": [e.to_dict() for e in self.errors],
            "syncedEntities": [s.to_dict() for s in self.synced_entities],
            "fatalError": self.fatal_error,
            "cancelled": self.cancelled,
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }
