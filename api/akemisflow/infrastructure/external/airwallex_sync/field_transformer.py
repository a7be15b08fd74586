"""
Transformacion de registros Airwallex a filas parciales de entidades locales.

Funciones puras (sin I/O). La salida solo contiene los campos presentes en el
registro externo: un campo ausente nunca se emite como None, para que un
UPDATE no pise valores existentes por ausencia.

Politica de nombres (en orden):
1. COMPANY con company_name -> company y last_name = company_name.
2. PERSONAL -> first_name / last_name tal cual.
3. Si siguen faltando (o son placeholders) y hay titular de cuenta bancaria,
   se separa por espacios: primer token -> nombre, resto -> apellido.
4. Si no hay nada derivable -> apellido placeholder con sufijo del ID externo.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from akemisflow.shared.constants.sync_constants import EntityType, SyncStatus

from .types import (
    ExternalBeneficiary,
    ExternalCounterparty,
    ExternalRecord,
    FieldMapping,
    ensure_utc,
)

# Nombres que Airwallex (o altas manuales antiguas) usan como relleno
_PLACEHOLDER_NAMES = {"unknown", "person", "company", "n/a", "na", "-", "none", "null"}

COUNTRY_NAMES: dict[str, str] = {
    "MA": "Morocco",
    "CN": "China",
    "HK": "Hong Kong",
    "SN": "Senegal",
    "TN": "Tunisia",
    "NE": "Niger",
    "PH": "Philippines",
    "ES": "Spain",
    "FR": "France",
    "DE": "Germany",
    "IT": "Italy",
    "GB": "United Kingdom",
    "NL": "Netherlands",
    "BE": "Belgium",
    "LU": "Luxembourg",
}


@dataclass(frozen=True)
class TransformedEntity:
    """Campos locales derivados de un registro externo."""

    external_id: str
    entity_type: EntityType
    fields: dict[str, Any]

    @property
    def email(self) -> Optional[str]:
        return self.fields.get("email")

    @property
    def display_name(self) -> str:
        return display_name(self.fields)


def display_name(row: dict[str, Any]) -> str:
    """Nombre para reportes: 'Nombre Apellido' o lo que exista."""
    parts = [row.get("first_name"), row.get("last_name")]
    name = " ".join(str(p) for p in parts if p)
    return name or str(row.get("company") or row.get("email") or row.get("id") or "")


def country_name(code: Optional[str]) -> Optional[str]:
    """Codigo ISO de 2 letras -> nombre. Codigos desconocidos pasan sin cambios."""
    if not code:
        return code
    return COUNTRY_NAMES.get(code.upper(), code)


def json_list(values: Iterable[str]) -> str:
    return json.dumps(list(values))


def placeholder_last_name(external_id: str) -> str:
    return f"Contact {external_id[-8:]}"


def placeholder_first_name(entity_type: EntityType) -> str:
    return "Company" if entity_type is EntityType.COMPANY else "Unknown"


def _real_name(value: Optional[str]) -> Optional[str]:
    if value is None or value.strip().lower() in _PLACEHOLDER_NAMES:
        return None
    return value


def split_holder_name(holder: str) -> tuple[Optional[str], str]:
    """
    "Jane Doe" -> ("Jane", "Doe"); "Jane Mary Doe" -> ("Jane", "Mary Doe");
    "Acme" -> (None, "Acme").
    """
    tokens = holder.split()
    if len(tokens) >= 2:
        return tokens[0], " ".join(tokens[1:])
    return None, holder.strip()


def _apply_holder_fallback(
    first: Optional[str],
    last: Optional[str],
    holder: Optional[str],
) -> tuple[Optional[str], Optional[str]]:
    """Completa solo el lado que falta; un nombre real ya presente nunca se pisa."""
    if not holder:
        return first, last
    holder_first, holder_last = split_holder_name(holder)
    if first is None and last is None:
        return holder_first, holder_last
    if first is None:
        return holder_first, last
    return first, holder_last


def derive_beneficiary_names(record: ExternalBeneficiary) -> dict[str, str]:
    first: Optional[str] = None
    last: Optional[str] = None
    company: Optional[str] = None

    if record.entity_type is EntityType.COMPANY and record.company_name:
        company = record.company_name
        last = record.company_name
    elif record.entity_type is EntityType.PERSONAL:
        first = _real_name(record.first_name)
        last = _real_name(record.last_name)

    names_missing = last is None or (record.entity_type is EntityType.PERSONAL and first is None)
    if names_missing:
        holder = record.bank_details.account_name if record.bank_details else None
        first, last = _apply_holder_fallback(first, last, holder)

    if last is None:
        last = placeholder_last_name(record.external_id)

    names = {"last_name": last}
    if first:
        names["first_name"] = first
    if company:
        names["company"] = company
    return names


def derive_counterparty_names(record: ExternalCounterparty) -> dict[str, str]:
    name = _real_name(record.name)
    if name and record.entity_type is EntityType.COMPANY:
        return {"company": name, "last_name": name}
    if name:
        first, last = split_holder_name(name)
        names = {"last_name": last}
        if first:
            names["first_name"] = first
        return names
    return {"last_name": placeholder_last_name(record.external_id)}


def _resolve(record: Any, path: str) -> Any:
    """Sigue una ruta de atributos; una seccion ausente corta en None."""
    value = record
    for attr in path.split("."):
        if value is None:
            return None
        value = getattr(value, attr)
    return value


def apply_field_mappings(record: ExternalRecord, mappings: Iterable[FieldMapping]) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for m in mappings:
        raw = _resolve(record, m.source)
        if raw is None or raw == "" or raw == ():
            continue
        value = m.transform(raw) if m.transform else raw
        if value is None or value == "":
            continue
        row[m.column] = value
    return row


def _stamp(row: dict[str, Any], payload: dict[str, Any], synced_at: datetime) -> dict[str, Any]:
    row["airwallex_sync_status"] = SyncStatus.SYNCED.value
    row["airwallex_last_sync_at"] = ensure_utc(synced_at)
    row["airwallex_raw_data"] = dict(payload)
    return row


def transform_beneficiary(
    payload: dict[str, Any],
    *,
    mappings: Iterable[FieldMapping],
    synced_at: datetime,
) -> TransformedEntity:
    """
    Beneficiario Airwallex -> fila parcial.

    Raises:
        TransformError: si el payload no tiene la forma esperada.
    """
    record = ExternalBeneficiary.from_payload(payload)
    row = apply_field_mappings(record, mappings)
    row.update(derive_beneficiary_names(record))

    info = record.additional_info
    if info:
        email = info.personal_email or info.legal_rep_email
        if email:
            row["email"] = email
        if info.legal_rep_mobile_number:
            row["phone"] = info.legal_rep_mobile_number

    if record.bank_details and record.bank_details.account_currency:
        row["preferred_currency"] = record.bank_details.account_currency

    return TransformedEntity(
        external_id=record.external_id,
        entity_type=record.entity_type,
        fields=_stamp(row, payload, synced_at),
    )


def transform_counterparty(
    payload: dict[str, Any],
    *,
    mappings: Iterable[FieldMapping],
    synced_at: datetime,
) -> TransformedEntity:
    """Contraparte (pagador) Airwallex -> fila parcial."""
    record = ExternalCounterparty.from_payload(payload)
    row = apply_field_mappings(record, mappings)
    row.update(derive_counterparty_names(record))
    return TransformedEntity(
        external_id=record.external_id,
        entity_type=record.entity_type,
        fields=_stamp(row, payload, synced_at),
    )
