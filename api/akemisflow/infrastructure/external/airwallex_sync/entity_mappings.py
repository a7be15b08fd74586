"""
Mapeos Airwallex -> Postgres por categoria de entidad.

Este es el punto recomendado para tener control total sobre:
- que columnas se escriben en cada tabla
- como se transforman los valores de Airwallex
- que relacion (beneficiario / contraparte) alimenta cada categoria

Contratistas, proveedores y contactos comparten el mismo esquema de columnas,
por eso existe una sola tabla de mapeo por tipo de payload y un solo motor
instanciado una vez por categoria.

Beneficiarios (a quienes pagamos) y contrapartes (quienes nos pagan) son dos
relaciones distintas: cada una tiene su propio campo de enlace y su propia
configuracion, no se unifican.
"""

from __future__ import annotations

from functools import partial
from typing import Any

from akemisflow.shared.constants.sync_constants import (
    DEFAULT_CURRENCY,
    RESOURCE_BENEFICIARIES,
    RESOURCE_COUNTERPARTIES,
    ContactType,
    EntityCategory,
    EntityType,
)
from akemisflow.shared.exceptions.domain import UnknownCategoryException

from .field_transformer import (
    TransformedEntity,
    country_name,
    json_list,
    transform_beneficiary,
    transform_counterparty,
)
from .sync_config import EmailScope, EntitySyncConfig
from .types import FieldMapping


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


_ADDRESS_MAPPINGS = [
    FieldMapping(source="address.street_address", column="address"),
    FieldMapping(source="address.city", column="city"),
    FieldMapping(source="address.postcode", column="postal_code"),
    FieldMapping(source="address.country_code", column="country", transform=country_name),
    FieldMapping(source="address.state", column="address_state"),
    FieldMapping(source="address.country_code", column="address_country_code"),
]

BENEFICIARY_FIELD_MAPPINGS: list[FieldMapping] = [
    *_ADDRESS_MAPPINGS,
    FieldMapping(source="entity_type", column="airwallex_entity_type", transform=_enum_value),
    FieldMapping(source="payment_methods", column="airwallex_payment_methods", transform=json_list),
    FieldMapping(source="payer_entity_type", column="airwallex_payer_entity_type"),
    # Datos bancarios
    FieldMapping(source="bank_details.account_name", column="bank_account_name"),
    FieldMapping(source="bank_details.account_number", column="bank_account_number"),
    FieldMapping(source="bank_details.account_currency", column="bank_account_currency"),
    FieldMapping(source="bank_details.bank_name", column="bank_name"),
    FieldMapping(source="bank_details.bank_country_code", column="bank_country_code"),
    FieldMapping(source="bank_details.swift_code", column="swift_code"),
    FieldMapping(source="bank_details.iban", column="iban"),
    FieldMapping(source="bank_details.local_clearing_system", column="local_clearing_system"),
    # Datos personales
    FieldMapping(source="additional_info.personal_email", column="personal_email"),
    FieldMapping(source="additional_info.personal_nationality", column="personal_nationality"),
    FieldMapping(source="additional_info.personal_occupation", column="personal_occupation"),
    FieldMapping(source="additional_info.personal_id_number", column="personal_id_number"),
    FieldMapping(source="additional_info.personal_first_name_in_chinese", column="personal_first_name_chinese"),
    FieldMapping(source="additional_info.personal_last_name_in_chinese", column="personal_last_name_chinese"),
    # Representante legal
    FieldMapping(source="additional_info.legal_rep_first_name", column="legal_rep_first_name"),
    FieldMapping(source="additional_info.legal_rep_last_name", column="legal_rep_last_name"),
    FieldMapping(source="additional_info.legal_rep_email", column="legal_rep_email"),
    FieldMapping(source="additional_info.legal_rep_mobile_number", column="legal_rep_mobile_number"),
    FieldMapping(source="additional_info.legal_rep_nationality", column="legal_rep_nationality"),
    FieldMapping(source="additional_info.legal_rep_occupation", column="legal_rep_occupation"),
    FieldMapping(source="additional_info.legal_rep_id_type", column="legal_rep_id_type"),
    FieldMapping(source="additional_info.legal_rep_address.street_address", column="legal_rep_address"),
    FieldMapping(source="additional_info.legal_rep_address.city", column="legal_rep_city"),
    FieldMapping(source="additional_info.legal_rep_address.state", column="legal_rep_state"),
    FieldMapping(source="additional_info.legal_rep_address.postcode", column="legal_rep_postal_code"),
    FieldMapping(source="additional_info.legal_rep_address.country_code", column="legal_rep_country_code"),
    # Registro mercantil
    FieldMapping(source="additional_info.business_registration_number", column="business_registration_number"),
    FieldMapping(source="additional_info.business_registration_type", column="business_registration_type"),
]

COUNTERPARTY_FIELD_MAPPINGS: list[FieldMapping] = [
    *_ADDRESS_MAPPINGS,
    FieldMapping(source="entity_type", column="airwallex_entity_type", transform=_enum_value),
    FieldMapping(source="email", column="email"),
    FieldMapping(source="phone", column="phone"),
]


def _client_contact_fields(entity: TransformedEntity) -> dict[str, Any]:
    contact_type = (
        ContactType.CLIENT_COMPANY if entity.entity_type is EntityType.COMPANY else ContactType.CLIENT_CONTACT
    )
    return {"contact_type": contact_type.value}


def _beneficiary_contact_fields(entity: TransformedEntity) -> dict[str, Any]:
    # Los beneficiarios nunca se crean con tipo cliente: esa relacion es de counterparties.
    contact_type = ContactType.PARTNER if entity.entity_type is EntityType.COMPANY else ContactType.CONSULTANT
    return {"contact_type": contact_type.value}


_CLIENT_CONTACT_TYPES = (ContactType.CLIENT_COMPANY.value, ContactType.CLIENT_CONTACT.value)

_beneficiary_transform = partial(transform_beneficiary, mappings=BENEFICIARY_FIELD_MAPPINGS)
_counterparty_transform = partial(transform_counterparty, mappings=COUNTERPARTY_FIELD_MAPPINGS)


ENTITY_SYNC_CONFIGS: dict[EntityCategory, EntitySyncConfig] = {
    EntityCategory.CONTRACTORS: EntitySyncConfig(
        category=EntityCategory.CONTRACTORS,
        entity_label="Contractor",
        resource=RESOURCE_BENEFICIARIES,
        target_table="contractors",
        link_column="airwallex_beneficiary_id",
        transform=_beneficiary_transform,
        create_defaults={"status": "ACTIVE", "preferred_currency": DEFAULT_CURRENCY},
    ),
    EntityCategory.SUPPLIERS: EntitySyncConfig(
        category=EntityCategory.SUPPLIERS,
        entity_label="Supplier",
        resource=RESOURCE_BENEFICIARIES,
        target_table="suppliers",
        link_column="airwallex_beneficiary_id",
        transform=_beneficiary_transform,
        create_defaults={"status": "ACTIVE", "preferred_currency": DEFAULT_CURRENCY},
    ),
    EntityCategory.CONTACTS: EntitySyncConfig(
        category=EntityCategory.CONTACTS,
        entity_label="Contact",
        resource=RESOURCE_BENEFICIARIES,
        target_table="contacts",
        link_column="airwallex_beneficiary_id",
        transform=_beneficiary_transform,
        email_scope=EmailScope(column="contact_type", values=_CLIENT_CONTACT_TYPES, exclude=True),
        create_fields=_beneficiary_contact_fields,
        create_defaults={"status": "ACTIVE", "preferred_currency": "USD"},
    ),
    EntityCategory.CLIENTS: EntitySyncConfig(
        category=EntityCategory.CLIENTS,
        entity_label="Client",
        resource=RESOURCE_COUNTERPARTIES,
        target_table="contacts",
        link_column="airwallex_payer_account_id",
        transform=_counterparty_transform,
        email_scope=EmailScope(column="contact_type", values=_CLIENT_CONTACT_TYPES),
        create_fields=_client_contact_fields,
        create_defaults={
            "status": "ACTIVE",
            "preferred_currency": DEFAULT_CURRENCY,
            "airwallex_payment_methods": json_list(["BANK_TRANSFER"]),
        },
    ),
}


def get_entity_sync_config(category: str | EntityCategory) -> EntitySyncConfig:
    """
    Retorna la configuracion de sync para la categoria indicada.

    Raises:
        UnknownCategoryException: si la categoria no existe.
    """
    try:
        key = EntityCategory(category)
    except ValueError as e:
        raise UnknownCategoryException(str(category), [c.value for c in EntityCategory]) from e
    return ENTITY_SYNC_CONFIGS[key]
