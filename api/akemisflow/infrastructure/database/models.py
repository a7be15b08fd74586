"""
Modelos de base de datos (ORM).

Contratistas, proveedores y contactos comparten el mismo bloque de columnas
(datos de contacto, bancarios, representante legal y estado de sync con
Airwallex). El motor de sync los trata como estructuralmente identicos.
"""
from sqlalchemy import Column, String, DateTime, Text, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from akemisflow.infrastructure.database.session import Base
from akemisflow.shared.constants.sync_constants import SyncStatus


# JSONB en Postgres, JSON generico en SQLite (tests)
JsonColumnType = JSON().with_variant(JSONB(), "postgresql")


class AirwallexSyncMixin:
    """Columnas comunes de las entidades sincronizables con Airwallex."""

    id = Column(String(36), primary_key=True)

    # Identidad
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(100), nullable=True)
    status = Column(String(50), default="ACTIVE")
    preferred_currency = Column(String(3), nullable=True)

    # Direccion
    address = Column(Text, nullable=True)
    city = Column(String(255), nullable=True)
    postal_code = Column(String(50), nullable=True)
    country = Column(String(255), nullable=True)
    address_state = Column(String(255), nullable=True)
    address_country_code = Column(String(2), nullable=True)

    # Datos bancarios
    bank_account_name = Column(String(255), nullable=True)
    bank_account_number = Column(String(100), nullable=True)
    bank_account_currency = Column(String(3), nullable=True)
    bank_name = Column(String(255), nullable=True)
    bank_country_code = Column(String(2), nullable=True)
    swift_code = Column(String(20), nullable=True)
    iban = Column(String(50), nullable=True)
    local_clearing_system = Column(String(50), nullable=True)

    # Datos personales
    personal_email = Column(String(255), nullable=True)
    personal_nationality = Column(String(100), nullable=True)
    personal_occupation = Column(String(255), nullable=True)
    personal_id_number = Column(String(100), nullable=True)
    personal_first_name_chinese = Column(String(255), nullable=True)
    personal_last_name_chinese = Column(String(255), nullable=True)

    # Representante legal
    legal_rep_first_name = Column(String(255), nullable=True)
    legal_rep_last_name = Column(String(255), nullable=True)
    legal_rep_email = Column(String(255), nullable=True)
    legal_rep_mobile_number = Column(String(100), nullable=True)
    legal_rep_nationality = Column(String(100), nullable=True)
    legal_rep_occupation = Column(String(255), nullable=True)
    legal_rep_id_type = Column(String(100), nullable=True)
    legal_rep_address = Column(Text, nullable=True)
    legal_rep_city = Column(String(255), nullable=True)
    legal_rep_state = Column(String(255), nullable=True)
    legal_rep_postal_code = Column(String(50), nullable=True)
    legal_rep_country_code = Column(String(2), nullable=True)

    # Registro mercantil
    business_registration_number = Column(String(100), nullable=True)
    business_registration_type = Column(String(100), nullable=True)

    # Airwallex
    airwallex_beneficiary_id = Column(String(255), nullable=True, unique=True, index=True)
    airwallex_entity_type = Column(String(20), nullable=True)
    airwallex_payment_methods = Column(Text, nullable=True)  # lista JSON serializada
    airwallex_payer_entity_type = Column(String(20), nullable=True)
    airwallex_sync_status = Column(String(20), default=SyncStatus.NONE.value, index=True)
    airwallex_last_sync_at = Column(DateTime(timezone=True), nullable=True)
    airwallex_sync_error = Column(Text, nullable=True)
    airwallex_raw_data = Column(JsonColumnType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class ContractorModel(AirwallexSyncMixin, Base):
    """Contratistas: beneficiarios a los que se paga por servicios."""

    __tablename__ = "contractors"

    def __repr__(self):
        return f"<Contractor(id={self.id}, email={self.email}, sync={self.airwallex_sync_status})>"


class SupplierModel(AirwallexSyncMixin, Base):
    """Proveedores: beneficiarios a los que se paga por bienes/servicios."""

    __tablename__ = "suppliers"

    def __repr__(self):
        return f"<Supplier(id={self.id}, company={self.company}, sync={self.airwallex_sync_status})>"


class ContactModel(AirwallexSyncMixin, Base):
    """
    Contactos. Tabla compartida entre contactos-beneficiario y clientes.

    Los clientes son contrapartes (quienes nos pagan) y se enlazan por
    airwallex_payer_account_id, independiente de airwallex_beneficiary_id.
    """

    __tablename__ = "contacts"

    contact_type = Column(String(50), nullable=True, index=True)
    airwallex_payer_account_id = Column(String(255), nullable=True, unique=True, index=True)

    def __repr__(self):
        return f"<Contact(id={self.id}, type={self.contact_type}, email={self.email})>"
