"""
Constantes relacionadas con la sincronizacion Airwallex.
"""
from enum import Enum


class SyncStatus(str, Enum):
    """Resultado del ultimo intento de sincronizacion de una entidad."""
    NONE = "NONE"
    PENDING = "PENDING"
    SYNCED = "SYNCED"
    ERROR = "ERROR"


class EntityType(str, Enum):
    """Tipo de entidad externa (beneficiario o contraparte)."""
    PERSONAL = "PERSONAL"
    COMPANY = "COMPANY"


class EntityCategory(str, Enum):
    """Categorias de entidades locales sincronizadas con Airwallex."""
    CONTRACTORS = "contractors"
    SUPPLIERS = "suppliers"
    CLIENTS = "clients"
    CONTACTS = "contacts"


class ConflictResolution(str, Enum):
    """Politica de resolucion de un conflicto detectado."""
    USE_AIRWALLEX = "USE_AIRWALLEX"
    USE_DB = "USE_DB"
    MANUAL = "MANUAL"


class ContactType(str, Enum):
    """Tipos de contacto creados por la sincronizacion."""
    CLIENT_COMPANY = "CLIENT_COMPANY"
    CLIENT_CONTACT = "CLIENT_CONTACT"
    CONSULTANT = "CONSULTANT"
    PARTNER = "PARTNER"


# Recursos del API de Airwallex
RESOURCE_BENEFICIARIES = "beneficiaries"
RESOURCE_COUNTERPARTIES = "counterparties"

# Campos comparados por el detector de conflictos
CONFLICT_FIELDS = ("email", "phone", "address", "bank_account_number")

# Dominio usado para emails placeholder de entidades creadas sin email real
PLACEHOLDER_EMAIL_DOMAIN = "airwallex.placeholder"

DEFAULT_CURRENCY = "EUR"
