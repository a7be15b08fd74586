"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas.
"""
from akemisflow.infrastructure.database.models import (
    ContractorModel,
    SupplierModel,
    ContactModel,
)
