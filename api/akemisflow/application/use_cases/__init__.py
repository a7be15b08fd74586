"""
Casos de uso de la aplicacion.
"""
from .sync_use_cases import AirwallexSyncUseCases

__all__ = ["AirwallexSyncUseCases"]
