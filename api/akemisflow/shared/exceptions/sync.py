"""
Excepciones del motor de sincronizacion con Airwallex.

Solo AuthenticationError y PageFetchError terminan una corrida antes de tiempo.
TransformError y PersistenceError se registran por registro y la corrida continua.
"""
from typing import Any, Dict, List, Optional

from akemisflow.shared.exceptions.base import AppException


class AirwallexSyncError(AppException):
    """Excepcion base para errores de integracion con Airwallex."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        error_code: str = "AIRWALLEX_SYNC_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )


class SyncConfigError(AirwallexSyncError):
    """Error de configuracion del pipeline (credenciales, DSN, categoria)."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=500,
            error_code="SYNC_CONFIG_ERROR"
        )


class AuthenticationError(AirwallexSyncError):
    """Credenciales ausentes o intercambio de token rechazado. Fatal para la corrida."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(
            message=message,
            error_code="AIRWALLEX_AUTH_ERROR",
            details={"upstream_status": status} if status is not None else None
        )
        self.status = status


class PageFetchError(AirwallexSyncError):
    """
    Fallo al listar una pagina (status no 2xx o error de red).

    `items` contiene los registros acumulados en paginas anteriores para que
    el orquestador pueda procesarlos igualmente.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        items: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(
            message=message,
            error_code="AIRWALLEX_PAGE_FETCH_ERROR",
            details={"upstream_status": status} if status is not None else None
        )
        self.status = status
        self.items: List[Dict[str, Any]] = list(items or [])


class TransformError(AirwallexSyncError):
    """Payload externo con forma inesperada."""

    def __init__(self, message: str, external_id: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="AIRWALLEX_TRANSFORM_ERROR",
            details={"external_id": external_id} if external_id else None
        )
        self.external_id = external_id


class PersistenceError(AirwallexSyncError):
    """Fallo de lectura/escritura en el almacenamiento de entidades."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=500,
            error_code="SYNC_PERSISTENCE_ERROR"
        )
