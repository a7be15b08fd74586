"""
Excepcion base para todas las excepciones personalizadas de la aplicacion.
"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Excepcion base de la aplicacion.

    Las excepciones de dominio y de sincronizacion heredan de esta clase para
    que el handler global de FastAPI las traduzca a una respuesta JSON uniforme.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Inicializa la excepcion.

        Args:
            message: Mensaje de error descriptivo
            status_code: Codigo de estado HTTP
            error_code: Codigo de error personalizado
            details: Detalles adicionales del error
        """
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Cuerpo JSON devuelto por el API."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }
