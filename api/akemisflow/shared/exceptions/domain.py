"""
Excepciones relacionadas con la logica de dominio.
"""
from typing import Any

from akemisflow.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepcion base para errores de dominio."""

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class EntityNotFoundException(DomainException):
    """Excepcion cuando no se encuentra una entidad."""

    def __init__(self, entity_name: str, entity_id: Any):
        super().__init__(
            message=f"{entity_name} con ID {entity_id} no encontrado",
            error_code="ENTITY_NOT_FOUND",
            details={"entity": entity_name, "id": str(entity_id)}
        )
        self.status_code = 404


class ValidationException(DomainException):
    """Excepcion para errores de validacion."""

    def __init__(self, message: str, field: str = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class UnknownCategoryException(DomainException):
    """Excepcion cuando se pide sincronizar una categoria inexistente."""

    def __init__(self, category: str, valid_categories: list[str]):
        super().__init__(
            message=f"La categoria '{category}' no es valida",
            error_code="UNKNOWN_CATEGORY",
            details={
                "category_provided": category,
                "valid_categories": valid_categories
            }
        )
        self.status_code = 404
