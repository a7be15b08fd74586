"""
Middleware para manejo centralizado de errores.

Las AppException se responden en el handler global de main.py; aqui solo
llegan los errores no previstos.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware para capturar y manejar errores de forma centralizada."""

    async def dispatch(self, request: Request, call_next):
        """
        Procesa la petición y captura errores.

        Args:
            request: Petición HTTP
            call_next: Siguiente middleware/handler

        Returns:
            Response: Respuesta HTTP
        """
        try:
            return await call_next(request)
        except Exception as exc:
            logger.opt(exception=exc).error(
                "Error no manejado en {} {}: {}", request.method, request.url.path, exc
            )

            # Respuesta de error generica
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "INTERNAL_SERVER_ERROR",
                    "message": "Ha ocurrido un error interno del servidor",
                    "details": {}
                }
            )
