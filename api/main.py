"""
Punto de entrada principal de la aplicación FastAPI.
Configura la aplicación, middlewares, rutas y eventos.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from akemisflow.core.config import settings, get_cors_origins
from akemisflow.core.events import lifespan
from akemisflow.api.v1.router import api_router
from akemisflow.api.middlewares.error_handler import ErrorHandlerMiddleware
from akemisflow.shared.exceptions.base import AppException


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Backend de AkemisFlow: reconciliacion de entidades con Airwallex",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Configurar CORS
    cors_origins = get_cors_origins(settings.CORS_ORIGINS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware personalizado para manejo de errores
    application.add_middleware(ErrorHandlerMiddleware)

    # Incluir routers de la API
    application.include_router(api_router, prefix="/api")

    # Manejador global de excepciones personalizadas
    @application.exception_handler(AppException)
    async def app_exception_handler(request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Health check endpoint
    @application.get("/health", tags=["Health"])
    async def health_check():
        """Endpoint para verificar el estado de la aplicación."""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "airwallex_configured": settings.airwallex_configured,
        }

    return application


# Crear instancia de la aplicación
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
