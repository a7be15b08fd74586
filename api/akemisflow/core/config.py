"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.
Soporta configuracion dinamica para desarrollo (ENVIRONMENT=development)
y produccion (ENVIRONMENT=production).
"""
import json
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    Configuracion de desarrollo vs produccion:
    - ENVIRONMENT: 'development' o 'production'
    - DATABASE_URL se puede especificar completa o por componentes
    - Las credenciales de Airwallex son opcionales al arrancar; sin ellas
      cualquier sincronizacion termina con error de autenticacion
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="AkemisFlow")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos - Componentes separados (recomendado para flexibilidad)
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="akemisflow")
    DATABASE_PASSWORD: str = Field(default="akemisflow")
    DATABASE_NAME: str = Field(default="akemisflow")

    # Base de datos - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Airwallex
    AIRWALLEX_CLIENT_ID: str = Field(default="")
    AIRWALLEX_API_KEY: str = Field(default="")
    AIRWALLEX_BASE_URL: str = Field(default="https://api.airwallex.com")
    AIRWALLEX_API_VERSION: str = Field(default="2020-09-22")
    AIRWALLEX_PAGE_SIZE: int = Field(default=100)
    AIRWALLEX_TIMEOUT_S: int = Field(default=30)
    AIRWALLEX_MAX_RETRIES: int = Field(default=6)
    # Margen de seguridad restado a la expiracion del token
    AIRWALLEX_TOKEN_MARGIN_S: int = Field(default=60)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la URL de base de datos efectiva.
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la URL desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    @computed_field
    @property
    def airwallex_configured(self) -> bool:
        """Indica si hay credenciales de Airwallex."""
        return bool(self.AIRWALLEX_CLIENT_ID and self.AIRWALLEX_API_KEY)

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


# Instancia global de configuracion
settings = Settings()
