"""Application configuration using Pydantic BaseSettings"""
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

# Setup logging
logger = logging.getLogger("config")

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./mly.db"

    # Domain & URLs
    DOMAIN: str = "localhost:8000"
    FRONTEND_URL: str = "http://localhost:3000"
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"

    # OpenTelemetry
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ""
    OTEL_SERVICE_NAME: str = "mly-backend"
    OTEL_ENVIRONMENT: str = "development"

    # Session tokens (cookie auth)
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 30
    TOKEN_COOKIE_NAME: str = "mly_token"

    # API keys
    API_KEY_HEADER: str = "X-Mly-Api-Key"
    API_KEY_PREFIX: str = "mly_"

    # Email provider (SES)
    DEFAULT_SES_REGION: str = "us-east-1"
    SES_CONFIGURATION_SET_HEADER: str = "X-SES-CONFIGURATION-SET"
    SES_CONNECT_TIMEOUT: int = 5  # seconds
    SES_READ_TIMEOUT: int = 15  # seconds
    SES_MAX_ATTEMPTS: int = 2

    # Pydantic V2 Config
    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("JWT_SECRET")
    @classmethod
    def check_jwt_secret(cls, v):
        if not v or v.strip() == "":
            # Tokens cannot be issued or decoded without a secret
            logger.error("JWT_SECRET is missing! Session cookies will not validate.")
            return v
        return v

# Create global settings instance
settings = Settings()

# --- Module-level Constants (Extracted from settings) ---
IS_DEVELOPMENT = settings.ENVIRONMENT == "development"
API_KEY_HEADER = settings.API_KEY_HEADER
DEFAULT_SES_REGION = settings.DEFAULT_SES_REGION
SES_CONFIGURATION_SET_HEADER = settings.SES_CONFIGURATION_SET_HEADER

# Derived constants
ALLOWED_AUTH_PROVIDERS = ["github", "google", "email"]
IDENTITY_STATUSES = ["pending", "success", "failed", "temporary_failure", "not_started"]
EMAIL_STATUSES = ["sending", "error", "delivered", "bounced", "complained", "rejected"]
