from pydantic_settings import BaseSettings
from typing import List
import logging
import os

from mindyamsanzi.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # App Configuration
    APP_NAME: str = "MindYaMsanzi API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS (the browser app and the edge functions both call in)
    ALLOWED_HOSTS: List[str] = ["*"]

    # Database; an empty URL means no data store is configured
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./mindyamsanzi.db")
    AUTO_CREATE_TABLES: bool = True
    SEED_DIRECTORY: bool = False

    # Authentication (tokens are issued by the hosted auth provider)
    JWT_SECRET: str = os.getenv("JWT_SECRET", "")
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    ADMIN_ROLE: str = "admin"

    # OpenRouter
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    AI_MODEL: str = "tngtech/deepseek-r1t2-chimera:free"
    AI_TEMPERATURE: float = 0.7
    CHAT_MAX_TOKENS: int = 500
    INTERVENTION_MAX_TOKENS: int = 600
    AI_TIMEOUT_SECONDS: float = 15.0
    MALFORMED_BODY_LIMIT: int = 2000

    # Student context
    DEFAULT_REGION: str = "Nkangala"
    CHAT_INCLUDE_STUDENT_CONTEXT: bool = True
    CONTEXT_RECORD_LIMIT: int = 5
    CONTEXT_MENTOR_LIMIT: int = 3
    INTERVENTION_DIRECTORY_LIMIT: int = 3

    # Admin
    ADMIN_RECORD_LIMIT: int = 1000

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def persistence_enabled(self) -> bool:
        return bool(self.DATABASE_URL)


def validate_settings(settings: Settings) -> Settings:
    """Check required configuration once, at process start"""
    if not settings.OPENROUTER_API_KEY:
        raise ConfigError("Missing OpenRouter API key")

    if not settings.persistence_enabled:
        logger.warning("DATABASE_URL not set; chat persistence will be skipped")

    if not settings.JWT_SECRET:
        logger.warning("JWT_SECRET not set; authenticated routes will reject every token")

    if settings.AI_TIMEOUT_SECONDS <= 0:
        raise ConfigError("AI_TIMEOUT_SECONDS must be positive")

    return settings


def get_settings() -> Settings:
    return Settings()
