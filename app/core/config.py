from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
import os
from functools import lru_cache
from typing import List
import secrets


class Settings(BaseSettings):
    # App settings
    APP_NAME: str = "Tender Tracker API"
    API_PREFIX: str = "/api"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    VERSION: str = "0.1.0"

    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./tender_tracker.db")

    # Security settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", secrets.token_hex(32))
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))  # 24 hours
    ALGORITHM: str = "HS256"

    # Admin user settings
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin123")

    # CORS settings
    CORS_ORIGINS: List[str] = os.getenv("CORS_ORIGINS", "*").split(",")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Procurement API (pcc.g0v.ronny.tw) settings
    PCC_API_BASE_URL: str = os.getenv("PCC_API_BASE_URL", "https://pcc.g0v.ronny.tw/api")
    PCC_REQUEST_DELAY_MS: int = int(os.getenv("PCC_REQUEST_DELAY_MS", "500"))
    PCC_MAX_RETRY_COUNT: int = int(os.getenv("PCC_MAX_RETRY_COUNT", "3"))
    PCC_RETRY_DELAY_MS: int = int(os.getenv("PCC_RETRY_DELAY_MS", "1500"))
    PCC_BACKOFF_FACTOR: float = float(os.getenv("PCC_BACKOFF_FACTOR", "1.5"))
    PCC_REQUEST_TIMEOUT_SECONDS: int = int(os.getenv("PCC_REQUEST_TIMEOUT_SECONDS", "30"))

    # Ingestion settings
    DEFAULT_DATE_RANGE_MONTHS: int = int(os.getenv("DEFAULT_DATE_RANGE_MONTHS", "6"))
    INGEST_CONCURRENCY_LIMIT: int = int(os.getenv("INGEST_CONCURRENCY_LIMIT", "3"))
    # Un-archive an existing view when a run stores a new version of its tender
    RESET_ARCHIVE_ON_NEW_VERSION: bool = os.getenv("RESET_ARCHIVE_ON_NEW_VERSION", "False").lower() == "true"

    # Subscription tiers
    FREE_TIER_KEYWORD_LIMIT: int = int(os.getenv("FREE_TIER_KEYWORD_LIMIT", "5"))

    # Inbound throttling for the search stream
    SEARCH_RATE_LIMIT: int = int(os.getenv("SEARCH_RATE_LIMIT", "10"))
    SEARCH_RATE_WINDOW_SECONDS: int = int(os.getenv("SEARCH_RATE_WINDOW_SECONDS", "60"))

    # Environment name
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    model_config = ConfigDict(
        # This will look for environment-specific files first, then fall back to the default
        env_file = (".env.{environment}", ".env"),
        case_sensitive = True,
        extra = "ignore"
    )

    @field_validator('ENVIRONMENT', mode='before')
    def set_environment(cls, v):
        """Get environment from ENV variable or use default"""
        return os.getenv('ENVIRONMENT', v)

    def __init__(self, **kwargs):
        # Replace {environment} placeholder with actual environment name
        if isinstance(self.model_config['env_file'], tuple):
            env_files = []
            for file in self.model_config['env_file']:
                if '{environment}' in file:
                    env = os.getenv('ENVIRONMENT', 'development')
                    file = file.format(environment=env)
                env_files.append(file)
            self.model_config['env_file'] = tuple(env_files)

        super().__init__(**kwargs)


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached settings instance to avoid loading .env file on each request
    """
    return Settings()


settings = get_settings()
