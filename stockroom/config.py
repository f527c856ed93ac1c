from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Stockroom Inventory Manager"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./stockroom.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Session & Login
    # ==============================
    SESSION_SECRET: Optional[str] = None
    SESSION_COOKIE: str = "inventory-session"
    SESSION_MAX_AGE_SECONDS: int = 7 * 24 * 60 * 60
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_PASSWORD_HASH: Optional[str] = None
    ADMIN_PASSWORD_SALT: Optional[str] = None
    PBKDF2_ROUNDS: int = 200_000
    AUTH_REQUIRED_FOR_ALL: bool = False
    CORS_ORIGINS: str = "http://localhost:3000"

    # ==============================
    # Uploads
    # ==============================
    UPLOAD_DIR: str = "uploads"
    IMAGE_MAX_BYTES: int = 5 * 1024 * 1024
    IMPORT_MAX_BYTES: int = 10 * 1024 * 1024

    # ==============================
    # Exports
    # ==============================
    CURRENCY_SYMBOL: str = "₹"


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
