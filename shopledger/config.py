from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Shop Ledger"
    ENVIRONMENT: str = "local"
    CURRENCY: str = "BDT"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./shopledger.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Stock alerts
    # ==============================
    EXPIRY_ALERT_DAYS: int = 30
    EXPIRY_ALERT_LIMIT: int = 50


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
