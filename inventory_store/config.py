"""
Configuration settings for the inventory store.

Uses Pydantic Settings to load environment variables for the storage backend,
logging, background jobs, credentials and low-stock alerts.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage
    store_backend: str = Field("sqlite", alias="STORE_BACKEND")
    sqlite_path: str = Field("inventory.db", alias="SQLITE_PATH")
    sqlite_timeout_seconds: float = Field(5.0, alias="SQLITE_TIMEOUT_SECONDS")

    # PostgreSQL (only used when STORE_BACKEND=postgres)
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("inventory", alias="DB_NAME")
    db_pool_min: int = Field(1, alias="DB_POOL_MIN")
    db_pool_max: int = Field(4, alias="DB_POOL_MAX")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Store / jobs
    scan_batch_size: int = Field(500, alias="SCAN_BATCH_SIZE")
    job_workers: int = Field(2, alias="JOB_WORKERS")

    # Credentials
    password_hash_rounds: int = Field(12, alias="PASSWORD_HASH_ROUNDS")

    # Low-stock alerts (manually triggered)
    alert_recipient: str = Field("5555215556", alias="ALERT_RECIPIENT")
    alert_message: str = Field(
        "Your inventory item is running low on stock.", alias="ALERT_MESSAGE"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
