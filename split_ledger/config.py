"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "split-ledger"
    service_version: str = "0.1.0"
    log_level: str = "INFO"

    # Storage
    store_backend: str = "memory"  # "memory" | "sql"
    database_url: str = "sqlite:///./split_ledger.db"

    # Money
    default_wallet_cents: int = 50_000  # $500.00
    max_amount_cents: int = 100_000_000  # $1,000,000.00

    # HTTP
    idempotency_key_max_length: int = 255
    mount_root_routes: bool = True  # Serve v1 routes at "/" as well as "/v1"


settings = Settings()
