"""
Configuration management.
Simple .env based config for VPS deployment.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Security
    session_secret: str = "change-me-in-production-use-random-string"

    # Database
    database_path: str = "./data/app.db"

    # Logging
    log_level: str = "INFO"

    # Profit estimate: share of an order total treated as cost of goods
    order_cost_ratio: float = Field(default=0.3, ge=0.0, le=1.0)

    # WooCommerce sync
    orders_page_size: int = Field(default=100, ge=1, le=100)
    sync_max_pages: int = Field(default=1, ge=1)
    woo_request_timeout: float = 30.0


# Global settings instance
settings = Settings()
