"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Gateway configuration loaded from environment variables with TALABAHUB_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="TALABAHUB_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Upstream REST backend ---
    upstream_url: str = "http://localhost:3030/api"
    upstream_timeout_seconds: float = 10.0

    # --- Rate limiting (Redis-backed, skipped when redis_url is empty) ---
    redis_url: str = ""
    redis_max_connections: int = 20
    rate_limit_requests: int = 60
    rate_limit_window_seconds: int = 60

    # --- Claims ---
    claims_page_size: int = 10
    verifications_page_size: int = 20
    countdown_tick_seconds: float = 1.0
    copy_ack_seconds: float = 2.0
    qr_code_base_url: str = "https://api.qrserver.com/v1/create-qr-code/"
    qr_code_size: str = "150x150"

    # --- Search ---
    search_limit: int = 20
    search_debounce_seconds: float = 0.5

    # --- Health monitor ---
    health_poll_enabled: bool = True
    health_poll_interval_seconds: float = 10.0
    system_health_refresh_seconds: float = 30.0
    system_health_error_limit: int = 10

    # --- Moderation / fraud ---
    moderation_page_size: int = 20


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
