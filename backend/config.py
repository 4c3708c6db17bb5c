"""
Application settings - loaded from environment variables (or a .env file)
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration. Required fields have no default: startup fails without them."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Document store
    database_url: str

    # Authentication (identity provider shares the signing secret)
    auth_jwt_secret: str
    auth_jwt_algorithm: str = "HS256"

    # Generative image / text API
    gemini_api_key: str
    gemini_image_model: str = "gemini-3-pro-image-preview"
    gemini_text_model: str = "gemini-2.5-flash"

    # Print vendor
    lulu_client_key: str
    lulu_client_secret: str
    lulu_use_sandbox: bool = False

    # Payment processor
    stripe_secret_key: str
    stripe_webhook_secret: str

    # Customer-facing site (checkout redirects, links in emails)
    app_url: str = "http://localhost:3000"

    # Transactional email; sending is skipped when no key is set
    resend_api_key: Optional[str] = None
    email_from: str = "Before Bedtime Adventures <hello@beforebedtimeadventures.com>"

    # Blob storage
    media_storage_path: str = "/app/media"
    public_base_url: str = "http://localhost:8000"

    # Background workers
    celery_broker_url: str = "redis://redis:6379/0"
    celery_result_backend: str = "redis://redis:6379/0"

    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"
    order_estimated_cost_cents: int = 2000  # Lulu print + shipping estimate
    http_timeout_seconds: float = 30.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
