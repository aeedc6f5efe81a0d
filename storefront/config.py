"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - Settings are frozen: one immutable value per process, passed into components
      at construction (no component reads the environment itself)
    - get_settings() is cached (lru_cache)

Design Decisions:
    - Defaults provided for all non-secret settings: works out-of-the-box locally
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, frozen=True,
    )

    # Storage
    storage_root: str = ".data"

    # Sessions and ids
    hash_secret: str = "change-me"
    session_duration_seconds: int = 60 * 60
    id_length: int = 20
    id_collision_attempts: int = 3

    # Payment gateway (Stripe-compatible)
    payment_api_url: str = "https://api.stripe.com/v1"
    payment_api_key: str = "sk_test_placeholder"
    payment_currency: str = "usd"

    # Mailer (Mailgun-compatible)
    mail_api_url: str = "https://api.mailgun.net/v3"
    mail_domain: str = "example.com"
    mail_api_key: str = "key-placeholder"
    mail_from: str = "Storefront <contact@:domain>"

    # Outbound HTTP
    http_timeout_seconds: float = 30.0
    http_max_retries: int = 3
    http_base_delay_ms: int = 500
    http_max_delay_ms: int = 10_000

    # Receipts
    app_name: str = "Storefront"
    app_url: str = "https://example.com/storefront"
    support_url: str = "https://example.com/storefront/support"
    templates_dir: str = str(Path(__file__).parent / "templates")

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("payment_currency")
    @classmethod
    def lowercase_currency(cls, v: str) -> str:
        return v.lower()

    @property
    def session_duration_ms(self) -> int:
        return self.session_duration_seconds * 1000

    @property
    def mail_sender(self) -> str:
        """Sender address with the ':domain' placeholder resolved."""
        return self.mail_from.replace(":domain", self.mail_domain)


@lru_cache
def get_settings() -> Settings:
    return Settings()
