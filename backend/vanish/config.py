"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Mail ids default to None: notifications are skipped until all three are set
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://vanish:vanish@db:5432/vanish"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Message store: every call bounded, never auto-retried on timeout
    store_timeout_seconds: float = 5.0
    reveal_max_contention_rounds: int = 32

    # Message creation defaults
    default_view_limit: int = 1
    default_expiration_minutes: int = 60
    max_expiration_minutes: int = 43_200

    # Shareable links
    public_base_url: str = "http://localhost:5173"

    # Notifications (EmailJS REST API)
    emailjs_api_url: str = "https://api.emailjs.com/api/v1.0/email/send"
    emailjs_service_id: str | None = None
    emailjs_template_id: str | None = None
    emailjs_user_id: str | None = None
    mail_timeout_seconds: float = 10.0
    mail_from_name: str = "Vanish"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def mail_enabled(self) -> bool:
        return bool(
            self.emailjs_service_id
            and self.emailjs_template_id
            and self.emailjs_user_id
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
