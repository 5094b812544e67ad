# slotkeeper/core/config.py
import logging
import os
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import BRAND_NAME

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


_DEV_SECRET_KEY = "dev-secret-key-change-me"


class Settings(BaseSettings):
    # Database
    database_url: str = Field(
        default="sqlite:///./slotkeeper.db",
        description="SQLAlchemy database URL",
    )
    create_tables_on_startup: bool = Field(
        default=True,
        description="Run metadata.create_all when the API starts",
    )

    # Token verification (tokens are issued by the external auth provider)
    secret_key: SecretStr = Field(
        default=SecretStr(_DEV_SECRET_KEY),
        description="Shared secret used to verify bearer tokens",
    )
    algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = 720  # 12 hours

    # Email settings
    email_provider: Literal["console", "resend"] = Field(
        default="console",
        description="Email delivery provider (console logs only)",
    )
    resend_api_key: Optional[SecretStr] = None
    from_email: str = f"{BRAND_NAME} <bookings@example.com>"
    admin_email: Optional[str] = Field(
        default=None,
        description="Recipient of pending-review notifications; skipped when unset",
    )
    brand_name: str = BRAND_NAME

    # Notification delivery
    notification_max_attempts: int = Field(default=3, ge=1)
    notification_backoff_seconds: float = Field(default=0.5, ge=0)

    # Scheduling
    business_timezone: str = Field(
        default="UTC",
        description="Timezone that defines the start of the current business day",
    )

    # Pagination
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    log_level: str = "INFO"
    is_testing: bool = False  # Set to True when running tests

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("business_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @field_validator("admin_email", mode="before")
    @classmethod
    def _blank_admin_email(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def get_database_url(self) -> str:
        """Get the database URL for the current context."""
        return self.database_url

    def uses_dev_secret(self) -> bool:
        return self.secret_key.get_secret_value() == _DEV_SECRET_KEY


settings = Settings()

if settings.uses_dev_secret() and not is_running_tests():
    logger.warning("[CONFIG] SECRET_KEY is not set; using the development placeholder")
