"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Production requirements (API key, Firebase credentials)
are validated at load time so a misconfigured deployment fails at startup.
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "eventpush"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Firebase: use key (env) or path (file). The same service account backs
    # Firestore (events, notification records, logs) and FCM.
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    events_collection: str = "events"

    # Push delivery
    broadcast_topic: str = "all_users"
    # Recipients are co-located; dates in notification text use this zone.
    target_timezone: str = "Asia/Kathmandu"

    # Change listener
    listener_enabled: bool = True
    resubscribe_delay_seconds: float = 5.0
    watch_poll_interval_seconds: float = 2.0

    # Daily reminders (wall-clock time in target_timezone)
    reminders_enabled: bool = True
    reminder_hour: int = 9
    reminder_minute: int = 0
    reminder_body_max_chars: int = 100

    # Stats
    stats_fetch_limit: int = 100
    stats_recent_limit: int = 10

    # HTTP
    api_key: SecretStr | None = None
    allowed_origins: str = ""
    max_request_body_bytes: int = 16 * 1024
    request_id_header: str = "X-Request-ID"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def has_firebase_credentials(self) -> bool:
        has_key = bool(
            self.firebase_service_account_key
            and self.firebase_service_account_key.get_secret_value()
        )
        return has_key or bool(self.firebase_service_account_path)

    @property
    def api_key_value(self) -> str | None:
        if self.api_key is None:
            return None
        return self.api_key.get_secret_value() or None

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate production requirements, timezone and reminder schedule."""
        if self.is_production:
            if not self.api_key_value:
                raise ValueError(
                    "API_KEY is required in production. "
                    "Generate with: openssl rand -hex 32."
                )
            if not self.has_firebase_credentials:
                raise ValueError(
                    "FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) or "
                    "FIREBASE_SERVICE_ACCOUNT_PATH is required in production."
                )
        try:
            ZoneInfo(self.target_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(
                f"target_timezone must be an IANA zone name, got: {self.target_timezone!r}"
            ) from e
        if not 0 <= self.reminder_hour <= 23:
            raise ValueError(f"reminder_hour must be 0-23, got {self.reminder_hour}")
        if not 0 <= self.reminder_minute <= 59:
            raise ValueError(f"reminder_minute must be 0-59, got {self.reminder_minute}")
        if self.resubscribe_delay_seconds < 0:
            raise ValueError("resubscribe_delay_seconds must not be negative")
        return self

    def startup_warnings(self) -> list[str]:
        """Non-fatal configuration problems worth logging at startup."""
        warnings: list[str] = []
        key = self.api_key_value
        if not key:
            warnings.append(
                "API_KEY not set: all routes are unauthenticated (development only)"
            )
        elif len(key) < 32:
            warnings.append("API_KEY is too short: use at least 32 characters")
        if self.is_production and not self.allowed_origins:
            warnings.append(
                "ALLOWED_ORIGINS not set: all browser origins are blocked in production"
            )
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
