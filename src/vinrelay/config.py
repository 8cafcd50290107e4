"""Application configuration via environment variables with Pydantic validation.

All configuration is loaded from environment variables (with .env file support).
Mail-provider secrets are optional at startup: a missing key or sender address
is reported per request as a server error with a presence hint, so the relay
can still answer health checks and preflight requests while misconfigured.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TO_EMAIL = "submissions@dmmethevin.example"


class Settings(BaseSettings):
    """VIN relay settings. All values sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Origin allow-list — comma-separated, empty allows every origin
    allowed_origins: str = ""

    # Mail provider — secrets, never logged
    sendgrid_api_key: str | None = None
    from_email: str | None = None
    to_email: str = DEFAULT_TO_EMAIL
    mail_subject: str = "DMMeTheVIN - New VIN submission"
    sendgrid_api_url: str = "https://api.sendgrid.com/v3/mail/send"
    # None leaves the send bounded only by the hosting platform's request timeout
    mail_timeout_seconds: float | None = None

    # Relay endpoint
    relay_path: str = "/api/send-vin"
    legacy_relay_path: str = "/.netlify/functions/sendVin"

    # Rate limiting (fixed window, per client IP)
    rate_limit_window_ms: int = 60_000
    rate_limit_max_requests: int = 5
    rate_limit_sweep_threshold: int = 10_000

    # Request context
    trust_forwarded_for: bool = True
    request_id_header: str = "X-Request-ID"

    # Request limits
    max_request_body_bytes: int = 16_384

    # Observability — /metrics is only served when a bearer token is set
    metrics_enabled: bool = True
    metrics_token: str | None = None

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("rate_limit_window_ms", "rate_limit_max_requests")
    @classmethod
    def rate_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Rate limit window and max requests must be at least 1")
        return v

    @field_validator("relay_path")
    @classmethod
    def relay_path_absolute(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("RELAY_PATH must start with '/'")
        return v

    @field_validator("log_format")
    @classmethod
    def log_format_known(cls, v: str) -> str:
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse the comma-separated origin allow-list into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def rate_limit_window_seconds(self) -> float:
        return self.rate_limit_window_ms / 1000.0

    @property
    def mail_configured(self) -> bool:
        """True when both the provider API key and the sender address are set."""
        return bool(self.sendgrid_api_key and self.sendgrid_api_key.strip()) and bool(
            self.from_email and self.from_email.strip()
        )

    @property
    def metrics_served(self) -> bool:
        """True when /metrics is enabled and protected by a token."""
        return self.metrics_enabled and bool(self.metrics_token and self.metrics_token.strip())

    def mail_config_hint(self) -> dict[str, bool]:
        """Presence of each required mail secret — booleans only, never values."""
        return {
            "apiKeyConfigured": bool(self.sendgrid_api_key and self.sendgrid_api_key.strip()),
            "fromEmailConfigured": bool(self.from_email and self.from_email.strip()),
        }


def get_settings() -> Settings:
    """Create and return a validated Settings instance.

    Raises ValidationError with clear messages if values are invalid.
    """
    return Settings()
