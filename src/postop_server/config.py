"""Server configuration — reads settings from environment variables.

Settings are read once at startup into an immutable :class:`ServerSettings`
and attached to ``app.state``; request handlers never touch ``os.environ``.

Only ``SECRET_TOKEN`` is required for the webhook to serve traffic.  Each
alert channel is enabled only when all of its settings are present, and
persistence is enabled only when ``DATABASE_URL`` is set.
"""

import os
from dataclasses import dataclass, field

from postop_triage.models.enums import AlertChannelName

DEFAULT_TELEGRAM_API_BASE = "https://api.telegram.org"
DEFAULT_SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"


def _env(key: str) -> str | None:
    """Return a stripped env value, treating blank as unset."""
    value = os.getenv(key, "").strip()
    return value or None


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS: comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    # Webhook shared secret.  None disables the endpoint (every call → 500).
    secret_token: str | None = None

    # Messaging bot (Telegram Bot API compatible)
    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None
    telegram_api_base: str = DEFAULT_TELEGRAM_API_BASE

    # Transactional email (SendGrid v3)
    sendgrid_api_key: str | None = None
    email_from: str | None = None
    alert_email: str | None = None
    sendgrid_api_url: str = DEFAULT_SENDGRID_API_URL

    # Optional persistence
    database_url: str | None = None

    # Base URL used to build case links in staff alerts
    dashboard_url: str | None = None

    # I/O bounds (seconds)
    alert_timeout_seconds: float = 10.0
    persist_timeout_seconds: float = 5.0
    # How long an alert waits for the record id to include a case link
    case_link_wait_seconds: float = 1.0
    # How long shutdown waits for in-flight alerts
    shutdown_grace_seconds: float = 15.0

    # Alternate keyword table (None → bundled keywords.yaml)
    keyword_table_path: str | None = None

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    @property
    def messaging_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @property
    def email_enabled(self) -> bool:
        return bool(self.sendgrid_api_key and self.email_from and self.alert_email)

    @property
    def persistence_enabled(self) -> bool:
        return bool(self.database_url)

    @property
    def available_channels(self) -> frozenset[AlertChannelName]:
        """Alert channels whose configuration is complete."""
        channels: set[AlertChannelName] = set()
        if self.messaging_enabled:
            channels.add(AlertChannelName.MESSAGING)
        if self.email_enabled:
            channels.add(AlertChannelName.EMAIL)
        return frozenset(channels)


def load_settings() -> ServerSettings:
    """Build settings from environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        secret_token=_env("SECRET_TOKEN"),
        telegram_bot_token=_env("TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=_env("TELEGRAM_CHAT_ID"),
        telegram_api_base=_env("TELEGRAM_API_BASE") or DEFAULT_TELEGRAM_API_BASE,
        sendgrid_api_key=_env("SENDGRID_API_KEY"),
        email_from=_env("EMAIL_FROM"),
        alert_email=_env("ALERT_EMAIL"),
        sendgrid_api_url=_env("SENDGRID_API_URL") or DEFAULT_SENDGRID_API_URL,
        database_url=_env("DATABASE_URL"),
        dashboard_url=_env("DASHBOARD_URL"),
        alert_timeout_seconds=float(os.getenv("ALERT_TIMEOUT_SECONDS", "10")),
        persist_timeout_seconds=float(os.getenv("PERSIST_TIMEOUT_SECONDS", "5")),
        case_link_wait_seconds=float(os.getenv("CASE_LINK_WAIT_SECONDS", "1")),
        shutdown_grace_seconds=float(os.getenv("SHUTDOWN_GRACE_SECONDS", "15")),
        keyword_table_path=_env("KEYWORD_TABLE_PATH"),
    )
