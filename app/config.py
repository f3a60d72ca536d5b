"""
Configuration for the LeafLink garden backend
=============================================
Runtime settings read from environment variables, plus the logging setup.

Leaving ``SUPABASE_URL`` / ``SUPABASE_ANON_KEY`` unset is a supported mode:
the garden then lives in a local JSON store and runs as the demo user.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.domain.exceptions import ConfigurationError
from app.utils.time import local_timezone


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


_DEFAULT_SECRET_KEY = "LeafLinkDevSecretKey"


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("LEAFLINK_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("LEAFLINK_SECRET_KEY", _DEFAULT_SECRET_KEY))
    DEBUG: bool = field(default_factory=lambda: _env_bool("LEAFLINK_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("LEAFLINK_LOG_LEVEL", "INFO"))
    log_dir: str = field(default_factory=lambda: os.getenv("LEAFLINK_LOG_DIR", "logs"))
    audit_log_path: str = field(default_factory=lambda: os.getenv("LEAFLINK_AUDIT_LOG_PATH", "logs/audit.log"))

    # Remote store and auth provider (Supabase project)
    supabase_url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_key: str = field(default_factory=lambda: os.getenv("SUPABASE_ANON_KEY", ""))
    remote_timeout_seconds: float = field(default_factory=lambda: _env_float("LEAFLINK_REMOTE_TIMEOUT", 10.0))

    # Local store / demo mode
    local_store_path: str = field(
        default_factory=lambda: os.getenv("LEAFLINK_LOCAL_STORE_PATH", "var/leaflink_store.json")
    )
    demo_user_id: str = field(default_factory=lambda: os.getenv("LEAFLINK_DEMO_USER", "demo-user"))

    # Garden behaviour
    timezone: str = field(default_factory=lambda: os.getenv("LEAFLINK_TIMEZONE", ""))
    notification_ttl_seconds: float = field(default_factory=lambda: _env_float("LEAFLINK_NOTIFICATION_TTL", 4.0))
    store_worker_count: int = field(default_factory=lambda: _env_int("LEAFLINK_STORE_WORKERS", 4))

    # Care advice (LLM)
    llm_provider: str = field(default_factory=lambda: os.getenv("LLM_PROVIDER", "none"))
    llm_api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", ""))
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", ""))
    llm_timeout: int = field(default_factory=lambda: _env_int("LLM_TIMEOUT", 30))
    advice_simulate: bool = field(default_factory=lambda: _env_bool("LEAFLINK_ADVICE_SIMULATE", True))

    # Plant-added emails
    smtp_host: str = field(default_factory=lambda: os.getenv("LEAFLINK_SMTP_HOST", ""))
    smtp_port: int = field(default_factory=lambda: _env_int("LEAFLINK_SMTP_PORT", 587))
    smtp_username: str = field(default_factory=lambda: os.getenv("LEAFLINK_SMTP_USERNAME", ""))
    smtp_password: str = field(default_factory=lambda: os.getenv("LEAFLINK_SMTP_PASSWORD", ""))
    smtp_use_tls: bool = field(default_factory=lambda: _env_bool("LEAFLINK_SMTP_USE_TLS", True))
    smtp_from: str = field(default_factory=lambda: os.getenv("LEAFLINK_SMTP_FROM", ""))

    socketio_cors_origins: str = field(default_factory=lambda: os.getenv("LEAFLINK_SOCKETIO_CORS", "*"))

    def __post_init__(self) -> None:
        if self.environment == "production" and self.secret_key == _DEFAULT_SECRET_KEY:
            raise ConfigurationError(
                "Cannot use default secret key in production! "
                "Set LEAFLINK_SECRET_KEY environment variable to a secure random value."
            )
        if self.notification_ttl_seconds <= 0:
            raise ConfigurationError("LEAFLINK_NOTIFICATION_TTL must be positive")
        if self.store_worker_count < 1:
            raise ConfigurationError("LEAFLINK_STORE_WORKERS must be at least 1")
        self.tzinfo  # fail fast on an unknown zone name

    @property
    def remote_store_configured(self) -> bool:
        """True when both the Supabase URL and key are present."""
        return bool(self.supabase_url and self.supabase_key)

    @property
    def tzinfo(self) -> tzinfo:
        """Zone used for calendar-day comparisons; the host zone when unset."""
        if not self.timezone:
            return local_timezone()
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigurationError(f"Unknown timezone: {self.timezone!r}") from None

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DEBUG": self.DEBUG,
            "AUDIT_LOG_PATH": self.audit_log_path,
            "SOCKETIO_CORS_ALLOWED_ORIGINS": self.socketio_cors_origins,
            "LEAFLINK_BACKEND_MODE": "remote" if self.remote_store_configured else "local",
        }


def validate_config(config: AppConfig) -> list[str]:
    """Return human-readable warnings for half-configured integrations."""
    warnings: list[str] = []
    if bool(config.supabase_url) != bool(config.supabase_key):
        warnings.append("Only one of SUPABASE_URL / SUPABASE_ANON_KEY is set; using the local store")
    if config.llm_provider.lower() not in {"", "none"} and not config.llm_api_key:
        warnings.append(f"LLM_PROVIDER={config.llm_provider} but LLM_API_KEY is empty; care advice disabled")
    if config.smtp_username and not config.smtp_host:
        warnings.append("LEAFLINK_SMTP_USERNAME set without LEAFLINK_SMTP_HOST; emails are simulated")
    return warnings


def setup_logging(debug: bool = False, log_dir: str = "logs") -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.INFO

    root = logging.getLogger()
    root.setLevel(log_level)

    # create_app may run many times per process (tests); never stack handlers
    has_console = any(getattr(h, "name", "") == "leaflink_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "leaflink_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "leaflink_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "leaflink.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "leaflink_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    for handler in root.handlers:
        if getattr(handler, "name", "") in {"leaflink_console", "leaflink_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    import logging

    config = AppConfig()
    logger = logging.getLogger("config_loader")
    for warning in validate_config(config):
        logger.warning(warning)
    return config
