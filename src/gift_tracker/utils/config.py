"""
Configuration management for the Gift Tracker application.

This module handles:
- Database path configuration
- Environment-specific configuration (development vs. production)
- Reminder settings (reference timezone, dashboard window)
- Outgoing email settings (SMTP or console backend)

Settings other than the environment come from GIFT_TRACKER_* environment
variables, read once when the Config is created.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DATABASE_VERSION,
    DEFAULT_APP_URL,
    DEFAULT_SMTP_PORT,
    DEFAULT_SMTP_TIMEOUT,
    DEFAULT_TIMEZONE,
    DEFAULT_UPCOMING_WINDOW_DAYS,
)
from .datetime_utils import get_timezone

ENV_PREFIX = "GIFT_TRACKER_"

logger = logging.getLogger(__name__)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, cast, minimum=0):
    """Read a numeric setting; invalid or out-of-range values fall back to default."""
    value = _env(name)
    if value is None:
        return default
    try:
        number = cast(value)
    except ValueError:
        number = None
    if number is None or number < minimum:
        logger.warning(f"Invalid {ENV_PREFIX}{name}={value!r}, using default {default}")
        return default
    return number


class Config:
    """
    Application configuration manager.

    Handles all configuration settings including database paths,
    environment settings, and reminder email delivery.
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'

        Raises:
            ZoneInfoNotFoundError: If the configured timezone is unknown
        """
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION
        self._database_version = DATABASE_VERSION

        # Determine base directory
        data_dir = _env("DATA_DIR")
        if data_dir:
            self._base_dir = Path(data_dir)
        elif environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_documents_dir()

        self._database_dir = self._base_dir
        self._database_path = self._database_dir / DATABASE_FILENAME

        # Reminder settings
        self._notification_timezone = _env("TIMEZONE", DEFAULT_TIMEZONE)
        get_timezone(self._notification_timezone)  # fail fast on unknown zones
        self._upcoming_window_days = _env_number(
            "UPCOMING_WINDOW_DAYS", DEFAULT_UPCOMING_WINDOW_DAYS, int
        )
        self._app_url = _env("APP_URL", DEFAULT_APP_URL).rstrip("/")

        # Email settings
        self._email_backend = _env("EMAIL_BACKEND", "smtp" if _env("SMTP_HOST") else "console")
        self._smtp_host = _env("SMTP_HOST", "localhost")
        self._smtp_port = _env_number("SMTP_PORT", DEFAULT_SMTP_PORT, int, minimum=1)
        self._smtp_username = _env("SMTP_USERNAME")
        self._smtp_password = _env("SMTP_PASSWORD")
        self._smtp_use_tls = _env_bool("SMTP_USE_TLS", True)
        self._smtp_timeout = _env_number("SMTP_TIMEOUT", DEFAULT_SMTP_TIMEOUT, float, minimum=0.1)
        self._email_sender = _env("EMAIL_FROM", "reminders@gifttracker.local")

    def _get_project_data_dir(self) -> Path:
        """
        Get the project's data directory for development.

        Returns:
            Path to project data/ directory
        """
        # src/gift_tracker/utils -> project root
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / "data"

    def _get_user_documents_dir(self) -> Path:
        """
        Get the user's Documents directory for production.

        Returns:
            Path to user's Documents folder with app subdirectory
        """
        return Path.home() / "Documents" / "GiftTracker"

    def ensure_directories(self):
        """Create the database directory if it doesn't exist."""
        self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def database_version(self) -> str:
        """Database schema version."""
        return self._database_version

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        GIFT_TRACKER_DATABASE_URL overrides the file-based default.
        """
        override = _env("DATABASE_URL")
        if override:
            return override
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def notification_timezone(self) -> str:
        """IANA timezone used to decide what 'today' is."""
        return self._notification_timezone

    @property
    def upcoming_window_days(self) -> int:
        """Default lookahead for the upcoming-birthdays dashboard."""
        return self._upcoming_window_days

    @property
    def app_url(self) -> str:
        """Base URL linked from reminder emails."""
        return self._app_url

    @property
    def email_backend(self) -> str:
        """'smtp' to deliver mail, 'console' to only log it."""
        return self._email_backend

    @property
    def smtp_host(self) -> str:
        return self._smtp_host

    @property
    def smtp_port(self) -> int:
        return self._smtp_port

    @property
    def smtp_username(self) -> Optional[str]:
        return self._smtp_username

    @property
    def smtp_password(self) -> Optional[str]:
        return self._smtp_password

    @property
    def smtp_use_tls(self) -> bool:
        return self._smtp_use_tls

    @property
    def smtp_timeout(self) -> float:
        """Per-message SMTP timeout in seconds."""
        return self._smtp_timeout

    @property
    def email_sender(self) -> str:
        """From address for reminder emails."""
        return self._email_sender

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def database_exists(self) -> bool:
        """
        Check if database file exists.

        Returns:
            True if database file exists, False otherwise
        """
        return self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(environment='{self.environment}', "
            f"database_path='{self._database_path}', "
            f"timezone='{self._notification_timezone}')"
        )


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument - this prevents accidental database
    switching mid-run.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    GIFT_TRACKER_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get("GIFT_TRACKER_ENV", "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton to prevent database switching."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
