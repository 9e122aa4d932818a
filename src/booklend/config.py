"""Configuration management for booklend.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path

    # Logging
    log_level: str

    # Reminders
    reminder_cooldown_hours: int
    upcoming_lead_days: int
    sweep_hour: int
    sweep_minute: int
    sweep_on_startup: bool

    # SMTP
    smtp_host: str
    smtp_port: int
    smtp_username: Optional[str]
    smtp_password: Optional[str]
    smtp_from_email: str
    smtp_from_name: str
    smtp_use_tls: bool

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "BOOKLEND_DB_PATH",
            str(Path.home() / ".booklend" / "books.db"),
        )
        db_path = Path(db_path_str).expanduser()

        return cls(
            db_path=db_path,
            log_level=os.environ.get("BOOKLEND_LOG_LEVEL", "INFO").upper(),
            reminder_cooldown_hours=int(
                os.environ.get("BOOKLEND_REMINDER_COOLDOWN_HOURS", "24")
            ),
            upcoming_lead_days=int(os.environ.get("BOOKLEND_UPCOMING_LEAD_DAYS", "3")),
            sweep_hour=int(os.environ.get("BOOKLEND_SWEEP_HOUR", "8")),
            sweep_minute=int(os.environ.get("BOOKLEND_SWEEP_MINUTE", "0")),
            sweep_on_startup=_env_bool("BOOKLEND_SWEEP_ON_STARTUP", "true"),
            smtp_host=os.environ.get("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.environ.get("SMTP_PORT", "587")),
            smtp_username=os.environ.get("SMTP_USERNAME") or None,
            smtp_password=os.environ.get("SMTP_PASSWORD") or None,
            smtp_from_email=os.environ.get("SMTP_FROM_EMAIL", "noreply@booklib.com"),
            smtp_from_name=os.environ.get("SMTP_FROM_NAME", "BookLib"),
            smtp_use_tls=_env_bool("SMTP_USE_TLS", "true"),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        # Check database directory is writable
        if str(self.db_path) != ":memory:" and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        if self.reminder_cooldown_hours <= 0:
            errors.append("Reminder cooldown must be a positive number of hours")
        if self.upcoming_lead_days < 0:
            errors.append("Upcoming reminder lead time cannot be negative")
        if not 0 <= self.sweep_hour <= 23:
            errors.append(f"Sweep hour out of range: {self.sweep_hour}")
        if not 0 <= self.sweep_minute <= 59:
            errors.append(f"Sweep minute out of range: {self.sweep_minute}")

        return errors

    def has_smtp_config(self) -> bool:
        """Check if SMTP credentials are present."""
        return bool(self.smtp_username and self.smtp_password)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
