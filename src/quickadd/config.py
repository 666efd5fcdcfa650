"""Configuration management for QuickAdd."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.models import QuickAddDefaults

logger = logging.getLogger(__name__)

QUICKADD_HOME = Path(os.environ.get("QUICKADD_HOME", Path.home() / ".quickadd"))
CONFIG_FILE = QUICKADD_HOME / "config" / "quickadd.conf"
DATA_DIR = QUICKADD_HOME / "data"

PROVIDERS = ("ics", "google-calendar", "google-tasks")
AI_PROVIDERS = ("gemini", "huggingface", "local")


@dataclass
class Config:
    """QuickAdd configuration."""

    timezone: str = "UTC"
    default_duration_minutes: int = 60
    reminder_minutes: int = 10
    task_due_time: str = "17:00"
    locale: str = "en"
    provider: str = "ics"
    ics_output_dir: str = ""
    history_file: str = ""
    # Optional LLM enrichment
    ai_parser_enabled: bool = False
    ai_parser_provider: str = "gemini"
    ai_parser_api_key: str = ""
    ai_parser_timeout: float = 8.0
    # Google provider settings
    google_client_secret_file: str = ""
    google_token_dir: str = ""
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)

    def task_due(self) -> tuple[int, int]:
        """Parse TASK_DUE_TIME as (hour, minute), falling back to 17:00."""
        try:
            hour_str, minute_str = self.task_due_time.split(":")
            hour, minute = int(hour_str), int(minute_str)
        except ValueError:
            logger.warning(f"Invalid task due time: {self.task_due_time}")
            return 17, 0
        if not (0 <= hour < 24 and 0 <= minute < 60):
            logger.warning(f"Task due time out of range: {self.task_due_time}")
            return 17, 0
        return hour, minute

    def defaults(self) -> QuickAddDefaults:
        """Parser defaults derived from this configuration."""
        due_hour, due_minute = self.task_due()
        return QuickAddDefaults(
            duration_minutes=self.default_duration_minutes,
            reminder_minutes=self.reminder_minutes,
            task_due_hour=due_hour,
            task_due_minute=due_minute,
            locale=self.locale,
            timezone=self.timezone,
        )

    def ics_dir(self) -> Path:
        if self.ics_output_dir:
            return Path(self.ics_output_dir).expanduser()
        return DATA_DIR / "ics"

    def history_path(self) -> Path:
        if self.history_file:
            return Path(self.history_file).expanduser()
        return DATA_DIR / "history.json"

    def token_dir(self) -> Path:
        if self.google_token_dir:
            return Path(self.google_token_dir).expanduser()
        return QUICKADD_HOME / "config" / "google"


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}")
        return default


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment on unquoted values."""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config() -> Config:
    """Load configuration from quickadd.conf."""
    config = Config()

    if not CONFIG_FILE.exists():
        return config

    for line in CONFIG_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "default_duration_minutes":
                config.default_duration_minutes = _parse_int(key, value, config.default_duration_minutes)
            case "reminder_minutes":
                config.reminder_minutes = _parse_int(key, value, config.reminder_minutes)
            case "task_due_time":
                config.task_due_time = value
            case "locale":
                config.locale = value
            case "provider":
                if value in PROVIDERS:
                    config.provider = value
                else:
                    logger.warning(f"Unknown provider {value!r}, keeping {config.provider}")
            case "ics_output_dir":
                config.ics_output_dir = value
            case "history_file":
                config.history_file = value
            case "ai_parser_enabled":
                config.ai_parser_enabled = _parse_bool(value)
            case "ai_parser_provider":
                if value in AI_PROVIDERS:
                    config.ai_parser_provider = value
                else:
                    logger.warning(f"Unknown AI parser provider {value!r}")
            case "ai_parser_api_key":
                config.ai_parser_api_key = value
            case "ai_parser_timeout":
                try:
                    config.ai_parser_timeout = float(value)
                except ValueError:
                    logger.warning(f"Invalid AI_PARSER_TIMEOUT: {value!r}")
            case "google_client_secret_file":
                config.google_client_secret_file = value
            case "google_token_dir":
                config.google_token_dir = value
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                config.telegram_allowed_users = [int(u.strip()) for u in value.split(",") if u.strip()]

    return config
