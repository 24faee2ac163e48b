"""
Runtime settings for the course access service.

Values come from environment variables with defaults suited to local
development, so the API boots without any configuration.
"""

import os
import pathlib
from dataclasses import dataclass, field
from typing import List


_backend_dir = pathlib.Path(__file__).parent.parent.parent
DEFAULT_SQLITE_URL = f"sqlite+aiosqlite:///{_backend_dir / 'dev.db'}"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass
class Settings:
    database_url: str
    sql_echo: bool
    environment: str
    cors_origins: List[str] = field(default_factory=list)
    auto_migrate: bool = False
    auto_create_tables: bool = True
    due_soon_hours: int = 72
    channel_message_limit: int = 50
    chat_message_limit: int = 100
    calendar_prodid: str = "-//CourseGate//Course Calendar//EN"


# Fixed by the product, not by deployment
JOIN_CODE_LENGTH = 6
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
MAX_COURSE_TAGS = 8
MAX_MESSAGE_ATTACHMENTS = 4


def load_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings(
        database_url=os.getenv("DATABASE_URL", DEFAULT_SQLITE_URL),
        sql_echo=_env_bool("SQL_ECHO", "false"),
        environment=os.getenv("ENVIRONMENT", "development"),
        cors_origins=os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://localhost:3001"
        ).split(","),
        auto_migrate=_env_bool("AUTO_MIGRATE", "false"),
        auto_create_tables=_env_bool("AUTO_CREATE_TABLES", "true"),
        due_soon_hours=_env_int("DUE_SOON_HOURS", 72),
        channel_message_limit=_env_int("CHANNEL_MESSAGE_LIMIT", 50),
        chat_message_limit=_env_int("CHAT_MESSAGE_LIMIT", 100),
        calendar_prodid=os.getenv(
            "CALENDAR_PRODID", "-//CourseGate//Course Calendar//EN"
        ),
    )


# Global settings instance
settings = load_settings()
