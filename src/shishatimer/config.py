# src/shishatimer/config.py

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

load_dotenv(find_dotenv(usecwd=True))

ENV_PREFIX = "SHISHA_"

_TRUTHY = {"1", "true", "yes", "on"}


def _env(name: str, default: str) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


class Config(BaseModel):
    """Runtime settings, read from SHISHA_* environment variables."""

    # Storage
    data_dir: Path = Field(default_factory=lambda: Path.cwd() / ".shisha")
    snapshot_key: str = "shisha-tables"

    # Lounge layout and session rules
    table_count: int = Field(default=25, ge=1)
    session_minutes: int = Field(default=30, ge=1)

    # Tick driver
    tick_interval: float = Field(default=1.0, gt=0)

    # Alerts
    sound_enabled: bool = True
    alert_feed_size: int = Field(default=50, ge=1)

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            data_dir=Path.cwd() / _env("DATA_DIR", ".shisha"),
            snapshot_key=_env("SNAPSHOT_KEY", "shisha-tables"),
            table_count=int(_env("TABLE_COUNT", "25")),
            session_minutes=int(_env("SESSION_MINUTES", "30")),
            tick_interval=float(_env("TICK_INTERVAL", "1.0")),
            sound_enabled=_env("SOUND_ENABLED", "true").strip().lower() in _TRUTHY,
            alert_feed_size=int(_env("ALERT_FEED_SIZE", "50")),
            host=_env("HOST", "0.0.0.0"),
            port=int(_env("PORT", "8000")),
        )

    def reload(self) -> None:
        """Re-read the environment and update this instance in place."""
        fresh = Config.from_env()
        for name in type(self).model_fields:
            setattr(self, name, getattr(fresh, name))


CONFIG = Config.from_env()
