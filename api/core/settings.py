"""
Process settings read from environment variables.

Settings are read once at startup (see `api/main.py`) and passed down
explicitly; feature code should not read `os.environ` on its own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEVELOPMENT = "development"


class ConfigurationError(RuntimeError):
    pass


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    app_env: str = DEVELOPMENT
    jwt_secret: str | None = None
    jwt_expires_in_seconds: int = 86400
    database_url: str | None = None
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def is_development(self) -> bool:
        return self.app_env == DEVELOPMENT

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            app_env=_env_str("APP_ENV", DEVELOPMENT).lower(),
            jwt_secret=os.environ.get("JWT_SECRET", "").strip() or None,
            jwt_expires_in_seconds=_env_int("JWT_EXPIRES_IN_SECONDS", 86400),
            database_url=os.environ.get("DATABASE_URL", "").strip() or None,
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            cors_origins=_env_list("CORS_ORIGINS", ["*"]),
        )
