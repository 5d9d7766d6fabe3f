"""
Environment-driven settings and logging setup.

Settings are read once when the app is built (see `main.create_app`) and
passed to the pieces that need them. Nothing here mutates after startup.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

DEFAULT_JWT_SECRET = "dev-change-this-secret"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    # "1d", "12h", "30m", "45s" or plain seconds.
    jwt_expires_in: str = "1d"
    auth_rate_limit_max: int = 20
    auth_rate_limit_window_s: int = 15 * 60
    db_pool_max: int = 10
    db_command_timeout_s: int = 30
    cors_origins: tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        # Local default keeps development simple.
        # In production, set JWT_SECRET in environment.
        jwt_secret=env_str("JWT_SECRET", DEFAULT_JWT_SECRET),
        jwt_algorithm=env_str("JWT_ALG", "HS256"),
        jwt_expires_in=env_str("JWT_EXPIRES_IN", "1d"),
        auth_rate_limit_max=env_int("AUTH_RATE_LIMIT_MAX", 20),
        auth_rate_limit_window_s=env_int("AUTH_RATE_LIMIT_WINDOW_MIN", 15) * 60,
        db_pool_max=env_int("DB_POOL_MAX", 10),
        db_command_timeout_s=env_int("DB_COMMAND_TIMEOUT", 30),
        cors_origins=env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
        log_level=env_str("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
