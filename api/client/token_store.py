"""
Client-side persistence of the bearer token and the signed-in user.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def default_auth_file() -> Path:
    raw = os.environ.get("PROJECT_TRACKER_AUTH_FILE", "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".project-tracker" / "auth.json"


class TokenStore:
    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else default_auth_file()

    def load(self) -> tuple[str | None, dict[str, Any] | None]:
        """
        Return (token, user). A missing or unreadable file means signed out.
        """
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None, None
        except (OSError, ValueError):
            logger.warning("auth_file_unreadable path=%s", self.path)
            return None, None

        if not isinstance(data, dict):
            return None, None
        token = data.get("token")
        user = data.get("user")
        if not isinstance(token, str) or not token or not isinstance(user, dict):
            return None, None
        return token, user

    def save(self, token: str, user: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": token, "user": user}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
