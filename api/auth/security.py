"""
Auth security helpers: password hashing and the bearer token service.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Callable

import bcrypt
import jwt

BCRYPT_ROUNDS = 10

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class AuthSecurityError(RuntimeError):
    pass


class InvalidToken(AuthSecurityError):
    pass


@dataclass(frozen=True)
class Identity:
    uid: int
    username: str
    email: str


def parse_duration(value: str) -> int:
    """
    Turn "1d", "12h", "30m", "45s" or "3600" into seconds.
    """
    match = _DURATION_RE.match(value or "")
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    seconds = int(match.group(1)) * _DURATION_UNITS[match.group(2).lower()]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


class TokenService:
    """
    Issues and verifies signed, self-contained bearer tokens.

    Nothing is stored server-side: a token is valid while its signature checks
    out under the process-wide secret and `exp` lies in the future.
    """

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str = "HS256",
        expires_in_s: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise AuthSecurityError("Token signing secret is empty.")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in_s = expires_in_s
        self._clock = clock

    def issue(self, user: dict[str, Any]) -> str:
        issued_at = int(self._clock())
        payload = {
            "uid": int(user["uid"]),
            "username": str(user["username"]),
            "email": str(user["email"]),
            "iat": issued_at,
            "exp": issued_at + self.expires_in_s,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        raw = (token or "").strip()
        if not raw:
            raise InvalidToken("Token is empty.")

        try:
            payload = jwt.decode(
                raw,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidToken("Invalid or expired token.") from exc

        uid = payload.get("uid")
        if not isinstance(uid, int) or isinstance(uid, bool):
            raise InvalidToken("Token has no valid uid claim.")

        return Identity(
            uid=uid,
            username=str(payload.get("username") or ""),
            email=str(payload.get("email") or ""),
        )
