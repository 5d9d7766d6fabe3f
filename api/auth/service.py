"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core.errors import Conflict, Unauthorized

from . import repository, schemas, security

logger = logging.getLogger(__name__)

# Same text for unknown identifier and wrong password.
INVALID_CREDENTIALS = "Invalid credentials."
DUPLICATE_USER = "Username or email already in use."


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        uid=int(user_row["uid"]),
        username=str(user_row["username"]),
        email=str(user_row["email"]),
        created_at=user_row.get("created_at"),
    )


async def register(
    payload: schemas.RegisterRequest,
    *,
    tokens: security.TokenService,
) -> schemas.AuthResponse:
    existing = await repository.find_user_by_username_or_email(
        username=payload.username,
        email=payload.email,
    )
    if existing is not None:
        raise Conflict(DUPLICATE_USER)

    password_hash = security.hash_password(payload.password)
    try:
        user_row = await repository.create_user(
            username=payload.username,
            email=payload.email,
            password_hash=password_hash,
        )
    except asyncpg.UniqueViolationError as exc:
        # A concurrent registration took the name between check and insert.
        raise Conflict(DUPLICATE_USER) from exc
    logger.info("user_registered uid=%s", user_row["uid"])

    return schemas.AuthResponse(
        message="User registered successfully.",
        user=_to_user_response(user_row),
        token=tokens.issue(user_row),
    )


async def login(
    payload: schemas.LoginRequest,
    *,
    tokens: security.TokenService,
) -> schemas.AuthResponse:
    user_row = await repository.get_user_for_login(payload.username_or_email)
    if user_row is None:
        logger.info("login_failed reason=unknown_identifier")
        raise Unauthorized(INVALID_CREDENTIALS)

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        logger.info("login_failed reason=bad_password uid=%s", user_row["uid"])
        raise Unauthorized(INVALID_CREDENTIALS)

    return schemas.AuthResponse(
        message="Logged in successfully.",
        user=_to_user_response(user_row),
        token=tokens.issue(user_row),
    )
