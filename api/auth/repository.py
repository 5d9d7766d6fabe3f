"""
Auth persistence helpers.

Usernames and emails are matched case-insensitively, and the unique
indexes in `db/init.sql` are on `lower(...)` to agree.
"""

from __future__ import annotations

from core import db


async def find_user_by_username_or_email(*, username: str, email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT uid
        FROM users
        WHERE lower(username) = lower($1)
           OR lower(email) = lower($2)
        LIMIT 1
        """,
        username,
        email,
    )


async def create_user(*, username: str, email: str, password_hash: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (username, email, password_hash)
        VALUES ($1, $2, $3)
        RETURNING uid, username, email, created_at
        """,
        username,
        email,
        password_hash,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_for_login(username_or_email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT uid, username, email, password_hash, created_at
        FROM users
        WHERE lower(username) = lower($1)
           OR lower(email) = lower($1)
        ORDER BY uid
        LIMIT 1
        """,
        username_or_email,
    )
