"""
Project persistence (raw SQL).

Every value reaches Postgres as a bound parameter, including the optional
filters of `search_projects`, whose WHERE clause is assembled from fixed
fragments only.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from core import db

_PROJECT_COLUMNS = """
    pid,
    title,
    start_date,
    end_date,
    short_description,
    phase,
    created_at
"""


def escape_like(value: str) -> str:
    """
    Escape LIKE wildcards so user input only ever matches literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def list_projects() -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT
          p.pid,
          p.title,
          p.start_date,
          p.short_description,
          p.phase,
          p.created_at,
          u.username
        FROM projects p
        JOIN users u ON p.uid = u.uid
        ORDER BY p.created_at DESC, p.pid DESC
        """
    )


async def get_project_with_owner(pid: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT
          p.pid,
          p.title,
          p.start_date,
          p.end_date,
          p.short_description,
          p.phase,
          p.created_at,
          u.username,
          u.email AS owner_email
        FROM projects p
        JOIN users u ON p.uid = u.uid
        WHERE p.pid = $1
        """,
        pid,
    )


async def search_projects(*, title: str | None = None, start_date: date | None = None) -> list[dict[str, Any]]:
    conditions: list[str] = []
    params: list[Any] = []

    if title:
        params.append(f"%{escape_like(title)}%")
        conditions.append(f"p.title ILIKE ${len(params)}")

    if start_date is not None:
        params.append(start_date)
        conditions.append(f"p.start_date = ${len(params)}")

    sql = """
        SELECT
          p.pid,
          p.title,
          p.start_date,
          p.short_description,
          p.phase,
          u.username
        FROM projects p
        JOIN users u ON p.uid = u.uid
    """
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY p.start_date DESC, p.pid DESC"

    return await db.fetch_all(sql, *params)


async def list_projects_for_owner(uid: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {_PROJECT_COLUMNS}
        FROM projects
        WHERE uid = $1
        ORDER BY created_at DESC, pid DESC
        """,
        uid,
    )


async def get_project_owner(pid: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT pid, uid
        FROM projects
        WHERE pid = $1
        """,
        pid,
    )


async def create_project(
    *,
    uid: int,
    title: str,
    start_date: date,
    end_date: date | None,
    short_description: str,
    phase: str,
) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO projects (uid, title, start_date, end_date, short_description, phase)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING {_PROJECT_COLUMNS}
        """,
        uid,
        title,
        start_date,
        end_date,
        short_description,
        phase,
    )
    if row is None:
        raise RuntimeError("Failed to create project.")
    return row


async def update_project(
    pid: int,
    *,
    title: str,
    start_date: date,
    end_date: date | None,
    short_description: str,
    phase: str,
) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE projects
        SET title = $2,
            start_date = $3,
            end_date = $4,
            short_description = $5,
            phase = $6
        WHERE pid = $1
        RETURNING {_PROJECT_COLUMNS}
        """,
        pid,
        title,
        start_date,
        end_date,
        short_description,
        phase,
    )


async def delete_project(pid: int) -> bool:
    status = await db.execute(
        """
        DELETE FROM projects
        WHERE pid = $1
        """,
        pid,
    )
    # asyncpg returns the command tag, e.g. "DELETE 1".
    return status.split()[-1] != "0"
