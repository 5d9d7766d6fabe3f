"""
Project business logic: lookups, search and owner-only mutations.

Update and delete read the owner first and then write, without a
transaction around the pair.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from auth.security import Identity
from core.errors import Forbidden, InvalidInput, NotFound

from . import repository, schemas

logger = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Project not found."

# `pid` is a SERIAL (int4) column.
MAX_PID = 2**31 - 1


def _project_values(payload: schemas.ProjectRequest) -> dict[str, Any]:
    return {
        "title": payload.title,
        "start_date": payload.start_date,
        "end_date": payload.end_date,
        "short_description": payload.short_description,
        "phase": payload.phase.value,
    }


def parse_start_date_filter(raw: str | None) -> date | None:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise InvalidInput(
            errors=[{"field": "startDate", "message": "Start date must be a valid date in YYYY-MM-DD format."}],
        ) from exc


def _require_pid_in_range(pid: int) -> None:
    # Ids the column cannot hold cannot exist.
    if not 1 <= pid <= MAX_PID:
        raise NotFound(PROJECT_NOT_FOUND)


async def list_projects() -> list[dict[str, Any]]:
    return await repository.list_projects()


async def get_project(pid: int) -> dict[str, Any]:
    _require_pid_in_range(pid)
    row = await repository.get_project_with_owner(pid)
    if row is None:
        raise NotFound(PROJECT_NOT_FOUND)
    return row


async def search_projects(*, title: str | None = None, start_date: str | None = None) -> list[dict[str, Any]]:
    title = (title or "").strip() or None
    return await repository.search_projects(
        title=title,
        start_date=parse_start_date_filter(start_date),
    )


async def my_projects(owner: Identity) -> list[dict[str, Any]]:
    return await repository.list_projects_for_owner(owner.uid)


async def create_project(payload: schemas.ProjectRequest, *, owner: Identity) -> dict[str, Any]:
    row = await repository.create_project(uid=owner.uid, **_project_values(payload))
    logger.info("project_created pid=%s uid=%s", row["pid"], owner.uid)
    return row


async def _require_owned(pid: int, *, caller: Identity, action: str) -> None:
    _require_pid_in_range(pid)
    row = await repository.get_project_owner(pid)
    if row is None:
        raise NotFound(PROJECT_NOT_FOUND)
    if int(row["uid"]) != caller.uid:
        logger.warning("project_%s_denied pid=%s uid=%s", action, pid, caller.uid)
        raise Forbidden(f"You are not authorised to {action} this project.")


async def update_project(pid: int, payload: schemas.ProjectRequest, *, caller: Identity) -> dict[str, Any]:
    await _require_owned(pid, caller=caller, action="update")

    row = await repository.update_project(pid, **_project_values(payload))
    if row is None:
        # Deleted between the ownership check and the write.
        raise NotFound(PROJECT_NOT_FOUND)
    logger.info("project_updated pid=%s uid=%s", pid, caller.uid)
    return row


async def delete_project(pid: int, *, caller: Identity) -> None:
    await _require_owned(pid, caller=caller, action="delete")

    if not await repository.delete_project(pid):
        raise NotFound(PROJECT_NOT_FOUND)
    logger.info("project_deleted pid=%s uid=%s", pid, caller.uid)
