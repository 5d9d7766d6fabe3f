"""
Pydantic schemas for project endpoints.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Phase(str, Enum):
    design = "design"
    development = "development"
    testing = "testing"
    deployment = "deployment"
    complete = "complete"


PHASE_VALUES = ", ".join(p.value for p in Phase)


def parse_iso_date(value: Any) -> date:
    """
    Accept "YYYY-MM-DD" or a full ISO-8601 timestamp and keep the date part.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("not a date")
    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()


class ProjectRequest(BaseModel):
    """
    Body for create and update. Update is a full replace, so both share it.
    Owner, id and timestamps are not accepted from clients.
    """

    model_config = ConfigDict(validate_default=True, extra="ignore")

    title: str = ""
    start_date: Any = None
    end_date: Any = None
    short_description: str = ""
    phase: Any = None

    @field_validator("title")
    @classmethod
    def _title_length(cls, value: str) -> str:
        value = value.strip()
        if not 3 <= len(value) <= 150:
            raise ValueError("Title must be between 3 and 150 characters.")
        return value

    @field_validator("start_date")
    @classmethod
    def _start_date_iso(cls, value: Any) -> date:
        try:
            return parse_iso_date(value)
        except ValueError as exc:
            raise ValueError("Start date must be a valid date in YYYY-MM-DD format.") from exc

    @field_validator("end_date")
    @classmethod
    def _end_date_iso(cls, value: Any) -> date | None:
        if value is None or value == "":
            return None
        try:
            return parse_iso_date(value)
        except ValueError as exc:
            raise ValueError("End date must be a valid date in YYYY-MM-DD format.") from exc

    @field_validator("short_description")
    @classmethod
    def _description_length(cls, value: str) -> str:
        value = value.strip()
        if not 10 <= len(value) <= 255:
            raise ValueError("Short description must be between 10 and 255 characters.")
        return value

    @field_validator("phase")
    @classmethod
    def _phase_member(cls, value: Any) -> Phase:
        try:
            return Phase(value)
        except ValueError as exc:
            raise ValueError(f"Phase must be one of: {PHASE_VALUES}.") from exc
