"""
Request body validation as an explicit FastAPI dependency.

FastAPI normally validates bodies after all other dependencies have run. Using
`validated_body(Model)` as an ordinary dependency lets a route list its guard
stages in the order they must fire (rate limit, body, auth, ...).
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from .errors import InvalidInput, field_errors

ModelT = TypeVar("ModelT", bound=BaseModel)


def validated_body(model: type[ModelT]) -> Callable[[Request], Awaitable[ModelT]]:
    async def dependency(request: Request) -> ModelT:
        raw = await request.body()
        try:
            data: Any = json.loads(raw) if raw else {}
        except ValueError as exc:
            raise InvalidInput("Request body must be valid JSON.") from exc

        if not isinstance(data, dict):
            raise InvalidInput("Request body must be a JSON object.")

        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise InvalidInput(errors=field_errors(exc.errors())) from exc

    dependency.__name__ = f"validated_{model.__name__}"
    return dependency
