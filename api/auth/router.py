"""
Auth API endpoints.

Guard order for both routes: rate limit -> body validation -> handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from core.rate_limit import enforce_auth_rate_limit
from core.validation import validated_body

from . import dependencies, schemas, service
from .security import TokenService

router = APIRouter(prefix="/auth")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    _: None = Depends(enforce_auth_rate_limit),
    payload: schemas.RegisterRequest = Depends(validated_body(schemas.RegisterRequest)),
    tokens: TokenService = Depends(dependencies.get_token_service),
) -> schemas.AuthResponse:
    return await service.register(payload, tokens=tokens)


@router.post("/login")
async def login(
    _: None = Depends(enforce_auth_rate_limit),
    payload: schemas.LoginRequest = Depends(validated_body(schemas.LoginRequest)),
    tokens: TokenService = Depends(dependencies.get_token_service),
) -> schemas.AuthResponse:
    return await service.login(payload, tokens=tokens)
