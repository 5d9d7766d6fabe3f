"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, Header, Request

from core.errors import Unauthenticated

from .security import Identity, InvalidToken, TokenService


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise Unauthenticated("Authorization header missing.")

    parts = authorization.strip().split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise Unauthenticated("Invalid authorization format.")
    return parts[1]


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(
    access_token: str = Depends(get_bearer_token),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    try:
        return tokens.verify(access_token)
    except InvalidToken as exc:
        raise Unauthenticated("Invalid or expired token.") from exc
