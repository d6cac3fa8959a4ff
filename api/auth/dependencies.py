"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Cookie, Depends, Header, HTTPException, Request, status

from . import service
from .security import TokenService

TOKEN_COOKIE = "token"


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header.",
        )

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format.",
        )

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization must be: Bearer <token>.",
        )
    return token


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_request_token(
    authorization: str | None = Header(default=None),
    token: str | None = Cookie(default=None),
) -> str:
    # The header wins; browsers fall back to the cookie set at sign-in.
    if authorization or not token:
        return _extract_bearer_token(authorization)
    return token


async def get_current_user(
    access_token: str = Depends(get_request_token),
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    return await service.get_user_from_token(access_token, tokens=tokens)


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    if str(current_user.get("role")) != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required.",
        )
    return current_user
