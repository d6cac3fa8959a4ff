"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from users import repository as users_repository
from users.service import to_user_response

from . import schemas
from .security import TokenInvalidError, TokenService, hash_password, verify_password

logger = logging.getLogger(__name__)


def token_claims(user_row: dict) -> dict:
    return {
        "id": int(user_row["id"]),
        "email": str(user_row["email"]),
        "role": str(user_row["role"]),
    }


def _issue(user_row: dict, tokens: TokenService) -> schemas.AuthResponse:
    token = tokens.sign(token_claims(user_row))
    return schemas.AuthResponse(user=to_user_response(user_row), token=token)


async def sign_up(payload: schemas.SignUpRequest, *, tokens: TokenService) -> schemas.AuthResponse:
    existing = await users_repository.get_user_by_email(payload.email)
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        )

    try:
        user_row = await users_repository.create_user(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
        )
    except asyncpg.UniqueViolationError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        ) from exc

    logger.info("user_signed_up user_id=%s", user_row["id"])
    return _issue(user_row, tokens)


async def sign_in(payload: schemas.SignInRequest, *, tokens: TokenService) -> schemas.AuthResponse:
    user_row = await users_repository.get_user_by_email(payload.email)
    if user_row is None or not verify_password(payload.password, str(user_row.get("password") or "")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    logger.info("user_signed_in user_id=%s", user_row["id"])
    return _issue(user_row, tokens)


async def get_user_from_token(token: str, *, tokens: TokenService) -> dict:
    try:
        claims = tokens.verify(token)
    except TokenInvalidError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
        ) from exc

    user_id = claims.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject.",
        )

    user_row = await users_repository.get_user_by_id(user_id)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found.",
        )
    return user_row
