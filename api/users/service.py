"""
User business logic.

Access rules:
- admins can read, update and delete any user
- everyone else can only act on their own row, and cannot change roles
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from . import repository, schemas

logger = logging.getLogger(__name__)


def to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        name=str(user_row["name"]),
        email=str(user_row["email"]),
        role=schemas.Role(str(user_row["role"])),
        created_at=user_row["created_at"],
        updated_at=user_row["updated_at"],
    )


def is_admin(user_row: dict) -> bool:
    return str(user_row.get("role")) == schemas.Role.ADMIN.value


def _ensure_self_or_admin(current_user: dict, user_id: int) -> None:
    if int(current_user["id"]) != user_id and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to access this user.",
        )


async def list_users(*, limit: int, offset: int) -> schemas.UserListResponse:
    rows = await repository.list_users(limit=limit, offset=offset)
    users = [to_user_response(row) for row in rows]
    return schemas.UserListResponse(users=users, limit=limit, offset=offset, count=len(users))


async def get_user(user_id: int, *, current_user: dict) -> schemas.UserResponse:
    _ensure_self_or_admin(current_user, user_id)
    row = await repository.get_user_by_id(user_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return to_user_response(row)


async def update_user(
    user_id: int,
    payload: schemas.UpdateUserRequest,
    *,
    current_user: dict,
) -> schemas.UserResponse:
    _ensure_self_or_admin(current_user, user_id)
    if payload.role is not None and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can change roles.",
        )

    try:
        row = await repository.update_user(
            user_id,
            name=payload.name,
            email=payload.email,
            role=payload.role.value if payload.role is not None else None,
        )
    except asyncpg.UniqueViolationError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered.",
        ) from exc

    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    logger.info("user_updated user_id=%s by=%s", user_id, current_user["id"])
    return to_user_response(row)


async def delete_user(user_id: int, *, current_user: dict) -> dict:
    _ensure_self_or_admin(current_user, user_id)
    deleted = await repository.delete_user(user_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    logger.info("user_deleted user_id=%s by=%s", user_id, current_user["id"])
    return {"ok": True, "user_id": user_id}
