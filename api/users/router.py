"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/api/users")


@router.get("", response_model=schemas.UserListResponse)
async def list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: dict = Depends(auth_dependencies.require_admin),
) -> schemas.UserListResponse:
    return await service.list_users(limit=limit, offset=offset)


@router.get("/me", response_model=schemas.UserResponse)
async def get_me(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.UserResponse:
    return service.to_user_response(current_user)


@router.get("/{user_id}", response_model=schemas.UserResponse)
async def get_user(
    user_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.UserResponse:
    return await service.get_user(user_id, current_user=current_user)


@router.patch("/{user_id}", response_model=schemas.UserResponse)
async def update_user(
    user_id: int,
    payload: schemas.UpdateUserRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.UserResponse:
    return await service.update_user(user_id, payload, current_user=current_user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.delete_user(user_id, current_user=current_user)
