"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from . import schemas, service
from .dependencies import TOKEN_COOKIE, get_token_service
from .security import TokenService

router = APIRouter(prefix="/api/auth")


def _set_token_cookie(request: Request, response: Response, token: str, max_age: int) -> None:
    settings = request.app.state.settings
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=max_age,
        httponly=True,
        secure=not settings.is_development,
        samesite="strict",
    )


@router.post("/sign-up", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    payload: schemas.SignUpRequest,
    request: Request,
    response: Response,
    tokens: TokenService = Depends(get_token_service),
) -> schemas.AuthResponse:
    result = await service.sign_up(payload, tokens=tokens)
    _set_token_cookie(request, response, result.token, tokens.config.expires_in_seconds)
    return result


@router.post("/sign-in", response_model=schemas.AuthResponse)
async def sign_in(
    payload: schemas.SignInRequest,
    request: Request,
    response: Response,
    tokens: TokenService = Depends(get_token_service),
) -> schemas.AuthResponse:
    result = await service.sign_in(payload, tokens=tokens)
    _set_token_cookie(request, response, result.token, tokens.config.expires_in_seconds)
    return result


@router.post("/sign-out")
async def sign_out(response: Response) -> dict:
    response.delete_cookie(TOKEN_COOKIE)
    return {"ok": True}
