"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from users.schemas import UserResponse


class SignUpRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    # bcrypt only looks at the first 72 bytes.
    password: str = Field(..., min_length=8, max_length=72)


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=72)


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"
