"""
Auth Schemas
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request body for POST /auth."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    success: bool = True
    username: str


class AuthStatus(BaseModel):
    authenticated: bool
    username: str | None = None


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Logged out successfully"
