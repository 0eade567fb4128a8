"""
Auth API Router

Session login, status and logout. The session lives in a signed cookie
managed by Starlette's SessionMiddleware.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request

from notevault.schemas.auth import AuthStatus, LoginRequest, LoginResponse, LogoutResponse
from notevault.services.auth import AuthContext, get_auth_context

router = APIRouter()


@router.post("/", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> LoginResponse:
    """Log in with one of the configured AUTH_USERS credentials."""
    # Argon2 verification is CPU-bound
    await asyncio.to_thread(
        auth.login, request.session, credentials.username, credentials.password
    )
    return LoginResponse(username=credentials.username)


@router.get("/", response_model=AuthStatus, response_model_exclude_none=True)
async def status(request: Request) -> AuthStatus:
    username = AuthContext.current_user(request.session)
    return AuthStatus(authenticated=username is not None, username=username)


@router.delete("/", response_model=LogoutResponse)
async def logout(request: Request) -> LogoutResponse:
    """Destroy the session. Always succeeds."""
    AuthContext.logout(request.session)
    return LogoutResponse()
