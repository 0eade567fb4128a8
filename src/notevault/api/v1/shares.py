"""
Shares API Router

Endpoints:
    GET    / : Resolve a share token (public, no session needed).
    POST   / : Create or rotate a note's share link (auth).
    DELETE / : Revoke a note's share link (auth).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from notevault.api.v1.deps import get_share_service
from notevault.core.errors import InvalidInput
from notevault.schemas.shares import (
    ShareCreate,
    ShareCreated,
    SharedNote,
    ShareRevoke,
    ShareRevoked,
)
from notevault.services.auth import require_auth
from notevault.services.sharing import ShareService

router = APIRouter()


@router.get("/", response_model=SharedNote, summary="Open a shared note")
async def resolve_share(
    token: str = Query(default="", description="Share token from the link"),
    password: str | None = Query(default=None),
    service: ShareService = Depends(get_share_service),
) -> SharedNote:
    """
    Return a shared note's name and content.

    Burn-after-reading shares are deleted once returned; the same token
    then answers 404.
    """
    if not token:
        raise InvalidInput("Share token required")
    return await service.resolve(token, password)


@router.post(
    "/",
    response_model=ShareCreated,
    summary="Create or rotate a share link",
    dependencies=[Depends(require_auth)],
)
async def create_share(
    share: ShareCreate,
    request: Request,
    service: ShareService = Depends(get_share_service),
) -> ShareCreated:
    """
    Issue a new share token for a note.

    Any previous token for the note stops working. The share URL is built
    from the scheme and host of this request.
    """
    return await service.create_or_update(
        share.path,
        str(request.base_url),
        burn_after_reading=share.burn_after_reading,
        password=share.password,
    )


@router.delete(
    "/",
    response_model=ShareRevoked,
    summary="Revoke a share link",
    dependencies=[Depends(require_auth)],
)
async def revoke_share(
    share: ShareRevoke,
    service: ShareService = Depends(get_share_service),
) -> ShareRevoked:
    await service.revoke(share.path)
    return ShareRevoked(path=share.path)
