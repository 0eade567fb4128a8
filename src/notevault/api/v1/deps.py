"""
Shared FastAPI dependencies.

Repositories and services are built once in the application lifespan
and stored on ``app.state``; these providers hand them to endpoints.
"""

from __future__ import annotations

from fastapi import Request

from notevault.repositories.notes import NoteRepository
from notevault.repositories.uploads import UploadRepository
from notevault.services.sharing import ShareService


def get_note_repository(request: Request) -> NoteRepository:
    """FastAPI dependency: returns the NoteRepository instance."""
    return request.app.state.notes


def get_upload_repository(request: Request) -> UploadRepository:
    """FastAPI dependency: returns the UploadRepository instance."""
    return request.app.state.uploads


def get_share_service(request: Request) -> ShareService:
    """FastAPI dependency: returns the ShareService instance."""
    return request.app.state.shares
