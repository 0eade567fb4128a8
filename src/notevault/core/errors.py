"""
Domain Errors

Exception taxonomy shared by repositories, services and the API layer.
Each error carries the HTTP status it maps to; a single exception handler
in ``notevault.main`` renders them as ``{"error": message}``.
"""

from __future__ import annotations


class NoteVaultError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(NoteVaultError):
    """Missing or malformed request data."""

    status_code = 400


class InvalidName(InvalidInput):
    """A user-supplied name sanitizes to nothing."""


class Unauthorized(NoteVaultError):
    """Bad credentials, missing session, or wrong share password."""

    status_code = 401


class Forbidden(NoteVaultError):
    """Target path lies outside the managed directories."""

    status_code = 403


class NotFound(NoteVaultError):
    status_code = 404


class Conflict(NoteVaultError):
    """Slug already taken by an existing note file."""

    status_code = 409


class PayloadTooLarge(NoteVaultError):
    status_code = 413


class UnsupportedType(NoteVaultError):
    """Upload extension is not on the allowlist."""

    status_code = 415


class StoreError(NoteVaultError):
    """Filesystem or index write failure."""

    status_code = 500
