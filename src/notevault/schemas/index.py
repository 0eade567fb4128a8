"""
Index Document Schemas

Pydantic models for the persisted ``notes-index.json`` document.
Field aliases match the on-disk JSON keys (camelCase).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class NoteEntry(BaseModel):
    """
    One note tracked by the index.

    Attributes:
        name: Display name, not unique.
        path: Storage path relative to DATA_DIR; identity key, never changes.
        slug: Stable user-chosen identifier the path was derived from.
        share_token: Present only while the note has an active share link.
        burn_after_reading: Present (and True) only for one-time shares.
        password_hash: Argon2 hash gating the share link.
    """

    name: str
    path: str
    slug: str | None = None
    share_token: str | None = Field(default=None, alias="shareToken")
    burn_after_reading: bool | None = Field(default=None, alias="burnAfterReading")
    password_hash: str | None = Field(default=None, alias="passwordHash")

    # extra="allow": keys written by other tools survive a read-modify-write
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def clear_share(self) -> None:
        """Drop every share field (Shared -> Unshared)."""
        self.share_token = None
        self.burn_after_reading = None
        self.password_hash = None


class IndexDocument(BaseModel):
    """The whole index: notes in insertion order."""

    notes: list[NoteEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    def find(self, path: str) -> NoteEntry | None:
        """Entry whose path equals ``path`` exactly."""
        for entry in self.notes:
            if entry.path == path:
                return entry
        return None

    def remove(self, path: str) -> None:
        """Drop every entry whose path equals ``path``, preserving order."""
        self.notes = [entry for entry in self.notes if entry.path != path]
