"""
Note Schemas

Pydantic models for Note API request/response validation.
Separates concerns: NoteCreate/NoteUpdate/NoteDelete (input),
NoteCreated/NoteMutated/NoteList/NoteContent (output).
"""

from pydantic import BaseModel, ConfigDict, Field

from notevault.schemas.index import NoteEntry


class NoteCreate(BaseModel):
    """Request schema for POST /notes."""

    name: str = Field(..., description="Display name, sanitized into the filename")
    content: str = Field(..., description="Markdown content")
    slug: str | None = Field(
        default=None,
        description="Stable identifier; the note is stored as notes/{slug}.md",
    )


class NoteUpdate(BaseModel):
    """Request schema for PUT /notes."""

    path: str = Field(..., min_length=1, description="Path returned at creation")
    content: str


class NoteDelete(BaseModel):
    """Request schema for DELETE /notes."""

    path: str = Field(..., min_length=1)


class NoteCreated(BaseModel):
    success: bool = True
    name: str
    path: str
    slug: str | None = None


class NoteMutated(BaseModel):
    """Response for update and delete."""

    success: bool = True
    path: str


class NoteListItem(BaseModel):
    """
    Public view of an index entry.

    The password hash never leaves the server; clients only learn
    whether a share is password protected.
    """

    name: str
    path: str
    slug: str | None = None
    share_token: str | None = Field(default=None, alias="shareToken")
    burn_after_reading: bool | None = Field(default=None, alias="burnAfterReading")
    password_protected: bool | None = Field(default=None, alias="passwordProtected")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_entry(cls, entry: NoteEntry) -> "NoteListItem":
        return cls(
            name=entry.name,
            path=entry.path,
            slug=entry.slug,
            share_token=entry.share_token,
            burn_after_reading=entry.burn_after_reading,
            password_protected=True if entry.password_hash else None,
        )


class NoteList(BaseModel):
    notes: list[NoteListItem] = Field(default_factory=list)


class NoteContent(BaseModel):
    """Response for GET /notes/content."""

    path: str
    content: str
