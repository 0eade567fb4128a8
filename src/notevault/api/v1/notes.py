"""
Notes API Router

REST endpoints for note CRUD. Notes are markdown files; the index
document is the listing source of truth.

Endpoints:
    GET    /         : List notes (public).
    GET    /content  : Read one note's content (public).
    POST   /         : Create a note (auth).
    PUT    /         : Overwrite a note's content (auth).
    DELETE /         : Delete a note (auth).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from notevault.api.v1.deps import get_note_repository
from notevault.repositories.notes import NoteRepository
from notevault.schemas.notes import (
    NoteContent,
    NoteCreate,
    NoteCreated,
    NoteDelete,
    NoteList,
    NoteListItem,
    NoteMutated,
    NoteUpdate,
)
from notevault.services.auth import require_auth

router = APIRouter()


@router.get("/", response_model=NoteList, response_model_exclude_none=True)
async def list_notes(repo: NoteRepository = Depends(get_note_repository)):
    """List all notes in creation order."""
    entries = await repo.get_all()
    return NoteList(notes=[NoteListItem.from_entry(entry) for entry in entries])


@router.get("/content", response_model=NoteContent)
async def read_note(
    path: str = Query(..., min_length=1, description="Path returned at creation"),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Return the markdown content stored at ``path``."""
    return NoteContent(path=path, content=await repo.read(path))


@router.post(
    "/",
    response_model=NoteCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_auth)],
)
async def create_note(
    note: NoteCreate,
    repo: NoteRepository = Depends(get_note_repository),
):
    """
    Create a new note.

    Without a slug the file is named ``{timestamp}_{name}.md``; with one
    it is ``{slug}.md`` and a second note with the same slug is a 409.
    """
    entry = await repo.create(note.name, note.content, note.slug)
    return NoteCreated(name=entry.name, path=entry.path, slug=entry.slug)


@router.put("/", response_model=NoteMutated, dependencies=[Depends(require_auth)])
async def update_note(
    note: NoteUpdate,
    repo: NoteRepository = Depends(get_note_repository),
):
    """Overwrite the content of an existing note. Name and path are unchanged."""
    await repo.update(note.path, note.content)
    return NoteMutated(path=note.path)


@router.delete("/", response_model=NoteMutated, dependencies=[Depends(require_auth)])
async def delete_note(
    note: NoteDelete,
    repo: NoteRepository = Depends(get_note_repository),
):
    """Delete a note file and its index entry."""
    await repo.delete(note.path)
    return NoteMutated(path=note.path)
