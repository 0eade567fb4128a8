"""Repositories package."""

from notevault.repositories.base import FileRepository
from notevault.repositories.index import IndexStore
from notevault.repositories.notes import NoteRepository
from notevault.repositories.uploads import UploadRepository

__all__ = [
    "FileRepository",
    "IndexStore",
    "NoteRepository",
    "UploadRepository",
]
