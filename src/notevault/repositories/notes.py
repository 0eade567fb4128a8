"""
Note Repository

CRUD for markdown notes stored as files under NOTES_DIR, with the
index document as the listing source of truth.

Consistency rules (file and index are updated in two steps):
    - create: file first, then index; an index failure removes the file.
    - delete: file first, then index; an index failure is logged and the
      delete still succeeds.
    - update: file only; name and path never change.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from notevault.core.errors import InvalidInput, NotFound, StoreError
from notevault.core.filenames import file_extension, sanitize_filename, timestamped_name
from notevault.repositories.base import FileRepository
from notevault.schemas.index import IndexDocument, NoteEntry

logger = logging.getLogger(__name__)


class NoteRepository(FileRepository):
    """
    Repository for notes.

    All public methods are async; blocking file and index I/O runs in a
    worker thread via ``asyncio.to_thread``.
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_all(self) -> list[NoteEntry]:
        """All index entries in insertion order (empty before first write)."""
        document = await asyncio.to_thread(self.index.load)
        return document.notes

    async def create(
        self,
        name: str,
        content: str,
        slug: str | None = None,
    ) -> NoteEntry:
        """
        Write a new note file and register it in the index.

        Args:
            name: Display name; its sanitized form becomes the filename.
            content: Markdown text, stored verbatim.
            slug: Optional stable identifier; stored as ``notes/{slug}.md``.

        Returns:
            The index entry that was appended.

        Raises:
            InvalidName: If name or slug sanitize to nothing.
            Conflict: If a note file for the slug already exists.
            StoreError: If the file or the index cannot be written.
        """
        return await asyncio.to_thread(self._create, name, content, slug)

    async def read(self, path: str) -> str:
        """Content of the note at ``path``."""
        return await asyncio.to_thread(self._read, path)

    async def update(self, path: str, content: str) -> None:
        """Overwrite an existing note in place."""
        await asyncio.to_thread(self._update, path, content)

    async def delete(self, path: str) -> None:
        """Delete the file at ``path`` and drop its index entry."""
        await asyncio.to_thread(self._delete, path)

    # ------------------------------------------------------------------
    # Sync implementations (run in worker threads)
    # ------------------------------------------------------------------

    def _create(self, name: str, content: str, slug: str | None) -> NoteEntry:
        display_name = name.strip()
        safe_name = sanitize_filename(display_name)
        if file_extension(safe_name) != "md":
            safe_name += ".md"

        safe_slug = None
        if slug is not None and slug.strip():
            safe_slug = sanitize_filename(slug.strip())
            target, handle = self.create_exclusive(
                self.notes_dir, f"{safe_slug}.md", numbered=False
            )
        else:
            target, handle = self.create_exclusive(
                self.notes_dir, timestamped_name(safe_name)
            )

        try:
            with handle:
                handle.write(content.encode("utf-8"))
        except OSError as e:
            self.discard(target)
            raise StoreError("Failed to create note") from e

        entry = NoteEntry(name=display_name, path=self.relative(target), slug=safe_slug)

        def append(document: IndexDocument) -> IndexDocument:
            document.notes.append(entry)
            return document

        try:
            self.index.update(append)
        except StoreError:
            # An untracked note file would never show up in the listing
            self.discard(target)
            raise

        logger.info("Created note '%s' at %s", display_name, entry.path)
        return entry

    def _existing(self, path: str) -> Path:
        target = self.resolve(path)
        if not target.is_file():
            raise NotFound("Note not found")
        return target

    def _read(self, path: str) -> str:
        target = self._existing(path)
        try:
            return target.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidInput("Note is not a UTF-8 text file") from e
        except OSError as e:
            raise StoreError("Failed to read note") from e

    def _update(self, path: str, content: str) -> None:
        target = self._existing(path)
        try:
            target.write_bytes(content.encode("utf-8"))
        except OSError as e:
            raise StoreError("Failed to update note") from e
        logger.info("Updated note %s", path)

    def _delete(self, path: str) -> None:
        target = self._existing(path)
        try:
            target.unlink()
        except FileNotFoundError as e:
            raise NotFound("Note not found") from e
        except OSError as e:
            raise StoreError("Failed to delete note") from e

        def drop(document: IndexDocument) -> IndexDocument:
            document.remove(path)
            return document

        try:
            self.index.update(drop)
        except StoreError:
            # The file is gone; a stale entry is tolerated
            logger.warning("Deleted %s but could not update the index", path)
        else:
            logger.info("Deleted note %s", path)
