"""
Base Repository

Shared filesystem plumbing for repositories that store files under
DATA_DIR: the managed-directory containment check, exclusive file
creation, and index access.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Final

from notevault.core.config import Settings
from notevault.core.errors import Conflict, Forbidden, InvalidInput, StoreError
from notevault.core.filenames import numbered_name
from notevault.repositories.index import IndexStore

logger = logging.getLogger(__name__)

MAX_NAME_ATTEMPTS: Final[int] = 100


class FileRepository:
    """
    Base class for repositories backed by files in the managed directories.

    The managed directories are NOTES_DIR and UPLOADS_DIR. Every path
    received from a client is checked with ``resolve`` before it touches
    the filesystem.

    Usage:
        class NoteRepository(FileRepository):
            ...

        repo = NoteRepository(settings, IndexStore(settings.INDEX_FILE))
    """

    def __init__(self, config: Settings, index: IndexStore) -> None:
        self.data_dir = Path(config.DATA_DIR)
        self.notes_dir = Path(config.NOTES_DIR)
        self.uploads_dir = Path(config.UPLOADS_DIR)
        self.index = index

    def resolve(self, path: str) -> Path:
        """
        Map a client path (relative to DATA_DIR) onto the filesystem.

        The parent directory is canonicalized, not the file itself, so the
        check also works for files that do not exist yet.

        Raises:
            Forbidden: If the parent is not NOTES_DIR, UPLOADS_DIR or
                a directory inside one of them.
        """
        if "\x00" in path:
            raise InvalidInput("Invalid note path")

        target = self.data_dir / path
        if target.name in ("", ".."):
            raise Forbidden("Invalid note path")

        parent = target.parent.resolve()
        for allowed in (self.notes_dir.resolve(), self.uploads_dir.resolve()):
            if parent.is_relative_to(allowed):
                return parent / target.name

        logger.warning("Rejected path outside managed directories: %r", path)
        raise Forbidden("Invalid note path")

    def relative(self, target: Path) -> str:
        """Client-facing path: ``notes/<file>`` or ``uploads/<file>``."""
        return target.relative_to(self.data_dir).as_posix()

    def create_exclusive(
        self,
        directory: Path,
        filename: str,
        numbered: bool = True,
    ) -> tuple[Path, BinaryIO]:
        """
        Create a new file without ever replacing an existing one.

        Args:
            directory: Target directory (created if missing).
            filename: Already-sanitized filename.
            numbered: On collision try ``name-2.ext``, ``name-3.ext``...
                When False a collision raises Conflict.

        Returns:
            The created path and its open binary handle (caller closes).
        """
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError("Failed to prepare storage directory") from e

        attempts = MAX_NAME_ATTEMPTS if numbered else 1
        for n in range(1, attempts + 1):
            candidate = directory / numbered_name(filename, n)
            try:
                return candidate, candidate.open("xb")
            except FileExistsError:
                continue
            except OSError as e:
                raise StoreError("Failed to create file") from e

        raise Conflict(f"A file named '{filename}' already exists")

    @staticmethod
    def discard(target: Path) -> None:
        """Best-effort removal used to undo a half-finished create."""
        try:
            target.unlink(missing_ok=True)
        except OSError:
            logger.exception("Could not remove orphaned file %s", target.name)
