"""
Upload Repository

Stores uploaded files under UPLOADS_DIR with a timestamp-prefixed name.
Markdown uploads are additionally registered in the index as notes.

Extension policy: allowlist (``ALLOWED_UPLOAD_EXTENSIONS``). Files with
no extension, or one not on the list, are rejected.
"""

from __future__ import annotations

import asyncio
import logging
from typing import BinaryIO, Final

from notevault.core.config import Settings
from notevault.core.errors import PayloadTooLarge, StoreError, UnsupportedType
from notevault.core.filenames import (
    file_extension,
    sanitize_filename,
    strip_extension,
    timestamped_name,
)
from notevault.repositories.base import FileRepository
from notevault.repositories.index import IndexStore
from notevault.schemas.index import IndexDocument, NoteEntry
from notevault.schemas.uploads import UploadResponse

logger = logging.getLogger(__name__)

CHUNK_SIZE: Final[int] = 1024 * 1024


class UploadRepository(FileRepository):
    """
    Repository for uploaded files.

    Unlike note creation, a failed index registration does not undo the
    upload: the file is kept and the upload reports success.
    """

    def __init__(self, config: Settings, index: IndexStore) -> None:
        super().__init__(config, index)
        self.max_size = config.MAX_UPLOAD_SIZE
        self.allowed_extensions = frozenset(
            ext.lower().lstrip(".") for ext in config.ALLOWED_UPLOAD_EXTENSIONS
        )

    async def store(
        self,
        stream: BinaryIO,
        declared_name: str,
        size: int | None = None,
    ) -> UploadResponse:
        """
        Persist an uploaded file.

        Args:
            stream: Readable binary stream positioned at the start.
            declared_name: Filename sent by the client (untrusted).
            size: Declared size in bytes; measured from the stream if None.

        Raises:
            PayloadTooLarge: Declared or actual size exceeds MAX_UPLOAD_SIZE.
            InvalidName: Filename sanitizes to nothing.
            UnsupportedType: Extension missing or not allowed.
            StoreError: The file cannot be written.
        """
        return await asyncio.to_thread(self._store, stream, declared_name, size)

    def check_type(self, safe_name: str) -> str:
        """Return the extension of ``safe_name`` if uploads of it are allowed."""
        extension = file_extension(safe_name)
        if extension not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise UnsupportedType(f"File type not allowed. Allowed types: {allowed}")
        return extension

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _store(
        self,
        stream: BinaryIO,
        declared_name: str,
        size: int | None,
    ) -> UploadResponse:
        if size is None:
            size = self._measure(stream)
        if size > self.max_size:
            raise PayloadTooLarge(
                f"File too large. Maximum size is {self.max_size} bytes"
            )

        safe_name = sanitize_filename(declared_name)
        extension = self.check_type(safe_name)

        target, handle = self.create_exclusive(
            self.uploads_dir, timestamped_name(safe_name)
        )
        try:
            with handle:
                written = self._copy(stream, handle)
        except PayloadTooLarge:
            self.discard(target)
            raise
        except OSError as e:
            self.discard(target)
            raise StoreError("Failed to save uploaded file") from e

        path = self.relative(target)
        logger.info("Stored upload '%s' as %s (%d bytes)", declared_name, path, written)

        if extension == "md":
            self._register(NoteEntry(name=strip_extension(safe_name), path=path))

        return UploadResponse(
            filename=target.name,
            original_name=declared_name,
            path=path,
            size=written,
            type=extension,
        )

    def _copy(self, stream: BinaryIO, handle: BinaryIO) -> int:
        """Copy in chunks, enforcing the size limit on actual bytes."""
        written = 0
        while chunk := stream.read(CHUNK_SIZE):
            written += len(chunk)
            if written > self.max_size:
                raise PayloadTooLarge(
                    f"File too large. Maximum size is {self.max_size} bytes"
                )
            handle.write(chunk)
        return written

    @staticmethod
    def _measure(stream: BinaryIO) -> int:
        position = stream.tell()
        size = stream.seek(0, 2)
        stream.seek(position)
        return size - position

    def _register(self, entry: NoteEntry) -> None:
        def append(document: IndexDocument) -> IndexDocument:
            document.notes.append(entry)
            return document

        try:
            self.index.update(append)
        except StoreError:
            logger.warning("Upload %s stored but not added to the note index", entry.path)
