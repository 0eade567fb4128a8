"""
Index Store

File-backed store for the notes index document.

Writers are serialized with an exclusive ``fcntl.flock`` on a dedicated
lock file and publish through write-to-temp + ``os.replace``, so readers
(which never lock) always see either the old or the new document in full.

Design:
    - update(mutator): lock -> load -> mutate -> atomic write -> unlock.
      The only way to change the index; callers never write it directly.
    - load(): plain read, may be slightly stale, never partial.
    - A missing or corrupt document loads as an empty index.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import ValidationError

from notevault.core.errors import StoreError
from notevault.schemas.index import IndexDocument

logger = logging.getLogger(__name__)

Mutator = Callable[[IndexDocument], IndexDocument]


class IndexStore:
    """
    Lock-protected read-modify-write access to ``notes-index.json``.

    Usage::

        store = IndexStore(settings.INDEX_FILE)

        def add(doc: IndexDocument) -> IndexDocument:
            doc.notes.append(NoteEntry(name="Todo", path="notes/todo.md"))
            return doc

        store.update(add)
    """

    def __init__(self, index_file: Path) -> None:
        self.index_file = Path(index_file)
        self.lock_file = self.index_file.with_name(self.index_file.name + ".lock")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self) -> IndexDocument:
        """Read the current document without locking."""
        try:
            raw = self.index_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return IndexDocument()
        except OSError:
            logger.exception("Could not read index %s", self.index_file.name)
            return IndexDocument()
        return self._parse(raw)

    def update(self, mutator: Mutator) -> IndexDocument:
        """
        Apply ``mutator`` to the index under the exclusive lock.

        Args:
            mutator: Receives the current document, returns the new one.
                Exceptions it raises propagate unchanged and nothing is
                written.

        Returns:
            The document as written.

        Raises:
            StoreError: If the lock cannot be taken or the write fails.
                The previous document is left untouched.
        """
        with self._locked():
            document = mutator(self.load())
            self._write(document)
            return document

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold an exclusive advisory lock on the dedicated lock file."""
        try:
            self.lock_file.parent.mkdir(parents=True, exist_ok=True)
            fd = self.lock_file.open("a")
        except OSError as e:
            raise StoreError("Failed to lock note index") from e

        try:
            try:
                fcntl.flock(fd.fileno(), fcntl.LOCK_EX)
            except OSError as e:
                raise StoreError("Failed to lock note index") from e
            yield
        finally:
            # Closing the descriptor releases the flock even if LOCK_UN fails
            try:
                fcntl.flock(fd.fileno(), fcntl.LOCK_UN)
            finally:
                fd.close()

    @staticmethod
    def _parse(raw: str) -> IndexDocument:
        try:
            return IndexDocument.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.warning("Index document is unreadable, treating it as empty")
            return IndexDocument()

    def _write(self, document: IndexDocument) -> None:
        """Serialize to a temp file in the same directory, then rename over."""
        payload = json.dumps(
            document.model_dump(mode="json", by_alias=True, exclude_none=True),
            indent=4,
            ensure_ascii=False,
        )
        directory = self.index_file.parent
        tmp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.index_file.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self.index_file)
            tmp_path = None
        except OSError as e:
            logger.error("Failed to write index %s: %s", self.index_file.name, e)
            raise StoreError("Failed to update note index") from e
        finally:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
