"""
Share Service

Public share links for notes.

A share is stored on the note's index entry: ``shareToken`` (32 hex
chars), optional ``burnAfterReading`` and optional ``passwordHash``.
Sharing again rotates the token; revoking clears all three fields.

Burn-after-reading:
    The content is read into memory first. The entry is then claimed
    (removed) under the index lock, so of several concurrent readers
    only one gets the content. If the index cannot be written the
    content is still returned and the failure is logged.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from pathlib import Path

from notevault.core.errors import NoteVaultError, NotFound, StoreError, Unauthorized
from notevault.core.security import hash_password, new_share_token, verify_password
from notevault.repositories.index import IndexStore
from notevault.repositories.notes import NoteRepository
from notevault.schemas.index import IndexDocument, NoteEntry
from notevault.schemas.shares import ShareCreated, SharedNote

logger = logging.getLogger(__name__)


def build_share_url(base_url: str, share_page: str, token: str) -> str:
    """``http://host`` + ``/share.html`` -> ``http://host/share.html?token=...``"""
    return f"{base_url.rstrip('/')}/{share_page.lstrip('/')}?token={token}"


class ShareService:
    """
    Create, revoke and resolve share links.

    Usage::

        service = ShareService(index, notes, share_page="/share.html")
        created = await service.create_or_update("notes/a.md", "http://host/")
        shared = await service.resolve(created.share_token)
    """

    def __init__(
        self,
        index: IndexStore,
        notes: NoteRepository,
        share_page: str = "/share.html",
    ) -> None:
        self.index = index
        self.notes = notes
        self.share_page = share_page

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, token: str, password: str | None = None) -> SharedNote:
        """
        Return the note behind ``token``.

        Raises:
            NotFound: Unknown token, or the note file is gone.
            Unauthorized: The share is password-gated and the password
                is missing or wrong.
        """
        return await asyncio.to_thread(self._resolve, token, password)

    async def create_or_update(
        self,
        path: str,
        base_url: str,
        burn_after_reading: bool = False,
        password: str | None = None,
    ) -> ShareCreated:
        """
        Issue a fresh share token for the note at ``path``.

        Args:
            path: Index path of the note.
            base_url: ``scheme://host/`` of the incoming request.
            burn_after_reading: Delete the note after its first read.
            password: Require this password to open the link.

        Raises:
            NotFound: No index entry has this path.
            StoreError: The index cannot be written.
        """
        return await asyncio.to_thread(
            self._create_or_update, path, base_url, burn_after_reading, password
        )

    async def revoke(self, path: str) -> None:
        """Remove the share link from the note at ``path``."""
        await asyncio.to_thread(self._revoke, path)

    # ------------------------------------------------------------------
    # Sync implementations
    # ------------------------------------------------------------------

    def _resolve(self, token: str, password: str | None) -> SharedNote:
        entry = self._find_by_token(token)
        if entry is None:
            raise NotFound("Note not found or share link expired")

        if entry.password_hash:
            if not password or not verify_password(password, entry.password_hash):
                logger.warning("Rejected password for share of %s", entry.path)
                raise Unauthorized("Invalid password")

        target, content = self._load_content(entry)
        burn = entry.burn_after_reading is True

        if burn:
            self._burn(entry, target)
        logger.info("Resolved share for %s (burn=%s)", entry.path, burn)

        return SharedNote(name=entry.name, content=content, burn_after_reading=burn)

    def _find_by_token(self, token: str) -> NoteEntry | None:
        wanted = token.encode("utf-8")
        for entry in self.index.load().notes:
            if entry.share_token and secrets.compare_digest(
                entry.share_token.encode("utf-8"), wanted
            ):
                return entry
        return None

    def _load_content(self, entry: NoteEntry) -> tuple[Path, str]:
        try:
            target = self.notes.resolve(entry.path)
            return target, target.read_bytes().decode("utf-8")
        except (NoteVaultError, OSError, UnicodeDecodeError) as e:
            logger.warning("Shared note %s has no readable file", entry.path)
            raise NotFound("Note file not found") from e

    def _burn(self, entry: NoteEntry, target: Path) -> None:
        def claim(document: IndexDocument) -> IndexDocument:
            current = document.find(entry.path)
            if current is None or current.share_token != entry.share_token:
                # Another reader burned it first
                raise NotFound("Note not found or share link expired")
            document.remove(entry.path)
            return document

        try:
            self.index.update(claim)
        except StoreError:
            logger.warning("Burned share of %s but could not update the index", entry.path)

        try:
            target.unlink(missing_ok=True)
        except OSError:
            logger.exception("Could not delete burned note %s", entry.path)
        else:
            logger.info("Burned note %s after reading", entry.path)

    def _create_or_update(
        self,
        path: str,
        base_url: str,
        burn_after_reading: bool,
        password: str | None,
    ) -> ShareCreated:
        token = new_share_token()
        # Hash outside the lock
        password_hash = hash_password(password) if password else None

        def share(document: IndexDocument) -> IndexDocument:
            entry = document.find(path)
            if entry is None:
                raise NotFound("Note not found")
            entry.share_token = token
            entry.burn_after_reading = True if burn_after_reading else None
            entry.password_hash = password_hash
            return document

        self.index.update(share)
        logger.info(
            "Shared %s (burn=%s, password=%s)",
            path,
            burn_after_reading,
            password_hash is not None,
        )

        return ShareCreated(
            share_token=token,
            share_url=build_share_url(base_url, self.share_page, token),
            burn_after_reading=burn_after_reading,
        )

    def _revoke(self, path: str) -> None:
        def unshare(document: IndexDocument) -> IndexDocument:
            entry = document.find(path)
            if entry is None:
                raise NotFound("Note not found")
            entry.clear_share()
            return document

        self.index.update(unshare)
        logger.info("Revoked share of %s", path)
