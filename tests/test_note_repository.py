"""
Note Repository Unit Tests

Covers create/read/update/delete against a temp DATA_DIR, the path
containment check, and the compensation rules between file and index.
"""

from __future__ import annotations

import re

import pytest

from notevault.core.config import Settings
from notevault.core.errors import Conflict, Forbidden, InvalidName, NotFound, StoreError
from notevault.repositories.index import IndexStore
from notevault.repositories.notes import NoteRepository

TIMESTAMPED_TODO = re.compile(r"^notes/\d{4}-\d{2}-\d{2}_\d{6}_Todo\.md$")


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreate:
    """Tests for note creation."""

    @pytest.mark.asyncio
    async def test_timestamped_path_and_listing(self, note_repo: NoteRepository) -> None:
        entry = await note_repo.create("Todo", "- a\n- b")

        assert TIMESTAMPED_TODO.match(entry.path)
        assert entry.name == "Todo"
        assert [e.path for e in await note_repo.get_all()] == [entry.path]

    @pytest.mark.asyncio
    async def test_content_round_trip(self, note_repo: NoteRepository) -> None:
        content = "# Title\r\n\nunicode: žluťoučký 🐎\n\ttrailing   "
        entry = await note_repo.create("Round Trip", content)

        assert await note_repo.read(entry.path) == content

    @pytest.mark.asyncio
    async def test_existing_md_suffix_not_doubled(self, note_repo: NoteRepository) -> None:
        entry = await note_repo.create("journal.md", "x")
        assert entry.path.endswith("_journal.md")

    @pytest.mark.asyncio
    async def test_display_name_keeps_spaces(self, note_repo: NoteRepository) -> None:
        entry = await note_repo.create("  Weekly Plan  ", "x")

        assert entry.name == "Weekly Plan"
        assert entry.path.endswith("_Weekly-Plan.md")

    @pytest.mark.asyncio
    async def test_same_second_names_do_not_collide(
        self, note_repo: NoteRepository
    ) -> None:
        first = await note_repo.create("Todo", "one")
        second = await note_repo.create("Todo", "two")

        assert first.path != second.path
        assert await note_repo.read(first.path) == "one"
        assert await note_repo.read(second.path) == "two"

    @pytest.mark.asyncio
    async def test_invalid_name_writes_nothing(
        self, note_repo: NoteRepository, config: Settings
    ) -> None:
        with pytest.raises(InvalidName):
            await note_repo.create("???", "x")

        assert list(config.NOTES_DIR.iterdir()) == []
        assert not config.INDEX_FILE.exists()


class TestSlugs:
    """Tests for slug-addressed notes."""

    @pytest.mark.asyncio
    async def test_slug_sets_path(self, note_repo: NoteRepository) -> None:
        entry = await note_repo.create("Reading List", "books", slug="reading")

        assert entry.path == "notes/reading.md"
        assert entry.slug == "reading"

    @pytest.mark.asyncio
    async def test_slug_is_sanitized(self, note_repo: NoteRepository) -> None:
        entry = await note_repo.create("X", "x", slug="../my slug")
        assert entry.path == "notes/my-slug.md"

    @pytest.mark.asyncio
    async def test_second_create_with_same_slug_conflicts(
        self, note_repo: NoteRepository
    ) -> None:
        await note_repo.create("First", "one", slug="shared")

        with pytest.raises(Conflict):
            await note_repo.create("Second", "two", slug="shared")

        assert await note_repo.read("notes/shared.md") == "one"
        assert [e.name for e in await note_repo.get_all()] == ["First"]

    @pytest.mark.asyncio
    async def test_blank_slug_is_ignored(self, note_repo: NoteRepository) -> None:
        entry = await note_repo.create("Todo", "x", slug="   ")

        assert entry.slug is None
        assert TIMESTAMPED_TODO.match(entry.path)


class TestCreateCompensation:
    """A failed index write must not leave an untracked note file."""

    @pytest.mark.asyncio
    async def test_index_failure_removes_file(
        self,
        note_repo: NoteRepository,
        index_store: IndexStore,
        config: Settings,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def failing_update(mutator):
            raise StoreError("Failed to update note index")

        monkeypatch.setattr(index_store, "update", failing_update)

        with pytest.raises(StoreError):
            await note_repo.create("Todo", "content")

        assert list(config.NOTES_DIR.iterdir()) == []


# ---------------------------------------------------------------------------
# Path containment
# ---------------------------------------------------------------------------


class TestContainment:
    """Update and delete only touch NOTES_DIR and UPLOADS_DIR."""

    @pytest.mark.asyncio
    async def test_parent_escape_is_forbidden_even_if_file_exists(
        self, note_repo: NoteRepository, config: Settings
    ) -> None:
        secret = config.DATA_DIR.parent / "secrets.txt"
        secret.write_text("top secret", encoding="utf-8")

        with pytest.raises(Forbidden):
            await note_repo.update("../secrets.txt", "pwned")

        assert secret.read_text(encoding="utf-8") == "top secret"

    @pytest.mark.asyncio
    async def test_parent_escape_is_forbidden_when_missing(
        self, note_repo: NoteRepository
    ) -> None:
        with pytest.raises(Forbidden):
            await note_repo.update("../secrets.txt", "x")

    @pytest.mark.parametrize(
        "path",
        [
            "notes/../../outside.md",
            "notes-evil/x.md",
            "notes-index.json",
            "/etc/passwd",
            "notes/..",
            "",
        ],
    )
    def test_resolve_rejects(self, note_repo: NoteRepository, path: str) -> None:
        with pytest.raises(Forbidden):
            note_repo.resolve(path)

    def test_resolve_accepts_managed_directories(
        self, note_repo: NoteRepository, config: Settings
    ) -> None:
        assert note_repo.resolve("notes/a.md") == config.NOTES_DIR.resolve() / "a.md"
        assert note_repo.resolve("uploads/b.txt") == config.UPLOADS_DIR.resolve() / "b.txt"

    @pytest.mark.asyncio
    async def test_symlinked_directory_escape_is_forbidden(
        self, note_repo: NoteRepository, config: Settings
    ) -> None:
        outside = config.DATA_DIR.parent / "outside"
        outside.mkdir()
        (outside / "x.md").write_text("outside", encoding="utf-8")
        (config.NOTES_DIR / "link").symlink_to(outside, target_is_directory=True)

        with pytest.raises(Forbidden):
            await note_repo.delete("notes/link/x.md")

        assert (outside / "x.md").exists()


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------


class TestUpdate:
    """Tests for in-place updates."""

    @pytest.mark.asyncio
    async def test_overwrites_content_and_keeps_index(
        self, note_repo: NoteRepository
    ) -> None:
        entry = await note_repo.create("Todo", "old")
        before = await note_repo.get_all()

        await note_repo.update(entry.path, "new")

        assert await note_repo.read(entry.path) == "new"
        assert await note_repo.get_all() == before

    @pytest.mark.asyncio
    async def test_missing_file_is_not_found(self, note_repo: NoteRepository) -> None:
        with pytest.raises(NotFound):
            await note_repo.update("notes/ghost.md", "x")

    @pytest.mark.asyncio
    async def test_can_update_uploaded_files(
        self, note_repo: NoteRepository, config: Settings
    ) -> None:
        (config.UPLOADS_DIR / "up.md").write_text("v1", encoding="utf-8")

        await note_repo.update("uploads/up.md", "v2")

        assert (config.UPLOADS_DIR / "up.md").read_text(encoding="utf-8") == "v2"


class TestDelete:
    """Tests for deletion."""

    @pytest.mark.asyncio
    async def test_removes_file_and_entry(
        self, note_repo: NoteRepository, config: Settings
    ) -> None:
        keep = await note_repo.create("Keep", "k")
        gone = await note_repo.create("Gone", "g")

        await note_repo.delete(gone.path)

        assert not (config.DATA_DIR / gone.path).exists()
        assert [e.path for e in await note_repo.get_all()] == [keep.path]

    @pytest.mark.asyncio
    async def test_missing_file_is_not_found(self, note_repo: NoteRepository) -> None:
        with pytest.raises(NotFound):
            await note_repo.delete("notes/ghost.md")

    @pytest.mark.asyncio
    async def test_index_failure_still_deletes(
        self,
        note_repo: NoteRepository,
        index_store: IndexStore,
        config: Settings,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        entry = await note_repo.create("Todo", "x")

        def failing_update(mutator):
            raise StoreError("Failed to update note index")

        monkeypatch.setattr(index_store, "update", failing_update)

        await note_repo.delete(entry.path)

        assert not (config.DATA_DIR / entry.path).exists()
        # Stale entry is tolerated
        assert [e.path for e in await note_repo.get_all()] == [entry.path]

    @pytest.mark.asyncio
    async def test_read_after_delete_is_not_found(self, note_repo: NoteRepository) -> None:
        entry = await note_repo.create("Todo", "x")
        await note_repo.delete(entry.path)

        with pytest.raises(NotFound):
            await note_repo.read(entry.path)
