"""Tests for JsonContentRepository: JSON export of the content tables."""

import json
from pathlib import Path

import pytest
from folio.content.models import ChildType, ContentType
from folio.content.store import STORE_FILENAME, JsonContentRepository
from folio.errors import TranslationFetchError
from folio.localization.locales import LocaleResolver
from folio.localization.reader import ReaderService
from pydantic import ValidationError


def _write_store(tmp_path: Path, **tables: object) -> Path:
    (tmp_path / STORE_FILENAME).write_text(json.dumps(tables), encoding="utf-8")
    return tmp_path


SERIES_ROW = {
    "id": "S1",
    "title": "Neon Sky",
    "description": "Clouds.",
    "created_at": "2025-01-01T00:00:00Z",
    "published": True,
    "published_at": None,
}
BOOK_ROW = {
    "id": "B1",
    "title": "Steppe Notes",
    "status": "published",
    "content": "Intro.",
    "created_at": "2025-01-02T00:00:00Z",
}


class TestLoad:
    async def test_missing_file_is_empty(self, tmp_path: Path):
        repo = JsonContentRepository(tmp_path)
        assert await repo.list_items(ContentType.SERIES) == []
        assert await repo.get_translations("series", ["S1"], "ko") == []

    async def test_corrupt_file_is_empty(self, tmp_path: Path):
        (tmp_path / STORE_FILENAME).write_text("{not json", encoding="utf-8")
        repo = JsonContentRepository(tmp_path)
        assert await repo.get_base_item(ContentType.SERIES, "S1") is None


class TestItems:
    async def test_series_row(self, tmp_path: Path):
        repo = JsonContentRepository(_write_store(tmp_path, series=[SERIES_ROW]))
        item = await repo.get_base_item(ContentType.SERIES, "S1")
        assert item is not None
        assert item.base_title == "Neon Sky"
        assert item.content_type == ContentType.SERIES

    async def test_book_status_published(self, tmp_path: Path):
        repo = JsonContentRepository(_write_store(tmp_path, books=[BOOK_ROW]))
        item = await repo.get_base_item(ContentType.BOOK, "B1")
        assert item.published is True
        assert item.base_body == "Intro."

    async def test_missing_item(self, tmp_path: Path):
        repo = JsonContentRepository(_write_store(tmp_path, series=[SERIES_ROW]))
        assert await repo.get_base_item(ContentType.BOOK, "S1") is None

    async def test_malformed_item_raises(self, tmp_path: Path):
        repo = JsonContentRepository(_write_store(tmp_path, series=[{"id": "S1"}]))
        with pytest.raises(ValidationError):
            await repo.get_base_item(ContentType.SERIES, "S1")

    async def test_list_skips_malformed(self, tmp_path: Path):
        repo = JsonContentRepository(
            _write_store(tmp_path, series=[SERIES_ROW, {"id": "broken"}])
        )
        items = await repo.list_items(ContentType.SERIES)
        assert [i.id for i in items] == ["S1"]


class TestChildren:
    async def test_chapters_and_pages(self, tmp_path: Path):
        repo = JsonContentRepository(
            _write_store(
                tmp_path,
                chapters=[
                    {"id": "C2", "book_id": "B1", "chapter_number": 2,
                     "created_at": "2025-01-01T00:00:00Z"},
                    {"id": "C1", "book_id": "B1", "chapter_number": 1,
                     "created_at": "2025-01-01T00:00:00Z"},
                    {"id": "CX", "series_id": "S1", "chapter_number": 1,
                     "created_at": "2025-01-01T00:00:00Z"},
                ],
                book_pages=[
                    {"id": "P1", "book_id": "B1", "page_number": 1, "title": "One",
                     "created_at": "2025-01-01T00:00:00Z"},
                ],
            )
        )
        chapters = await repo.get_base_children("B1", ChildType.CHAPTER)
        assert [c.id for c in chapters] == ["C1", "C2"]
        pages = await repo.get_base_children("B1", ChildType.PAGE)
        assert [(p.id, p.child_type) for p in pages] == [("P1", ChildType.PAGE)]
        assert len(await repo.get_base_children("B1")) == 3

    async def test_malformed_row_of_other_parent_is_ignored(self, tmp_path: Path):
        repo = JsonContentRepository(
            _write_store(
                tmp_path,
                chapters=[
                    {"id": "C1", "series_id": "S1", "chapter_number": 1,
                     "created_at": "2025-01-01T00:00:00Z"},
                    {"id": "X1", "series_id": "S9", "chapter_number": None},
                ],
            )
        )
        chapters = await repo.get_base_children("S1", ChildType.CHAPTER)
        assert [c.id for c in chapters] == ["C1"]

    async def test_malformed_own_row_is_skipped(self, tmp_path: Path, caplog):
        repo = JsonContentRepository(
            _write_store(
                tmp_path,
                chapters=[
                    {"id": "C1", "series_id": "S1", "chapter_number": 1,
                     "created_at": "2025-01-01T00:00:00Z"},
                    {"id": "C2", "series_id": "S1", "chapter_number": None},
                ],
            )
        )
        with caplog.at_level("WARNING", logger="folio.content.store"):
            chapters = await repo.get_base_children("S1")
        assert [c.id for c in chapters] == ["C1"]
        assert "Skipping malformed chapter row 'C2'" in caplog.text

    async def test_reader_unaffected_by_other_series_rows(self, tmp_path: Path):
        repo = JsonContentRepository(
            _write_store(
                tmp_path,
                series=[SERIES_ROW],
                chapters=[
                    {"id": "C1", "series_id": "S1", "chapter_number": 1, "title": "Arrival",
                     "created_at": "2025-01-01T00:00:00Z"},
                    {"id": "X1", "series_id": "S9", "chapter_number": None},
                ],
                content_translations=[],
            )
        )
        view = await ReaderService(repo, LocaleResolver()).resolve_for_reader(
            ContentType.SERIES, "S1", "en"
        )
        assert [c.id for c in view.children] == ["C1"]
        assert view.children[0].projection.title == "Arrival"


class TestTranslations:
    async def test_content_translations(self, tmp_path: Path):
        repo = JsonContentRepository(
            _write_store(
                tmp_path,
                content_translations=[
                    {"content_type": "series", "content_id": "S1", "locale": "ko",
                     "title": "네온 스카이", "description": None, "body": None},
                    {"content_type": "book", "content_id": "S1", "locale": "ko",
                     "title": "wrong type"},
                    {"content_type": "series", "content_id": "S1", "locale": "ja",
                     "title": "ネオン"},
                ],
            )
        )
        rows = await repo.get_translations("series", ["S1"], "ko")
        assert [r.title for r in rows] == ["네온 스카이"]

    async def test_legacy_tables(self, tmp_path: Path):
        repo = JsonContentRepository(
            _write_store(
                tmp_path,
                content_translations=[],
                series_translations=[
                    {"series_id": "S1", "locale": "mn", "title": "Неон тэнгэр"},
                ],
                chapter_translations=[
                    {"chapter_id": "C1", "locale": "mn", "title": "Ирэлт", "script": "Бороо."},
                ],
            )
        )
        series_rows = await repo.get_translations("series", ["S1"], "mn")
        assert series_rows[0].title == "Неон тэнгэр"
        chapter_rows = await repo.get_translations("chapter", ["C1"], "mn")
        assert chapter_rows[0].body == "Бороо."
        assert chapter_rows[0].content_type == "chapter"

    async def test_content_translations_take_precedence(self, tmp_path: Path):
        repo = JsonContentRepository(
            _write_store(
                tmp_path,
                content_translations=[
                    {"content_type": "series", "content_id": "S1", "locale": "mn", "title": "new"},
                ],
                series_translations=[{"series_id": "S1", "locale": "mn", "title": "old"}],
            )
        )
        rows = await repo.get_translations("series", ["S1"], "mn")
        assert [r.title for r in rows] == ["new"]

    async def test_missing_table_raises(self, tmp_path: Path):
        repo = JsonContentRepository(_write_store(tmp_path, series=[SERIES_ROW]))
        with pytest.raises(TranslationFetchError):
            await repo.get_translations("series", ["S1"], "ko")

    async def test_malformed_row_raises(self, tmp_path: Path):
        repo = JsonContentRepository(
            _write_store(
                tmp_path,
                content_translations=[{"content_type": "series", "locale": "ko"}],
            )
        )
        with pytest.raises(ValidationError):
            await repo.get_translations("series", ["S1"], "ko")
