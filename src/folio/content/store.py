"""JSON-backed content repository.

Reads a single JSON document shaped like the platform's tables::

    {
      "series": [...], "books": [...],
      "chapters": [...], "book_pages": [...],
      "content_translations": [...],
      "series_translations": [...], "chapter_translations": [...]
    }

Rows keep their storage column names; the domain models map them.
The file is loaded on init and never written.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from folio.content.models import (
    ChildItem,
    ChildType,
    ContentItem,
    ContentType,
    Translation,
)
from folio.content.repository import ContentRepository
from folio.errors import TranslationFetchError
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

STORE_FILENAME = ".folio-content-store.json"

Row = dict[str, Any]

_ITEM_TABLES: dict[ContentType, str] = {
    ContentType.SERIES: "series",
    ContentType.BOOK: "books",
}

# Older per-kind translation tables, keyed by the content type they hold.
_LEGACY_TRANSLATION_TABLES: dict[str, tuple[str, str]] = {
    "series": ("series_translations", "series_id"),
    "chapter": ("chapter_translations", "chapter_id"),
}

# Child rows name their parent by whichever of these columns the table has.
_PARENT_KEYS = ("parent_id", "series_id", "book_id")


def _row_parent(row: Row) -> Any:
    for key in _PARENT_KEYS:
        if row.get(key) is not None:
            return row[key]
    return None


class _StoreData(BaseModel):
    """Internal wrapper for JSON deserialization."""

    series: list[Row] = Field(default_factory=list)
    books: list[Row] = Field(default_factory=list)
    chapters: list[Row] = Field(default_factory=list)
    book_pages: list[Row] = Field(default_factory=list)
    content_translations: list[Row] | None = None
    series_translations: list[Row] = Field(default_factory=list)
    chapter_translations: list[Row] = Field(default_factory=list)


class JsonContentRepository(ContentRepository):
    """Read-only repository over a JSON export of the content tables.

    A store without a ``content_translations`` table behaves like a
    database where that table was never created: translation reads fail
    with ``TranslationFetchError``.
    """

    def __init__(self, store_dir: Path) -> None:
        self._path = store_dir / STORE_FILENAME
        self._data = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            logger.info("No content store at %s, starting empty", self._path)
            return _StoreData(content_translations=[])
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt content store at %s, starting empty", self._path)
            return _StoreData(content_translations=[])

    def _item_rows(self, content_type: ContentType) -> list[Row]:
        return getattr(self._data, _ITEM_TABLES[content_type])

    def _to_item(self, content_type: ContentType, row: Row) -> ContentItem:
        return ContentItem.model_validate({**row, "content_type": content_type})

    # ── ContentRepository ────────────────────────────────────────

    async def get_base_item(self, content_type: ContentType, content_id: str) -> ContentItem | None:
        for row in self._item_rows(ContentType(content_type)):
            if row.get("id") == content_id:
                return self._to_item(ContentType(content_type), row)
        return None

    async def get_base_children(
        self,
        parent_id: str,
        child_type: ChildType | None = None,
    ) -> list[ChildItem]:
        tables: list[tuple[ChildType, list[Row]]] = []
        if child_type in (None, ChildType.CHAPTER):
            tables.append((ChildType.CHAPTER, self._data.chapters))
        if child_type in (None, ChildType.PAGE):
            tables.append((ChildType.PAGE, self._data.book_pages))

        children: list[ChildItem] = []
        for kind, rows in tables:
            for row in rows:
                if _row_parent(row) != parent_id:
                    continue
                try:
                    children.append(ChildItem.model_validate({**row, "child_type": kind}))
                except ValidationError:
                    logger.warning("Skipping malformed %s row %r", kind, row.get("id"))
        return sorted(children, key=lambda c: (c.ordinal, c.created_at))

    async def get_translations(
        self,
        content_type: str,
        ids: Sequence[str],
        locale: str,
    ) -> list[Translation]:
        if self._data.content_translations is None:
            raise TranslationFetchError(f"content_translations table missing in {self._path}")

        wanted = set(ids)
        locale = locale.strip().lower()
        found: dict[str, Translation] = {}
        for row in self._data.content_translations:
            if row.get("content_type") != str(content_type):
                continue
            translation = Translation.model_validate(row)
            if translation.content_id in wanted and translation.locale == locale:
                found[translation.content_id] = translation

        legacy = _LEGACY_TRANSLATION_TABLES.get(str(content_type))
        if legacy is not None:
            table, id_key = legacy
            for row in getattr(self._data, table):
                row_id = row.get(id_key)
                if row_id not in wanted or row_id in found:
                    continue
                translation = Translation.model_validate(
                    {**row, "content_type": str(content_type), "content_id": row_id}
                )
                if translation.locale == locale:
                    found[row_id] = translation

        return list(found.values())

    async def list_items(self, content_type: ContentType) -> list[ContentItem]:
        items: list[ContentItem] = []
        for row in self._item_rows(ContentType(content_type)):
            try:
                items.append(self._to_item(ContentType(content_type), row))
            except ValidationError:
                logger.warning("Skipping malformed %s row %r", content_type, row.get("id"))
        return items
