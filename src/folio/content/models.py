"""Content domain models: pure Pydantic v2 data types.

Series and books are the top-level published units; chapters and pages
are their ordered children.  Translations are optional overlays keyed by
(content type, content id, locale).  Resolved projections are the
locale-merged, reader-facing view of those records and are never
persisted.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ContentType(StrEnum):
    """Kind of top-level content item."""

    SERIES = "series"
    BOOK = "book"


class ChildType(StrEnum):
    """Kind of child item."""

    CHAPTER = "chapter"
    PAGE = "page"


# Source rows use these column names for the child's parent and ordinal.
_PARENT_KEYS = ("parent_id", "series_id", "book_id")
_ORDINAL_KEYS = ("ordinal", "chapter_number", "page_number")
_BODY_KEYS = ("base_body", "body", "content", "script")


def _first_present(row: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


class ContentItem(BaseModel):
    """A series or book as stored, read as an immutable snapshot.

    Accepts either the canonical field names or the storage column names
    (``title``, ``description``, ``content``, ``status``).  A textual
    ``status`` of ``"published"`` counts as the published flag.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    content_type: ContentType
    base_title: str = ""
    base_description: str | None = None
    base_body: str | None = None
    created_at: datetime
    published: bool = False
    published_at: datetime | None = None
    default_locale: str | None = None
    cover_image_url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_source_row(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "base_title" not in data and "title" in data:
            data["base_title"] = data.pop("title")
        if "base_description" not in data and "description" in data:
            data["base_description"] = data.pop("description")
        if "base_body" not in data and "content" in data:
            data["base_body"] = data.pop("content")
        status = data.pop("status", None)
        if isinstance(status, str) and status.strip().lower() == "published":
            data["published"] = True
        if data.get("published") is None:
            data["published"] = False
        if data.get("base_title") is None:
            data["base_title"] = ""
        return data


class ChildItem(BaseModel):
    """A chapter or page belonging to a content item."""

    model_config = ConfigDict(frozen=True)

    id: str
    parent_id: str
    child_type: ChildType = ChildType.CHAPTER
    ordinal: int = Field(gt=0)
    base_title: str | None = None
    base_body: str | None = None
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _from_source_row(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "parent_id" not in data:
            data["parent_id"] = _first_present(data, _PARENT_KEYS)
        if "ordinal" not in data:
            data["ordinal"] = _first_present(data, _ORDINAL_KEYS)
        if "child_type" not in data and "page_number" in data:
            data["child_type"] = ChildType.PAGE
        if "base_title" not in data and "title" in data:
            data["base_title"] = data.pop("title")
        if "base_body" not in data:
            data["base_body"] = _first_present(data, _BODY_KEYS)
        return data


class Translation(BaseModel):
    """A per-locale overlay for a content or child item.

    Every text field is independently optional; a row existing says
    nothing about whether any of its fields are usable.
    """

    content_type: str
    content_id: str
    locale: str
    title: str | None = None
    description: str | None = None
    body: str | None = None

    @field_validator("locale")
    @classmethod
    def _normalize_locale(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="before")
    @classmethod
    def _from_source_row(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # chapter_translations rows carry the body as ``script``
        if data.get("body") is None and data.get("script") is not None:
            data["body"] = data.pop("script")
        for key in ("series_id", "chapter_id", "book_id"):
            if "content_id" not in data and data.get(key) is not None:
                data["content_id"] = data[key]
        return data


class ResolvedProjection(BaseModel):
    """Locale-merged, reader-facing text of one item."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str | None = None
    body: str | None = None
    source_locale: str
    used_fallback: bool


class ChildProjection(BaseModel):
    """A resolved child, keeping its ordinal for navigation."""

    model_config = ConfigDict(frozen=True)

    id: str
    ordinal: int
    projection: ResolvedProjection


class ReaderView(BaseModel):
    """Everything a reader page needs for one content item."""

    parent: ResolvedProjection
    children: list[ChildProjection] = Field(default_factory=list)
    degraded: bool = False


class ChapterView(BaseModel):
    """A single child in reading position with its neighbours."""

    parent: ResolvedProjection
    chapter: ChildProjection
    previous_ordinal: int | None = None
    next_ordinal: int | None = None
    degraded: bool = False


class LibraryEntry(BaseModel):
    """One visible item in a library listing."""

    id: str
    content_type: ContentType
    projection: ResolvedProjection
    created_at: datetime
    published_at: datetime | None = None
    cover_image_url: str | None = None
