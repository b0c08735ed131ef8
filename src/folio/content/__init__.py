"""Content domain: models and repositories for series, books and their children."""

from folio.content.models import (
    ChapterView,
    ChildItem,
    ChildProjection,
    ChildType,
    ContentItem,
    ContentType,
    LibraryEntry,
    ReaderView,
    ResolvedProjection,
    Translation,
)
from folio.content.repository import ContentRepository, InMemoryContentRepository
from folio.content.store import JsonContentRepository

__all__ = [
    "ChapterView",
    "ChildItem",
    "ChildProjection",
    "ChildType",
    "ContentItem",
    "ContentRepository",
    "ContentType",
    "InMemoryContentRepository",
    "JsonContentRepository",
    "LibraryEntry",
    "ReaderView",
    "ResolvedProjection",
    "Translation",
]
