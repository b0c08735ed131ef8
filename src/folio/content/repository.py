"""Content repository interface and in-memory implementation.

The repository is the only I/O boundary of the resolution layer.  It
owns transport, timeouts and retries; callers only see domain models.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from folio.content.models import (
    ChildItem,
    ChildType,
    ContentItem,
    ContentType,
    Translation,
)

logger = logging.getLogger(__name__)


class ContentRepository(ABC):
    """Read operations the resolution layer needs from storage."""

    @abstractmethod
    async def get_base_item(self, content_type: ContentType, content_id: str) -> ContentItem | None:
        """Return the stored item, or None if it does not exist."""

    @abstractmethod
    async def get_base_children(
        self,
        parent_id: str,
        child_type: ChildType | None = None,
    ) -> list[ChildItem]:
        """Return the parent's children ordered by ordinal.

        If ``child_type`` is None, all child kinds are returned.
        """

    @abstractmethod
    async def get_translations(
        self,
        content_type: str,
        ids: Sequence[str],
        locale: str,
    ) -> list[Translation]:
        """Return translation rows for ``ids`` in a single locale.

        May raise; the projector treats any error as "no translations".
        """

    @abstractmethod
    async def list_items(self, content_type: ContentType) -> list[ContentItem]:
        """Return every stored item of one content type."""


class InMemoryContentRepository(ContentRepository):
    """Dict-backed repository, used for tests and embedding.

    Children are kept in insertion order and sorted on read.
    """

    def __init__(
        self,
        items: Iterable[ContentItem] = (),
        children: Iterable[ChildItem] = (),
        translations: Iterable[Translation] = (),
    ) -> None:
        self._items: dict[tuple[str, str], ContentItem] = {}
        self._children: list[ChildItem] = []
        self._translations: list[Translation] = []
        for item in items:
            self.add_item(item)
        for child in children:
            self.add_child(child)
        for translation in translations:
            self.add_translation(translation)

    # ── Write helpers ────────────────────────────────────────────

    def add_item(self, item: ContentItem) -> None:
        self._items[(str(item.content_type), item.id)] = item

    def add_child(self, child: ChildItem) -> None:
        self._children = [c for c in self._children if c.id != child.id]
        self._children.append(child)

    def add_translation(self, translation: Translation) -> None:
        key = (translation.content_type, translation.content_id, translation.locale)
        self._translations = [
            t for t in self._translations if (t.content_type, t.content_id, t.locale) != key
        ]
        self._translations.append(translation)

    # ── ContentRepository ────────────────────────────────────────

    async def get_base_item(self, content_type: ContentType, content_id: str) -> ContentItem | None:
        return self._items.get((str(content_type), content_id))

    async def get_base_children(
        self,
        parent_id: str,
        child_type: ChildType | None = None,
    ) -> list[ChildItem]:
        children = [
            c
            for c in self._children
            if c.parent_id == parent_id and (child_type is None or c.child_type == child_type)
        ]
        return sorted(children, key=lambda c: (c.ordinal, c.created_at))

    async def get_translations(
        self,
        content_type: str,
        ids: Sequence[str],
        locale: str,
    ) -> list[Translation]:
        wanted = set(ids)
        locale = locale.strip().lower()
        rows = [
            t
            for t in self._translations
            if t.content_type == str(content_type) and t.content_id in wanted and t.locale == locale
        ]
        logger.debug(
            "Loaded %d %s translation(s) for %d id(s) in %s",
            len(rows), content_type, len(wanted), locale,
        )
        return rows

    async def list_items(self, content_type: ContentType) -> list[ContentItem]:
        return [item for (kind, _), item in self._items.items() if kind == str(content_type)]
