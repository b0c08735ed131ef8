"""Reader-facing resolution of series and books.

``ReaderService`` is the one entry point views use to turn a request
(content type, id, locale) into localized, publishable text.  The
publication gate always completes before the first translation read.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from folio.content.models import (
    ChapterView,
    ChildItem,
    ChildProjection,
    ChildType,
    ContentItem,
    ContentType,
    LibraryEntry,
    ReaderView,
)
from folio.content.repository import ContentRepository
from folio.errors import ContentNotFound
from folio.localization.gate import is_visible
from folio.localization.locales import LocaleResolver
from folio.localization.projector import TranslationProjector

logger = logging.getLogger(__name__)

# Sort key for items that were never given a publication timestamp.
_EPOCH = datetime.min


class ReaderService:
    """Resolves what an anonymous reader sees for a requested locale."""

    def __init__(self, repository: ContentRepository, resolver: LocaleResolver) -> None:
        self.repository = repository
        self.resolver = resolver
        self.projector = TranslationProjector(repository, resolver)

    async def resolve_for_reader(
        self,
        content_type: ContentType,
        content_id: str,
        requested_locale: str,
    ) -> ReaderView:
        """Resolve a content item and all of its children.

        Base children are read before any translation lookup, so a request
        that fails on its children issues no translation reads.

        Raises:
            ContentNotFound: If the item does not exist.
            ContentNotVisible: If the item exists but is unpublished.
        """
        item = await self.projector.load_visible_item(content_type, content_id)
        children = await self._base_children(item)
        logger.debug("Resolving %d child(ren) of %s %s", len(children), item.content_type, item.id)
        parent_batch, child_batch = await asyncio.gather(
            self.projector.project([item], requested_locale),
            self.projector.project(children, requested_locale, item_default=item.default_locale),
        )
        return ReaderView(
            parent=parent_batch.projections[item.id],
            children=[
                ChildProjection(
                    id=child.id,
                    ordinal=child.ordinal,
                    projection=child_batch.projections[child.id],
                )
                for child in children
            ],
            degraded=parent_batch.is_degraded or child_batch.is_degraded,
        )

    async def resolve_chapter(
        self,
        content_type: ContentType,
        content_id: str,
        ordinal: int,
        requested_locale: str,
        child_type: ChildType | None = None,
    ) -> ChapterView:
        """Resolve one child in reading position.

        Only the parent and the requested child are projected; the sibling
        list is used for previous/next navigation.

        Raises:
            ContentNotFound: If the item or the child ordinal does not exist.
            ContentNotVisible: If the item exists but is unpublished.
        """
        item = await self.projector.load_visible_item(content_type, content_id)
        children = await self._base_children(item, child_type)
        ordinals = [child.ordinal for child in children]
        position = next((i for i, c in enumerate(children) if c.ordinal == ordinal), None)
        if position is None:
            raise ContentNotFound(
                content_type, content_id, f"no {child_type or 'chapter'} {ordinal}"
            )
        chapter = children[position]

        parent_batch, child_batch = await asyncio.gather(
            self.projector.project([item], requested_locale),
            self.projector.project([chapter], requested_locale, item_default=item.default_locale),
        )
        return ChapterView(
            parent=parent_batch.projections[item.id],
            chapter=ChildProjection(
                id=chapter.id,
                ordinal=chapter.ordinal,
                projection=child_batch.projections[chapter.id],
            ),
            previous_ordinal=ordinals[position - 1] if position > 0 else None,
            next_ordinal=ordinals[position + 1] if position + 1 < len(ordinals) else None,
            degraded=parent_batch.is_degraded or child_batch.is_degraded,
        )

    async def resolve_library(
        self,
        content_type: ContentType,
        requested_locale: str,
    ) -> list[LibraryEntry]:
        """List visible items of one type, newest publication first."""
        items = [
            item
            for item in await self.repository.list_items(ContentType(content_type))
            if is_visible(item)
        ]
        items.sort(
            key=lambda i: (
                i.published_at is not None,
                _naive(i.published_at),
                _naive(i.created_at),
            ),
            reverse=True,
        )
        batch = await self.projector.project(items, requested_locale)
        return [
            LibraryEntry(
                id=item.id,
                content_type=item.content_type,
                projection=batch.projections[item.id],
                created_at=item.created_at,
                published_at=item.published_at,
                cover_image_url=item.cover_image_url,
            )
            for item in items
        ]

    # ── Private helpers ──────────────────────────────────────────

    async def _base_children(
        self,
        item: ContentItem,
        child_type: ChildType | None = None,
    ) -> list[ChildItem]:
        """Load children; books without chapters fall back to their pages.

        Raises ContentNotFound if the children cannot be loaded.
        """
        try:
            if child_type is not None:
                return await self.repository.get_base_children(item.id, child_type)
            children = await self.repository.get_base_children(item.id, ChildType.CHAPTER)
            if not children and item.content_type == ContentType.BOOK:
                children = await self.repository.get_base_children(item.id, ChildType.PAGE)
        except Exception as exc:
            logger.warning("Failed to load children of %s %s", item.content_type, item.id)
            raise ContentNotFound(
                item.content_type, item.id, f"children unavailable: {exc}"
            ) from exc
        return children


def _naive(value: datetime | None) -> datetime:
    """Comparable timestamp for sorting mixed aware/naive datetimes."""
    if value is None:
        return _EPOCH
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value
