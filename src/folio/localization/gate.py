"""Publication gate for anonymous readers."""

from __future__ import annotations

from folio.content.models import ContentItem
from folio.errors import ContentNotVisible


def is_visible(item: ContentItem) -> bool:
    """Return True if an unauthenticated reader may see ``item``.

    Either stored signal is enough: the published flag or a publication
    timestamp.  No locale or translation data is consulted.
    """
    return item.published is True or item.published_at is not None


def require_visible(item: ContentItem) -> ContentItem:
    """Return ``item`` unchanged, or raise ContentNotVisible."""
    if not is_visible(item):
        raise ContentNotVisible(item.content_type, item.id)
    return item
