"""Translation projection: per-field, locale-chain merge of overlays.

Each text field is resolved on its own: the first locale in the chain
whose translation row has a non-blank value wins, otherwise the base
record's value is used.  Translation fetches are best-effort; any
failure collapses the affected batch to base fields and is logged as a
``DegradedTranslation``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from folio.content.models import (
    ChildItem,
    ContentItem,
    ContentType,
    ResolvedProjection,
    Translation,
)
from folio.content.repository import ContentRepository
from folio.errors import ContentNotFound, DegradedTranslation
from folio.localization.gate import require_visible
from folio.localization.locales import LocaleResolver

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "description", "body")

# content id -> locale -> translation row
Overlays = dict[str, dict[str, Translation]]


def blank_to_none(value: object) -> str | None:
    """Return ``value`` if it is a string with visible content, else None."""
    if not isinstance(value, str) or not value.strip():
        return None
    return value


def resolve_field(
    name: str,
    chain: Sequence[str],
    rows_by_locale: Mapping[str, Translation],
    base_value: str | None,
) -> tuple[str | None, str | None]:
    """Resolve one text field along the locale chain.

    Returns ``(value, locale)``; ``locale`` is None when the value came
    from the base record.
    """
    for locale in chain:
        row = rows_by_locale.get(locale)
        if row is None:
            continue
        value = blank_to_none(getattr(row, name, None))
        if value is not None:
            return value, locale
    return blank_to_none(base_value), None


@dataclass
class ProjectionBatch:
    """Projections for a group of records plus any degradation signals."""

    projections: dict[str, ResolvedProjection] = field(default_factory=dict)
    degraded: list[DegradedTranslation] = field(default_factory=list)

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded)


def _translation_type(record: ContentItem | ChildItem) -> str:
    if isinstance(record, ChildItem):
        return str(record.child_type)
    return str(record.content_type)


def _base_fields(record: ContentItem | ChildItem) -> dict[str, str | None]:
    if isinstance(record, ChildItem):
        return {"title": record.base_title, "description": None, "body": record.base_body}
    return {
        "title": record.base_title,
        "description": record.base_description,
        "body": record.base_body,
    }


class TranslationProjector:
    """Resolves the reader-facing text of content items and their children."""

    def __init__(self, repository: ContentRepository, resolver: LocaleResolver) -> None:
        self.repository = repository
        self.resolver = resolver

    # ── Public API ───────────────────────────────────────────────

    async def load_visible_item(self, content_type: ContentType, content_id: str) -> ContentItem:
        """Fetch a base item and pass it through the publication gate.

        Raises:
            ContentNotFound: If the item is missing or cannot be loaded.
            ContentNotVisible: If the item is unpublished.
        """
        try:
            kind = ContentType(content_type)
        except ValueError as exc:
            raise ContentNotFound(content_type, content_id, str(exc)) from exc
        try:
            item = await self.repository.get_base_item(kind, content_id)
        except Exception as exc:
            logger.warning("Failed to load %s %s", content_type, content_id, exc_info=True)
            raise ContentNotFound(content_type, content_id, str(exc)) from exc
        if item is None:
            raise ContentNotFound(content_type, content_id)
        return require_visible(item)

    async def project_parent(
        self,
        content_type: ContentType,
        content_id: str,
        requested_locale: str,
    ) -> ResolvedProjection:
        """Resolve a single visible content item.

        The gate runs before any translation read.
        """
        item = await self.load_visible_item(content_type, content_id)
        batch = await self.project([item], requested_locale)
        return batch.projections[item.id]

    async def project_children(
        self,
        children: Sequence[ChildItem],
        requested_locale: str,
        item_default: str | None = None,
    ) -> dict[str, ResolvedProjection]:
        """Resolve every child; the result has an entry for each input id."""
        batch = await self.project(children, requested_locale, item_default=item_default)
        return batch.projections

    async def project_items(
        self,
        items: Sequence[ContentItem],
        requested_locale: str,
    ) -> dict[str, ResolvedProjection]:
        """Resolve several content items, e.g. for a library listing.

        Callers are responsible for gating the items first.
        """
        batch = await self.project(items, requested_locale)
        return batch.projections

    async def project(
        self,
        records: Sequence[ContentItem | ChildItem],
        requested_locale: str,
        item_default: str | None = None,
    ) -> ProjectionBatch:
        """Resolve a batch of records with grouped translation reads.

        ``item_default`` applies to records without their own default
        locale (children inherit their parent's).
        """
        if not records:
            return ProjectionBatch()

        chains: dict[str, list[str]] = {}
        for record in records:
            own_default = getattr(record, "default_locale", None) or item_default
            chains[record.id] = self.resolver.chain(requested_locale, own_default)

        overlays, degraded = await self._fetch_overlays(records, chains)
        requested = self.resolver.normalize(requested_locale)

        batch = ProjectionBatch(degraded=degraded)
        for record in records:
            own_default = getattr(record, "default_locale", None) or item_default
            batch.projections[record.id] = self._merge(
                record,
                chains[record.id],
                overlays.get(record.id, {}),
                requested,
                self.resolver.base_locale(own_default),
            )
        return batch

    # ── Private helpers ──────────────────────────────────────────

    def _merge(
        self,
        record: ContentItem | ChildItem,
        chain: Sequence[str],
        rows_by_locale: Mapping[str, Translation],
        requested: str | None,
        base_locale: str,
    ) -> ResolvedProjection:
        base = _base_fields(record)
        resolved: dict[str, str | None] = {}
        title_locale: str | None = None
        for name in TEXT_FIELDS:
            value, locale = resolve_field(name, chain, rows_by_locale, base[name])
            resolved[name] = value
            if name == "title":
                title_locale = locale

        return ResolvedProjection(
            title=resolved["title"] or "",
            description=resolved["description"],
            body=resolved["body"],
            source_locale=title_locale or base_locale,
            used_fallback=title_locale is None or title_locale != requested,
        )

    async def _fetch_overlays(
        self,
        records: Sequence[ContentItem | ChildItem],
        chains: Mapping[str, Sequence[str]],
    ) -> tuple[Overlays, list[DegradedTranslation]]:
        """Issue one grouped read per (translation type, locale) pair.

        A failure in any read degrades the whole batch.
        """
        ids_by_type: dict[str, list[str]] = {}
        locales: list[str] = []
        for record in records:
            ids_by_type.setdefault(_translation_type(record), []).append(record.id)
            for locale in chains[record.id]:
                if locale not in locales:
                    locales.append(locale)

        requests = [
            (content_type, ids, locale)
            for content_type, ids in ids_by_type.items()
            for locale in locales
        ]
        results = await asyncio.gather(
            *(self.repository.get_translations(t, ids, loc) for t, ids, loc in requests),
            return_exceptions=True,
        )

        overlays: Overlays = {}
        try:
            for (content_type, ids, locale), rows in zip(requests, results):
                if isinstance(rows, BaseException):
                    raise rows
                wanted = set(ids)
                for row in rows or []:
                    translation = (
                        row if isinstance(row, Translation) else Translation.model_validate(row)
                    )
                    if translation.content_id not in wanted or translation.locale != locale:
                        continue
                    overlays.setdefault(translation.content_id, {}).setdefault(locale, translation)
        except Exception as exc:
            degraded = [
                DegradedTranslation(
                    content_type=content_type,
                    content_ids=tuple(ids),
                    locale=",".join(locales),
                    reason=f"{type(exc).__name__}: {exc}",
                )
                for content_type, ids in ids_by_type.items()
            ]
            for signal in degraded:
                logger.warning(
                    "Translation lookup failed for %d %s id(s) in %s, using base fields: %s",
                    len(signal.content_ids), signal.content_type, signal.locale, signal.reason,
                )
            return {}, degraded

        return overlays, []
