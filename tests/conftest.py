"""Shared fixtures: a call-recording repository seeded with sample content."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

import pytest
from folio.content.models import (
    ChildItem,
    ChildType,
    ContentItem,
    ContentType,
    Translation,
)
from folio.content.repository import InMemoryContentRepository
from folio.errors import TranslationFetchError
from folio.localization.locales import LocaleResolver

CREATED = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class RecordingRepository(InMemoryContentRepository):
    """In-memory repository that records every call in order."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.calls: list[tuple[str, ...]] = []
        self.fail_translations = False
        self.fail_children = False

    @property
    def translation_calls(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] == "get_translations"]

    async def get_base_item(self, content_type, content_id):
        self.calls.append(("get_base_item", str(content_type), content_id))
        return await super().get_base_item(content_type, content_id)

    async def get_base_children(self, parent_id, child_type=None):
        self.calls.append(("get_base_children", parent_id, str(child_type)))
        if self.fail_children:
            raise ConnectionError("children table unreachable")
        return await super().get_base_children(parent_id, child_type)

    async def get_translations(self, content_type, ids: Sequence[str], locale):
        self.calls.append(("get_translations", str(content_type), ",".join(ids), locale))
        if self.fail_translations:
            raise TranslationFetchError("translation store unreachable")
        return await super().get_translations(content_type, ids, locale)

    async def list_items(self, content_type):
        self.calls.append(("list_items", str(content_type)))
        return await super().list_items(content_type)


@pytest.fixture
def resolver() -> LocaleResolver:
    return LocaleResolver(default_locale="en", supported_locales=["en", "ko", "mn", "ja"])


@pytest.fixture
def repo() -> RecordingRepository:
    """Published series S1 with two chapters, a draft series and a book with pages."""
    return RecordingRepository(
        items=[
            ContentItem(
                id="S1",
                content_type=ContentType.SERIES,
                base_title="Neon Sky",
                base_description="A city above the clouds.",
                created_at=CREATED,
                published=True,
            ),
            ContentItem(
                id="S2",
                content_type=ContentType.SERIES,
                base_title="Hidden Draft",
                created_at=CREATED,
                published=False,
                published_at=None,
            ),
            ContentItem(
                id="B1",
                content_type=ContentType.BOOK,
                base_title="Steppe Notes",
                base_body="Book introduction.",
                created_at=CREATED,
                published_at=datetime(2025, 4, 1, tzinfo=UTC),
            ),
        ],
        children=[
            ChildItem(
                id="C1", parent_id="S1", ordinal=1,
                base_title="Arrival", base_body="The rain stopped.", created_at=CREATED,
            ),
            ChildItem(
                id="C2", parent_id="S1", ordinal=3,
                base_title="Ascent", base_body="They climbed.", created_at=CREATED,
            ),
            ChildItem(
                id="P1", parent_id="B1", child_type=ChildType.PAGE, ordinal=1,
                base_title="Page one", base_body="Grass.", created_at=CREATED,
            ),
            ChildItem(
                id="P2", parent_id="B1", child_type=ChildType.PAGE, ordinal=2,
                base_title="Page two", base_body="Wind.", created_at=CREATED,
            ),
        ],
        translations=[
            Translation(content_type="series", content_id="S1", locale="ko", title="네온 스카이"),
            Translation(content_type="series", content_id="S2", locale="ko", title="숨겨진 초안"),
            Translation(
                content_type="chapter", content_id="C1", locale="ko",
                title="도착", body="비가 그쳤다.",
            ),
            Translation(content_type="chapter", content_id="C2", locale="ko", title="   "),
            Translation(content_type="page", content_id="P2", locale="ja", title="二ページ"),
        ],
    )
