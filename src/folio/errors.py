"""Error taxonomy for content resolution.

Only ``ContentNotFound`` and ``ContentNotVisible`` ever reach callers.
Translation failures are absorbed by the projector and surface at most
as a logged ``DegradedTranslation`` record.
"""

from __future__ import annotations

from dataclasses import dataclass


class FolioError(Exception):
    """Base error for folio."""


class ContentNotFound(FolioError):
    """The base content item (or a required child) does not exist."""

    def __init__(self, content_type: str, content_id: str, detail: str = "") -> None:
        self.content_type = str(content_type)
        self.content_id = content_id
        message = f"{self.content_type} {content_id!r} not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ContentNotVisible(FolioError):
    """The content item exists but has not been published."""

    def __init__(self, content_type: str, content_id: str) -> None:
        self.content_type = str(content_type)
        self.content_id = content_id
        super().__init__(f"{self.content_type} {content_id!r} is not published")


class TranslationFetchError(FolioError):
    """A repository could not load translation rows."""


@dataclass(frozen=True)
class DegradedTranslation:
    """Record of a translation lookup that fell back to base fields."""

    content_type: str
    content_ids: tuple[str, ...]
    locale: str
    reason: str
