"""Localization and publication resolution for reader-facing content."""

from folio.localization.gate import is_visible, require_visible
from folio.localization.locales import (
    DEFAULT_LOCALE,
    SUPPORTED_LOCALES,
    LocaleResolver,
    normalize_locale,
    resolve_chain,
    safe_locale,
    with_locale,
)
from folio.localization.projector import (
    ProjectionBatch,
    TranslationProjector,
    blank_to_none,
    resolve_field,
)
from folio.localization.reader import ReaderService

__all__ = [
    "DEFAULT_LOCALE",
    "SUPPORTED_LOCALES",
    "LocaleResolver",
    "ProjectionBatch",
    "ReaderService",
    "TranslationProjector",
    "blank_to_none",
    "is_visible",
    "normalize_locale",
    "require_visible",
    "resolve_chain",
    "resolve_field",
    "safe_locale",
    "with_locale",
]
