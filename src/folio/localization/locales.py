"""Locale normalization and fallback chains.

Everything here is pure: bad input degrades to the configured defaults
and never raises.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES: tuple[str, ...] = ("en", "ko", "mn", "ja")

_SUBTAG_SPLIT_RE = re.compile(r"[-_]")


def normalize_locale(raw: object, supported: Iterable[str] = SUPPORTED_LOCALES) -> str | None:
    """Map a requested locale code onto a supported locale.

    Trims and lower-cases the code.  A region-tagged code (``ko-KR``,
    ``ja_JP``) falls back to its primary subtag.  Returns None for
    anything unsupported or non-string.
    """
    if not isinstance(raw, str):
        return None
    code = raw.strip().lower()
    if not code:
        return None
    supported_set = set(supported)
    if code in supported_set:
        return code
    primary = _SUBTAG_SPLIT_RE.split(code, maxsplit=1)[0]
    if primary in supported_set:
        return primary
    return None


def resolve_chain(
    requested: object,
    supported: Sequence[str] = SUPPORTED_LOCALES,
    item_default: str | None = None,
    default_locale: str = DEFAULT_LOCALE,
    exhaustive: bool = False,
) -> list[str]:
    """Build the ordered, de-duplicated locale chain for a request.

    Order: requested locale, the item's own default, then the process
    default, which ends the chain.  With ``exhaustive`` the remaining
    supported locales follow in ``supported`` order, so a request still
    finds a translation in some language before falling back to base.
    """
    chain: list[str] = []
    candidates = [
        normalize_locale(requested, supported),
        normalize_locale(item_default, supported),
        default_locale,
    ]
    if exhaustive:
        candidates.extend(supported)
    for locale in candidates:
        if locale is not None and locale not in chain:
            chain.append(locale)
    return chain


def safe_locale(
    raw: object,
    fallback: str = DEFAULT_LOCALE,
    supported: Iterable[str] = SUPPORTED_LOCALES,
) -> str:
    """Return ``raw`` if it is an exactly supported locale, else ``fallback``."""
    if isinstance(raw, str) and raw in set(supported):
        return raw
    return fallback


def with_locale(locale: str, path: str) -> str:
    """Prefix a site path with its locale segment."""
    clean = path if path.startswith("/") else f"/{path}"
    return f"/{locale}{clean}"


class LocaleResolver:
    """Locale chain builder bound to one configuration.

    Raises ValueError at construction if the default locale is not one of
    the supported locales.
    """

    def __init__(
        self,
        default_locale: str = DEFAULT_LOCALE,
        supported_locales: Sequence[str] = SUPPORTED_LOCALES,
        exhaustive: bool = False,
    ) -> None:
        supported: list[str] = []
        for locale in supported_locales:
            code = locale.strip().lower()
            if code and code not in supported:
                supported.append(code)
        default = default_locale.strip().lower()
        if default not in supported:
            raise ValueError(
                f"Default locale {default_locale!r} is not in supported locales {supported!r}"
            )
        self.default_locale = default
        self.supported_locales: tuple[str, ...] = tuple(supported)
        self.exhaustive = exhaustive

    def normalize(self, raw: object) -> str | None:
        return normalize_locale(raw, self.supported_locales)

    def is_supported(self, raw: object) -> bool:
        return self.normalize(raw) is not None

    def chain(self, requested: object, item_default: str | None = None) -> list[str]:
        """Return the fallback chain for ``requested``."""
        return resolve_chain(
            requested,
            self.supported_locales,
            item_default=item_default,
            default_locale=self.default_locale,
            exhaustive=self.exhaustive,
        )

    def base_locale(self, item_default: str | None = None) -> str:
        """Locale a base record is assumed to be written in."""
        return self.normalize(item_default) or self.default_locale

    def __repr__(self) -> str:
        return (
            f"LocaleResolver(default_locale={self.default_locale!r}, "
            f"supported_locales={self.supported_locales!r}, "
            f"exhaustive={self.exhaustive!r})"
        )
