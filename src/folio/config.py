"""Unified configuration loaded from .folio.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from folio.localization.locales import DEFAULT_LOCALE, SUPPORTED_LOCALES, LocaleResolver
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".folio.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]


class LocalizationConfig(BaseModel):
    """[localization] section."""

    default_locale: str = DEFAULT_LOCALE
    supported_locales: list[str] = Field(default_factory=lambda: list(SUPPORTED_LOCALES))
    exhaustive_fallback: bool = False

    @field_validator("supported_locales", mode="before")
    @classmethod
    def _split_locales(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @field_validator("default_locale")
    @classmethod
    def _lower_default(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def _default_is_supported(self) -> LocalizationConfig:
        supported = [code.strip().lower() for code in self.supported_locales]
        if self.default_locale not in supported:
            raise ValueError(
                f"default_locale {self.default_locale!r} must be one of {supported!r}"
            )
        self.supported_locales = supported
        return self

    def to_resolver(self) -> LocaleResolver:
        """Build the LocaleResolver for this configuration."""
        return LocaleResolver(
            default_locale=self.default_locale,
            supported_locales=self.supported_locales,
            exhaustive=self.exhaustive_fallback,
        )


class StoreConfig(BaseModel):
    """[store] section."""

    path: str = "."

    @property
    def directory(self) -> Path:
        return Path(self.path).expanduser()


class FolioConfig(BaseModel):
    """Top-level configuration model."""

    localization: LocalizationConfig = Field(default_factory=LocalizationConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)


def load_config(path: str | Path | None = None) -> FolioConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .folio.toml in CWD
    3. ~/.config/folio/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged FolioConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        global_config = Path.home() / ".config" / "folio" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = FolioConfig.model_validate(data) if data else FolioConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: FolioConfig, **cli_kwargs: object) -> FolioConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``store_path``, ``default_locale``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "store_path": ("store", "path"),
        "default_locale": ("localization", "default_locale"),
        "supported_locales": ("localization", "supported_locales"),
        "exhaustive_fallback": ("localization", "exhaustive_fallback"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return FolioConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: FolioConfig) -> FolioConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "FOLIO_DEFAULT_LOCALE": ("localization", "default_locale"),
        "FOLIO_SUPPORTED_LOCALES": ("localization", "supported_locales"),
        "FOLIO_STORE_PATH": ("store", "path"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    fallback_raw = os.environ.get("FOLIO_EXHAUSTIVE_FALLBACK")
    if fallback_raw is not None:
        data["localization"]["exhaustive_fallback"] = fallback_raw.strip().lower() in (
            "1", "true", "yes",
        )

    return FolioConfig.model_validate(data)
