"""Engine configuration.

Two layers:
- ``Settings``: environment driven (``SCHEMATA_*`` variables or a ``.env`` file),
  read once and cached.
- ``Defaults``: the process-wide default record for the fallback error map and
  the error formatter. Set it once at process start with ``set_defaults``;
  ``reset_defaults`` restores the built-in record.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Callable

from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from .errors.issues import ErrorMap, Issue


class Settings(BaseSettings):
    # Parsing
    ABORT_EARLY: bool = False
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for structured JSON, False for colored console output

    model_config = SettingsConfigDict(env_prefix="SCHEMATA_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True, slots=True)
class Defaults:
    """Process-wide fallbacks consulted after the contextual and schema error maps."""
    error_map: ErrorMap | None = None
    formatter: Callable[[list[Issue]], str] | None = None


_defaults = Defaults()


def get_defaults() -> Defaults: return _defaults


def set_defaults(**changes: Any) -> Defaults:
    """Replace fields of the process default record, returning the new record."""
    global _defaults
    _defaults = replace(_defaults, **changes)
    return _defaults


def reset_defaults() -> Defaults:
    global _defaults
    _defaults = Defaults()
    return _defaults
