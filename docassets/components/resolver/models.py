"""
Resolver component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from docassets.core.entities import AssetContext

DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES: tuple[str, ...] = ("en", "es", "pt")
DEFAULT_VERSION = "v1"


class FallbackTier(str, Enum):
    """Position of a candidate in the resolution order."""

    EXACT = "exact"
    VERSION = "version"
    LOCALE = "locale"
    DIRECT = "direct"


@dataclass(frozen=True)
class Candidate:
    """One (locale, version) probe in the ordered candidate list."""

    locale: str
    version: str
    tier: FallbackTier

    @property
    def context(self) -> AssetContext:
        return AssetContext(locale=self.locale, version=self.version)


@dataclass(frozen=True)
class AvailabilityEntry:
    """Whether a source path resolves exactly in one context."""

    context: AssetContext
    available: bool
