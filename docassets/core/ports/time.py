"""
Clock port.

Only the manifest's generatedAt field reads the clock; every other value the
engine produces is derived from file contents and metadata.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time (timezone-aware)."""
        ...
