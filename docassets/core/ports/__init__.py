"""
Port interfaces for the asset engine.

Protocol-based so tests can substitute in-memory fakes.
"""

from .optimizer import (
    FormatOptions,
    ImageOptimizerPort,
    ModernFormatOptions,
    ResponsiveVariantOptions,
)
from .time import ClockPort

__all__ = [
    "ClockPort",
    "FormatOptions",
    "ImageOptimizerPort",
    "ModernFormatOptions",
    "ResponsiveVariantOptions",
]
