"""
Image optimizer port.

The optimizer is an optional collaborator of the asset processor. Each of its
operations may fail independently; the processor logs the failure and keeps
the asset.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Protocol

from docassets.core.entities import AssetDerivative, ImageDimensions, ProcessedAsset


@dataclass(frozen=True)
class ResponsiveVariantOptions:
    """Options for @1x/@2x and width based variants."""

    generate_retina: bool = True
    sizes: tuple[int, ...] = ()
    quality: int = 85


@dataclass(frozen=True)
class FormatOptions:
    """Encoder settings for one modern format."""

    enabled: bool = True
    quality: int = 85
    effort: int = 4


@dataclass(frozen=True)
class ModernFormatOptions:
    """Options for WebP/AVIF conversion."""

    webp: FormatOptions = field(default_factory=FormatOptions)
    avif: FormatOptions = field(default_factory=lambda: FormatOptions(quality=80))


class ImageOptimizerPort(Protocol):
    """Interface for image inspection and derivative generation."""

    def get_image_dimensions(self, path: str) -> ImageDimensions:
        """Read pixel dimensions. Raises on unreadable or vector images."""
        ...

    def generate_responsive_variants(
        self,
        asset: ProcessedAsset,
        options: ResponsiveVariantOptions | None = None,
    ) -> list[AssetDerivative]:
        """Produce size variants of an image asset."""
        ...

    def convert_to_modern_formats(
        self,
        asset: ProcessedAsset,
        options: ModernFormatOptions | None = None,
    ) -> list[AssetDerivative]:
        """Produce WebP/AVIF variants of an image asset."""
        ...

    def scratch_staging(self) -> AbstractContextManager[object]:
        """Stage derivative bytes somewhere discarded when the block exits."""
        ...
