"""
Processor component configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from docassets.core.entities import ImageDimensions
from docassets.core.ports import (
    FormatOptions,
    ModernFormatOptions,
    ResponsiveVariantOptions,
)
from docassets.rules.models import OptimizationRules

DEFAULT_PUBLIC_DIR = "public/assets"
MAX_IMAGE_DIMENSIONS = ImageDimensions(width=4000, height=4000)


@dataclass(frozen=True)
class ProcessOptions:
    """Optional image enhancements requested for each processed asset."""

    generate_responsive_variants: bool = True
    generate_modern_formats: bool = True
    responsive: ResponsiveVariantOptions = field(default_factory=ResponsiveVariantOptions)
    modern_formats: ModernFormatOptions = field(default_factory=ModernFormatOptions)

    @classmethod
    def from_rules(cls, rules: OptimizationRules | None) -> ProcessOptions:
        if rules is None:
            return cls()
        webp = rules.modern_formats.webp
        avif = rules.modern_formats.avif
        return cls(
            generate_responsive_variants=rules.generate_responsive_variants,
            generate_modern_formats=rules.generate_modern_formats,
            responsive=ResponsiveVariantOptions(
                generate_retina=rules.responsive.generate_retina,
                sizes=tuple(rules.responsive.sizes),
                quality=rules.responsive.quality,
            ),
            modern_formats=ModernFormatOptions(
                webp=FormatOptions(enabled=webp.enabled, quality=webp.quality, effort=webp.effort),
                avif=FormatOptions(enabled=avif.enabled, quality=avif.quality, effort=avif.effort),
            ),
        )


NO_OPTIMIZATION = ProcessOptions(generate_responsive_variants=False, generate_modern_formats=False)
