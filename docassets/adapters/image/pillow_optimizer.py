"""
Pillow-backed image optimizer.

Derivative bytes are encoded in memory, content-hashed, and staged under
``staging_dir/{locale}/{version}/``; the publisher later copies the staged
files to their public paths.
Inside ``scratch_staging()`` files go to a temporary directory instead and
are removed on exit.

Responsive variants treat the source as the @2x master:
- @2x is the source re-encoded at the configured quality
- @1x is the source at half size
- @{w}w is produced for each configured width smaller than the source

Modern formats: WebP when enabled, AVIF when enabled and the installed
Pillow can encode it. SVG input is never rasterized.
"""

from __future__ import annotations

import io
import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from PIL import Image

from docassets.components.processor import (
    DEFAULT_PUBLIC_DIR,
    generate_content_hash,
    generate_scoped_asset_path,
    make_hashed_filename,
    split_filename,
)
from docassets.core.entities import AssetDerivative, AssetType, ImageDimensions, ProcessedAsset
from docassets.core.mime import get_extension
from docassets.core.ports import FormatOptions, ModernFormatOptions, ResponsiveVariantOptions

logger = logging.getLogger(__name__)

# Raster formats that size variants are re-encoded in.
RESIZABLE_FORMATS: dict[str, str] = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".webp": "WEBP",
}

VECTOR_EXTENSIONS = frozenset({".svg"})


def can_encode(pil_format: str) -> bool:
    """Whether the installed Pillow build has a writer for the format."""
    Image.init()
    return pil_format in Image.SAVE


def _prepare_for(image: Image.Image, pil_format: str) -> Image.Image:
    if pil_format == "JPEG" and image.mode not in ("RGB", "L"):
        return image.convert("RGB")
    if pil_format in ("WEBP", "AVIF") and image.mode not in ("RGB", "RGBA"):
        return image.convert("RGBA" if "A" in image.getbands() or image.mode == "P" else "RGB")
    return image


def encode_image(image: Image.Image, pil_format: str, *, quality: int, effort: int = 4) -> bytes:
    """Encode an image to bytes in the given Pillow format."""
    params: dict[str, object] = {}
    if pil_format == "JPEG":
        params = {"quality": quality, "optimize": True, "progressive": True}
    elif pil_format == "PNG":
        params = {"optimize": True}
    elif pil_format == "WEBP":
        params = {"quality": quality, "method": min(max(effort, 0), 6)}
    elif pil_format == "AVIF":
        params = {"quality": quality, "speed": min(max(9 - effort, 0), 10)}

    buffer = io.BytesIO()
    _prepare_for(image, pil_format).save(buffer, format=pil_format, **params)
    return buffer.getvalue()


def _scaled(dims: ImageDimensions, width: int) -> ImageDimensions:
    return ImageDimensions(width=width, height=max(1, round(width * dims.height / dims.width)))


class PillowImageOptimizer:
    """ImageOptimizerPort implementation using Pillow."""

    def __init__(self, staging_dir: str | Path, public_dir: str = DEFAULT_PUBLIC_DIR) -> None:
        self.staging_dir = Path(staging_dir)
        self.public_dir = public_dir

    @contextmanager
    def scratch_staging(self) -> Iterator[Path]:
        original = self.staging_dir
        with tempfile.TemporaryDirectory(prefix="docassets-scratch-") as tmp:
            self.staging_dir = Path(tmp)
            try:
                yield self.staging_dir
            finally:
                self.staging_dir = original

    def get_image_dimensions(self, path: str) -> ImageDimensions:
        if get_extension(path) in VECTOR_EXTENSIONS:
            raise ValueError(f"Vector image has no pixel dimensions: {path}")
        with Image.open(path) as img:
            width, height = img.size
        return ImageDimensions(width=width, height=height)

    def generate_responsive_variants(
        self,
        asset: ProcessedAsset,
        options: ResponsiveVariantOptions | None = None,
    ) -> list[AssetDerivative]:
        options = options or ResponsiveVariantOptions()
        pil_format = RESIZABLE_FORMATS.get(get_extension(asset.source_path))
        if pil_format is None:
            logger.debug("No responsive variants for %s", asset.source_path)
            return []

        _, ext = split_filename(asset.source_path)
        derivatives: list[AssetDerivative] = []

        with Image.open(asset.source_path) as source:
            source.load()
            dims = ImageDimensions(width=source.width, height=source.height)
            targets: list[tuple[str, ImageDimensions]] = []

            if options.generate_retina:
                targets.append(("@2x", dims))
                targets.append(("@1x", _scaled(dims, max(1, dims.width // 2))))

            for width in sorted(set(options.sizes)):
                if 0 < width < dims.width:
                    targets.append((f"@{width}w", _scaled(dims, width)))

            for variant, target in targets:
                image = source if target == dims else source.resize(
                    (target.width, target.height), Image.Resampling.LANCZOS
                )
                data = encode_image(image, pil_format, quality=options.quality)
                derivatives.append(self._stage(asset, variant, variant, ext, data, target))

        return derivatives

    def convert_to_modern_formats(
        self,
        asset: ProcessedAsset,
        options: ModernFormatOptions | None = None,
    ) -> list[AssetDerivative]:
        if asset.type is not AssetType.IMAGE:
            raise ValueError(f"Asset is not an image: {asset.source_path}")

        options = options or ModernFormatOptions()
        ext = get_extension(asset.source_path)
        if ext in VECTOR_EXTENSIONS:
            return []

        derivatives: list[AssetDerivative] = []
        formats: list[tuple[str, str, FormatOptions]] = [
            ("webp", "WEBP", options.webp),
            ("avif", "AVIF", options.avif),
        ]

        with Image.open(asset.source_path) as source:
            source.load()
            dims = ImageDimensions(width=source.width, height=source.height)

            for variant, pil_format, fmt in formats:
                if not fmt.enabled or ext == f".{variant}":
                    continue
                if not can_encode(pil_format):
                    logger.warning(
                        "%s encoding not available; skipping %s", pil_format, asset.source_path
                    )
                    continue
                try:
                    data = encode_image(source, pil_format, quality=fmt.quality, effort=fmt.effort)
                except (OSError, ValueError) as e:
                    if variant == "webp":
                        raise
                    logger.warning(
                        "%s conversion failed for %s, skipping: %s",
                        pil_format,
                        asset.source_path,
                        e,
                    )
                    continue
                derivatives.append(self._stage(asset, variant, "", f".{variant}", data, dims))

        return derivatives

    def _stage(
        self,
        asset: ProcessedAsset,
        variant: str,
        suffix: str,
        ext: str,
        data: bytes,
        dims: ImageDimensions,
    ) -> AssetDerivative:
        """Hash derivative bytes, write them to staging and describe them."""
        base, _ = split_filename(asset.source_path)
        hashed = make_hashed_filename(f"{base}{suffix}{ext}", generate_content_hash(data))

        staged = self.staging_dir / asset.locale / asset.version / hashed
        staged.parent.mkdir(parents=True, exist_ok=True)
        staged.write_bytes(data)

        return AssetDerivative(
            variant=variant,
            public_path=generate_scoped_asset_path(
                self.public_dir, asset.locale, asset.version, AssetType.IMAGE, hashed
            ),
            hashed_filename=hashed,
            file_size=len(data),
            dimensions=dims,
            source_path=str(staged),
        )
