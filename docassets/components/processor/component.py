"""
Processor component - Content hashing and public path derivation.

Turns an AssetReference into a ProcessedAsset: reads the file once, hashes
it, and derives a content-addressed filename and a locale/version scoped
public path. Image assets may be enriched by an optional image optimizer.

Invariants:
- contentHash is SHA-256 over the full file bytes (64 lowercase hex chars)
- hashedFilename is {basename}.{contentHash[0:8]}{ext}
- publicPath is /{public_dir}/{locale}/{version}/{images|files}/{hashedFilename}
- Processing the same bytes at the same relative path always yields the
  same contentHash, hashedFilename and publicPath
- Optimizer failures are logged and never fail processing
"""

from __future__ import annotations

import hashlib
import logging
import os
import posixpath
from concurrent.futures import ThreadPoolExecutor

from docassets.core.entities import (
    AssetManifest,
    AssetReference,
    AssetType,
    ProcessedAsset,
)
from docassets.core.errors import AssetError, BatchError, ProcessingError
from docassets.core.mime import asset_type_from_path, get_mime_type
from docassets.core.ports import ImageOptimizerPort
from docassets.core.timestamps import from_epoch

from .models import DEFAULT_PUBLIC_DIR, MAX_IMAGE_DIMENSIONS, ProcessOptions

logger = logging.getLogger(__name__)

HASH_PREFIX_LENGTH = 8


# --- Helper Functions ---


def generate_content_hash(content: bytes) -> str:
    """SHA-256 hex digest of the full content."""
    return hashlib.sha256(content).hexdigest()


def split_filename(path: str) -> tuple[str, str]:
    """Return (basename without extension, extension) for a path."""
    name = posixpath.basename(path.replace("\\", "/"))
    return posixpath.splitext(name)


def make_hashed_filename(path: str, content_hash: str) -> str:
    """
    Build the content-addressed filename.

    Format: {basename}.{hash[0:8]}{ext}
    """
    base, ext = split_filename(path)
    return f"{base}.{content_hash[:HASH_PREFIX_LENGTH]}{ext}"


def generate_scoped_asset_path(
    public_dir: str,
    locale: str,
    version: str,
    asset_type: AssetType,
    filename: str,
) -> str:
    """
    Public URL path for a file.

    Format: /{public_dir}/{locale}/{version}/{images|files}/{filename}
    """
    root = public_dir.replace("\\", "/").strip("/")
    return f"/{root}/{locale}/{version}/{asset_type.public_dir}/{filename}"


# --- Processor ---


class AssetProcessor:
    """Hashes assets and derives their published locations."""

    def __init__(
        self,
        public_dir: str = DEFAULT_PUBLIC_DIR,
        *,
        optimizer: ImageOptimizerPort | None = None,
        max_workers: int = 8,
    ) -> None:
        self.public_dir = public_dir.replace("\\", "/").strip("/")
        self.optimizer = optimizer
        self.max_workers = max_workers

    def generate_scoped_asset_path(
        self,
        locale: str,
        version: str,
        asset_type: AssetType,
        filename: str,
    ) -> str:
        return generate_scoped_asset_path(self.public_dir, locale, version, asset_type, filename)

    def process_asset(
        self,
        asset: AssetReference,
        options: ProcessOptions | None = None,
    ) -> ProcessedAsset:
        """
        Process a single asset.

        Raises ProcessingError when the file cannot be read.
        """
        options = options or ProcessOptions()

        try:
            with open(asset.source_path, "rb") as f:
                stats = os.fstat(f.fileno())
                content = f.read()
        except OSError as e:
            raise ProcessingError(asset.source_path, e) from e

        content_hash = generate_content_hash(content)
        hashed_filename = make_hashed_filename(asset.source_path, content_hash)

        processed = ProcessedAsset(
            source_path=asset.source_path,
            relative_path=asset.relative_path,
            locale=asset.locale,
            version=asset.version,
            type=asset.type,
            public_path=self.generate_scoped_asset_path(
                asset.locale, asset.version, asset.type, hashed_filename
            ),
            hashed_filename=hashed_filename,
            content_hash=content_hash,
            file_size=stats.st_size,
            mime_type=get_mime_type(asset.source_path),
            last_modified=from_epoch(stats.st_mtime),
            referenced_by=list(asset.referenced_by),
        )

        if asset.type is AssetType.IMAGE and self.optimizer is not None:
            self._enhance_image(self.optimizer, processed, options)

        logger.debug("Processed %s -> %s", asset.relative_path, processed.public_path)
        return processed

    def process_assets(
        self,
        assets: list[AssetReference],
        options: ProcessOptions | None = None,
    ) -> list[ProcessedAsset]:
        """
        Process a batch in parallel, preserving input order.

        Every asset is attempted; failures are raised together as a BatchError.
        """
        if not assets:
            return []

        failures: dict[str, AssetError] = {}
        processed: list[ProcessedAsset] = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [(a, pool.submit(self.process_asset, a, options)) for a in assets]
            for asset, future in futures:
                try:
                    processed.append(future.result())
                except ProcessingError as e:
                    logger.error("%s", e)
                    failures[asset.source_path] = e

        if failures:
            raise BatchError("processing", failures)

        return processed

    def resolve_asset_url(
        self,
        relative_path: str,
        locale: str,
        version: str,
        manifest: AssetManifest | None = None,
    ) -> str | None:
        """
        Public URL for a content-relative path.

        Without a manifest the unhashed scoped path is returned. With one,
        the exact entry is preferred, then any entry for the same original
        path that shares either the locale or the version.
        """
        normalized = relative_path.replace("\\", "/")

        if manifest is None:
            filename = normalized.split("/")[-1]
            return self.generate_scoped_asset_path(
                locale, version, asset_type_from_path(normalized), filename
            )

        entry = manifest.assets.get(normalized)
        if entry is not None and entry.locale == locale and entry.version == version:
            return entry.public_path

        for candidate in manifest.assets.values():
            if candidate.original_path == normalized and (
                candidate.locale == locale or candidate.version == version
            ):
                return candidate.public_path

        return None

    def _enhance_image(
        self,
        optimizer: ImageOptimizerPort,
        processed: ProcessedAsset,
        options: ProcessOptions,
    ) -> None:
        """Best-effort dimensions and derivatives; failures only warn."""
        source = processed.source_path

        try:
            processed.dimensions = optimizer.get_image_dimensions(source)
        except Exception as e:
            logger.warning("Failed to get dimensions for %s: %s", source, e)

        dims = processed.dimensions
        if dims is not None and (
            dims.width > MAX_IMAGE_DIMENSIONS.width or dims.height > MAX_IMAGE_DIMENSIONS.height
        ):
            logger.warning(
                "Image %s is %dx%d, larger than the recommended %dx%d",
                source,
                dims.width,
                dims.height,
                MAX_IMAGE_DIMENSIONS.width,
                MAX_IMAGE_DIMENSIONS.height,
            )

        if options.generate_responsive_variants:
            try:
                processed.derivatives.extend(
                    optimizer.generate_responsive_variants(processed, options.responsive)
                )
            except Exception as e:
                logger.warning("Failed to generate responsive variants for %s: %s", source, e)

        if options.generate_modern_formats:
            try:
                processed.derivatives.extend(
                    optimizer.convert_to_modern_formats(processed, options.modern_formats)
                )
            except Exception as e:
                logger.warning("Failed to generate modern format variants for %s: %s", source, e)


def create_asset_processor(
    public_dir: str = DEFAULT_PUBLIC_DIR,
    *,
    optimizer: ImageOptimizerPort | None = None,
    max_workers: int = 8,
) -> AssetProcessor:
    """Factory function to create an asset processor."""
    return AssetProcessor(public_dir, optimizer=optimizer, max_workers=max_workers)
