"""
Discovery component - Find assets in the per-locale, per-version content tree.

Layout: {content_dir}/{locale}/{version}/assets/**

Invariants:
- Only files whose MIME type is in an allow-list are returned
- A missing assets directory is skipped, not an error
- Results are ordered by relative path, independent of filesystem order
- The directory walk uses an explicit stack, never recursion
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from docassets.core.entities import AssetReference, AssetType
from docassets.core.errors import DiscoveryError
from docassets.core.mime import determine_asset_type, get_mime_type

logger = logging.getLogger(__name__)

ASSETS_DIR_NAME = "assets"


def _list_directories(path: Path) -> list[str]:
    """Sorted names of visible sub-directories; [] when path is unreadable."""
    try:
        with os.scandir(path) as entries:
            names = [e.name for e in entries if e.is_dir() and not e.name.startswith(".")]
    except OSError:
        return []
    return sorted(names)


def get_available_locales_and_versions(content_dir: str | Path) -> tuple[list[str], list[str]]:
    """Return (locales, versions) present as directories under content_dir."""
    root = Path(content_dir)
    locales: set[str] = set()
    versions: set[str] = set()

    for locale in _list_directories(root):
        locales.add(locale)
        versions.update(_list_directories(root / locale))

    return sorted(locales), sorted(versions)


def scan_assets_directory(
    assets_dir: str | Path,
    content_dir: str | Path,
    locale: str,
    version: str,
) -> list[AssetReference]:
    """
    Walk one assets directory with a work stack.

    Raises DiscoveryError when a directory inside the tree cannot be read.
    """
    root = Path(content_dir)
    found: list[AssetReference] = []
    pending: list[Path] = [Path(assets_dir)]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise DiscoveryError(str(current), e) from e

        for entry in entries:
            if entry.is_dir():
                pending.append(Path(entry.path))
                continue
            if not entry.is_file():
                continue

            asset_type = determine_asset_type(get_mime_type(entry.name))
            if asset_type is AssetType.UNKNOWN:
                logger.debug("Skipping unsupported file %s", entry.path)
                continue

            file_path = Path(entry.path)
            found.append(
                AssetReference(
                    source_path=str(file_path),
                    relative_path=file_path.relative_to(root).as_posix(),
                    locale=locale,
                    version=version,
                    type=asset_type,
                )
            )

    return found


def discover_assets(content_dir: str | Path, *, max_workers: int = 8) -> list[AssetReference]:
    """
    Discover every asset under {content_dir}/{locale}/{version}/assets.

    Locale/version pairs are scanned in parallel and merged by relative path.
    """
    root = Path(content_dir)
    pairs: list[tuple[str, str, Path]] = []

    for locale in _list_directories(root):
        for version in _list_directories(root / locale):
            assets_dir = root / locale / version / ASSETS_DIR_NAME
            if assets_dir.is_dir():
                pairs.append((locale, version, assets_dir))
            else:
                logger.debug("No assets directory for %s/%s", locale, version)

    if not pairs:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        batches = list(
            pool.map(
                lambda pair: scan_assets_directory(pair[2], root, pair[0], pair[1]),
                pairs,
            )
        )

    assets = [asset for batch in batches for asset in batch]
    assets.sort(key=lambda a: a.relative_path)
    logger.info(
        "Discovered %d assets across %d locales",
        len(assets),
        len({a.locale for a in assets}),
    )
    return assets
