"""
Manifest component - Build, serialize and load the asset manifest.

The manifest maps each asset's original relative path to its published,
content-addressed location. Its JSON form is the contract with the render
layer and uses camelCase keys.

Invariants:
- Entries are keyed by original relative path, never by hashed name
- locales and versions are sorted and unique
- Building twice from the same assets differs only in generatedAt
- An empty asset list yields an empty manifest
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from docassets.core.entities import (
    AssetDerivative,
    AssetManifest,
    AssetMetadata,
    ImageDimensions,
    ManifestEntry,
    ProcessedAsset,
)
from docassets.core.errors import ManifestError
from docassets.core.ports import ClockPort
from docassets.core.timestamps import to_iso8601

logger = logging.getLogger(__name__)

MANIFEST_VERSION = "1.0.0"
MANIFEST_FILENAME = "assets-manifest.json"


def _default_clock() -> ClockPort:
    from docassets.adapters.clock import SystemClock

    return SystemClock()


# --- Building ---


def build_entry(asset: ProcessedAsset, *, security_scanned: bool = True) -> ManifestEntry:
    """Manifest entry for one processed asset."""
    return ManifestEntry(
        public_path=asset.public_path,
        hashed_filename=asset.hashed_filename,
        content_hash=asset.content_hash,
        original_path=asset.relative_path,
        file_size=asset.file_size,
        mime_type=asset.mime_type,
        locale=asset.locale,
        version=asset.version,
        dimensions=asset.dimensions,
        derivatives={d.variant: d for d in asset.derivatives},
        metadata=AssetMetadata(
            last_modified=asset.last_modified,
            referenced_by=tuple(asset.referenced_by),
            optimized=bool(asset.derivatives),
            security_scanned=security_scanned,
        ),
    )


def generate_manifest(
    assets: Iterable[ProcessedAsset],
    *,
    clock: ClockPort | None = None,
    security_scanned: bool = True,
) -> AssetManifest:
    """
    Aggregate processed assets into a manifest.

    Runs in the calling thread as the single reduction step of a build.
    """
    clock = clock or _default_clock()
    entries: dict[str, ManifestEntry] = {}
    locales: set[str] = set()
    versions: set[str] = set()

    for asset in sorted(assets, key=lambda a: a.relative_path):
        locales.add(asset.locale)
        versions.add(asset.version)
        entries[asset.relative_path] = build_entry(asset, security_scanned=security_scanned)

    return AssetManifest(
        version=MANIFEST_VERSION,
        generated_at=to_iso8601(clock.now_utc()),
        assets=entries,
        locales=sorted(locales),
        versions=sorted(versions),
    )


# --- Serialization ---


def _dimensions_to_dict(dims: ImageDimensions) -> dict[str, int]:
    return {"width": dims.width, "height": dims.height}


def _derivative_to_dict(derivative: AssetDerivative) -> dict[str, Any]:
    data: dict[str, Any] = {
        "variant": derivative.variant,
        "publicPath": derivative.public_path,
        "hashedFilename": derivative.hashed_filename,
        "fileSize": derivative.file_size,
    }
    if derivative.dimensions is not None:
        data["dimensions"] = _dimensions_to_dict(derivative.dimensions)
    return data


def entry_to_dict(entry: ManifestEntry) -> dict[str, Any]:
    data: dict[str, Any] = {
        "publicPath": entry.public_path,
        "hashedFilename": entry.hashed_filename,
        "contentHash": entry.content_hash,
        "originalPath": entry.original_path,
        "fileSize": entry.file_size,
        "mimeType": entry.mime_type,
        "locale": entry.locale,
        "version": entry.version,
    }
    if entry.dimensions is not None:
        data["dimensions"] = _dimensions_to_dict(entry.dimensions)
    data["derivatives"] = {
        variant: _derivative_to_dict(d) for variant, d in entry.derivatives.items()
    }
    data["metadata"] = {
        "lastModified": entry.metadata.last_modified,
        "referencedBy": list(entry.metadata.referenced_by),
        "optimized": entry.metadata.optimized,
        "securityScanned": entry.metadata.security_scanned,
    }
    return data


def manifest_to_dict(manifest: AssetManifest) -> dict[str, Any]:
    return {
        "version": manifest.version,
        "generatedAt": manifest.generated_at,
        "assets": {key: entry_to_dict(entry) for key, entry in manifest.assets.items()},
        "locales": list(manifest.locales),
        "versions": list(manifest.versions),
    }


def manifest_to_json(manifest: AssetManifest) -> str:
    """Pretty-printed JSON with a 2-space indent."""
    return json.dumps(manifest_to_dict(manifest), indent=2, ensure_ascii=False)


# --- Deserialization ---


def _dimensions_from_dict(data: dict[str, Any] | None) -> ImageDimensions | None:
    if data is None:
        return None
    return ImageDimensions(width=int(data["width"]), height=int(data["height"]))


def _derivative_from_dict(data: dict[str, Any]) -> AssetDerivative:
    return AssetDerivative(
        variant=data["variant"],
        public_path=data["publicPath"],
        hashed_filename=data["hashedFilename"],
        file_size=int(data["fileSize"]),
        dimensions=_dimensions_from_dict(data.get("dimensions")),
    )


def entry_from_dict(data: dict[str, Any]) -> ManifestEntry:
    meta = data.get("metadata") or {}
    return ManifestEntry(
        public_path=data["publicPath"],
        hashed_filename=data["hashedFilename"],
        content_hash=data["contentHash"],
        original_path=data["originalPath"],
        file_size=int(data["fileSize"]),
        mime_type=data["mimeType"],
        locale=data["locale"],
        version=data["version"],
        dimensions=_dimensions_from_dict(data.get("dimensions")),
        derivatives={
            variant: _derivative_from_dict(d)
            for variant, d in (data.get("derivatives") or {}).items()
        },
        metadata=AssetMetadata(
            last_modified=meta.get("lastModified", ""),
            referenced_by=tuple(meta.get("referencedBy", [])),
            optimized=bool(meta.get("optimized", False)),
            security_scanned=bool(meta.get("securityScanned", False)),
        ),
    )


def manifest_from_dict(data: dict[str, Any]) -> AssetManifest:
    """
    Parse a manifest document.

    Raises ManifestError when required fields are missing or mistyped.
    """
    try:
        assets = {key: entry_from_dict(entry) for key, entry in data["assets"].items()}
        return AssetManifest(
            version=str(data["version"]),
            generated_at=str(data["generatedAt"]),
            assets=assets,
            locales=sorted(set(data.get("locales", []))),
            versions=sorted(set(data.get("versions", []))),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ManifestError(f"Invalid asset manifest: {e!r}") from e


def load_manifest(path: str | Path) -> AssetManifest:
    """
    Read a published manifest.

    Raises FileNotFoundError if the file is missing, ManifestError if it is
    not a valid manifest.
    """
    manifest_path = Path(path)
    with open(manifest_path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Manifest {manifest_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {manifest_path} must contain a JSON object")

    manifest = manifest_from_dict(data)
    logger.debug("Loaded manifest %s with %d assets", manifest_path, len(manifest.assets))
    return manifest
