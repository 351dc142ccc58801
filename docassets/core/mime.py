"""
Extension based MIME resolution and asset classification.

Two closed allow-lists decide what the engine handles: images and binary
documents. Anything else is UNKNOWN and is dropped at discovery time.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable

from docassets.core.entities import AssetType

ALLOWED_IMAGE_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/avif",
    "image/gif",
    "image/svg+xml",
)

ALLOWED_BINARY_TYPES: tuple[str, ...] = (
    "application/pdf",
    "application/zip",
    "application/json",
    "text/plain",
    "text/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".json": "application/json",
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    ext for ext, mime in MIME_TYPES.items() if mime.startswith("image/")
)


def get_extension(path: str) -> str:
    """Lower-cased extension including the dot, or "" when absent."""
    name = posixpath.basename(path.replace("\\", "/"))
    return posixpath.splitext(name)[1].lower()


def get_mime_type(path: str) -> str:
    """Resolve a MIME type from the file extension."""
    return MIME_TYPES.get(get_extension(path), DEFAULT_MIME_TYPE)


def determine_asset_type(
    mime_type: str,
    image_types: Iterable[str] = ALLOWED_IMAGE_TYPES,
    binary_types: Iterable[str] = ALLOWED_BINARY_TYPES,
) -> AssetType:
    if mime_type in image_types:
        return AssetType.IMAGE
    if mime_type in binary_types:
        return AssetType.BINARY
    return AssetType.UNKNOWN


def asset_type_from_path(path: str) -> AssetType:
    return determine_asset_type(get_mime_type(path))
