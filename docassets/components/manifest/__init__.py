"""
Manifest component - Asset manifest building and (de)serialization.
"""

from .component import (
    MANIFEST_FILENAME,
    MANIFEST_VERSION,
    build_entry,
    entry_from_dict,
    entry_to_dict,
    generate_manifest,
    load_manifest,
    manifest_from_dict,
    manifest_to_dict,
    manifest_to_json,
)

__all__ = [
    "MANIFEST_FILENAME",
    "MANIFEST_VERSION",
    "build_entry",
    "entry_from_dict",
    "entry_to_dict",
    "generate_manifest",
    "load_manifest",
    "manifest_from_dict",
    "manifest_to_dict",
    "manifest_to_json",
]
