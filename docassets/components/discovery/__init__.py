"""
Discovery component - Asset discovery in the content tree.
"""

from .component import (
    ASSETS_DIR_NAME,
    discover_assets,
    get_available_locales_and_versions,
    scan_assets_directory,
)

__all__ = [
    "ASSETS_DIR_NAME",
    "discover_assets",
    "get_available_locales_and_versions",
    "scan_assets_directory",
]
