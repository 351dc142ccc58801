"""
Processor component - Content hashing and public path derivation.
"""

from .component import (
    HASH_PREFIX_LENGTH,
    AssetProcessor,
    create_asset_processor,
    generate_content_hash,
    generate_scoped_asset_path,
    make_hashed_filename,
    split_filename,
)
from .models import (
    DEFAULT_PUBLIC_DIR,
    MAX_IMAGE_DIMENSIONS,
    NO_OPTIMIZATION,
    ProcessOptions,
)

__all__ = [
    # Processor
    "AssetProcessor",
    "create_asset_processor",
    # Helper functions
    "generate_content_hash",
    "generate_scoped_asset_path",
    "make_hashed_filename",
    "split_filename",
    # Configuration
    "DEFAULT_PUBLIC_DIR",
    "HASH_PREFIX_LENGTH",
    "MAX_IMAGE_DIMENSIONS",
    "NO_OPTIMIZATION",
    "ProcessOptions",
]
