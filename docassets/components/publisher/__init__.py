"""
Publisher component - Asset copying and manifest writing.
"""

from .component import AssetPublisher, create_asset_publisher

__all__ = [
    "AssetPublisher",
    "create_asset_publisher",
]
