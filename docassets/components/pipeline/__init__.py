"""
Pipeline component - Build orchestration.
"""

from .component import AssetPipeline, create_asset_pipeline
from .models import BuildOptions, BuildReport

__all__ = [
    "AssetPipeline",
    "BuildOptions",
    "BuildReport",
    "create_asset_pipeline",
]
