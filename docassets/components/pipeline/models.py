"""Pipeline component models - build inputs and the build report."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from docassets.components.processor import ProcessOptions
from docassets.core.entities import AssetManifest, ProcessedAsset


@dataclass(frozen=True)
class BuildOptions:
    """Per-run switches layered over the configured rules."""

    dry_run: bool = False
    skip_security: bool = False
    process: ProcessOptions | None = None


@dataclass(frozen=True)
class BuildReport:
    """Outcome of one build."""

    discovered: int
    processed: list[ProcessedAsset]
    manifest: AssetManifest
    security_scanned: bool
    dry_run: bool
    published_files: int = 0
    manifest_path: Path | None = None
    locales: list[str] = field(default_factory=list)

    @property
    def derivative_count(self) -> int:
        return sum(len(asset.derivatives) for asset in self.processed)

    @property
    def assets_by_type(self) -> dict[str, int]:
        return dict(Counter(asset.type.value for asset in self.processed))
