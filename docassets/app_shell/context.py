from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from docassets.adapters.clock import SystemClock
from docassets.adapters.image import PillowImageOptimizer
from docassets.components.pipeline import AssetPipeline, create_asset_pipeline
from docassets.components.resolver import AssetResolver, create_asset_resolver
from docassets.core.ports import ClockPort
from docassets.rules.models import AssetRules


@dataclass
class AppContext:
    rules: AssetRules
    pipeline: AssetPipeline
    resolver: AssetResolver
    clock: ClockPort

    @property
    def manifest_path(self) -> Path:
        return Path(self.rules.paths.output_root) / self.rules.manifest_relpath

    @classmethod
    def create(
        cls,
        rules: AssetRules,
        *,
        clock: ClockPort | None = None,
        optimize: bool = True,
    ) -> AppContext:
        clock = clock or SystemClock()
        optimizer = (
            PillowImageOptimizer(rules.paths.staging_dir, rules.paths.public_dir)
            if optimize
            else None
        )

        pipeline = create_asset_pipeline(rules, optimizer=optimizer, clock=clock)
        resolver = create_asset_resolver(
            Path(rules.paths.output_root) / rules.manifest_relpath,
            default_locale=rules.locales.default,
            supported_locales=tuple(rules.locales.supported),
            public_dir=rules.paths.public_dir,
        )
        return cls(rules=rules, pipeline=pipeline, resolver=resolver, clock=clock)
