"""
Pipeline component - One build from content tree to published manifest.

Stages: discovery -> validation -> processing -> manifest -> publish.

Invariants:
- Nothing is published when any asset fails security validation
- The manifest is written only after every asset copied successfully
- A dry run performs every stage but leaves the output and staging
  directories untouched; derivatives are staged in a scratch directory
- Manifest aggregation runs in the calling thread after all workers finish
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path

from docassets.components.discovery import discover_assets
from docassets.components.manifest import generate_manifest
from docassets.components.processor import AssetProcessor, ProcessOptions
from docassets.components.publisher import AssetPublisher
from docassets.components.security import SecurityConfig, SecurityValidator
from docassets.core.entities import AssetReference, ValidationResult
from docassets.core.errors import SecurityValidationError
from docassets.core.ports import ClockPort, ImageOptimizerPort
from docassets.rules.models import AssetRules

from .models import BuildOptions, BuildReport

logger = logging.getLogger(__name__)


class AssetPipeline:
    """Runs a build with injected stage collaborators."""

    def __init__(
        self,
        content_dir: str | Path,
        validator: SecurityValidator,
        processor: AssetProcessor,
        publisher: AssetPublisher,
        *,
        process_options: ProcessOptions | None = None,
        clock: ClockPort | None = None,
        max_workers: int = 8,
    ) -> None:
        self.content_dir = Path(content_dir)
        self.validator = validator
        self.processor = processor
        self.publisher = publisher
        self.process_options = process_options or ProcessOptions()
        self.clock = clock
        self.max_workers = max_workers

    def discover(self) -> list[AssetReference]:
        return discover_assets(self.content_dir, max_workers=self.max_workers)

    def validate(self, assets: list[AssetReference]) -> dict[str, ValidationResult]:
        """
        Validate every discovered asset.

        Raises SecurityValidationError listing each failing file.
        """
        logger.info("Validating %d assets for security", len(assets))
        results = self.validator.validate_assets([a.source_path for a in assets])
        invalid = {path: r for path, r in results.items() if not r.is_valid}

        if invalid:
            for path, result in invalid.items():
                logger.error("%s failed security validation: %s", path, "; ".join(result.errors))
            raise SecurityValidationError(invalid)

        logger.info("All assets passed security validation")
        return results

    def _staging(self, dry_run: bool) -> AbstractContextManager[object]:
        optimizer = self.processor.optimizer
        if dry_run and optimizer is not None:
            return optimizer.scratch_staging()
        return nullcontext()

    def run(self, options: BuildOptions | None = None) -> BuildReport:
        options = options or BuildOptions()
        process_options = options.process or self.process_options

        assets = self.discover()

        security_scanned = not options.skip_security
        if security_scanned:
            self.validate(assets)
        else:
            logger.warning("Security validation skipped")

        with self._staging(options.dry_run):
            processed = self.processor.process_assets(assets, process_options)
        manifest = generate_manifest(
            processed, clock=self.clock, security_scanned=security_scanned
        )

        published = 0
        manifest_path: Path | None = None
        if options.dry_run:
            logger.info("Dry run: nothing written")
        else:
            published = self.publisher.copy_assets_to_public_directory(processed)
            manifest_path = self.publisher.write_manifest(manifest)

        return BuildReport(
            discovered=len(assets),
            processed=processed,
            manifest=manifest,
            security_scanned=security_scanned,
            dry_run=options.dry_run,
            published_files=published,
            manifest_path=manifest_path,
            locales=list(manifest.locales),
        )


def create_asset_pipeline(
    rules: AssetRules,
    *,
    optimizer: ImageOptimizerPort | None = None,
    clock: ClockPort | None = None,
) -> AssetPipeline:
    """Factory function wiring a pipeline from configuration."""
    paths = rules.paths
    workers = rules.concurrency.max_workers
    content_dir = Path(paths.content_dir)

    validator = SecurityValidator(
        SecurityConfig.from_rules(rules.security),
        base_dir=content_dir,
        max_workers=workers,
    )
    processor = AssetProcessor(paths.public_dir, optimizer=optimizer, max_workers=workers)
    publisher = AssetPublisher(paths.public_dir, paths.output_root, max_workers=workers)

    return AssetPipeline(
        content_dir,
        validator,
        processor,
        publisher,
        process_options=ProcessOptions.from_rules(rules.optimization),
        clock=clock,
        max_workers=workers,
    )
