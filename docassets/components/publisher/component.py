"""
Publisher component - Copy processed assets and write the manifest.

Directory structure: {output_root}/{public_path}
Manifest: {output_root}/{public_dir}/assets-manifest.json

Invariants:
- A published file's bytes equal its source bytes
- Copies run concurrently; every failure is collected and raised once
- The manifest is written via a temp file and an atomic replace, so
  readers see either the previous manifest or the new one
- The manifest gets the same permissions as any file created under the
  current umask
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from docassets.components.manifest import MANIFEST_FILENAME, manifest_to_json
from docassets.components.processor import DEFAULT_PUBLIC_DIR
from docassets.core.entities import AssetManifest, ProcessedAsset
from docassets.core.errors import PublishError

logger = logging.getLogger(__name__)


def _default_file_mode() -> int:
    """Mode a plain open() would create, honoring the process umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class AssetPublisher:
    """Writes processed assets and the manifest below an output root."""

    def __init__(
        self,
        public_dir: str = DEFAULT_PUBLIC_DIR,
        output_root: str | Path = ".",
        *,
        max_workers: int = 8,
    ) -> None:
        self.public_dir = public_dir.replace("\\", "/").strip("/")
        self.output_root = Path(output_root)
        self.max_workers = max_workers

    @property
    def manifest_path(self) -> Path:
        return self.output_root / self.public_dir / MANIFEST_FILENAME

    def target_path(self, public_path: str) -> Path:
        """Filesystem location of a public URL path."""
        return self.output_root / public_path.lstrip("/")

    def _copy_file(self, source: str, public_path: str) -> None:
        target = self.target_path(public_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as e:
            raise PublishError(public_path, e) from e
        logger.debug("Copied %s -> %s", source, target)

    def _copy_jobs(self, assets: list[ProcessedAsset]) -> list[tuple[str, str]]:
        jobs: list[tuple[str, str]] = []
        for asset in assets:
            jobs.append((asset.source_path, asset.public_path))
            for derivative in asset.derivatives:
                if derivative.source_path is not None:
                    jobs.append((derivative.source_path, derivative.public_path))
        return jobs

    def copy_assets_to_public_directory(self, assets: list[ProcessedAsset]) -> int:
        """
        Copy every asset and staged derivative to its public location.

        Returns the number of files written. Raises PublishError carrying
        each individual failure once all copies have finished.
        """
        jobs = self._copy_jobs(assets)
        if not jobs:
            return 0

        failures: list[PublishError] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._copy_file, src, dest) for src, dest in jobs]
            for future in futures:
                try:
                    future.result()
                except PublishError as e:
                    logger.error("%s", e)
                    failures.append(e)

        if failures:
            raise PublishError(str(self.output_root / self.public_dir), failures=failures)

        logger.info("Published %d files to %s", len(jobs), self.output_root / self.public_dir)
        return len(jobs)

    def write_manifest(self, manifest: AssetManifest) -> Path:
        """Atomically write the manifest as 2-space indented JSON."""
        target = self.manifest_path
        payload = manifest_to_json(manifest)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{MANIFEST_FILENAME}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.chmod(tmp_name, _default_file_mode())
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PublishError(str(target), e) from e

        logger.info("Wrote manifest with %d assets to %s", len(manifest.assets), target)
        return target


def create_asset_publisher(
    public_dir: str = DEFAULT_PUBLIC_DIR,
    output_root: str | Path = ".",
    *,
    max_workers: int = 8,
) -> AssetPublisher:
    """Factory function to create an asset publisher."""
    return AssetPublisher(public_dir, output_root, max_workers=max_workers)
