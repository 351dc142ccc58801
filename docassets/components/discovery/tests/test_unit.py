"""
Discovery component unit tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from docassets.components.discovery import (
    discover_assets,
    get_available_locales_and_versions,
    scan_assets_directory,
)
from docassets.core.entities import AssetType


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    files = [
        "en/v1/assets/images/logo.png",
        "en/v1/assets/images/diagrams/flow.svg",
        "en/v1/assets/files/guide.pdf",
        "en/v1/assets/files/notes.md",
        "en/v2/assets/images/logo.png",
        "es/v1/assets/images/logo-es.jpg",
        "es/v1/index.mdx",
    ]
    for rel in files:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"data")
    (root / "pt" / "v1").mkdir(parents=True)
    (root / ".git" / "objects").mkdir(parents=True)
    return root


class TestLocalesAndVersions:
    """Directory listing of the content root."""

    def test_lists_sorted_locales_and_versions(self, content_dir: Path) -> None:
        locales, versions = get_available_locales_and_versions(content_dir)

        assert locales == ["en", "es", "pt"]
        assert versions == ["v1", "v2"]

    def test_missing_root(self, tmp_path: Path) -> None:
        assert get_available_locales_and_versions(tmp_path / "nope") == ([], [])


class TestScanAssetsDirectory:
    """Walking a single assets directory."""

    def test_classifies_and_filters(self, content_dir: Path) -> None:
        assets = scan_assets_directory(
            content_dir / "en" / "v1" / "assets", content_dir, "en", "v1"
        )
        by_path = {a.relative_path: a for a in assets}

        assert set(by_path) == {
            "en/v1/assets/images/logo.png",
            "en/v1/assets/images/diagrams/flow.svg",
            "en/v1/assets/files/guide.pdf",
        }
        assert by_path["en/v1/assets/images/logo.png"].type is AssetType.IMAGE
        assert by_path["en/v1/assets/files/guide.pdf"].type is AssetType.BINARY

    def test_records_context(self, content_dir: Path) -> None:
        assets = scan_assets_directory(
            content_dir / "es" / "v1" / "assets", content_dir, "es", "v1"
        )

        assert len(assets) == 1
        assert assets[0].locale == "es"
        assert assets[0].version == "v1"
        assert Path(assets[0].source_path).is_file()


class TestDiscoverAssets:
    """Whole-tree discovery."""

    def test_finds_every_supported_asset(self, content_dir: Path) -> None:
        assets = discover_assets(content_dir)

        assert [a.relative_path for a in assets] == [
            "en/v1/assets/files/guide.pdf",
            "en/v1/assets/images/diagrams/flow.svg",
            "en/v1/assets/images/logo.png",
            "en/v2/assets/images/logo.png",
            "es/v1/assets/images/logo-es.jpg",
        ]

    def test_order_is_independent_of_worker_count(self, content_dir: Path) -> None:
        single = discover_assets(content_dir, max_workers=1)
        many = discover_assets(content_dir, max_workers=8)

        assert [a.relative_path for a in single] == [a.relative_path for a in many]

    def test_skips_locale_without_assets_dir(self, content_dir: Path) -> None:
        assets = discover_assets(content_dir)

        assert all(a.locale != "pt" for a in assets)

    def test_empty_content_dir(self, tmp_path: Path) -> None:
        assert discover_assets(tmp_path) == []
