"""
Pillow image optimizer tests.

Real images are generated with Pillow in a temporary directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from docassets.adapters.image import PillowImageOptimizer, can_encode
from docassets.components.processor import AssetProcessor, ProcessOptions
from docassets.core.entities import AssetReference, AssetType, ImageDimensions, ProcessedAsset
from docassets.core.ports import FormatOptions, ModernFormatOptions, ResponsiveVariantOptions

NO_AVIF = ModernFormatOptions(avif=FormatOptions(enabled=False))


@pytest.fixture
def optimizer(tmp_path: Path) -> PillowImageOptimizer:
    return PillowImageOptimizer(tmp_path / "stage", "public/assets")


def process(path: Path, rel: str, optimizer: PillowImageOptimizer | None = None) -> ProcessedAsset:
    ref = AssetReference(
        source_path=str(path),
        relative_path=rel,
        locale="en",
        version="v1",
        type=AssetType.IMAGE,
    )
    options = ProcessOptions(generate_responsive_variants=False, generate_modern_formats=False)
    return AssetProcessor(optimizer=optimizer).process_asset(ref, options)


class TestDimensions:
    """Reading pixel sizes."""

    def test_png(self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image) -> None:
        path = make_image(tmp_path, "a.png", (120, 80))
        assert optimizer.get_image_dimensions(str(path)) == ImageDimensions(120, 80)

    def test_svg_raises(self, optimizer: PillowImageOptimizer, tmp_path: Path, make_file) -> None:
        path = make_file(tmp_path, "a.svg", b"<svg xmlns='http://www.w3.org/2000/svg'/>")
        with pytest.raises(ValueError):
            optimizer.get_image_dimensions(str(path))

    def test_processor_records_dimensions(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image
    ) -> None:
        path = make_image(tmp_path, "en/v1/assets/images/a.png", (64, 48))
        processed = process(path, "en/v1/assets/images/a.png", optimizer)
        assert processed.dimensions == ImageDimensions(64, 48)


class TestResponsiveVariants:
    """@2x master, @1x half size and width variants."""

    def test_retina_pair(self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image) -> None:
        path = make_image(tmp_path, "en/v1/assets/images/hero.png", (400, 200))
        asset = process(path, "en/v1/assets/images/hero.png")

        derivatives = optimizer.generate_responsive_variants(asset)
        by_variant = {d.variant: d for d in derivatives}

        assert list(by_variant) == ["@2x", "@1x"]
        assert by_variant["@2x"].dimensions == ImageDimensions(400, 200)
        assert by_variant["@1x"].dimensions == ImageDimensions(200, 100)
        for derivative in derivatives:
            staged = Path(derivative.source_path)
            assert staged.is_file()
            assert staged.stat().st_size == derivative.file_size
            assert derivative.public_path == (
                f"/public/assets/en/v1/images/{derivative.hashed_filename}"
            )
        with Image.open(by_variant["@1x"].source_path) as img:
            assert img.size == (200, 100)

    def test_hashed_variant_names(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image
    ) -> None:
        path = make_image(tmp_path, "hero.png", (100, 50))
        asset = process(path, "en/v1/assets/images/hero.png")

        names = [d.hashed_filename for d in optimizer.generate_responsive_variants(asset)]

        assert names[0].startswith("hero@2x.") and names[0].endswith(".png")
        assert names[1].startswith("hero@1x.") and names[1].endswith(".png")

    def test_width_variants_only_below_source(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image
    ) -> None:
        path = make_image(tmp_path, "wide.jpg", (800, 400), fmt="JPEG")
        asset = process(path, "en/v1/assets/images/wide.jpg")
        options = ResponsiveVariantOptions(generate_retina=False, sizes=(1600, 320, 640))

        derivatives = optimizer.generate_responsive_variants(asset, options)

        assert [d.variant for d in derivatives] == ["@320w", "@640w"]
        assert derivatives[0].dimensions == ImageDimensions(320, 160)

    def test_svg_and_gif_have_no_size_variants(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_file, make_image
    ) -> None:
        svg = make_file(tmp_path, "icon.svg", b"<svg/>")
        gif = make_image(tmp_path, "anim.gif", (40, 40), fmt="GIF")

        assert optimizer.generate_responsive_variants(process(svg, "en/v1/assets/icon.svg")) == []
        assert optimizer.generate_responsive_variants(process(gif, "en/v1/assets/anim.gif")) == []

    def test_deterministic_output(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image
    ) -> None:
        path = make_image(tmp_path, "same.png", (60, 60))
        asset = process(path, "en/v1/assets/images/same.png")

        first = [d.hashed_filename for d in optimizer.generate_responsive_variants(asset)]
        second = [d.hashed_filename for d in optimizer.generate_responsive_variants(asset)]

        assert first == second

    def test_scratch_staging_is_discarded(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image
    ) -> None:
        path = make_image(tmp_path, "hero.png", (40, 40))
        asset = process(path, "en/v1/assets/images/hero.png")

        with optimizer.scratch_staging() as scratch:
            derivatives = optimizer.generate_responsive_variants(asset)
            assert all(Path(d.source_path).parent.parent.parent == scratch for d in derivatives)

        assert not scratch.exists()
        assert optimizer.staging_dir == tmp_path / "stage"
        assert not (tmp_path / "stage").exists()


class TestModernFormats:
    """WebP/AVIF conversion."""

    @pytest.mark.skipif(not can_encode("WEBP"), reason="Pillow built without WebP")
    def test_webp(self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image) -> None:
        path = make_image(tmp_path, "photo.png", (50, 30))
        asset = process(path, "en/v1/assets/images/photo.png")

        derivatives = optimizer.convert_to_modern_formats(asset, NO_AVIF)

        assert [d.variant for d in derivatives] == ["webp"]
        assert derivatives[0].hashed_filename.endswith(".webp")
        with Image.open(derivatives[0].source_path) as img:
            assert img.format == "WEBP"
            assert img.size == (50, 30)

    @pytest.mark.skipif(not can_encode("WEBP"), reason="Pillow built without WebP")
    def test_jpeg_source(self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image) -> None:
        path = make_image(tmp_path, "photo.jpg", (50, 30), fmt="JPEG")
        asset = process(path, "en/v1/assets/images/photo.jpg")

        assert len(optimizer.convert_to_modern_formats(asset, NO_AVIF)) == 1

    def test_disabled_formats(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_image
    ) -> None:
        path = make_image(tmp_path, "photo.png", (50, 30))
        asset = process(path, "en/v1/assets/images/photo.png")
        options = ModernFormatOptions(
            webp=FormatOptions(enabled=False), avif=FormatOptions(enabled=False)
        )

        assert optimizer.convert_to_modern_formats(asset, options) == []

    def test_svg_is_never_converted(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_file
    ) -> None:
        path = make_file(tmp_path, "icon.svg", b"<svg/>")
        assert optimizer.convert_to_modern_formats(process(path, "en/v1/assets/icon.svg")) == []

    def test_non_image_rejected(
        self, optimizer: PillowImageOptimizer, tmp_path: Path, make_file
    ) -> None:
        path = make_file(tmp_path, "doc.pdf", b"%PDF")
        asset = process(path, "en/v1/assets/files/doc.pdf")
        asset.type = AssetType.BINARY

        with pytest.raises(ValueError):
            optimizer.convert_to_modern_formats(asset)


class TestProcessorIntegration:
    """Optimizer wired into the processor."""

    @pytest.mark.skipif(not can_encode("WEBP"), reason="Pillow built without WebP")
    def test_derivatives_attached(self, tmp_path: Path, make_image) -> None:
        optimizer = PillowImageOptimizer(tmp_path / "stage")
        path = make_image(tmp_path, "en/v1/assets/images/logo.png", (100, 100))
        ref = AssetReference(
            source_path=str(path),
            relative_path="en/v1/assets/images/logo.png",
            locale="en",
            version="v1",
            type=AssetType.IMAGE,
        )
        options = ProcessOptions(modern_formats=NO_AVIF)

        processed = AssetProcessor(optimizer=optimizer).process_asset(ref, options)

        assert [d.variant for d in processed.derivatives] == ["@2x", "@1x", "webp"]

    def test_corrupt_image_only_warns(
        self, tmp_path: Path, make_file, caplog: pytest.LogCaptureFixture
    ) -> None:
        optimizer = PillowImageOptimizer(tmp_path / "stage")
        path = make_file(tmp_path, "en/v1/assets/images/broken.png", b"\x89PNG\r\n\x1a\nxx")
        ref = AssetReference(
            source_path=str(path),
            relative_path="en/v1/assets/images/broken.png",
            locale="en",
            version="v1",
            type=AssetType.IMAGE,
        )

        with caplog.at_level("WARNING"):
            processed = AssetProcessor(optimizer=optimizer).process_asset(ref)

        assert processed.derivatives == []
        assert processed.dimensions is None
        assert "Failed to get dimensions" in caplog.text
