from pathlib import Path

import pytest
from PIL import Image

from docassets.adapters.clock import FixedClock
from docassets.rules.models import AssetRules

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def write_file(root: Path, rel: str, content: bytes) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def write_image(root: Path, rel: str, size: tuple[int, int], fmt: str = "PNG") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = "RGB" if fmt == "JPEG" else "RGBA"
    Image.new(mode, size, (200, 40, 40) if mode == "RGB" else (200, 40, 40, 255)).save(
        path, format=fmt
    )
    return path


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def site(tmp_path: Path) -> dict[str, Path]:
    """Content, output and staging directories for one build."""
    paths = {
        "content": tmp_path / "content",
        "output": tmp_path / "site",
        "staging": tmp_path / "stage",
    }
    paths["content"].mkdir()
    return paths


@pytest.fixture
def rules(site: dict[str, Path]) -> AssetRules:
    """
    Rules pointing every path at the temporary site.

    Image optimization is off; tests that exercise Pillow opt in.
    """
    return AssetRules.model_validate(
        {
            "paths": {
                "content_dir": str(site["content"]),
                "output_root": str(site["output"]),
                "staging_dir": str(site["staging"]),
            },
            "optimization": {
                "generate_responsive_variants": False,
                "generate_modern_formats": False,
            },
            "concurrency": {"max_workers": 4},
        }
    )


@pytest.fixture
def make_file():
    return write_file


@pytest.fixture
def make_image():
    return write_image
