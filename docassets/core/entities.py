"""
Core entities for asset processing and resolution.

Build-time records (AssetReference, ProcessedAsset, AssetDerivative) live only
for the duration of one build. The manifest types (AssetManifest,
ManifestEntry) are the published contract consumed by the render layer; their
JSON shape is produced by ``docassets.components.manifest``.

Invariants:
- contentHash is the SHA-256 hex digest of the full file bytes
- hashedFilename is {basename}.{contentHash[0:8]}{ext}
- A manifest is never patched in place; a build replaces it wholesale
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AssetType(str, Enum):
    """Closed classification of discovered files."""

    IMAGE = "image"
    BINARY = "binary"
    UNKNOWN = "unknown"

    @property
    def public_dir(self) -> str:
        """Sub-directory name used in published paths."""
        return "images" if self is AssetType.IMAGE else "files"


@dataclass(frozen=True)
class ImageDimensions:
    """Pixel dimensions of an image."""

    width: int
    height: int


@dataclass
class AssetReference:
    """A file found under {content}/{locale}/{version}/assets/."""

    source_path: str
    relative_path: str  # relative to the content root, forward slashes
    locale: str
    version: str
    type: AssetType
    referenced_by: list[str] = field(default_factory=list)


@dataclass
class AssetDerivative:
    """Generated size or format variant of an image."""

    variant: str  # "@1x", "@2x", "@640w", "webp", "avif"
    public_path: str
    hashed_filename: str
    file_size: int
    dimensions: ImageDimensions | None = None
    # Staged bytes written by the optimizer; copied by the publisher, never serialized.
    source_path: str | None = None


@dataclass
class ProcessedAsset:
    """An AssetReference enriched with its content address."""

    source_path: str
    relative_path: str
    locale: str
    version: str
    type: AssetType
    public_path: str
    hashed_filename: str
    content_hash: str
    file_size: int
    mime_type: str
    last_modified: str
    referenced_by: list[str] = field(default_factory=list)
    dimensions: ImageDimensions | None = None
    derivatives: list[AssetDerivative] = field(default_factory=list)


@dataclass(frozen=True)
class AssetMetadata:
    """Bookkeeping attached to each manifest entry."""

    last_modified: str
    referenced_by: tuple[str, ...] = ()
    optimized: bool = False
    security_scanned: bool = False


@dataclass(frozen=True)
class ManifestEntry:
    """Published location and metadata of one asset."""

    public_path: str
    hashed_filename: str
    content_hash: str
    original_path: str
    file_size: int
    mime_type: str
    locale: str
    version: str
    metadata: AssetMetadata
    dimensions: ImageDimensions | None = None
    derivatives: dict[str, AssetDerivative] = field(default_factory=dict)


@dataclass(frozen=True)
class AssetManifest:
    """Versioned map of original relative path to published entry."""

    version: str
    generated_at: str
    assets: dict[str, ManifestEntry] = field(default_factory=dict)
    locales: list[str] = field(default_factory=list)
    versions: list[str] = field(default_factory=list)


@dataclass
class ValidationResult:
    """Aggregated outcome of the security checks for one path."""

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    sanitized_path: str | None = None

    def add_error(self, message: str) -> None:
        self.is_valid = False
        self.errors.append(message)


@dataclass(frozen=True)
class AssetContext:
    """Render-time lookup key."""

    locale: str
    version: str


@dataclass(frozen=True)
class AssetResolutionResult:
    """
    Outcome of a resolution.

    ``entry`` is None only for a "direct" result, i.e. the unhashed guess
    returned after every fallback tier missed.
    """

    public_path: str
    entry: ManifestEntry | None
    fallback_used: bool = False
    fallback_type: str | None = None  # "version" | "locale" | "direct"
