"""
Error hierarchy for the asset engine.

Validation failures are normally reported through ValidationResult; the
exceptions below cover the cases that abort an operation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docassets.core.entities import ValidationResult


class AssetError(Exception):
    """Base class for asset engine errors."""


class PathSecurityError(AssetError):
    """Raised by strict path sanitization on traversal or injection attempts."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path!r}")


class DiscoveryError(AssetError):
    """Raised when an assets directory exists but cannot be scanned."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to scan assets directory {path}: {cause}")


class ProcessingError(AssetError):
    """Raised when an asset cannot be read or hashed."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to process asset {path}: {cause}")


class PublishError(AssetError):
    """
    Raised when copying an asset or writing the manifest fails.

    A publish run that failed on several assets raises a single PublishError
    whose ``failures`` holds one PublishError per failed asset.
    """

    def __init__(
        self,
        path: str,
        cause: BaseException | None = None,
        *,
        failures: list[PublishError] | None = None,
    ) -> None:
        self.path = path
        self.cause = cause
        self.failures = failures or []
        if self.failures:
            message = f"Failed to publish {len(self.failures)} asset(s) to {path}"
        else:
            message = f"Failed to publish {path}: {cause}"
        super().__init__(message)


class ManifestError(AssetError):
    """Raised when a manifest file is missing fields or is not valid JSON."""


class BatchError(AssetError):
    """Per-item failures collected while running a stage over many assets."""

    def __init__(self, stage: str, failures: Mapping[str, AssetError]) -> None:
        self.stage = stage
        self.failures = dict(failures)
        super().__init__(f"{stage} failed for {len(self.failures)} asset(s)")


class SecurityValidationError(AssetError):
    """Raised by the build pipeline when assets fail security validation."""

    def __init__(self, invalid: Mapping[str, ValidationResult]) -> None:
        self.invalid = dict(invalid)
        super().__init__(f"Asset security validation failed for {len(self.invalid)} files")
