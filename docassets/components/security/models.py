"""
Security component configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass

from docassets.core.mime import ALLOWED_BINARY_TYPES, ALLOWED_IMAGE_TYPES
from docassets.rules.models import MAX_FILE_SIZE, SecurityRules


@dataclass(frozen=True)
class SecurityConfig:
    """Validator configuration, built from SecurityRules or defaults."""

    max_file_size: int = MAX_FILE_SIZE
    allowed_image_types: tuple[str, ...] = ALLOWED_IMAGE_TYPES
    allowed_binary_types: tuple[str, ...] = ALLOWED_BINARY_TYPES
    enable_content_scanning: bool = True
    strict_path_validation: bool = True

    @property
    def allowed_types(self) -> tuple[str, ...]:
        return self.allowed_image_types + self.allowed_binary_types

    @classmethod
    def from_rules(cls, rules: SecurityRules | None) -> SecurityConfig:
        if rules is None:
            return cls()
        return cls(
            max_file_size=rules.max_file_size,
            allowed_image_types=tuple(rules.allowed_image_types),
            allowed_binary_types=tuple(rules.allowed_binary_types),
            enable_content_scanning=rules.enable_content_scanning,
            strict_path_validation=rules.strict_path_validation,
        )


DEFAULT_CONFIG = SecurityConfig()
