"""
Security component - Asset file validation.
"""

from .component import (
    EXECUTABLE_SIGNATURES,
    IMAGE_SIGNATURES,
    SecurityValidator,
    create_security_validator,
    has_executable_signature,
    has_injection_patterns,
    has_script_content,
    has_valid_image_signature,
    sanitize_path,
)
from .models import DEFAULT_CONFIG, SecurityConfig

__all__ = [
    # Validator
    "SecurityValidator",
    "create_security_validator",
    # Pure helpers
    "has_executable_signature",
    "has_injection_patterns",
    "has_script_content",
    "has_valid_image_signature",
    "sanitize_path",
    # Configuration
    "DEFAULT_CONFIG",
    "EXECUTABLE_SIGNATURES",
    "IMAGE_SIGNATURES",
    "SecurityConfig",
]
