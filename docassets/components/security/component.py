"""
Security component - Validation of asset files before processing.

Provides file-type allow-listing, path sanitization, size limits and a
content scan over the leading bytes of each file.

Invariants:
- Only MIME types in the image or binary allow-list are accepted
- Files larger than max_file_size are rejected
- Executables, embedded scripts and injection markers are rejected
- An image must start with the signature of the format its extension claims
- Validation never raises for ordinary failures; strict path
  sanitization is the one check that raises (PathSecurityError)
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from docassets.core.entities import ValidationResult
from docassets.core.errors import PathSecurityError
from docassets.core.mime import get_extension, get_mime_type

from .models import DEFAULT_CONFIG, SecurityConfig

logger = logging.getLogger(__name__)

SCAN_BYTES = 1024
TEXT_SCAN_BYTES = 512

EXECUTABLE_SIGNATURES: tuple[bytes, ...] = (
    b"\x4d\x5a",  # PE/DOS (MZ)
    b"\x7fELF",
    b"\xfe\xed\xfa\xce",  # Mach-O 32-bit
    b"\xfe\xed\xfa\xcf",  # Mach-O 64-bit
    b"\xca\xfe\xba\xbe",  # Java class
)

SCRIPT_EXTENSIONS = frozenset({".js", ".ts", ".py", ".sh", ".bat", ".ps1"})

SCRIPT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<script[^>]*>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"\bon\w+\s*=", re.IGNORECASE),  # inline event handlers
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"document\.write", re.IGNORECASE),
    re.compile(r"window\.location", re.IGNORECASE),
    re.compile(r"\.innerHTML", re.IGNORECASE),
)

INJECTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\$\{.*\}"),
    re.compile(r"<\?php", re.IGNORECASE),
    re.compile(r"<%.*%>"),
    re.compile(r"\{\{.*\}\}"),
    re.compile(r"\bexec\s*\(", re.IGNORECASE),
    re.compile(r"\bsystem\s*\(", re.IGNORECASE),
    re.compile(r"\bshell_exec\s*\(", re.IGNORECASE),
    re.compile(r"\bpassthru\s*\(", re.IGNORECASE),
    re.compile(r"\bfile_get_contents\s*\(", re.IGNORECASE),
    re.compile(r"\bfopen\s*\(", re.IGNORECASE),
    re.compile(r"\binclude\s*\(", re.IGNORECASE),
    re.compile(r"\brequire\s*\(", re.IGNORECASE),
)

SENSITIVE_PATH_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^/etc(/|$)"),
    re.compile(r"^/proc(/|$)"),
    re.compile(r"^/sys(/|$)"),
    re.compile(r"^/dev(/|$)"),
    re.compile(r"^/var/log(/|$)"),
    re.compile(r"^/root(/|$)"),
    re.compile(r"^/home/[^/]+/\.[^/]+"),  # hidden files in user directories
)

IMAGE_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    ".jpg": (b"\xff\xd8\xff",),
    ".jpeg": (b"\xff\xd8\xff",),
    ".png": (b"\x89PNG\r\n\x1a\n",),
    ".gif": (b"GIF87a", b"GIF89a"),
    ".webp": (b"RIFF",),
}

SVG_PREFIXES = ("<?xml", "<svg")

_DRIVE_LETTER = re.compile(r"^[a-zA-Z]:")
_LEADING_SEPARATORS = re.compile(r"^(?:\./|/)+")


# --- Pure helpers ---


def has_executable_signature(content: bytes) -> bool:
    return any(content.startswith(signature) for signature in EXECUTABLE_SIGNATURES)


def has_script_content(content: bytes, extension: str) -> bool:
    """Script markers in a file that is not itself a script."""
    if extension in SCRIPT_EXTENSIONS:
        return False
    text = content[:TEXT_SCAN_BYTES].decode("utf-8", errors="ignore")
    return any(pattern.search(text) for pattern in SCRIPT_PATTERNS)


def has_injection_patterns(content: bytes) -> bool:
    text = content[:TEXT_SCAN_BYTES].decode("utf-8", errors="ignore")
    return any(pattern.search(text) for pattern in INJECTION_PATTERNS)


def has_valid_image_signature(content: bytes, extension: str) -> bool:
    """
    Check that image bytes match the format the extension claims.

    Extensions without a known signature (e.g. .avif) pass.
    """
    if extension == ".svg":
        head = content[:100].decode("utf-8", errors="ignore").strip().lower()
        return head.startswith(SVG_PREFIXES)

    signatures = IMAGE_SIGNATURES.get(extension)
    if signatures is None:
        return True

    if not any(content.startswith(signature) for signature in signatures):
        return False

    # RIFF is a generic container; WebP carries its own tag at offset 8
    if extension == ".webp":
        return content[8:12] == b"WEBP"
    return True


def _check_path_security(normalized: str, original: str) -> None:
    """Raise PathSecurityError on traversal or injection attempts."""
    if "\0" in original:
        raise PathSecurityError(original, "Null byte in path detected")

    if ".." in normalized.split("/"):
        raise PathSecurityError(original, "Path traversal attempt detected")

    if normalized.startswith("~"):
        raise PathSecurityError(original, "Home directory access attempt detected")

    for pattern in SENSITIVE_PATH_PATTERNS:
        if pattern.search(normalized):
            raise PathSecurityError(original, "Suspicious path pattern detected")


def _strip_dangerous_segments(normalized: str) -> str:
    cleaned = normalized.replace("\0", "")
    segments = [s for s in cleaned.split("/") if s != ".." and not s.startswith("~")]
    return "/".join(segments)


def sanitize_path(input_path: str, *, strict: bool = True) -> str:
    """
    Normalize a path and strip leading "./", "/" and drive letters.

    Strict mode raises PathSecurityError on "..", a leading "~", null bytes
    or a sensitive system directory. Lenient mode removes the dangerous
    segments and keeps going.

    ".." only counts as a whole segment left after normalization, so
    "file..v2.png" passes and "a/../b.png" collapses to "b.png". A caller
    that must refuse any ".." substring has to check for it itself.
    """
    unified = input_path.replace("\\", "/")
    normalized = posixpath.normpath(unified) if unified else ""
    if normalized == ".":
        normalized = ""

    if strict:
        _check_path_security(normalized, input_path)
    else:
        normalized = _strip_dangerous_segments(normalized)

    sanitized = _DRIVE_LETTER.sub("", normalized)
    return _LEADING_SEPARATORS.sub("", sanitized)


# --- Validator ---


class SecurityValidator:
    """
    Validates asset files.

    Paths under ``base_dir`` are sanitized relative to it, so an absolute
    checkout location never trips the system-directory patterns.
    """

    def __init__(
        self,
        config: SecurityConfig | None = None,
        *,
        base_dir: str | Path | None = None,
        max_workers: int = 8,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.base_dir = Path(base_dir).resolve() if base_dir is not None else None
        self.max_workers = max_workers

    def validate_file_type(self, file_path: str) -> bool:
        return get_mime_type(file_path) in self.config.allowed_types

    def sanitize_path(self, input_path: str, strict: bool | None = None) -> str:
        if strict is None:
            strict = self.config.strict_path_validation
        return sanitize_path(input_path, strict=strict)

    def check_file_size(self, file_path: str) -> bool:
        try:
            size = os.stat(file_path).st_size
        except OSError:
            return False
        return size <= self.config.max_file_size

    def scan_for_malicious_content(self, file_path: str) -> bool:
        """Return True when the first 1KB of the file looks safe."""
        if not self.config.enable_content_scanning:
            return True

        try:
            with open(file_path, "rb") as f:
                content = f.read(SCAN_BYTES)
        except OSError as e:
            # Unreadable content is treated as suspicious
            logger.warning("Could not read %s for content scan: %s", file_path, e)
            return False

        return self.analyze_content(content, file_path)

    def analyze_content(self, content: bytes, file_path: str) -> bool:
        extension = get_extension(file_path)

        if has_executable_signature(content):
            return False
        if has_script_content(content, extension):
            return False
        if has_injection_patterns(content):
            return False
        if get_mime_type(file_path) in self.config.allowed_image_types:
            return has_valid_image_signature(content, extension)
        return True

    def validate_asset(self, file_path: str) -> ValidationResult:
        """
        Run existence, type, size, path and content checks.

        Failures are collected in the result; nothing is raised.
        """
        result = ValidationResult()

        try:
            if not os.path.exists(file_path):
                result.add_error(f"File does not exist: {file_path}")
                return result

            if not self.validate_file_type(file_path):
                result.add_error(f"File type not allowed: {get_mime_type(file_path)}")

            if not self.check_file_size(file_path):
                size = os.stat(file_path).st_size
                result.add_error(
                    f"File size exceeds maximum allowed size "
                    f"({self.config.max_file_size} bytes): {size} bytes"
                )

            display_path = self._display_path(file_path)
            try:
                sanitized = self.sanitize_path(display_path)
            except PathSecurityError as e:
                result.add_error(f"Path validation failed: {e}")
            else:
                if sanitized != display_path:
                    result.warnings.append(
                        f"Path was sanitized from {display_path} to {sanitized}"
                    )
                    result.sanitized_path = sanitized

            if result.is_valid and not self.scan_for_malicious_content(file_path):
                result.add_error("File content appears to be malicious or suspicious")

        except OSError as e:
            result.add_error(f"Validation error: {e}")

        return result

    def validate_assets(self, file_paths: list[str]) -> dict[str, ValidationResult]:
        """Validate many paths in parallel; one path never affects another."""
        results: dict[str, ValidationResult] = {}
        if not file_paths:
            return results

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {path: pool.submit(self.validate_asset, path) for path in file_paths}
            for path, future in futures.items():
                try:
                    results[path] = future.result()
                except Exception as e:
                    logger.exception("Unexpected error validating %s", path)
                    failed = ValidationResult()
                    failed.add_error(f"Validation error: {e}")
                    results[path] = failed

        return results

    def _display_path(self, file_path: str) -> str:
        if self.base_dir is None:
            return file_path
        try:
            return Path(file_path).resolve().relative_to(self.base_dir).as_posix()
        except ValueError:
            return file_path


def create_security_validator(
    config: SecurityConfig | None = None,
    *,
    base_dir: str | Path | None = None,
    max_workers: int = 8,
) -> SecurityValidator:
    """Factory function to create a security validator."""
    return SecurityValidator(config, base_dir=base_dir, max_workers=max_workers)
