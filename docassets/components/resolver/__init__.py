"""
Resolver component - Context-aware asset resolution with fallback.
"""

from .component import (
    AssetResolver,
    ManifestCache,
    asset_exists_in_context,
    build_candidates,
    candidate_keys,
    create_asset_resolver,
    find_exact_entry,
    generate_direct_asset_path,
    get_all_possible_contexts,
    get_asset_availability,
    get_asset_context_from_pathname,
    get_locale_from_pathname,
    get_version_from_pathname,
    normalize_src,
    resolve,
    resolve_or_direct,
)
from .models import (
    DEFAULT_LOCALE,
    DEFAULT_VERSION,
    SUPPORTED_LOCALES,
    AvailabilityEntry,
    Candidate,
    FallbackTier,
)

__all__ = [
    # Resolution
    "resolve",
    "resolve_or_direct",
    "build_candidates",
    "candidate_keys",
    "find_exact_entry",
    "generate_direct_asset_path",
    "normalize_src",
    # Diagnostics
    "asset_exists_in_context",
    "get_all_possible_contexts",
    "get_asset_availability",
    # Pathname context
    "get_asset_context_from_pathname",
    "get_locale_from_pathname",
    "get_version_from_pathname",
    # Cache and resolver
    "AssetResolver",
    "ManifestCache",
    "create_asset_resolver",
    # Models
    "AvailabilityEntry",
    "Candidate",
    "FallbackTier",
    "DEFAULT_LOCALE",
    "DEFAULT_VERSION",
    "SUPPORTED_LOCALES",
]
