"""
Resolver component - Render-time lookup of published assets.

Maps a logical source path plus an AssetContext (locale, version) to a
published path using the manifest, falling back across versions and then
to the default locale.

Candidate order for resolve():
1. (ctx.locale, ctx.version)                      -> exact
2. (ctx.locale, v) for every other version        -> version
3. (default_locale, ctx.version)                  -> locale
4. (default_locale, v) for every version          -> locale

Invariants:
- Candidates are probed once each, in order; duplicates keep their first tier
- An entry is accepted only when its own locale and version equal the
  candidate's, never on key match alone
- Key shapes are probed in a fixed order and the first hit wins
- The manifest is never mutated; a miss returns None
"""

from __future__ import annotations

import logging
import re
import threading
from pathlib import Path

from docassets.components.manifest import load_manifest
from docassets.components.processor import DEFAULT_PUBLIC_DIR, generate_scoped_asset_path
from docassets.core.entities import (
    AssetContext,
    AssetManifest,
    AssetResolutionResult,
    ManifestEntry,
)
from docassets.core.mime import asset_type_from_path

from .models import (
    DEFAULT_LOCALE,
    DEFAULT_VERSION,
    SUPPORTED_LOCALES,
    AvailabilityEntry,
    Candidate,
    FallbackTier,
)

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"/v(\d+)")


# --- Pathname helpers ---


def normalize_src(src: str) -> str:
    return src[1:] if src.startswith("/") else src


def get_locale_from_pathname(
    pathname: str,
    *,
    supported_locales: tuple[str, ...] = SUPPORTED_LOCALES,
    default_locale: str = DEFAULT_LOCALE,
) -> str:
    """First path segment when it is a supported locale, else the default."""
    segments = pathname.split("/")
    candidate = segments[1] if len(segments) > 1 else ""
    return candidate if candidate in supported_locales else default_locale


def get_version_from_pathname(pathname: str) -> str:
    """First /v<digits> segment prefix in the path, else "v1"."""
    match = _VERSION_PATTERN.search(pathname)
    return f"v{match.group(1)}" if match else DEFAULT_VERSION


def get_asset_context_from_pathname(
    pathname: str,
    *,
    supported_locales: tuple[str, ...] = SUPPORTED_LOCALES,
    default_locale: str = DEFAULT_LOCALE,
) -> AssetContext:
    return AssetContext(
        locale=get_locale_from_pathname(
            pathname, supported_locales=supported_locales, default_locale=default_locale
        ),
        version=get_version_from_pathname(pathname),
    )


# --- Lookup ---


def candidate_keys(src: str, context: AssetContext) -> tuple[str, ...]:
    """Manifest keys probed for one context, in priority order."""
    prefix = f"{context.locale}/{context.version}/assets"
    return (
        f"{prefix}/{src}",
        f"{prefix}/images/{src}",
        f"{prefix}/files/{src}",
        src,
    )


def find_exact_entry(
    src: str, context: AssetContext, manifest: AssetManifest
) -> ManifestEntry | None:
    for key in candidate_keys(src, context):
        entry = manifest.assets.get(key)
        if (
            entry is not None
            and entry.locale == context.locale
            and entry.version == context.version
        ):
            return entry
    return None


def build_candidates(
    context: AssetContext,
    manifest: AssetManifest,
    *,
    default_locale: str = DEFAULT_LOCALE,
) -> list[Candidate]:
    """The ordered, de-duplicated list of contexts resolve() probes."""
    versions = sorted(manifest.versions)
    raw: list[Candidate] = [Candidate(context.locale, context.version, FallbackTier.EXACT)]
    raw.extend(
        Candidate(context.locale, v, FallbackTier.VERSION) for v in versions if v != context.version
    )
    if context.locale != default_locale:
        raw.append(Candidate(default_locale, context.version, FallbackTier.LOCALE))
    raw.extend(Candidate(default_locale, v, FallbackTier.LOCALE) for v in versions)

    seen: set[tuple[str, str]] = set()
    candidates: list[Candidate] = []
    for candidate in raw:
        key = (candidate.locale, candidate.version)
        if key in seen:
            continue
        seen.add(key)
        candidates.append(candidate)
    return candidates


def resolve(
    src: str,
    context: AssetContext,
    manifest: AssetManifest,
    *,
    default_locale: str = DEFAULT_LOCALE,
) -> AssetResolutionResult | None:
    """Resolve src with locale/version fallback; None when nothing matches."""
    normalized = normalize_src(src)

    for candidate in build_candidates(context, manifest, default_locale=default_locale):
        entry = find_exact_entry(normalized, candidate.context, manifest)
        if entry is None:
            continue
        if candidate.tier is FallbackTier.EXACT:
            return AssetResolutionResult(public_path=entry.public_path, entry=entry)
        logger.debug(
            "Resolved %s for %s/%s via %s fallback (%s/%s)",
            normalized,
            context.locale,
            context.version,
            candidate.tier.value,
            candidate.locale,
            candidate.version,
        )
        return AssetResolutionResult(
            public_path=entry.public_path,
            entry=entry,
            fallback_used=True,
            fallback_type=candidate.tier.value,
        )

    return None


def generate_direct_asset_path(
    src: str,
    context: AssetContext,
    public_dir: str = DEFAULT_PUBLIC_DIR,
) -> str:
    """Unhashed guess at the published path, used when the manifest has no entry."""
    filename = normalize_src(src).split("/")[-1] or "unknown"
    return generate_scoped_asset_path(
        public_dir, context.locale, context.version, asset_type_from_path(filename), filename
    )


def resolve_or_direct(
    src: str,
    context: AssetContext,
    manifest: AssetManifest | None,
    *,
    default_locale: str = DEFAULT_LOCALE,
    public_dir: str = DEFAULT_PUBLIC_DIR,
) -> AssetResolutionResult:
    """resolve(), degrading to the direct path guess on a miss."""
    if manifest is not None:
        result = resolve(src, context, manifest, default_locale=default_locale)
        if result is not None:
            return result

    logger.warning("Asset %s not found for %s/%s", src, context.locale, context.version)
    return AssetResolutionResult(
        public_path=generate_direct_asset_path(src, context, public_dir),
        entry=None,
        fallback_used=True,
        fallback_type=FallbackTier.DIRECT.value,
    )


# --- Diagnostics ---


def get_all_possible_contexts(manifest: AssetManifest) -> list[AssetContext]:
    return [
        AssetContext(locale=locale, version=version)
        for locale in manifest.locales
        for version in manifest.versions
    ]


def asset_exists_in_context(src: str, context: AssetContext, manifest: AssetManifest) -> bool:
    return find_exact_entry(normalize_src(src), context, manifest) is not None


def get_asset_availability(src: str, manifest: AssetManifest) -> list[AvailabilityEntry]:
    return [
        AvailabilityEntry(context=ctx, available=asset_exists_in_context(src, ctx, manifest))
        for ctx in get_all_possible_contexts(manifest)
    ]


# --- Manifest cache ---


class ManifestCache:
    """
    Caller-owned, lazily loaded manifest.

    The first get() reads the file; later calls return the same snapshot
    until invalidate(). A failed load is not cached, so the next get()
    retries.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._manifest: AssetManifest | None = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._manifest is not None

    def get(self) -> AssetManifest:
        """Return the cached manifest. Raises FileNotFoundError or ManifestError."""
        with self._lock:
            if self._manifest is None:
                self._manifest = load_manifest(self.path)
                logger.info("Loaded asset manifest from %s", self.path)
            return self._manifest

    def invalidate(self) -> None:
        with self._lock:
            self._manifest = None


# --- Resolver ---


class AssetResolver:
    """Binds locale configuration and a manifest cache for repeated lookups."""

    def __init__(
        self,
        cache: ManifestCache,
        *,
        default_locale: str = DEFAULT_LOCALE,
        supported_locales: tuple[str, ...] = SUPPORTED_LOCALES,
        public_dir: str = DEFAULT_PUBLIC_DIR,
    ) -> None:
        self.cache = cache
        self.default_locale = default_locale
        self.supported_locales = supported_locales
        self.public_dir = public_dir

    def context_from_pathname(self, pathname: str) -> AssetContext:
        return get_asset_context_from_pathname(
            pathname,
            supported_locales=self.supported_locales,
            default_locale=self.default_locale,
        )

    def resolve(self, src: str, context: AssetContext) -> AssetResolutionResult | None:
        return resolve(src, context, self.cache.get(), default_locale=self.default_locale)

    def resolve_or_direct(self, src: str, context: AssetContext) -> AssetResolutionResult:
        return resolve_or_direct(
            src,
            context,
            self.cache.get(),
            default_locale=self.default_locale,
            public_dir=self.public_dir,
        )

    def availability(self, src: str) -> list[AvailabilityEntry]:
        return get_asset_availability(src, self.cache.get())

    def contexts(self) -> list[AssetContext]:
        return get_all_possible_contexts(self.cache.get())


def create_asset_resolver(
    manifest_path: str | Path,
    *,
    default_locale: str = DEFAULT_LOCALE,
    supported_locales: tuple[str, ...] = SUPPORTED_LOCALES,
    public_dir: str = DEFAULT_PUBLIC_DIR,
) -> AssetResolver:
    """Factory function to create a resolver over a manifest file."""
    return AssetResolver(
        ManifestCache(manifest_path),
        default_locale=default_locale,
        supported_locales=supported_locales,
        public_dir=public_dir,
    )
