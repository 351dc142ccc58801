import argparse
import dataclasses
import logging
import sys

from docassets.app_shell.context import AppContext
from docassets.components.pipeline import BuildOptions
from docassets.components.processor import ProcessOptions
from docassets.core.entities import AssetContext
from docassets.core.errors import AssetError, BatchError, PublishError, SecurityValidationError
from docassets.rules.loader import resolve_rules
from docassets.rules.models import AssetRules

logger = logging.getLogger("cli")


def apply_path_overrides(rules: AssetRules, args: argparse.Namespace) -> AssetRules:
    updates = {
        key: value
        for key, value in (
            ("content_dir", getattr(args, "content_dir", None)),
            ("public_dir", getattr(args, "public_dir", None)),
            ("output_root", getattr(args, "output_root", None)),
        )
        if value is not None
    }
    if not updates:
        return rules
    paths = rules.paths.model_validate({**rules.paths.model_dump(), **updates})
    return rules.model_copy(update={"paths": paths})


def get_context(args: argparse.Namespace) -> AppContext:
    try:
        rules = resolve_rules(args.rules)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)

    rules = apply_path_overrides(rules, args)
    optimize = not (
        getattr(args, "skip_responsive", False) and getattr(args, "skip_modern_formats", False)
    )
    return AppContext.create(rules, optimize=optimize)


def handle_process(ctx: AppContext, args: argparse.Namespace) -> None:
    process = ProcessOptions.from_rules(ctx.rules.optimization)
    if args.skip_responsive:
        process = dataclasses.replace(process, generate_responsive_variants=False)
    if args.skip_modern_formats:
        process = dataclasses.replace(process, generate_modern_formats=False)

    options = BuildOptions(dry_run=args.dry_run, skip_security=args.skip_security, process=process)

    try:
        report = ctx.pipeline.run(options)
    except SecurityValidationError as e:
        for path, result in e.invalid.items():
            print(f"  {path}:", file=sys.stderr)
            for error in result.errors:
                print(f"    - {error}", file=sys.stderr)
        logger.error("%s", e)
        sys.exit(1)
    except BatchError as e:
        for path, error in e.failures.items():
            print(f"  {path}: {error}", file=sys.stderr)
        logger.error("%s", e)
        sys.exit(1)
    except PublishError as e:
        for failure in e.failures:
            print(f"  {failure}", file=sys.stderr)
        logger.error("%s", e)
        sys.exit(1)
    except AssetError as e:
        logger.error("%s", e)
        sys.exit(1)

    print(f"Found {report.discovered} assets across {len(report.locales)} locales")
    for asset_type, count in sorted(report.assets_by_type.items()):
        print(f"  {asset_type}: {count}")
    print(f"Processed {len(report.processed)} assets")
    if report.derivative_count:
        print(f"Generated {report.derivative_count} optimized variants")
    if report.dry_run:
        print("Dry run: no files written")
    else:
        print(f"Published {report.published_files} files")
        print(f"Manifest: {report.manifest_path}")


def load_manifest_or_exit(ctx: AppContext) -> None:
    try:
        ctx.resolver.cache.get()
    except (FileNotFoundError, AssetError) as e:
        logger.error("Cannot load manifest %s: %s", ctx.manifest_path, e)
        sys.exit(1)


def handle_resolve(ctx: AppContext, args: argparse.Namespace) -> None:
    if args.pathname:
        context = ctx.resolver.context_from_pathname(args.pathname)
    else:
        context = AssetContext(
            locale=args.locale or ctx.rules.locales.default,
            version=args.version or "v1",
        )

    load_manifest_or_exit(ctx)
    result = ctx.resolver.resolve_or_direct(args.src, context)

    print(result.public_path)
    if result.fallback_used:
        print(f"  fallback: {result.fallback_type}")
    if result.entry is not None:
        print(f"  from: {result.entry.locale}/{result.entry.version}")


def handle_audit(ctx: AppContext, args: argparse.Namespace) -> None:
    load_manifest_or_exit(ctx)
    availability = ctx.resolver.availability(args.src)
    if not availability:
        print("Manifest has no contexts")
        return
    for item in availability:
        mark = "yes" if item.available else "no"
        print(f"{item.context.locale}/{item.context.version}: {mark}")


def handle_contexts(ctx: AppContext, args: argparse.Namespace) -> None:
    load_manifest_or_exit(ctx)
    for context in ctx.resolver.contexts():
        print(f"{context.locale}/{context.version}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Documentation asset processor")
    parser.add_argument(
        "--rules", help="Path to rules.yaml (default: $DOCASSETS_RULES or ./rules.yaml)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # process
    process_parser = subparsers.add_parser("process", help="Build and publish assets")
    process_parser.add_argument("--content-dir", help="Content root directory")
    process_parser.add_argument("--public-dir", help="Public assets directory")
    process_parser.add_argument("--output-root", help="Directory public paths are written under")
    process_parser.add_argument(
        "--skip-security", action="store_true", help="Skip security validation"
    )
    process_parser.add_argument(
        "--skip-responsive", action="store_true", help="Do not generate responsive variants"
    )
    process_parser.add_argument(
        "--skip-modern-formats", action="store_true", help="Do not generate WebP/AVIF variants"
    )
    process_parser.add_argument(
        "--dry-run", action="store_true", help="Process without writing files"
    )

    # resolve
    resolve_parser = subparsers.add_parser("resolve", help="Resolve an asset reference")
    resolve_parser.add_argument("src", help="Asset path as referenced from content")
    resolve_parser.add_argument("--locale", help="Locale of the rendering page")
    resolve_parser.add_argument("--version", help="Docs version of the rendering page")
    resolve_parser.add_argument("--pathname", help="Derive locale and version from a page URL")

    # audit
    audit_parser = subparsers.add_parser("audit", help="Show where an asset is available")
    audit_parser.add_argument("src", help="Asset path as referenced from content")

    # contexts
    subparsers.add_parser("contexts", help="List locale/version pairs in the manifest")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    ctx = get_context(args)

    if args.command == "process":
        handle_process(ctx, args)
    elif args.command == "resolve":
        handle_resolve(ctx, args)
    elif args.command == "audit":
        handle_audit(ctx, args)
    elif args.command == "contexts":
        handle_contexts(ctx, args)


if __name__ == "__main__":
    main()
