"""Main module for the image migrator CLI."""

import sys
import argparse
from typing import List, Optional

from . import __version__
from .core import (
    ConfigurationError,
    ImageMigratorError,
    ListingError,
    MigrationConfig,
    get_logger,
    setup_logger,
)
from .core.cdn_urls import TRANSFORMATIONS, build_delivery_url
from .core.factories import LoggerFactory, MigrationPipelineFactory
from .core.settings import load_settings, validate_settings

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-migrator",
        description="Move product images from inline base64 or remote storage to Cloudinary",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Migrate inline base64 images, 5 per batch
  image-migrator migrate

  # See how many images are still inline before migrating
  image-migrator analyze

  # Migrate images hosted elsewhere, fetching one record at a time
  image-migrator migrate --mode remote --strategy per-record

  # Delivery URL of an uploaded asset
  image-migrator url products/product-42 --size thumbnail
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    migrate_parser = subparsers.add_parser(
        "migrate", help="Upload images to Cloudinary and rewrite the image column"
    )
    migrate_parser.add_argument(
        "--mode",
        choices=["inline", "remote"],
        default="inline",
        help="'inline' migrates base64 payloads, 'remote' also downloads image URLs",
    )
    migrate_parser.add_argument(
        "--strategy",
        choices=["bulk", "per-record"],
        default="bulk",
        help="List full records at once, or ids first and each image separately",
    )
    migrate_parser.add_argument("--batch-size", type=int, help="Records per batch")
    migrate_parser.add_argument(
        "--batch-delay", type=float, help="Seconds to wait between batches"
    )
    migrate_parser.add_argument(
        "--record-delay", type=float, help="Seconds to wait after each migrated record"
    )
    migrate_parser.add_argument("--limit", type=int, help="Maximum records to list")
    migrate_parser.add_argument("--env-file", help="Path to a .env file")
    migrate_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    analyze_parser = subparsers.add_parser(
        "analyze", help="Count inline, hosted and external images without changing anything"
    )
    analyze_parser.add_argument(
        "--limit", type=int, default=100, help="Records to sample (0 for the whole table)"
    )
    analyze_parser.add_argument("--env-file", help="Path to a .env file")
    analyze_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    url_parser = subparsers.add_parser("url", help="Print the delivery URL of an asset")
    url_parser.add_argument("public_id", help="Public id, e.g. products/product-42")
    url_parser.add_argument(
        "--size", choices=sorted(TRANSFORMATIONS), default="card", help="Named transformation"
    )
    url_parser.add_argument("--cloud-name", help="Overrides CLOUDINARY_CLOUD_NAME")
    url_parser.add_argument("--env-file", help="Path to a .env file")

    subparsers.add_parser("version", help="Show version information")
    return parser


def run_migration(args: argparse.Namespace) -> int:
    """Run the migrate command and return the process exit code."""
    level = "DEBUG" if args.debug else None
    logger = setup_logger(level=level)

    try:
        config = MigrationConfig.for_mode(
            args.mode,
            args.strategy,
            batch_size=args.batch_size,
            batch_delay=args.batch_delay,
            record_delay=args.record_delay,
            limit=args.limit,
        )
    except ValueError as exc:
        logger.error(f"Invalid options: {exc}")
        return EXIT_FATAL

    try:
        settings = load_settings(env_file=args.env_file, migration=config)
        # Fail before any client is built or any record is read
        validate_settings(settings)
        pipeline = MigrationPipelineFactory.create_pipeline(
            settings, logger=LoggerFactory.create_logger(level=level)
        )
        try:
            pipeline.run()
        finally:
            pipeline.close()
    except ConfigurationError as exc:
        logger.error(f"Configuration error: {exc}")
        return EXIT_FATAL
    except ListingError as exc:
        logger.error(f"Could not list records: {exc}")
        return EXIT_FATAL
    except ImageMigratorError as exc:
        logger.error(f"Migration failed: {exc}", exc_info=True)
        return EXIT_FATAL

    return EXIT_OK


def run_analysis(args: argparse.Namespace) -> int:
    """Run the analyze command; needs only the record store credentials."""
    level = "DEBUG" if args.debug else None
    logger = setup_logger(level=level)

    try:
        settings = load_settings(env_file=args.env_file)
        if not settings.store.is_configured:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set")
        analyzer = MigrationPipelineFactory.create_analyzer(
            settings, logger=LoggerFactory.create_logger(level=level)
        )
        try:
            analyzer.run(limit=args.limit or None)
        finally:
            analyzer.close()
    except ConfigurationError as exc:
        logger.error(f"Configuration error: {exc}")
        return EXIT_FATAL
    except ImageMigratorError as exc:
        logger.error(f"Analysis failed: {exc}")
        return EXIT_FATAL

    return EXIT_OK


def print_url(args: argparse.Namespace) -> int:
    cloud_name = args.cloud_name
    if not cloud_name:
        try:
            settings = load_settings(env_file=args.env_file)
        except ConfigurationError as exc:
            get_logger().error(str(exc))
            return EXIT_FATAL
        cloud_name = settings.cloudinary.cloud_name
    print(build_delivery_url(cloud_name, args.public_id, args.size))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the ``image-migrator`` command.

    Exits 0 when a migration completes, even if some records failed, and
    non-zero when the run could not start or list its records.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in ("migrate", "analyze"):
        command = run_migration if args.command == "migrate" else run_analysis
        try:
            code = command(args)
        except KeyboardInterrupt:
            get_logger().warning("Interrupted by user.")
            code = EXIT_INTERRUPTED
        except Exception as exc:
            get_logger().error(f"Fatal unexpected error: {exc}", exc_info=True)
            code = EXIT_FATAL
        sys.exit(code)

    elif args.command == "url":
        sys.exit(print_url(args))

    elif args.command == "version":
        print("Image Migrator CLI")
        print(f"Version {__version__}")
        sys.exit(EXIT_OK)

    else:
        parser.print_help()
        sys.exit(EXIT_FATAL)


if __name__ == "__main__":
    main()
