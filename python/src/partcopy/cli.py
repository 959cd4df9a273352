"""CLI entry point for partcopy."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from partcopy import metrics
from partcopy.config import PartCopyConfig, load_config
from partcopy.coordinator import MultipartCopier, resolve_object_size
from partcopy.errors import CopyError
from partcopy.logging_config import configure_logging
from partcopy.models import CopyRequest, DestinationOptions, ObjectLocation
from partcopy.storage import create_storage_service

logger = logging.getLogger("partcopy")


def _metadata_pair(value: str) -> tuple[str, str]:
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key, val


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="partcopy",
        description="partcopy - server-side multipart copy of large S3 objects",
    )
    parser.add_argument("source_bucket", help="Bucket holding the object to copy")
    parser.add_argument("source_key", help="Key of the object to copy")
    parser.add_argument("destination_bucket", help="Bucket to copy into")
    parser.add_argument("destination_key", help="Key of the new object")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: built-in defaults)",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=None,
        help="Source object size in bytes (default: looked up with a HEAD request)",
    )
    parser.add_argument(
        "--part-size",
        type=int,
        default=None,
        help="Part size in bytes (overrides config)",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum part copies in flight, 0 for unbounded (overrides config)",
    )
    parser.add_argument("--acl", type=str, default=None, help="Canned ACL for the new object")
    parser.add_argument("--content-type", type=str, default=None)
    parser.add_argument("--cache-control", type=str, default=None)
    parser.add_argument("--storage-class", type=str, default=None)
    parser.add_argument(
        "--sse",
        type=str,
        default=None,
        help="Server-side encryption algorithm (e.g. AES256, aws:kms)",
    )
    parser.add_argument(
        "--metadata",
        type=_metadata_pair,
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="User metadata for the new object (repeatable)",
    )
    parser.add_argument(
        "--request-id",
        type=str,
        default=None,
        help="Request id attached to every log record",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config, default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["text", "json"],
        help="Log format: 'text' (human-readable) or 'json' (structured)",
    )
    return parser.parse_args(argv)


def build_request(args: argparse.Namespace, object_size: int) -> CopyRequest:
    """Build the copy request described by the parsed arguments."""
    options = DestinationOptions(
        acl=args.acl,
        content_type=args.content_type,
        cache_control=args.cache_control,
        storage_class=args.storage_class,
        server_side_encryption=args.sse,
        metadata=dict(args.metadata) if args.metadata else None,
    )
    return CopyRequest(
        source=ObjectLocation(args.source_bucket, args.source_key),
        destination=ObjectLocation(args.destination_bucket, args.destination_key),
        object_size=object_size,
        part_size=args.part_size,
        options=options,
    )


async def run_copy(config: PartCopyConfig, args: argparse.Namespace) -> dict[str, Any]:
    """Open the storage service, run one copy, and close the service."""
    service = create_storage_service(config.client)
    await service.init()
    try:
        size = args.size
        if size is None:
            size = await resolve_object_size(
                service, ObjectLocation(args.source_bucket, args.source_key)
            )
        copier = MultipartCopier(service, config.copy_settings)
        return await copier.copy(build_request(args, size), request_context=args.request_id)
    finally:
        await service.close()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the partcopy CLI.

    Loads configuration, applies CLI overrides, runs the copy and prints
    the completion response as JSON on stdout. Exits with status 1 when
    the copy fails.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].
    """
    args = parse_args(argv)

    # Use a basic stderr logger for config-loading errors
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    if args.config is None:
        config = PartCopyConfig()
    else:
        try:
            config = load_config(args.config)
        except FileNotFoundError:
            logger.error("Config file not found: %s", args.config)
            sys.exit(1)
        except Exception as exc:
            logger.error("Failed to load config: %s", exc)
            sys.exit(1)

    # Apply CLI overrides
    if args.log_level is not None:
        config.logging.level = args.log_level
    if args.log_format is not None:
        config.logging.format = args.log_format
    if args.max_concurrency is not None:
        try:
            config.copy_settings.max_concurrency = args.max_concurrency
        except ValidationError as exc:
            logger.error("Invalid --max-concurrency: %s", exc)
            sys.exit(1)

    configure_logging(level=config.logging.level, fmt=config.logging.format)
    if config.observability.metrics:
        metrics.init_metrics()

    try:
        response = asyncio.run(run_copy(config, args))
    except CopyError as exc:
        logger.error("Copy failed [%s]: %s", exc.code, exc.message)
        sys.exit(1)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    except (ClientError, BotoCoreError) as exc:
        logger.error("Copy failed: %s", exc)
        sys.exit(1)
    finally:
        if config.observability.metrics and config.observability.pushgateway_url:
            metrics.push_metrics(config.observability.pushgateway_url)

    print(json.dumps(response, default=str))


if __name__ == "__main__":
    main()
