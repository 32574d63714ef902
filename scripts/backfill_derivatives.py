#!/usr/bin/env python3
"""
Generate missing thumbnails and previews for existing images.

Run:
    python scripts/backfill_derivatives.py \
      --bucket <BUCKET> \
      [--prefix 2024/] [--dry-run] [--limit 100]

Exits 1 if any image failed.
"""

import argparse
import sys

from aws_lambda_powertools import Logger

from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.services.reconciliation import ReconciliationService

logger = Logger(service="backfill-derivatives")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Backfill missing image derivatives")

    parser.add_argument(
        "--bucket",
        default=None,
        help="Bucket name (defaults to IMAGE_S3_BUCKET_NAME)",
    )
    parser.add_argument(
        "--prefix",
        default="",
        help="Only process keys under this prefix",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be generated without writing",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of images to consider",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        storage = S3ImageStorage(S3Adapter(bucket_name=args.bucket))
        service = ReconciliationService(storage=storage)

        logger.info(
            "Starting backfill",
            extra={"bucket": storage.bucket, "prefix": args.prefix, "dry_run": args.dry_run},
        )

        keys = service.list_image_keys(args.prefix, args.limit)
        report = service.backfill_derivatives(keys, dry_run=args.dry_run)

    except Exception as exc:
        logger.exception("Backfill failed", exc_info=exc)
        return 1

    for error in report.errors:
        logger.error("Backfill error", extra={"error": error})

    logger.info(
        "Backfill summary",
        extra={
            "to_process": report.to_process,
            "already_done": report.already_done,
            "succeeded": report.succeeded,
            "failed": report.failed,
        },
    )

    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
