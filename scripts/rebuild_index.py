#!/usr/bin/env python3
"""
Rebuild the metadata index from the bucket contents.

Run:
    python scripts/rebuild_index.py \
      --bucket <BUCKET> \
      [--prefix 2024/] [--dry-run] [--limit 100]

Object storage is authoritative; existing records are overwritten.
Exits 1 if any object could not be indexed.
"""

import argparse
import sys

from aws_lambda_powertools import Logger

from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.services.reconciliation import ReconciliationService

logger = Logger(service="rebuild-index")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rebuild the image metadata index")

    parser.add_argument(
        "--bucket",
        default=None,
        help="Bucket name (defaults to IMAGE_S3_BUCKET_NAME)",
    )
    parser.add_argument(
        "--prefix",
        default="",
        help="Only index keys under this prefix",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build records without writing them",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of images to index",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        storage = S3ImageStorage(S3Adapter(bucket_name=args.bucket))
        service = ReconciliationService(storage=storage)

        logger.info(
            "Starting index rebuild",
            extra={"bucket": storage.bucket, "prefix": args.prefix, "dry_run": args.dry_run},
        )

        report = service.rebuild_index(args.prefix, dry_run=args.dry_run, limit=args.limit)

    except Exception as exc:
        logger.exception("Index rebuild failed", exc_info=exc)
        return 1

    for error in report.errors:
        logger.error("Rebuild error", extra={"error": error})

    logger.info(
        "Rebuild summary",
        extra={
            "scanned": report.scanned,
            "written": report.written,
            "failed": report.failed,
            "batch_calls": report.batch_calls,
        },
    )

    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
