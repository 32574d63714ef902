"""Batch repair: backfill missing derivatives and rebuild the metadata index.

This is the documented repair path for drift between object storage and
the index. Both operations are safe to re-run.
"""

from dataclasses import dataclass, field

from aws_lambda_powertools import Logger

from core.derivatives.generator import DerivativeGenerator
from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.image import IndexRecord
from core.repositories.metadata_repository import ImageMetadataRepository
from core.repositories.storage_repository import ImageStorageRepository
from core.services.indexing import build_index_record
from core.utils.concurrency import run_bounded
from core.utils.keys import (
    is_derivative_key,
    is_folder_marker,
    is_image_key,
    preview_key,
    thumbnail_key,
)

logger = Logger(UTC=True)


@dataclass
class BackfillReport:
    to_process: int = 0
    already_done: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class RebuildReport:
    scanned: int = 0
    written: int = 0
    failed: int = 0
    batch_calls: int = 0
    errors: list[str] = field(default_factory=list)


class ReconciliationService:
    def __init__(
        self,
        storage: ImageStorageRepository | None = None,
        index: ImageMetadataRepository | None = None,
        generator: DerivativeGenerator | None = None,
    ) -> None:
        self.storage = storage or S3ImageStorage()
        self._index = index
        self.generator = generator or DerivativeGenerator(self.storage)

    @property
    def index(self) -> ImageMetadataRepository:
        if self._index is None:
            self._index = DynamoDBMetadata()
        return self._index

    def list_image_keys(self, prefix: str = "", limit: int | None = None) -> list[str]:
        """Every original image key under ``prefix``, in listing order."""
        keys: list[str] = []

        for obj in self.storage.iter_objects(prefix=prefix):
            key = obj["Key"]
            if is_folder_marker(key) or is_derivative_key(key) or not is_image_key(key):
                continue

            keys.append(key)
            if limit is not None and len(keys) >= limit:
                break

        logger.info("Image keys listed", extra={"prefix": prefix, "count": len(keys)})
        return keys

    def _has_all_derivatives(self, key: str) -> bool:
        return self.storage.exists(key=thumbnail_key(key)) and self.storage.exists(
            key=preview_key(key)
        )

    def backfill_derivatives(self, keys: list[str], dry_run: bool = False) -> BackfillReport:
        """Generate whatever derivatives are missing. A dry run only checks."""
        report = BackfillReport()

        present = run_bounded(self._has_all_derivatives, keys)
        pending: list[str] = []

        for key, done in zip(keys, present):
            if isinstance(done, Exception):
                report.failed += 1
                report.errors.append(f"{key}: {done}")
            elif done:
                report.already_done += 1
            else:
                pending.append(key)

        report.to_process = len(pending)
        logger.info(
            "Backfill plan",
            extra={
                "to_process": report.to_process,
                "already_done": report.already_done,
                "dry_run": dry_run,
            },
        )

        if dry_run:
            return report

        for key, results in zip(pending, run_bounded(self.generator.generate_all, pending)):
            if isinstance(results, Exception):
                report.failed += 1
                report.errors.append(f"{key}: {results}")
                continue

            failures = [r for r in results.values() if not r.success and not r.skipped]
            if failures:
                report.failed += 1
                report.errors.extend(
                    f"{key} ({r.kind.value}): {r.error}" for r in failures
                )
            else:
                report.succeeded += 1
                logger.debug("Derivatives backfilled", extra={"key": key})

        logger.info(
            "Backfill complete",
            extra={"succeeded": report.succeeded, "failed": report.failed},
        )
        return report

    def rebuild_index(
        self,
        prefix: str = "",
        dry_run: bool = False,
        limit: int | None = None,
    ) -> RebuildReport:
        """Write an index record for every original image under ``prefix``.

        Objects whose attributes cannot be read are counted as failed and
        left out. A dry run builds the records but writes nothing.
        """
        report = RebuildReport()
        keys = self.list_image_keys(prefix, limit)
        report.scanned = len(keys)

        records: list[IndexRecord] = []
        for key, result in zip(
            keys, run_bounded(lambda k: build_index_record(self.storage, k), keys)
        ):
            if isinstance(result, Exception):
                report.failed += 1
                report.errors.append(f"{key}: {result}")
                logger.warning("Skipping object in rebuild", extra={"key": key, "error": str(result)})
                continue
            records.append(result)

        if not dry_run and records:
            report.batch_calls = self.index.batch_upsert(records)

        report.written = 0 if dry_run else len(records)

        logger.info(
            "Index rebuild complete",
            extra={
                "scanned": report.scanned,
                "written": report.written,
                "failed": report.failed,
                "dry_run": dry_run,
            },
        )
        return report
