"""Build and write metadata index records from object storage state.

Object storage is the source of truth. Façade writes to the index go
through ``refresh_index_record`` / ``remove_index_record``, which log and
swallow index failures so a successful storage write is never reported
as failed.
"""

from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_metadata import record_from_head
from core.models.image import IndexRecord
from core.repositories.metadata_repository import ImageMetadataRepository
from core.repositories.storage_repository import ImageStorageRepository
from core.services.tag_registry import parse_tag_metadata
from core.utils.keys import preview_key, thumbnail_key

logger = Logger(UTC=True)


def build_index_record(
    storage: ImageStorageRepository,
    key: str,
    head: dict[str, Any] | None = None,
) -> IndexRecord:
    """HEAD the original (unless given) and check both derivatives.

    Raises:
        NotFoundError: If the original does not exist
    """
    head = head if head is not None else storage.head_image(key=key)
    thumb = thumbnail_key(key)
    preview = preview_key(key)

    return record_from_head(
        key,
        head,
        tags=parse_tag_metadata(head.get("Metadata") or {}),
        thumbnail_key=thumb if storage.exists(key=thumb) else None,
        preview_key=preview if storage.exists(key=preview) else None,
    )


def refresh_index_record(
    storage: ImageStorageRepository,
    index: ImageMetadataRepository,
    key: str,
) -> bool:
    """Best-effort upsert of the record for ``key``. Returns False on failure."""
    try:
        index.upsert(build_index_record(storage, key))
        return True
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Index update failed, record may be stale",
            extra={"key": key, "error": str(exc), "error_type": type(exc).__name__},
        )
        return False


def remove_index_record(index: ImageMetadataRepository, key: str) -> bool:
    """Best-effort delete of the record for ``key``. Returns False on failure."""
    try:
        index.delete(key)
        return True
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Index delete failed, record may be stale",
            extra={"key": key, "error": str(exc), "error_type": type(exc).__name__},
        )
        return False
