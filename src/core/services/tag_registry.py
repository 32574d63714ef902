"""Image tags stored as a JSON array in S3 user metadata.

Tags live on the object itself. The metadata index mirrors them so that
folders can be sorted by tag count and counted without a bucket scan.
"""

import json
from collections import Counter
from collections.abc import Iterable
from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata, record_from_head
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import ValidationError
from core.models.image import TagCount
from core.repositories.metadata_repository import ImageMetadataRepository
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.concurrency import run_bounded
from core.utils.constants import (
    ERROR_CODE_INVALID_TAGS,
    LEGACY_TAGS_METADATA_KEY,
    TAG_MAX_LENGTH,
    TAGS_METADATA_KEY,
)
from core.utils.keys import is_derivative_key, is_folder_marker, validate_key

logger = Logger(UTC=True)


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Trim, lowercase, drop empty and dedupe keeping first occurrence."""
    seen: dict[str, None] = {}
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def validate_tags(value: Any) -> list[str]:
    """Check a client-supplied tag list and return the trimmed non-empty tags.

    Raises:
        ValidationError: If ``value`` is not a list of strings or a tag is
            longer than 50 characters.
    """
    if not isinstance(value, list):
        raise ValidationError(
            message="Tags must be an array",
            error_code=ERROR_CODE_INVALID_TAGS,
        )

    cleaned: list[str] = []
    for tag in value:
        if not isinstance(tag, str):
            raise ValidationError(
                message="Each tag must be a string",
                error_code=ERROR_CODE_INVALID_TAGS,
            )
        if len(tag) > TAG_MAX_LENGTH:
            raise ValidationError(
                message=f"Tag exceeds maximum length of {TAG_MAX_LENGTH} characters",
                error_code=ERROR_CODE_INVALID_TAGS,
                details={"tag": tag[:TAG_MAX_LENGTH]},
            )
        tag = tag.strip()
        if tag:
            cleaned.append(tag)

    return cleaned


def parse_tag_metadata(metadata: dict[str, str]) -> list[str]:
    """Read tags from S3 user metadata. Missing or invalid entries give ``[]``."""
    raw = metadata.get(TAGS_METADATA_KEY) or metadata.get(LEGACY_TAGS_METADATA_KEY)
    if not raw:
        return []

    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable tag metadata", extra={"raw": raw[:100]})
        return []

    if not isinstance(parsed, list):
        return []

    return normalize_tags(tag for tag in parsed if isinstance(tag, str))


def count_tags(tag_lists: Iterable[list[str]]) -> list[TagCount]:
    counts: Counter[str] = Counter()
    for tags in tag_lists:
        counts.update(tags)
    return [
        TagCount(tag=tag, count=count)
        for tag, count in sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
    ]


class TagRegistry:
    """Reads and writes image tags."""

    def __init__(
        self,
        storage: ImageStorageRepository | None = None,
        index: ImageMetadataRepository | None = None,
    ) -> None:
        self.storage = storage or S3ImageStorage()
        self._index = index

    @property
    def index(self) -> ImageMetadataRepository:
        # Built lazily so tag reads work without the index table configured.
        if self._index is None:
            self._index = DynamoDBMetadata()
        return self._index

    def get_tags(self, key: str) -> list[str]:
        """
        Raises:
            InvalidKeyError: If the key is unsafe
            NotFoundError: If the image does not exist
        """
        validate_key(key)
        head = self.storage.head_image(key=key)
        return parse_tag_metadata(head.get("Metadata") or {})

    def set_tags(self, key: str, tags: Any) -> list[str]:
        """Replace an image's tags, keeping its other metadata.

        Last writer wins. The index update afterwards is best-effort.

        Raises:
            InvalidKeyError: If the key is unsafe
            ValidationError: If the tags are invalid
            NotFoundError: If the image does not exist
        """
        validate_key(key)
        normalized = normalize_tags(validate_tags(tags))

        # Step 1: read existing metadata and content type
        head = self.storage.head_image(key=key)
        metadata = dict(head.get("Metadata") or {})
        metadata.pop(LEGACY_TAGS_METADATA_KEY, None)
        metadata[TAGS_METADATA_KEY] = json.dumps(normalized)

        # Step 2: copy in place, replacing metadata only
        self.storage.replace_metadata(
            key=key,
            metadata=metadata,
            content_type=head.get("ContentType"),
        )
        logger.info("Tags updated", extra={"key": key, "tag_count": len(normalized)})

        # Step 3: mirror into the index
        try:
            if not self.index.update_tags(key, normalized):
                self.index.upsert(record_from_head(key, head, tags=normalized))
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Index tag update failed, record may be stale",
                extra={"key": key, "error": str(exc)},
            )

        return normalized

    def get_all_tag_counts(self, source: str = "s3") -> list[TagCount]:
        """Count tags across every image.

        ``s3`` reads each object's metadata (exact, expensive). ``index``
        scans the metadata index (cheap, possibly stale).
        """
        if source == "index":
            return self.index.scan_tag_counts()

        if source != "s3":
            raise ValidationError(
                message="source must be 's3' or 'index'",
                details={"source": source},
            )

        keys = [
            obj["Key"]
            for obj in self.storage.iter_objects()
            if not is_folder_marker(obj["Key"]) and not is_derivative_key(obj["Key"])
        ]

        def _tags(key: str) -> list[str]:
            head = self.storage.head_image(key=key)
            return parse_tag_metadata(head.get("Metadata") or {})

        tag_lists: list[list[str]] = []
        for key, result in zip(keys, run_bounded(_tags, keys)):
            if isinstance(result, Exception):
                logger.warning(
                    "Skipping object in tag count",
                    extra={"key": key, "error": str(result)},
                )
                continue
            tag_lists.append(result)

        return count_tags(tag_lists)
