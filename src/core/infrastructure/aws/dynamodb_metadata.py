"""DynamoDB-backed implementation of ImageMetadataRepository."""

import time
from collections import Counter
from datetime import datetime
from typing import Any

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapter,
    DynamoDBAdapterProtocol,
)
from core.models.errors import DynamoDBError, ValidationError
from core.models.image import IndexRecord, TagCount
from core.models.pagination import decode_cursor, encode_cursor
from core.repositories.metadata_repository import ImageMetadataRepository
from core.utils.constants import (
    ALLOWED_SORT_ORDERS,
    BATCH_WRITE_SIZE,
    DEFAULT_LIMIT,
    ERROR_CODE_METADATA_BATCH_FAILED,
    ERROR_CODE_METADATA_DELETE_FAILED,
    ERROR_CODE_METADATA_FETCH_FAILED,
    ERROR_CODE_METADATA_QUERY_FAILED,
    ERROR_CODE_METADATA_SCAN_FAILED,
    ERROR_CODE_METADATA_UPSERT_FAILED,
    INDEX_ROOT_FOLDER,
    MAX_BATCH_RETRIES,
    MAX_LIMIT,
    MIN_LIMIT,
    SORT_INDEXES,
)
from core.utils.keys import folder_of, name_of
from core.utils.time import now_ms, to_epoch_ms

logger = Logger(UTC=True)

_AWS_ERRORS = (ClientError, BotoCoreError)

_BACKOFF_BASE_SECONDS = 0.05


def record_from_head(
    key: str,
    head: dict[str, Any],
    tags: list[str] | None = None,
    thumbnail_key: str | None = None,
    preview_key: str | None = None,
) -> IndexRecord:
    """Build an index record from an S3 HEAD (or listing) response."""
    last_modified = head.get("LastModified")
    if isinstance(last_modified, datetime):
        last_modified_ms = to_epoch_ms(last_modified)
    else:
        last_modified_ms = now_ms()

    size = head.get("ContentLength", head.get("Size", 0))

    return IndexRecord(
        key=key,
        name=name_of(key),
        size=int(size),
        last_modified=last_modified_ms,
        tags=list(tags or []),
        folder=folder_of(key),
        thumbnail_key=thumbnail_key,
        preview_key=preview_key,
    )


class DynamoDBMetadata(ImageMetadataRepository):
    """DynamoDB-backed metadata index with error handling.

    All boto3 errors are caught and translated into
    domain-specific errors with stable semantics.
    """

    def __init__(self, adapter: DynamoDBAdapterProtocol | None = None) -> None:
        """Initialize with DynamoDB adapter."""
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter()

    def upsert(self, record: IndexRecord) -> None:
        """Insert or replace a record, stamping ``updatedAt``."""
        logger.debug("Upserting index record", extra={"key": record.key})

        item = record.model_copy(update={"updated_at": now_ms()}).to_item()

        try:
            self._db.put_item(item=item)
            logger.info("Index record written", extra={"key": record.key})

        except _AWS_ERRORS as exc:
            logger.error("DynamoDB put_item failed", extra={"key": record.key})
            raise DynamoDBError(
                message="Unable to save image metadata at this time",
                error_code=ERROR_CODE_METADATA_UPSERT_FAILED,
                details={"key": record.key},
            ) from exc

    def get(self, key: str) -> IndexRecord | None:
        logger.debug("Fetching index record", extra={"key": key})

        try:
            response = self._db.get_item(key={"key": key})

        except _AWS_ERRORS as exc:
            logger.error("DynamoDB get_item failed", extra={"key": key})
            raise DynamoDBError(
                message="Unable to retrieve image metadata",
                error_code=ERROR_CODE_METADATA_FETCH_FAILED,
                details={"key": key},
            ) from exc

        item = response.get("Item")
        if item is None:
            return None

        return IndexRecord.model_validate(item)

    def delete(self, key: str) -> None:
        logger.debug("Removing index record", extra={"key": key})

        try:
            self._db.delete_item(key={"key": key})
            logger.info("Index record removed", extra={"key": key})

        except _AWS_ERRORS as exc:
            logger.error("DynamoDB delete_item failed", extra={"key": key})
            raise DynamoDBError(
                message="Unable to delete image metadata",
                error_code=ERROR_CODE_METADATA_DELETE_FAILED,
                details={"key": key},
            ) from exc

    def update_tags(self, key: str, tags: list[str]) -> bool:
        """Set tags on an existing record. Returns False when there is none."""
        try:
            self._db.update_item(
                Key={"key": key},
                UpdateExpression="SET #tags = :tags, #tagCount = :count, #updatedAt = :now",
                ConditionExpression="attribute_exists(#key)",
                ExpressionAttributeNames={
                    "#key": "key",
                    "#tags": "tags",
                    "#tagCount": "tagCount",
                    "#updatedAt": "updatedAt",
                },
                ExpressionAttributeValues={
                    ":tags": list(tags),
                    ":count": len(tags),
                    ":now": now_ms(),
                },
            )
            return True

        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return False

            logger.error("DynamoDB update_item failed", extra={"key": key})
            raise DynamoDBError(
                message="Unable to update image tags",
                error_code=ERROR_CODE_METADATA_UPSERT_FAILED,
                details={"key": key},
            ) from exc

        except BotoCoreError as exc:
            logger.error("DynamoDB update_item failed", extra={"key": key})
            raise DynamoDBError(
                message="Unable to update image tags",
                error_code=ERROR_CODE_METADATA_UPSERT_FAILED,
                details={"key": key},
            ) from exc

    def query(
        self,
        folder: str,
        sort_by: str = "date",
        order: str = "desc",
        limit: int = DEFAULT_LIMIT,
        cursor: str | None = None,
    ) -> tuple[list[IndexRecord], str | None]:
        """Query one folder through the GSI matching ``sort_by``.

        NOTE:
        - ``desc`` reverses the scan direction of the index.
        - A cursor only continues the same folder, sort field and order.
        """
        if sort_by not in SORT_INDEXES:
            raise ValidationError(
                message=f"sortBy must be one of: {', '.join(sorted(SORT_INDEXES))}",
                details={"sortBy": sort_by},
            )

        if order not in ALLOWED_SORT_ORDERS:
            raise ValidationError(
                message="order must be 'asc' or 'desc'",
                details={"order": order},
            )

        if limit < MIN_LIMIT or limit > MAX_LIMIT:
            raise ValidationError(
                message=f"Limit must be between {MIN_LIMIT} and {MAX_LIMIT}",
                details={"limit": limit},
            )

        index_name, _range_attribute = SORT_INDEXES[sort_by]

        query_kwargs: dict[str, Any] = {
            "IndexName": index_name,
            "KeyConditionExpression": Key("folder").eq(folder or INDEX_ROOT_FOLDER),
            "ScanIndexForward": order == "asc",
            "Limit": limit,
        }

        start_key = decode_cursor(cursor)
        if start_key:
            query_kwargs["ExclusiveStartKey"] = start_key

        logger.debug(
            "Querying index",
            extra={"folder": folder, "sort_by": sort_by, "order": order, "limit": limit},
        )

        try:
            response = self._db.query(**query_kwargs)

        except _AWS_ERRORS as exc:
            logger.error("DynamoDB query failed", extra={"folder": folder})
            raise DynamoDBError(
                message="Unable to query images",
                error_code=ERROR_CODE_METADATA_QUERY_FAILED,
                details={"folder": folder},
            ) from exc

        items = [IndexRecord.model_validate(item) for item in response.get("Items", [])]
        next_cursor = encode_cursor(response.get("LastEvaluatedKey"))

        logger.info(
            "Index queried",
            extra={"folder": folder, "count": len(items), "has_more": bool(next_cursor)},
        )

        return items, next_cursor

    def batch_upsert(self, records: list[IndexRecord]) -> int:
        """Write records in chunks of 25, one chunk at a time.

        Unprocessed items are resubmitted with exponential backoff up to
        ``MAX_BATCH_RETRIES`` times per chunk. Every ``batch_write_item``
        call, retries included, counts towards the returned total.

        Raises:
            DynamoDBError: If a chunk fails or keeps returning unprocessed items
        """
        calls = 0
        stamp = now_ms()

        for start in range(0, len(records), BATCH_WRITE_SIZE):
            chunk = records[start : start + BATCH_WRITE_SIZE]
            requests = [
                {"PutRequest": {"Item": r.model_copy(update={"updated_at": stamp}).to_item()}}
                for r in chunk
            ]

            attempt = 0
            while requests:
                try:
                    response = self._db.batch_write(requests=requests)
                except _AWS_ERRORS as exc:
                    logger.error("DynamoDB batch_write_item failed", extra={"chunk_start": start})
                    raise DynamoDBError(
                        message="Unable to write image metadata batch",
                        error_code=ERROR_CODE_METADATA_BATCH_FAILED,
                        details={"chunk_start": start},
                    ) from exc

                calls += 1
                requests = response.get("UnprocessedItems", {}).get(self._db.table_name, [])
                if not requests:
                    break

                if attempt >= MAX_BATCH_RETRIES:
                    raise DynamoDBError(
                        message="Unable to write image metadata batch",
                        error_code=ERROR_CODE_METADATA_BATCH_FAILED,
                        details={"chunk_start": start, "unprocessed": len(requests)},
                    )

                logger.warning(
                    "Resubmitting unprocessed items",
                    extra={"count": len(requests), "attempt": attempt + 1},
                )
                time.sleep(_BACKOFF_BASE_SECONDS * (2**attempt))
                attempt += 1

        logger.info("Batch upsert complete", extra={"records": len(records), "calls": calls})
        return calls

    def scan_tag_counts(self) -> list[TagCount]:
        """Projection-only scan over ``tags`` counting each tag."""
        counts: Counter[str] = Counter()
        scan_kwargs: dict[str, Any] = {
            "ProjectionExpression": "#tags",
            "ExpressionAttributeNames": {"#tags": "tags"},
        }

        try:
            while True:
                response = self._db.scan(**scan_kwargs)
                for item in response.get("Items", []):
                    counts.update(item.get("tags") or [])

                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key

        except _AWS_ERRORS as exc:
            logger.error("DynamoDB scan failed")
            raise DynamoDBError(
                message="Unable to count tags",
                error_code=ERROR_CODE_METADATA_SCAN_FAILED,
            ) from exc

        return [
            TagCount(tag=tag, count=count)
            for tag, count in sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
        ]
