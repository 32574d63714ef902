"""Business logic for sorted folder queries against the metadata index."""

from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.image import ImageSummary, IndexRecord
from core.utils.constants import PRESIGNED_URL_EXPIRATION

logger = Logger(UTC=True)


class QueryService:
    def __init__(self) -> None:
        self.storage = S3ImageStorage()
        self.index = DynamoDBMetadata()

    def _sign(self, key: str | None) -> str | None:
        if not key:
            return None
        return self.storage.generate_presigned_url(
            operation="get", key=key, expires_in=PRESIGNED_URL_EXPIRATION
        )

    def _summary(self, record: IndexRecord) -> dict[str, Any]:
        return ImageSummary(
            key=record.key,
            name=record.name,
            size=record.size,
            last_modified=record.last_modified,
            url=self._sign(record.key) or "",
            thumbnail_url=self._sign(record.thumbnail_key),
            preview_url=self._sign(record.preview_key),
            tags=record.tags,
            folder=record.folder,
        ).to_response()

    def query_images(
        self,
        *,
        folder: str,
        sort_by: str,
        order: str,
        limit: int,
        cursor: str | None,
    ) -> dict[str, Any]:
        records, next_cursor = self.index.query(
            folder,
            sort_by=sort_by,
            order=order,
            limit=limit,
            cursor=cursor,
        )

        return {
            "images": [self._summary(record) for record in records],
            "nextCursor": next_cursor,
        }
