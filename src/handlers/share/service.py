"""Business logic for share links.

Resolution HEADs the shared image on every call, so a link to a deleted
image answers 404 even while its token is still valid.
"""

from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata, record_from_head
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import NotFoundError
from core.models.image import IndexRecord
from core.services.share_tokens import SHARE_NOT_FOUND_MESSAGE, ShareTokenService
from core.services.tag_registry import parse_tag_metadata
from core.utils.constants import (
    ERROR_CODE_SHARE_NOT_FOUND,
    PRESIGNED_URL_EXPIRATION,
    SHARE_URL_TEMPLATE,
)
from core.utils.keys import preview_key, thumbnail_key

from .models import CreateShareResponse, SharedImageResponse

logger = Logger(UTC=True)


class ShareService:
    def __init__(self) -> None:
        self.storage = S3ImageStorage()
        self.tokens = ShareTokenService()

    def create_share(
        self,
        image_key: str,
        expires_in_days: int | None,
        created_by: str | None,
    ) -> dict[str, Any]:
        """
        Raises:
            NotFoundError: If the image does not exist
            ShareTokenGenerationError: If no unique token could be minted
        """
        self.storage.head_image(key=image_key)

        record = self.tokens.create(
            image_key,
            expires_in_days=expires_in_days,
            created_by=created_by,
        )

        return CreateShareResponse(
            share_token=record.share_token,
            share_url=SHARE_URL_TEMPLATE.format(token=record.share_token),
            expires_at=record.expires_at,
        ).model_dump(by_alias=True)

    def resolve_share(self, token: str) -> dict[str, Any]:
        """
        Raises:
            NotFoundError: If the token is unknown or expired, or the image is gone
        """
        record = self.tokens.resolve(token)
        if record is None:
            raise NotFoundError(
                message=SHARE_NOT_FOUND_MESSAGE,
                error_code=ERROR_CODE_SHARE_NOT_FOUND,
            )

        key = record.image_key
        head = self.storage.head_image(key=key)
        indexed = self._indexed(key)

        tags = indexed.tags if indexed else parse_tag_metadata(head.get("Metadata") or {})
        summary = record_from_head(key, head, tags=tags)

        return SharedImageResponse(
            image_key=key,
            image_url=self._sign(key),
            thumbnail_url=self._sign_if_exists(thumbnail_key(key)),
            preview_url=self._sign_if_exists(preview_key(key)),
            name=summary.name,
            size=summary.size,
            last_modified=summary.last_modified,
            tags=summary.tags,
        ).model_dump(by_alias=True, exclude_none=True)

    def delete_share(self, token: str, caller_id: str | None) -> None:
        self.tokens.delete(token, caller_id)

    def _indexed(self, key: str) -> IndexRecord | None:
        try:
            return DynamoDBMetadata().get(key)
        except Exception as exc:  # noqa: BLE001
            logger.debug(
                "No index record, using object metadata",
                extra={"key": key, "error": str(exc)},
            )
            return None

    def _sign(self, key: str) -> str:
        return self.storage.generate_presigned_url(
            operation="get", key=key, expires_in=PRESIGNED_URL_EXPIRATION
        )

    def _sign_if_exists(self, key: str) -> str | None:
        return self._sign(key) if self.storage.exists(key=key) else None
