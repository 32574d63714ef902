"""Business logic for listing a bucket page with URLs and tags."""

from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.image import ImageSummary
from core.services.tag_registry import parse_tag_metadata
from core.utils.concurrency import run_bounded
from core.utils.constants import PRESIGNED_URL_EXPIRATION
from core.utils.keys import is_derivative_key, is_folder_marker, name_of, thumbnail_key
from core.utils.time import now_ms, to_epoch_ms

logger = Logger(UTC=True)


class ListService:
    """Lists one page of objects and enriches each with URLs and tags.

    Enrichment runs in bounded batches. An object whose enrichment fails
    is still returned, with empty tags and, if even signing fails, an
    empty URL.
    """

    def __init__(self) -> None:
        self.storage = S3ImageStorage()

    def _summary(self, obj: dict[str, Any], folder: str) -> ImageSummary:
        key = obj["Key"]
        last_modified = obj.get("LastModified")
        return ImageSummary(
            key=key,
            name=name_of(key),
            size=int(obj.get("Size", 0)),
            last_modified=to_epoch_ms(last_modified) if last_modified else now_ms(),
            url="",
            folder=folder or None,
        )

    def _enrich(self, obj: dict[str, Any], folder: str) -> ImageSummary:
        summary = self._summary(obj, folder)
        key = summary.key

        summary.url = self.storage.generate_presigned_url(
            operation="get", key=key, expires_in=PRESIGNED_URL_EXPIRATION
        )

        thumb = thumbnail_key(key)
        if self.storage.exists(key=thumb):
            summary.thumbnail_url = self.storage.generate_presigned_url(
                operation="get", key=thumb, expires_in=PRESIGNED_URL_EXPIRATION
            )

        head = self.storage.head_image(key=key)
        summary.tags = parse_tag_metadata(head.get("Metadata") or {})
        return summary

    def _fallback(self, obj: dict[str, Any], folder: str) -> ImageSummary:
        summary = self._summary(obj, folder)
        try:
            summary.url = self.storage.generate_presigned_url(
                operation="get", key=summary.key, expires_in=PRESIGNED_URL_EXPIRATION
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Unable to sign URL even in fallback",
                extra={"key": summary.key, "error": str(exc)},
            )
        return summary

    def list_images(
        self,
        *,
        prefix: str,
        max_keys: int,
        continuation_token: str | None,
    ) -> dict[str, Any]:
        page = self.storage.list_page(
            prefix=prefix,
            max_keys=max_keys,
            continuation_token=continuation_token,
        )

        objects = [
            obj
            for obj in page.get("Contents", [])
            if not is_folder_marker(obj["Key"]) and not is_derivative_key(obj["Key"])
        ]

        images: list[dict[str, Any]] = []
        for obj, result in zip(objects, run_bounded(lambda o: self._enrich(o, prefix), objects)):
            if isinstance(result, Exception):
                logger.warning(
                    "Image enrichment failed",
                    extra={"key": obj["Key"], "error": str(result)},
                )
                result = self._fallback(obj, prefix)
            images.append(result.to_response())

        logger.info(
            "Images listed",
            extra={"prefix": prefix, "count": len(images), "truncated": bool(page.get("IsTruncated"))},
        )

        return {
            "images": images,
            "isTruncated": bool(page.get("IsTruncated", False)),
            "nextContinuationToken": page.get("NextContinuationToken"),
            "keyCount": len(images),
        }
