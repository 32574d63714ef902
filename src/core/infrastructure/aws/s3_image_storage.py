"""S3-backed implementation of ImageStorageRepository."""

from collections.abc import Iterator
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import NotFoundError, S3Error, ValidationError
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import (
    DEFAULT_UPLOAD_CONTENT_TYPE,
    DELETE_OBJECTS_BATCH_SIZE,
    ERROR_CODE_DERIVATIVE_UPLOAD_FAILED,
    ERROR_CODE_FOLDER_CREATE_FAILED,
    ERROR_CODE_IMAGE_COPY_FAILED,
    ERROR_CODE_IMAGE_DELETE_FAILED,
    ERROR_CODE_IMAGE_DOWNLOAD_FAILED,
    ERROR_CODE_IMAGE_LIST_FAILED,
    ERROR_CODE_IMAGE_NOT_FOUND,
    ERROR_CODE_IMAGE_PRESIGNED_URL_FAILED,
    FOLDER_CONTENT_TYPE,
)

logger = Logger(UTC=True)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})

_PRESIGN_METHODS = {
    "get": "get_object",
    "put": "put_object",
    "delete": "delete_object",
}


def _is_not_found(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


class S3ImageStorage(ImageStorageRepository):
    """Image storage implementation backed by Amazon S3."""

    def __init__(self, adapter: S3AdapterProtocol | None = None) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3: S3AdapterProtocol = adapter or S3Adapter()

    @property
    def bucket(self) -> str:
        return self._s3.bucket

    def head_image(self, *, key: str) -> dict[str, Any]:
        """Return size, last-modified, content type and user metadata."""
        logger.debug("Fetching object attributes", extra={"key": key})

        try:
            return dict(self._s3.head_object(key=key))

        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                    details={"key": key},
                ) from exc

            logger.error("S3 head_object failed", extra={"key": key})
            raise S3Error(
                message="Unable to read image attributes",
                details={"key": key},
            ) from exc

    def exists(self, *, key: str) -> bool:
        try:
            self.head_image(key=key)
        except NotFoundError:
            return False
        return True

    def download_image(self, *, key: str) -> bytes:
        """Download image bytes directly from S3."""
        logger.debug("Downloading image", extra={"key": key})

        try:
            response = self._s3.get_object(key=key)
            body: bytes = response["Body"].read()

            logger.debug("Image downloaded", extra={"key": key, "size": len(body)})
            return body

        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                    details={"key": key},
                ) from exc

            logger.error("S3 download failed", extra={"key": key})
            raise S3Error(
                message="Unable to download image at this time",
                error_code=ERROR_CODE_IMAGE_DOWNLOAD_FAILED,
                details={"key": key},
            ) from exc

    def upload_image(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
        cache_control: str | None = None,
    ) -> None:
        """Upload bytes to S3 under ``key``."""
        logger.debug(
            "Uploading object",
            extra={"key": key, "size": len(body), "content_type": content_type},
        )

        try:
            self._s3.put_object(
                key=key,
                body=body,
                content_type=content_type,
                metadata=metadata,
                cache_control=cache_control,
            )
            logger.info("Object uploaded", extra={"key": key})

        except ClientError as exc:
            logger.error("S3 upload failed", extra={"key": key})
            raise S3Error(
                message="Unable to upload image at this time",
                error_code=ERROR_CODE_DERIVATIVE_UPLOAD_FAILED,
                details={"key": key},
            ) from exc

    def create_folder(self, *, prefix: str) -> None:
        try:
            self._s3.put_object(key=prefix, body=b"", content_type=FOLDER_CONTENT_TYPE)
            logger.info("Folder marker created", extra={"prefix": prefix})

        except ClientError as exc:
            logger.error("S3 folder creation failed", extra={"prefix": prefix})
            raise S3Error(
                message="Unable to create folder at this time",
                error_code=ERROR_CODE_FOLDER_CREATE_FAILED,
                details={"prefix": prefix},
            ) from exc

    def remove_image(self, *, key: str) -> None:
        """Delete an image object from S3."""
        logger.debug("Deleting object", extra={"key": key})

        try:
            self._s3.delete_object(key=key)
            logger.info("Object deleted", extra={"key": key})

        except ClientError as exc:
            logger.error("S3 deletion failed", extra={"key": key})
            raise S3Error(
                message="Unable to delete image at this time",
                error_code=ERROR_CODE_IMAGE_DELETE_FAILED,
                details={"key": key},
            ) from exc

    def remove_images(self, *, keys: list[str]) -> list[str]:
        """Delete objects in chunks of 1000 and return the keys S3 rejected."""
        failed: list[str] = []

        for start in range(0, len(keys), DELETE_OBJECTS_BATCH_SIZE):
            chunk = keys[start : start + DELETE_OBJECTS_BATCH_SIZE]

            try:
                response = self._s3.delete_objects(keys=chunk)
            except ClientError as exc:
                logger.error("S3 delete_objects failed", extra={"count": len(chunk)})
                raise S3Error(
                    message="Unable to delete images at this time",
                    error_code=ERROR_CODE_IMAGE_DELETE_FAILED,
                    details={"count": len(chunk)},
                ) from exc

            for error in response.get("Errors", []):
                logger.warning(
                    "Object could not be deleted",
                    extra={"key": error.get("Key"), "code": error.get("Code")},
                )
                failed.append(error.get("Key", ""))

        return failed

    def copy_image(self, *, source_key: str, dest_key: str) -> None:
        logger.debug("Copying object", extra={"source": source_key, "dest": dest_key})

        try:
            self._s3.copy_object(source_key=source_key, dest_key=dest_key)
            logger.info("Object copied", extra={"source": source_key, "dest": dest_key})

        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                    details={"key": source_key},
                ) from exc

            logger.error("S3 copy failed", extra={"source": source_key, "dest": dest_key})
            raise S3Error(
                message="Unable to copy image at this time",
                error_code=ERROR_CODE_IMAGE_COPY_FAILED,
                details={"source": source_key, "dest": dest_key},
            ) from exc

    def replace_metadata(
        self,
        *,
        key: str,
        metadata: dict[str, str],
        content_type: str | None = None,
    ) -> None:
        """Copy the object onto itself with ``MetadataDirective=REPLACE``."""
        try:
            self._s3.copy_object(
                source_key=key,
                dest_key=key,
                metadata=metadata,
                content_type=content_type,
            )

        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                    details={"key": key},
                ) from exc

            logger.error("S3 metadata replace failed", extra={"key": key})
            raise S3Error(
                message="Unable to update image metadata",
                error_code=ERROR_CODE_IMAGE_COPY_FAILED,
                details={"key": key},
            ) from exc

    def list_page(
        self,
        *,
        prefix: str = "",
        max_keys: int = 1000,
        continuation_token: str | None = None,
        delimiter: str | None = None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"Prefix": prefix, "MaxKeys": max_keys}
        if continuation_token:
            kwargs["ContinuationToken"] = continuation_token
        if delimiter:
            kwargs["Delimiter"] = delimiter

        try:
            return dict(self._s3.list_objects(**kwargs))

        except ClientError as exc:
            logger.error("S3 listing failed", extra={"prefix": prefix})
            raise S3Error(
                message="Unable to list images at this time",
                error_code=ERROR_CODE_IMAGE_LIST_FAILED,
                details={"prefix": prefix},
            ) from exc

    def iter_objects(self, *, prefix: str = "") -> Iterator[dict[str, Any]]:
        token: str | None = None

        while True:
            page = self.list_page(prefix=prefix, continuation_token=token)
            yield from page.get("Contents", [])

            if not page.get("IsTruncated"):
                return
            token = page.get("NextContinuationToken")

    def generate_presigned_url(
        self,
        *,
        operation: str,
        key: str,
        expires_in: int,
        content_type: str | None = None,
    ) -> str:
        """Generate a pre-signed S3 URL for get, put or delete."""
        method = _PRESIGN_METHODS.get(operation)
        if method is None:
            raise ValidationError(
                message="Invalid operation",
                details={"operation": operation},
            )

        params: dict[str, Any] = {"Key": key}
        if operation == "put":
            params["ContentType"] = content_type or DEFAULT_UPLOAD_CONTENT_TYPE

        try:
            return self._s3.generate_presigned_url(
                method=method,
                params=params,
                expires_in=expires_in,
            )

        except ClientError as exc:
            logger.error("Failed to generate pre-signed URL", extra={"key": key})
            raise S3Error(
                message="Unable to generate image access URL",
                error_code=ERROR_CODE_IMAGE_PRESIGNED_URL_FAILED,
                details={"key": key},
            ) from exc
