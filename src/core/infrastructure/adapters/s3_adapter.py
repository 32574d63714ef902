"""Thin adapter for interacting with Amazon S3."""

from collections.abc import Mapping
import os
from typing import Any, Protocol

import boto3

from core.utils.constants import (
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_IMAGE_S3_BUCKET_NAME,
)


class S3AdapterProtocol(Protocol):
    """Minimal S3 adapter protocol (repository-facing)."""

    bucket: str

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
        cache_control: str | None = None,
    ) -> None: ...

    def get_object(self, *, key: str) -> Mapping[str, Any]: ...

    def head_object(self, *, key: str) -> Mapping[str, Any]: ...

    def delete_object(self, *, key: str) -> None: ...

    def delete_objects(self, *, keys: list[str]) -> Mapping[str, Any]: ...

    def copy_object(
        self,
        *,
        source_key: str,
        dest_key: str,
        metadata: dict[str, str] | None = None,
        content_type: str | None = None,
    ) -> None: ...

    def list_objects(self, **kwargs: Any) -> Mapping[str, Any]: ...

    def generate_presigned_url(
        self,
        *,
        method: str,
        params: dict[str, Any],
        expires_in: int,
    ) -> str: ...


class S3Adapter:
    """Low-level S3 operations (mechanical, no error handling).

    This adapter:
    - Wraps boto3 S3 client
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self, bucket_name: str | None = None) -> None:
        """Create S3 client from environment configuration."""
        bucket_name = bucket_name or os.getenv(ENV_IMAGE_S3_BUCKET_NAME)
        if not bucket_name:
            raise RuntimeError(f"{ENV_IMAGE_S3_BUCKET_NAME} environment variable is not set")

        self.bucket = bucket_name
        self._client = boto3.client(
            "s3",
            endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
            region_name=os.getenv(ENV_AWS_REGION),
        )

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
        cache_control: str | None = None,
    ) -> None:
        """Store object in S3."""
        kwargs: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
            "Metadata": metadata or {},
        }
        if cache_control:
            kwargs["CacheControl"] = cache_control

        self._client.put_object(**kwargs)

    def get_object(self, *, key: str) -> Mapping[str, Any]:
        """Fetch object from S3."""
        return self._client.get_object(Bucket=self.bucket, Key=key)

    def head_object(self, *, key: str) -> Mapping[str, Any]:
        """Fetch object attributes and user metadata without the body."""
        return self._client.head_object(Bucket=self.bucket, Key=key)

    def delete_object(self, *, key: str) -> None:
        """Delete object from S3."""
        self._client.delete_object(Bucket=self.bucket, Key=key)

    def delete_objects(self, *, keys: list[str]) -> Mapping[str, Any]:
        """Delete up to 1000 objects in one request."""
        return self._client.delete_objects(
            Bucket=self.bucket,
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
        )

    def copy_object(
        self,
        *,
        source_key: str,
        dest_key: str,
        metadata: dict[str, str] | None = None,
        content_type: str | None = None,
    ) -> None:
        """Copy an object within the bucket.

        Passing ``metadata`` replaces the destination metadata wholesale.
        """
        kwargs: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": dest_key,
            "CopySource": {"Bucket": self.bucket, "Key": source_key},
        }
        if metadata is not None:
            kwargs["Metadata"] = metadata
            kwargs["MetadataDirective"] = "REPLACE"
            if content_type:
                kwargs["ContentType"] = content_type

        self._client.copy_object(**kwargs)

    def list_objects(self, **kwargs: Any) -> Mapping[str, Any]:
        """Single ``list_objects_v2`` page. Callers drive pagination."""
        return self._client.list_objects_v2(Bucket=self.bucket, **kwargs)

    def generate_presigned_url(
        self,
        *,
        method: str,
        params: dict[str, Any],
        expires_in: int,
    ) -> str:
        """Generate a pre-signed S3 URL."""
        return self._client.generate_presigned_url(
            ClientMethod=method,
            Params={**params, "Bucket": self.bucket},
            ExpiresIn=expires_in,
        )
