"""
Pytest configuration and fixtures for photo album tests.
Provides AWS mocking, DynamoDB and S3 fixtures with proper cleanup,
and Pillow-generated images.
"""

import io
import os
from collections.abc import Callable
from typing import Any

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws
from PIL import Image

from core.utils.constants import SORT_INDEXES

for _name, _value in {
    "AWS_REGION": "us-east-1",
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_SECURITY_TOKEN": "testing",
    "AWS_SESSION_TOKEN": "testing",
    "IMAGE_S3_BUCKET_NAME": "test-album-bucket",
    "IMAGE_METADATA_TABLE_NAME": "test-image-metadata",
    "SHARES_TABLE_NAME": "test-share-tokens",
    "POWERTOOLS_TRACE_DISABLED": "1",
    "POWERTOOLS_METRICS_NAMESPACE": "PhotoAlbum",
    "POWERTOOLS_SERVICE_NAME": "photo-album",
}.items():
    os.environ.setdefault(_name, _value)

# moto only intercepts the default AWS endpoints.
os.environ.pop("AWS_ENDPOINT_URL", None)
os.environ.pop("RATE_LIMIT_TABLE_NAME", None)

RATE_LIMIT_TABLE = "test-rate-limits"


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def dynamodb_resource(aws_mock):
    return boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION"))


def _sort_index(name: str, attribute: str) -> dict[str, Any]:
    return {
        "IndexName": name,
        "KeySchema": [
            {"AttributeName": "folder", "KeyType": "HASH"},
            {"AttributeName": attribute, "KeyType": "RANGE"},
        ],
        "Projection": {"ProjectionType": "ALL"},
    }


def _create_dynamodb_table(dynamodb_resource):
    """Helper to create the metadata table with one GSI per sort order."""
    table_name = os.getenv("IMAGE_METADATA_TABLE_NAME")

    return dynamodb_resource.create_table(
        TableName=table_name,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "key", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "key", "AttributeType": "S"},
            {"AttributeName": "folder", "AttributeType": "S"},
            {"AttributeName": "name", "AttributeType": "S"},
            {"AttributeName": "lastModified", "AttributeType": "N"},
            {"AttributeName": "size", "AttributeType": "N"},
            {"AttributeName": "tagCount", "AttributeType": "N"},
        ],
        GlobalSecondaryIndexes=[
            _sort_index(index_name, attribute)
            for index_name, attribute in SORT_INDEXES.values()
        ],
    )


@pytest.fixture(scope="function")
def dynamodb_table(dynamodb_resource):
    """
    Create the metadata table for testing.

    moto discards every table when the mock context exits.
    """
    table = _create_dynamodb_table(dynamodb_resource)
    table.wait_until_exists()
    return table


@pytest.fixture(scope="function")
def shares_table(dynamodb_resource):
    table = dynamodb_resource.create_table(
        TableName=os.getenv("SHARES_TABLE_NAME"),
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "shareToken", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "shareToken", "AttributeType": "S"}],
    )
    table.wait_until_exists()
    return table


@pytest.fixture(scope="function")
def rate_limit_table(dynamodb_resource):
    table = dynamodb_resource.create_table(
        TableName=RATE_LIMIT_TABLE,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[
            {"AttributeName": "identifier", "KeyType": "HASH"},
            {"AttributeName": "window", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "identifier", "AttributeType": "S"},
            {"AttributeName": "window", "AttributeType": "N"},
        ],
    )
    table.wait_until_exists()
    return table


@pytest.fixture
def dynamodb_get_item(dynamodb_table) -> Callable[[str], dict[str, Any] | None]:
    """
    Helper to read one index record by object key.

    Usage:
        item = dynamodb_get_item("2024/trip.jpg")
    """

    def _get(key: str) -> dict[str, Any] | None:
        response: dict[str, Any] = dynamodb_table.get_item(Key={"key": key})
        return response.get("Item")

    return _get


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """
    Create the album bucket for testing.

    moto discards the bucket when the mock context exits.
    """
    bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")

    try:
        s3_client.create_bucket(Bucket=bucket_name)
    except ClientError as e:
        if e.response["Error"]["Code"] != "BucketAlreadyOwnedByYou":
            raise

    return s3_client


@pytest.fixture
def s3_put_object(s3_bucket) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        response = s3_put_object("2024/trip.jpg", image_bytes, "image/jpeg")
    """

    def _put(
        key: str,
        body: bytes = b"",
        content_type: str = "application/octet-stream",
        metadata: dict[str, str] | None = None,
    ):
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        return s3_bucket.put_object(
            Bucket=bucket_name,
            Key=key,
            Body=body,
            ContentType=content_type,
            Metadata=metadata or {},
        )

    return _put


@pytest.fixture
def s3_get_object(s3_bucket) -> Callable[[str], bytes]:
    def _get(key: str) -> bytes:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        response: dict[str, Any] = s3_bucket.get_object(Bucket=bucket_name, Key=key)
        data: bytes = response["Body"].read()
        return data

    return _get


@pytest.fixture
def s3_keys(s3_bucket) -> Callable[[str], list[str]]:
    """Helper returning every key under a prefix, sorted."""

    def _keys(prefix: str = "") -> list[str]:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        paginator = s3_bucket.get_paginator("list_objects_v2")
        return sorted(
            obj["Key"]
            for page in paginator.paginate(Bucket=bucket_name, Prefix=prefix)
            for obj in page.get("Contents", [])
        )

    return _keys


def make_image(
    size: tuple[int, int] = (640, 480),
    mode: str = "RGB",
    fmt: str = "JPEG",
    color: Any = (200, 80, 40),
) -> bytes:
    """Encode a solid-colour Pillow image."""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_factory() -> Callable[..., bytes]:
    return make_image


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image()


@pytest.fixture
def large_jpeg_bytes() -> bytes:
    return make_image(size=(3840, 2160))


@pytest.fixture
def png_rgba_bytes() -> bytes:
    return make_image(size=(300, 120), mode="RGBA", fmt="PNG", color=(0, 0, 255, 0))
