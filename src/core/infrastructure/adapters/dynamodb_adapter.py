"""Thin DynamoDB adapter wrapping boto3 table operations."""

import os
from typing import Any, Protocol

import boto3

from core.utils.constants import (
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_IMAGE_METADATA_TABLE_NAME,
)


class DynamoDBAdapterProtocol(Protocol):
    """Minimal DynamoDB adapter protocol (repository-facing)."""

    table_name: str

    def put_item(
        self,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]: ...

    def get_item(self, *, key: dict[str, Any]) -> dict[str, Any]: ...

    def delete_item(self, *, key: dict[str, Any]) -> dict[str, Any]: ...

    def update_item(self, **kwargs: Any) -> dict[str, Any]: ...

    def query(self, **kwargs: Any) -> dict[str, Any]: ...

    def scan(self, **kwargs: Any) -> dict[str, Any]: ...

    def batch_write(self, *, requests: list[dict[str, Any]]) -> dict[str, Any]: ...


class DynamoDBAdapter:
    """Low-level DynamoDB operations (mechanical, no error handling).

    This adapter:
    - Wraps boto3 DynamoDB resource
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors

    The same adapter serves the metadata, share and rate-limit tables;
    ``env_var`` names the variable holding the table name.
    """

    def __init__(
        self,
        env_var: str = ENV_IMAGE_METADATA_TABLE_NAME,
        *,
        table_name: str | None = None,
    ) -> None:
        """Initialize DynamoDB table from environment."""
        table_name = table_name or os.getenv(env_var)
        if not table_name:
            raise RuntimeError(f"{env_var} environment variable is not set")

        dynamodb = boto3.resource(
            "dynamodb",
            endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
            region_name=os.getenv(ENV_AWS_REGION),
        )

        self.table_name = table_name
        self._resource = dynamodb
        self.table = dynamodb.Table(table_name)

    def put_item(
        self,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]:
        """Insert item into DynamoDB."""
        kwargs: dict[str, Any] = {"Item": item}

        if condition_expression:
            kwargs["ConditionExpression"] = condition_expression

        return self.table.put_item(**kwargs)

    def get_item(self, *, key: dict[str, Any]) -> dict[str, Any]:
        """Retrieve item by key."""
        return self.table.get_item(Key=key)

    def delete_item(self, *, key: dict[str, Any]) -> dict[str, Any]:
        """Delete item by key."""
        return self.table.delete_item(Key=key)

    def update_item(self, **kwargs: Any) -> dict[str, Any]:
        """Execute DynamoDB update_item."""
        return self.table.update_item(**kwargs)

    def query(self, **kwargs: Any) -> dict[str, Any]:
        """Execute DynamoDB query."""
        return self.table.query(**kwargs)

    def scan(self, **kwargs: Any) -> dict[str, Any]:
        """Execute one DynamoDB scan page."""
        return self.table.scan(**kwargs)

    def batch_write(self, *, requests: list[dict[str, Any]]) -> dict[str, Any]:
        """Issue a single ``batch_write_item`` call for this table.

        ``requests`` are resource-style write requests, for example
        ``{"PutRequest": {"Item": {...}}}``. At most 25 per call.
        """
        return self._resource.batch_write_item(
            RequestItems={self.table_name: requests},
        )
