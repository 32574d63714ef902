"""Per-client fixed-window rate limiting backed by DynamoDB.

Lambda instances share no memory, so counters live in the table named by
``RATE_LIMIT_TABLE_NAME``. When that variable is unset the limiter is off.
Store failures never block a request.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapter,
    DynamoDBAdapterProtocol,
)
from core.models.errors import RateLimitExceededError
from core.utils.constants import (
    ENV_RATE_LIMIT_TABLE_NAME,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
)

logger = Logger(UTC=True)

JsonDict = dict[str, Any]


class FixedWindowRateLimiter:
    """Counts requests per ``(identifier, window)`` with an atomic ADD."""

    def __init__(
        self,
        adapter: DynamoDBAdapterProtocol | None = None,
        *,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
    ) -> None:
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter(ENV_RATE_LIMIT_TABLE_NAME)
        self.window_seconds = window_seconds
        self.max_requests = max_requests

    def hit(self, identifier: str, *, now: float | None = None) -> int:
        """Record one request and return the count in the current window.

        Raises:
            RateLimitExceededError: If the count exceeds ``max_requests``
        """
        current = time.time() if now is None else now
        window_start = int(current // self.window_seconds) * self.window_seconds

        try:
            response = self._db.update_item(
                Key={"identifier": identifier, "window": window_start},
                UpdateExpression="ADD #count :one SET #ttl = :ttl",
                ExpressionAttributeNames={"#count": "count", "#ttl": "ttl"},
                ExpressionAttributeValues={
                    ":one": 1,
                    ":ttl": window_start + 2 * self.window_seconds,
                },
                ReturnValues="UPDATED_NEW",
            )
        except (ClientError, BotoCoreError) as exc:
            logger.warning(
                "Rate limit store unavailable, allowing request",
                extra={"identifier": identifier, "error": str(exc)},
            )
            return 0

        count = int(response.get("Attributes", {}).get("count", 0))

        if count > self.max_requests:
            retry_after = max(1, int(window_start + self.window_seconds - current))
            logger.warning(
                "Rate limit exceeded",
                extra={"identifier": identifier, "count": count, "retry_after": retry_after},
            )
            raise RateLimitExceededError(retry_after=retry_after)

        return count


_limiters: dict[str, FixedWindowRateLimiter] = {}


def get_rate_limiter() -> FixedWindowRateLimiter | None:
    """Limiter for the configured table, or None when rate limiting is off."""
    table_name = os.getenv(ENV_RATE_LIMIT_TABLE_NAME)
    if not table_name:
        return None

    if table_name not in _limiters:
        _limiters[table_name] = FixedWindowRateLimiter(
            DynamoDBAdapter(ENV_RATE_LIMIT_TABLE_NAME, table_name=table_name)
        )
    return _limiters[table_name]


def client_identifier(event: dict[str, Any]) -> str:
    """``IP#<addr>`` from the source IP, else the first X-Forwarded-For hop."""
    identity = (event.get("requestContext") or {}).get("identity") or {}
    address = identity.get("sourceIp")

    if not address:
        headers = event.get("headers") or {}
        forwarded = next(
            (v for k, v in headers.items() if k.lower() == "x-forwarded-for"),
            "",
        )
        address = forwarded.split(",")[0].strip()

    return f"IP#{address or 'unknown'}"


def rate_limited(func: Callable[..., JsonDict]) -> Callable[..., JsonDict]:
    @wraps(func)
    def wrapper(event: dict[str, Any], context: Any) -> JsonDict:
        limiter = get_rate_limiter()
        if limiter is not None:
            limiter.hit(client_identifier(event))
        return func(event, context)

    return wrapper
