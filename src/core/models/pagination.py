"""Opaque cursor encoding for index queries.

A cursor is the DynamoDB ``LastEvaluatedKey`` serialized as JSON and
encoded as URL-safe base64. It is only valid for the same folder, sort
field and order it was obtained with.
"""

import base64
import binascii
import json
from decimal import Decimal
from typing import Any

from core.models.errors import ValidationError
from core.utils.constants import ERROR_CODE_INVALID_CURSOR


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Unsupported cursor value: {type(value).__name__}")


def encode_cursor(last_evaluated_key: dict[str, Any] | None) -> str | None:
    if not last_evaluated_key:
        return None
    raw = json.dumps(last_evaluated_key, default=_json_default, sort_keys=True)
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str | None) -> dict[str, Any] | None:
    """Decode a cursor produced by ``encode_cursor``.

    Raises:
        ValidationError: If the cursor is not a valid encoded key.
    """
    if not cursor:
        return None

    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        decoded = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise ValidationError(
            message="Invalid cursor",
            error_code=ERROR_CODE_INVALID_CURSOR,
        ) from exc

    if not isinstance(decoded, dict):
        raise ValidationError(
            message="Invalid cursor",
            error_code=ERROR_CODE_INVALID_CURSOR,
        )

    return decoded
