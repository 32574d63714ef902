"""Request validation utilities."""

import json
from typing import Any, TypeVar

from pydantic import BaseModel

from core.models.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Sanitize Pydantic validation errors for API responses.

    Removes sensitive/internal fields like:
    - url
    - ctx
    - input
    """
    sanitized: list[dict[str, str]] = []

    for err in errors:
        field = ".".join(str(x) for x in err.get("loc", [])) or "body"
        raw_msg = err.get("msg", "Invalid value")

        msg = raw_msg.replace("Value error,", "").strip()

        msg_lower = msg.lower()
        if "field required" in msg_lower:
            msg = "This field is required"
        elif msg_lower.startswith("input should be a valid"):
            msg = "Invalid value type"

        sanitized.append(
            {
                "field": field,
                "message": msg,
            }
        )

    return sanitized


def validate_request(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate request data against a Pydantic model.

    Raises:
        pydantic.ValidationError: Mapped to a 422 by ``api_gateway_handler``.
    """
    return model.model_validate(data)


def parse_json_body(event: dict[str, Any]) -> dict[str, Any]:
    """Decode the API Gateway body into a dict.

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    raw = event.get("body")
    if raw in (None, ""):
        return {}

    if isinstance(raw, dict):
        return raw

    try:
        body = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ValidationError(message="Request body must be valid JSON") from exc

    if not isinstance(body, dict):
        raise ValidationError(message="Request body must be a JSON object")

    return body


def query_params(event: dict[str, Any]) -> dict[str, Any]:
    return event.get("queryStringParameters") or {}


def path_params(event: dict[str, Any]) -> dict[str, Any]:
    return event.get("pathParameters") or {}
