"""
Lambda handlers for image tags.

- ``GET /api/s3/image/{key}/tags``: ``get_handler``
- ``PUT /api/s3/image/{key}/tags``: ``put_handler``
- ``GET /api/s3/tags``: ``all_handler``
"""

from typing import Any
from urllib.parse import unquote

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.services.tag_registry import TagRegistry
from core.utils.auth import require_auth
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler, log_request
from core.utils.rate_limit import rate_limited
from core.utils.response import ResponseBuilder
from core.utils.validators import parse_json_body, path_params, query_params, validate_request

from .models import ImageKeyPath, TagCountsRequest, UpdateTagsRequest, UpdateTagsResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


def _image_key(event: dict[str, Any]) -> str:
    return unquote(validate_request(ImageKeyPath, path_params(event)).key)


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def get_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    log_request(logger, "Received get tags request", event, context)

    tags = TagRegistry().get_tags(_image_key(event))

    return ResponseBuilder.ok({"tags": tags})


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def put_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Replace the tags of one image and return the normalized set."""
    log_request(logger, "Received update tags request", event, context)

    key = _image_key(event)
    request = validate_request(UpdateTagsRequest, parse_json_body(event))

    tags = TagRegistry().set_tags(key, request.tags)

    return ResponseBuilder.ok(UpdateTagsResponse(tags=tags).model_dump())


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def all_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Count tags across the album.

    ``source=s3`` (default) reads object metadata and is exact. ``source=index``
    scans the metadata index and may lag behind recent writes.
    """
    log_request(logger, "Received tag counts request", event, context)

    request = validate_request(TagCountsRequest, query_params(event))
    counts = TagRegistry().get_all_tag_counts(source=request.source)

    return ResponseBuilder.ok({"tags": [count.model_dump() for count in counts]})
