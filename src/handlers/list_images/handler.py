"""
Lambda handler for listing a bucket page: ``GET /api/s3/list``.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.utils.auth import require_auth
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler, log_request
from core.utils.keys import validate_prefix
from core.utils.rate_limit import rate_limited
from core.utils.response import ResponseBuilder
from core.utils.validators import query_params, validate_request

from .models import ListImagesRequest
from .service import ListService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    List images under a prefix.

    Folder markers and derivative objects are hidden. Each image carries a
    presigned GET URL, a thumbnail URL when one exists, and its tags.
    """
    log_request(logger, "Received list images request", event, context)

    request = validate_request(ListImagesRequest, query_params(event))
    prefix = validate_prefix(request.prefix)

    result = ListService().list_images(
        prefix=prefix,
        max_keys=request.page_size(),
        continuation_token=request.continuation_token,
    )

    return ResponseBuilder.ok(result)
