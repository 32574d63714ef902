"""
Lambda handler responsible for deleting an image: ``DELETE /api/s3/delete``.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.utils.auth import require_auth
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler, log_request
from core.utils.keys import validate_key
from core.utils.rate_limit import rate_limited
from core.utils.response import ResponseBuilder
from core.utils.validators import parse_json_body, validate_request

from .models import DeleteImageRequest, SuccessResponse
from .service import DeleteService

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
    Handle image deletion requests.

    This function:
    - Validates the ``{"key": ...}`` body
    - Delegates deletion of the original and its derivatives to the service
    - Returns ``{"success": true}``; errors are mapped by ``api_gateway_handler``

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    log_request(logger, "Received image delete request", event, context)

    request = validate_request(DeleteImageRequest, parse_json_body(event))
    validate_key(request.key)

    DeleteService().delete_image(request.key)

    return ResponseBuilder.ok(SuccessResponse().model_dump())
