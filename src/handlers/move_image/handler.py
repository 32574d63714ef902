"""
Lambda handler moving an image between keys: ``POST /api/s3/move``.
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

from .models import MoveImageRequest
from .service import MoveService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    log_request(logger, "Received move image request", event, context)

    request = validate_request(MoveImageRequest, parse_json_body(event))
    validate_key(request.old_key)
    validate_key(request.new_key)

    MoveService().move_image(request.old_key, request.new_key)

    return ResponseBuilder.ok({"success": True})
