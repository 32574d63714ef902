"""
Lambda handler for sorted folder queries: ``GET /api/images``.
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

from .models import QueryImagesRequest
from .service import QueryService

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
    Query one folder of the metadata index.

    ``cursor`` continues a previous page and must be reused with the same
    folder, ``sortBy`` and ``order``.
    """
    log_request(logger, "Received query images request", event, context)

    request = validate_request(QueryImagesRequest, query_params(event))

    result = QueryService().query_images(
        folder=validate_prefix(request.folder),
        sort_by=request.sort_by,
        order=request.order,
        limit=request.limit,
        cursor=request.cursor,
    )

    return ResponseBuilder.ok(result)
