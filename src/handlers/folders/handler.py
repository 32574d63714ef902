"""
Lambda handlers for the folder hierarchy.

- ``GET /api/s3/folders``: ``list_handler``
- ``POST /api/s3/folder``: ``create_handler``
- ``DELETE /api/s3/folder``: ``delete_handler``
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
from core.utils.validators import parse_json_body, query_params, validate_request

from .models import FolderPathRequest, ListFoldersRequest
from .service import FolderService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def list_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    log_request(logger, "Received list folders request", event, context)

    request = validate_request(ListFoldersRequest, query_params(event))
    folders = FolderService().list_folders(validate_prefix(request.prefix))

    return ResponseBuilder.ok({"folders": folders})


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def create_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    log_request(logger, "Received create folder request", event, context)

    request = validate_request(FolderPathRequest, parse_json_body(event))
    FolderService().create_folder(validate_prefix(request.path))

    return ResponseBuilder.ok({"success": True})


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def delete_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Delete a folder with every image, derivative and index record under it."""
    log_request(logger, "Received delete folder request", event, context)

    request = validate_request(FolderPathRequest, parse_json_body(event))
    FolderService().delete_folder(validate_prefix(request.path))

    return ResponseBuilder.ok({"success": True})
