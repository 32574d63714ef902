"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_INVALID_KEY = "INVALID_KEY"
ERROR_CODE_INVALID_PREFIX = "INVALID_PREFIX"
ERROR_CODE_INVALID_TAGS = "INVALID_TAGS"
ERROR_CODE_INVALID_CURSOR = "INVALID_CURSOR"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
ERROR_CODE_SHARE_NOT_FOUND = "SHARE_NOT_FOUND"

# Auth Errors
ERROR_CODE_UNAUTHORIZED = "UNAUTHORIZED"
ERROR_CODE_TOKEN_EXPIRED = "TOKEN_EXPIRED"
ERROR_CODE_TOKEN_MALFORMED = "TOKEN_MALFORMED"
ERROR_CODE_TOKEN_INVALID = "TOKEN_INVALID"
ERROR_CODE_FORBIDDEN = "FORBIDDEN"
ERROR_CODE_RATE_LIMITED = "RATE_LIMITED"
ERROR_CODE_AUTH_NOT_CONFIGURED = "AUTH_NOT_CONFIGURED"

# Storage Errors
ERROR_CODE_S3 = "S3_ERROR"
ERROR_CODE_IMAGE_DOWNLOAD_FAILED = "IMAGE_DOWNLOAD_FAILED"
ERROR_CODE_IMAGE_DELETE_FAILED = "IMAGE_DELETE_FAILED"
ERROR_CODE_IMAGE_COPY_FAILED = "IMAGE_COPY_FAILED"
ERROR_CODE_IMAGE_LIST_FAILED = "IMAGE_LIST_FAILED"
ERROR_CODE_IMAGE_PRESIGNED_URL_FAILED = "PRESIGNED_URL_FAILED"
ERROR_CODE_DERIVATIVE_UPLOAD_FAILED = "DERIVATIVE_UPLOAD_FAILED"
ERROR_CODE_FOLDER_CREATE_FAILED = "FOLDER_CREATE_FAILED"

# Metadata / DynamoDB Errors
ERROR_CODE_DYNAMODB = "DYNAMODB_ERROR"
ERROR_CODE_METADATA_UPSERT_FAILED = "METADATA_UPSERT_FAILED"
ERROR_CODE_METADATA_FETCH_FAILED = "METADATA_FETCH_FAILED"
ERROR_CODE_METADATA_DELETE_FAILED = "METADATA_DELETE_FAILED"
ERROR_CODE_METADATA_QUERY_FAILED = "METADATA_QUERY_FAILED"
ERROR_CODE_METADATA_BATCH_FAILED = "METADATA_BATCH_FAILED"
ERROR_CODE_METADATA_SCAN_FAILED = "METADATA_SCAN_FAILED"
ERROR_CODE_SHARE_STORE_FAILED = "SHARE_STORE_FAILED"
ERROR_CODE_SHARE_TOKEN_GENERATION_FAILED = "SHARE_TOKEN_GENERATION_FAILED"

# Internal / Unexpected
ERROR_CODE_INTERNAL_ERROR = "INTERNAL_ERROR"


# ============================================================================
# Object Key Constraints
# ============================================================================

MAX_KEY_LENGTH = 1024

SUPPORTED_IMAGE_EXTENSIONS: Final[tuple[str, ...]] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
)

# ============================================================================
# Derivative Images
# ============================================================================

THUMBNAIL_PREFIX = "thumbnails/"
PREVIEW_PREFIX = "previews/"
DERIVATIVE_PREFIXES: Final[tuple[str, ...]] = (THUMBNAIL_PREFIX, PREVIEW_PREFIX)

THUMBNAIL_SIZE = 200
PREVIEW_MAX_WIDTH = 1920
PREVIEW_MAX_HEIGHT = 1080
DERIVATIVE_QUALITY = 85
DERIVATIVE_CONTENT_TYPE = "image/jpeg"
DERIVATIVE_CACHE_CONTROL = "max-age=31536000"  # 1 year

# ============================================================================
# Presigned URLs
# ============================================================================

PRESIGNED_URL_EXPIRATION = 7 * 24 * 3600  # 7 days
MAX_PRESIGNED_URL_EXPIRATION = 7 * 24 * 3600
DEFAULT_UPLOAD_CONTENT_TYPE = "application/octet-stream"
FOLDER_CONTENT_TYPE = "application/x-directory"

# ============================================================================
# Tags
# ============================================================================

TAG_MAX_LENGTH = 50
TAGS_METADATA_KEY = "tags"
LEGACY_TAGS_METADATA_KEY = "x-amz-meta-tags"

# ============================================================================
# Fan-out / Batching
# ============================================================================

FANOUT_WIDTH = 10
BATCH_WRITE_SIZE = 25  # DynamoDB hard limit
MAX_BATCH_RETRIES = 3
DELETE_OBJECTS_BATCH_SIZE = 1000  # S3 hard limit

# ============================================================================
# Metadata Index
# ============================================================================

GSI_NAME = "GSI-name"
GSI_DATE = "GSI-date"
GSI_SIZE = "GSI-size"
GSI_TAGS = "GSI-tags"

SORT_INDEXES: Final[dict[str, tuple[str, str]]] = {
    "name": (GSI_NAME, "name"),
    "date": (GSI_DATE, "lastModified"),
    "size": (GSI_SIZE, "size"),
    "tags": (GSI_TAGS, "tagCount"),
}

ALLOWED_SORT_ORDERS = frozenset({"asc", "desc"})

# ============================================================================
# Pagination Constraints
# ============================================================================

DEFAULT_LIMIT = 100
MIN_LIMIT = 1
MAX_LIMIT = 1000

# Index keys cannot be empty strings, so the root folder is stored as "/".
INDEX_ROOT_FOLDER = "/"

# ============================================================================
# Sharing
# ============================================================================

SHARE_TOKEN_BYTES = 32
SHARE_TOKEN_MAX_ATTEMPTS = 10
DEFAULT_SHARE_EXPIRY_DAYS = 7
MAX_SHARE_EXPIRY_DAYS = 30
MS_PER_DAY = 24 * 60 * 60 * 1000
SHARE_URL_TEMPLATE = "/share/{token}"

# ============================================================================
# Rate Limiting
# ============================================================================

RATE_LIMIT_WINDOW_SECONDS = 15 * 60
RATE_LIMIT_MAX_REQUESTS = 100

# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization"
EXPOSE_HEADERS = "Content-Type,Content-Length,Retry-After"
DEFAULT_CONTENT_TYPE = "application/json"

# ============================================================================
# Observability
# ============================================================================

METRICS_NAMESPACE = "PhotoAlbum"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_IMAGE_S3_BUCKET_NAME = "IMAGE_S3_BUCKET_NAME"
ENV_IMAGE_METADATA_TABLE_NAME = "IMAGE_METADATA_TABLE_NAME"
ENV_SHARES_TABLE_NAME = "SHARES_TABLE_NAME"
ENV_RATE_LIMIT_TABLE_NAME = "RATE_LIMIT_TABLE_NAME"
ENV_COGNITO_USER_POOL_ID = "COGNITO_USER_POOL_ID"
ENV_COGNITO_CLIENT_ID = "COGNITO_CLIENT_ID"
ENV_ENVIRONMENT = "ENVIRONMENT"

DEFAULT_AWS_REGION = "us-east-1"
DEVELOPMENT_ENVIRONMENT = "development"
