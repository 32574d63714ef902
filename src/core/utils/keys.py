"""Object key and folder prefix validation.

Every key that reaches S3 or the metadata index passes through here first.
All functions are pure and perform no I/O.
"""

import re
from typing import Any

from core.models.errors import InvalidKeyError
from core.utils.constants import (
    DERIVATIVE_PREFIXES,
    ERROR_CODE_INVALID_PREFIX,
    MAX_KEY_LENGTH,
    PREVIEW_PREFIX,
    SUPPORTED_IMAGE_EXTENSIONS,
    THUMBNAIL_PREFIX,
)

# Tab, LF and CR are tolerated.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def validate_key(key: Any) -> None:
    """Reject keys that could escape their folder or confuse S3.

    Raises:
        InvalidKeyError: If the key is empty, not a string, contains ``..``,
            ``//``, a leading ``/``, a null byte or control characters, or
            is longer than 1024 characters.
    """
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(message="Invalid key: key must be a non-empty string")

    if ".." in key or "//" in key or key.startswith("/"):
        raise InvalidKeyError(
            message="Invalid key: path traversal detected",
            details={"key": key},
        )

    if "\x00" in key:
        raise InvalidKeyError(message="Invalid key: null bytes not allowed")

    if _CONTROL_CHARS.search(key):
        raise InvalidKeyError(message="Invalid key: control characters not allowed")

    if len(key) > MAX_KEY_LENGTH:
        raise InvalidKeyError(
            message=f"Invalid key: exceeds maximum length of {MAX_KEY_LENGTH} characters",
            details={"length": len(key)},
        )


def validate_prefix(prefix: Any) -> str:
    """Normalize a folder prefix to ``""`` or ``"a/b/"``.

    Raises:
        InvalidKeyError: If the prefix is not a string or is unsafe.
    """
    if prefix is None or prefix == "":
        return ""

    if not isinstance(prefix, str):
        raise InvalidKeyError(
            message="Invalid prefix: must be a string",
            error_code=ERROR_CODE_INVALID_PREFIX,
        )

    normalized = prefix.strip().strip("/")

    if ".." in normalized or "//" in normalized:
        raise InvalidKeyError(
            message="Invalid prefix: path traversal detected",
            error_code=ERROR_CODE_INVALID_PREFIX,
            details={"prefix": prefix},
        )

    if "\x00" in normalized or _CONTROL_CHARS.search(normalized):
        raise InvalidKeyError(
            message="Invalid prefix: control characters not allowed",
            error_code=ERROR_CODE_INVALID_PREFIX,
        )

    return f"{normalized}/" if normalized else ""


def folder_of(key: str) -> str:
    """Return the key prefix up to and including the last ``/``."""
    index = key.rfind("/")
    return key[: index + 1] if index >= 0 else ""


def name_of(key: str) -> str:
    return key.rsplit("/", 1)[-1]


def is_derivative_key(key: str) -> bool:
    return key.startswith(DERIVATIVE_PREFIXES)


def is_folder_marker(key: str) -> bool:
    return key.endswith("/")


def is_image_key(key: str) -> bool:
    """True when the key carries a supported image extension (case-insensitive)."""
    return key.lower().endswith(SUPPORTED_IMAGE_EXTENSIONS)


def thumbnail_key(key: str) -> str:
    return f"{THUMBNAIL_PREFIX}{key}"


def preview_key(key: str) -> str:
    return f"{PREVIEW_PREFIX}{key}"
