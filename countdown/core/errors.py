"""Error types and classification utilities for storage and sync failures."""

from enum import Enum
from typing import Literal

import httpx


class StorageError(RuntimeError):
    """Raised when the local key-value store cannot be read or written."""


class RemoteStorageError(RuntimeError):
    """Raised by remote storage adapters when the provider rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SyncErrorCategory(Enum):
    """Categories of errors that can occur while syncing with a remote store."""

    NETWORK_ERROR = "network_error"
    AUTHENTICATION_FAILED = "authentication_failed"
    NOT_FOUND = "not_found"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    INVALID_DOCUMENT = "invalid_document"
    UNKNOWN = "unknown"


_ERROR_PATTERNS: dict[
    Literal["rate_limit", "auth", "network", "not_found"],
    dict[str, list[str] | set[str]],
] = {
    "rate_limit": {
        "phrases": ["rate limit", "too many requests", "429"],
        "exception_types": set(),
    },
    "auth": {
        "phrases": ["unauthorized", "bad credentials", "permission denied", "401", "403"],
        "exception_types": {"PermissionError"},
    },
    "network": {
        "phrases": ["connection", "timeout", "timed out", "network", "unreachable", "502", "503", "504"],
        "exception_types": {"ConnectionError", "TimeoutError"},
    },
    "not_found": {
        "phrases": ["not found", "404"],
        "exception_types": set(),
    },
}

_STATUS_CATEGORIES: dict[int, SyncErrorCategory] = {
    401: SyncErrorCategory.AUTHENTICATION_FAILED,
    403: SyncErrorCategory.AUTHENTICATION_FAILED,
    404: SyncErrorCategory.NOT_FOUND,
    429: SyncErrorCategory.RATE_LIMIT_EXCEEDED,
}

_MESSAGES: dict[SyncErrorCategory, str] = {
    SyncErrorCategory.NETWORK_ERROR: "Sync failed: the remote store is unreachable. Working offline.",
    SyncErrorCategory.AUTHENTICATION_FAILED: "Sync failed: the remote store rejected the credentials.",
    SyncErrorCategory.NOT_FOUND: "Sync failed: the remote document was not found.",
    SyncErrorCategory.RATE_LIMIT_EXCEEDED: "Sync failed: too many requests. Changes are kept locally.",
    SyncErrorCategory.INVALID_DOCUMENT: "Sync failed: the remote document could not be read.",
    SyncErrorCategory.UNKNOWN: "Sync failed. Changes are kept locally.",
}


def _match_error_pattern(
    *,
    error_str: str,
    exception_type: str,
    pattern_type: Literal["rate_limit", "auth", "network", "not_found"],
) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def classify_sync_error(exception: Exception) -> tuple[SyncErrorCategory, str]:
    """Classify a remote load/save error and return a user-facing status message.

    Status codes carried by the exception win over message inspection.

    Args:
        exception: The exception raised by a remote storage adapter

    Returns:
        Tuple of (SyncErrorCategory, user_friendly_message)
    """
    status_code = getattr(exception, "status_code", None)
    if isinstance(exception, httpx.HTTPStatusError):
        status_code = exception.response.status_code
    if status_code in _STATUS_CATEGORIES:
        category = _STATUS_CATEGORIES[status_code]
        return category, _MESSAGES[category]

    if isinstance(exception, httpx.TransportError):
        return SyncErrorCategory.NETWORK_ERROR, _MESSAGES[SyncErrorCategory.NETWORK_ERROR]

    if isinstance(exception, ValueError):
        return SyncErrorCategory.INVALID_DOCUMENT, _MESSAGES[SyncErrorCategory.INVALID_DOCUMENT]

    error_str = str(exception).lower()
    exception_type = type(exception).__name__

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="rate_limit"):
        category = SyncErrorCategory.RATE_LIMIT_EXCEEDED
    elif _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="auth"):
        category = SyncErrorCategory.AUTHENTICATION_FAILED
    elif _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="network"):
        category = SyncErrorCategory.NETWORK_ERROR
    elif _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="not_found"):
        category = SyncErrorCategory.NOT_FOUND
    else:
        category = SyncErrorCategory.UNKNOWN

    return category, _MESSAGES[category]
