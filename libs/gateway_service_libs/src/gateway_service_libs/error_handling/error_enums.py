"""Error codes shared by gateway services."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Canonical error taxonomy for the session gateway."""

    MISSING_HEADER = "MISSING_HEADER"
    MALFORMED_TOKEN = "MALFORMED_TOKEN"
    CLAIM_MISSING = "CLAIM_MISSING"
    CLAIM_INVALID = "CLAIM_INVALID"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    UPSTREAM_REJECTED = "UPSTREAM_REJECTED"
    DECODE_FAILURE = "DECODE_FAILURE"
    UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    REQUEST_CANCELLED = "REQUEST_CANCELLED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
