"""Structured error handling for gateway services.

Framework-specific integration lives in ``gateway_service_libs.error_handling.fastapi``.
"""

from .error_enums import ErrorCode
from .error_models import ErrorDetail
from .factories import (
    create_error_detail,
    raise_claim_invalid,
    raise_claim_missing,
    raise_decode_failure,
    raise_malformed_token,
    raise_missing_header,
    raise_request_cancelled,
    raise_transport_failure,
    raise_upstream_rejected,
    raise_validation_error,
)
from .gateway_error import GatewayError

__all__ = [
    "ErrorCode",
    "ErrorDetail",
    "GatewayError",
    "create_error_detail",
    "raise_claim_invalid",
    "raise_claim_missing",
    "raise_decode_failure",
    "raise_malformed_token",
    "raise_missing_header",
    "raise_request_cancelled",
    "raise_transport_failure",
    "raise_upstream_rejected",
    "raise_validation_error",
]
