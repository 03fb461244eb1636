"""
Factory functions for raising structured GatewayError instances.

Each factory builds an ErrorDetail with a consistent shape and raises it.
Additional keyword arguments are stored verbatim in ErrorDetail.details.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, NoReturn
from uuid import UUID

from gateway_service_libs.error_handling.error_enums import ErrorCode
from gateway_service_libs.error_handling.error_models import ErrorDetail
from gateway_service_libs.error_handling.gateway_error import GatewayError


def create_error_detail(
    error_code: ErrorCode,
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID,
    details: dict[str, Any] | None = None,
) -> ErrorDetail:
    return ErrorDetail(
        error_code=error_code,
        message=message,
        correlation_id=correlation_id,
        timestamp=datetime.now(UTC),
        service=service,
        operation=operation,
        details=details or {},
    )


def _raise(
    error_code: ErrorCode,
    *,
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    details: dict[str, Any],
) -> NoReturn:
    raise GatewayError(
        create_error_detail(
            error_code=error_code,
            message=message,
            service=service,
            operation=operation,
            correlation_id=correlation_id,
            details=details,
        )
    )


# =============================================================================
# Request / identity errors
# =============================================================================


def raise_missing_header(
    service: str,
    operation: str,
    header_name: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    """Raise when a required inbound header is absent or empty."""
    _raise(
        ErrorCode.MISSING_HEADER,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        details={"header_name": header_name, **additional_context},
    )


def raise_malformed_token(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    reason: str,
    **additional_context: Any,
) -> NoReturn:
    """Raise when a bearer value or token cannot be parsed.

    ``reason`` distinguishes empty input, wrong part count and undecodable
    structure.
    """
    _raise(
        ErrorCode.MALFORMED_TOKEN,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        details={"reason": reason, **additional_context},
    )


def raise_claim_missing(
    service: str,
    operation: str,
    claim_name: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.CLAIM_MISSING,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        details={"claim_name": claim_name, **additional_context},
    )


def raise_claim_invalid(
    service: str,
    operation: str,
    claim_name: str,
    message: str,
    correlation_id: UUID,
    reason: str,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.CLAIM_INVALID,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        details={"claim_name": claim_name, "reason": reason, **additional_context},
    )


# =============================================================================
# Downstream service errors
# =============================================================================


def raise_transport_failure(
    service: str,
    operation: str,
    target: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    """Raise when a downstream call fails before a response is received."""
    _raise(
        ErrorCode.TRANSPORT_FAILURE,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        details={"target": target, **additional_context},
    )


def raise_upstream_rejected(
    service: str,
    operation: str,
    upstream_service: str,
    status_code: int,
    body: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    """Raise when a dependency answers with a non-200 status.

    The upstream body becomes the error message so it can be relayed verbatim.
    """
    _raise(
        ErrorCode.UPSTREAM_REJECTED,
        service=service,
        operation=operation,
        message=body,
        correlation_id=correlation_id,
        details={
            "upstream_service": upstream_service,
            "upstream_status": status_code,
            **additional_context,
        },
    )


def raise_decode_failure(
    service: str,
    operation: str,
    upstream_service: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    _raise(
        ErrorCode.DECODE_FAILURE,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        details={"upstream_service": upstream_service, **additional_context},
    )


# =============================================================================
# Upload validation errors
# =============================================================================


def raise_validation_error(
    service: str,
    operation: str,
    field: str,
    message: str,
    correlation_id: UUID,
    value: Any = None,
    **additional_context: Any,
) -> NoReturn:
    details: dict[str, Any] = {"field": field, **additional_context}
    if value is not None:
        details["value"] = value
    _raise(
        ErrorCode.VALIDATION_ERROR,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        details=details,
    )


# =============================================================================
# Generic errors
# =============================================================================


def raise_request_cancelled(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    """Raise when the inbound client went away while work was in flight."""
    _raise(
        ErrorCode.REQUEST_CANCELLED,
        service=service,
        operation=operation,
        message=message,
        correlation_id=correlation_id,
        details=dict(additional_context),
    )
