"""FastAPI integration for structured gateway errors."""

from __future__ import annotations

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gateway_service_libs.error_handling.error_enums import ErrorCode
from gateway_service_libs.error_handling.factories import create_error_detail
from gateway_service_libs.error_handling.gateway_error import GatewayError
from gateway_service_libs.logging_utils import create_service_logger

logger = create_service_logger("gateway_service_libs.error_handling.fastapi")

# Nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.MISSING_HEADER: 401,
    ErrorCode.MALFORMED_TOKEN: 401,
    ErrorCode.CLAIM_MISSING: 401,
    ErrorCode.CLAIM_INVALID: 401,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.UNSUPPORTED_FILE_TYPE: 415,
    ErrorCode.TRANSPORT_FAILURE: 500,
    ErrorCode.DECODE_FAILURE: 502,
    ErrorCode.REQUEST_CANCELLED: CLIENT_CLOSED_REQUEST,
    ErrorCode.UNKNOWN_ERROR: 500,
}


def status_code_for(error: GatewayError) -> int:
    """Resolve the HTTP status for an error.

    Upstream rejections keep the status the dependency answered with.
    """
    detail = error.error_detail
    if detail.error_code is ErrorCode.UPSTREAM_REJECTED:
        upstream_status = detail.details.get("upstream_status")
        if isinstance(upstream_status, int) and 400 <= upstream_status <= 599:
            return upstream_status
        return 502
    return ERROR_CODE_TO_HTTP_STATUS.get(detail.error_code, 500)


def build_error_response(error: GatewayError) -> JSONResponse:
    """Render an error as ``{"error": ..., "error_code": ..., "correlation_id": ...}``."""
    return JSONResponse(
        status_code=status_code_for(error),
        content={
            "error": error.error_detail.message,
            "error_code": error.error_code,
            "correlation_id": error.correlation_id,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register handlers for GatewayError and for unexpected exceptions."""

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        logger.warning(
            "Request failed",
            error_code=exc.error_code,
            operation=exc.operation,
            path=request.url.path,
            correlation_id=exc.correlation_id,
        )
        return build_error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", None) or uuid4()
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            error_type=type(exc).__name__,
            correlation_id=str(correlation_id),
            exc_info=True,
        )
        unknown = create_error_detail(
            ErrorCode.UNKNOWN_ERROR,
            message="Internal server error",
            service=app.title,
            operation=f"{request.method} {request.url.path}",
            correlation_id=correlation_id,
            details={"error_type": type(exc).__name__},
        )
        return build_error_response(GatewayError(unknown))
