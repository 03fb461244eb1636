"""Middleware for the Session Gateway Service.

Registration order in ``create_app`` puts CORSGateMiddleware outermost, then
CorrelationIDMiddleware, then SessionValidationMiddleware.
"""

from uuid import UUID, uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from gateway_service_libs.error_handling import GatewayError
from gateway_service_libs.error_handling.fastapi import build_error_response
from gateway_service_libs.logging_utils import (
    bind_request_context,
    clear_request_context,
    create_service_logger,
)
from services.session_gateway_service.config import Settings
from services.session_gateway_service.protocols import MetricsProtocol, SessionValidatorProtocol
from services.session_gateway_service.utils.cors_utils import (
    get_cors_headers,
    parse_allowed_origins,
)

logger = create_service_logger("session_gateway.middleware")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Middleware to ensure every request has a correlation ID as UUID."""

    async def dispatch(self, request: Request, call_next):
        """Extract or generate correlation ID and store as UUID in request state."""
        x_correlation_id = request.headers.get("X-Correlation-ID")
        if x_correlation_id:
            try:
                correlation_id = UUID(x_correlation_id)
            except ValueError:
                logger.warning(
                    "Invalid correlation ID format, generating new one",
                    received=x_correlation_id,
                )
                correlation_id = uuid4()
        else:
            correlation_id = uuid4()

        request.state.correlation_id = correlation_id
        bind_request_context(
            str(correlation_id), method=request.method, path=request.url.path
        )
        try:
            response = await call_next(request)
        finally:
            clear_request_context()

        response.headers["X-Correlation-ID"] = str(correlation_id)
        return response


class CORSGateMiddleware(BaseHTTPMiddleware):
    """Echoes allow-listed origins and answers preflight requests with 204.

    Requests from other origins are still passed through, just without
    ``Access-Control-Allow-Origin``. The allow-list comes from the Settings
    held by the app's dishka container and is parsed on first use.
    """

    allowed_origins: frozenset[str] | None = None

    async def _allowed_origins(self, request: Request) -> frozenset[str]:
        if self.allowed_origins is None:
            config = await request.app.state.dishka_container.get(Settings)
            self.allowed_origins = frozenset(parse_allowed_origins(config.CORS_ORIGINS))
        return self.allowed_origins

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("Origin")
        allowed_origins = await self._allowed_origins(request)

        if request.method == "OPTIONS":
            response: Response = Response(status_code=204)
        else:
            response = await call_next(request)

        response.headers.update(get_cors_headers(origin, allowed_origins))
        return response


class SessionValidationMiddleware(BaseHTTPMiddleware):
    """Admits a request only after the identity service accepted its session.

    The validator is resolved from the dishka container attached to the app,
    so tests can swap the identity client through a provider.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        correlation_id: UUID = getattr(request.state, "correlation_id", None) or uuid4()
        container = request.app.state.dishka_container
        validator = await container.get(SessionValidatorProtocol)
        metrics = await container.get(MetricsProtocol)

        try:
            outcome = await validator.validate(request, correlation_id)
        except GatewayError as e:
            metrics.session_validations_total.labels(outcome=e.error_code.lower()).inc()
            logger.info(
                "Session rejected",
                error_code=e.error_code,
                path=request.url.path,
                correlation_id=str(correlation_id),
            )
            return build_error_response(e)

        metrics.session_validations_total.labels(outcome=outcome.value).inc()
        return await call_next(request)
