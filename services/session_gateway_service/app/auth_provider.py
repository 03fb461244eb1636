from __future__ import annotations

from uuid import UUID, uuid4

from dishka import Provider, Scope, provide
from fastapi import Request

from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.app.header_relay import (
    AUTHORIZATION,
    RelayedHeaders,
    extract_relayed_headers,
)
from services.session_gateway_service.app.token_inspector import extract_user_id
from services.session_gateway_service.models.identity import UserId

logger = create_service_logger("session_gateway.auth_provider")


class RequestContextProvider(Provider):
    """Provider for per-request context at REQUEST scope.

    The FastAPI ``Request`` comes from dishka's FastapiProvider context.
    Nothing here performs authentication; the session middleware already
    delegated that to the identity service.
    """

    @provide(scope=Scope.REQUEST)
    def provide_correlation_id(self, request: Request) -> UUID:
        """Provide correlation ID from request state as UUID."""
        return getattr(request.state, "correlation_id", None) or uuid4()

    @provide(scope=Scope.REQUEST)
    def provide_relayed_headers(self, request: Request) -> RelayedHeaders:
        return extract_relayed_headers(request)

    @provide(scope=Scope.REQUEST)
    def provide_user_id(self, request: Request, correlation_id: UUID) -> UserId:
        """Advisory user identifier read from the unverified token payload.

        Only usable as a hint (logging, owner tagging). Raises a 401-mapped
        GatewayError when the header or claim is missing or malformed.
        """
        user_id = extract_user_id(request.headers.get(AUTHORIZATION, ""), correlation_id)
        logger.debug("Resolved user id hint", correlation_id=str(correlation_id))
        return user_id
