"""
Session validation gate.

Every non-public request must carry an Authorization header (and, when
configured, a Client-Type header) and be accepted by the identity service
before it reaches a handler. The gateway never decides validity itself.
"""

from __future__ import annotations

from uuid import UUID

from starlette.requests import Request

from gateway_service_libs.error_handling import raise_missing_header
from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.app.disconnect_guard import run_until_disconnected
from services.session_gateway_service.app.header_relay import (
    AUTHORIZATION,
    CLIENT_TYPE,
    extract_relayed_headers,
)
from services.session_gateway_service.config import Settings
from services.session_gateway_service.models.identity import SessionOutcome
from services.session_gateway_service.protocols import (
    IdentityClientProtocol,
    SessionValidatorProtocol,
)

logger = create_service_logger("session_gateway.session_validator")


def normalize_path(path: str) -> str:
    """Strip trailing slashes; the empty path becomes ``/``."""
    return path.rstrip("/") or "/"


def has_request_body(request: Request) -> bool:
    """True when the client announced a body, fixed-length or chunked."""
    if "transfer-encoding" in request.headers:
        return True
    content_length = request.headers.get("content-length", "").strip()
    return bool(content_length) and content_length != "0"


class SessionValidator(SessionValidatorProtocol):
    def __init__(self, settings: Settings, identity_client: IdentityClientProtocol) -> None:
        self._settings = settings
        self._identity_client = identity_client
        self._public_paths = frozenset(normalize_path(p) for p in settings.PUBLIC_PATHS)

    def is_public_path(self, path: str) -> bool:
        return normalize_path(path) in self._public_paths

    async def validate(self, request: Request, correlation_id: UUID) -> SessionOutcome:
        path = request.url.path
        if self.is_public_path(path):
            logger.debug("Public path; session check bypassed", path=path)
            return SessionOutcome.BYPASSED

        relayed = extract_relayed_headers(request)

        if not relayed.authorization:
            logger.info(
                "Rejected request without Authorization header",
                path=path,
                correlation_id=str(correlation_id),
            )
            raise_missing_header(
                service="session_gateway_service",
                operation="validate_session",
                header_name=AUTHORIZATION,
                message="Missing Authorization header",
                correlation_id=correlation_id,
            )

        if self._settings.REQUIRE_CLIENT_TYPE and not relayed.client_type:
            logger.info(
                "Rejected request without Client-Type header",
                path=path,
                correlation_id=str(correlation_id),
            )
            raise_missing_header(
                service="session_gateway_service",
                operation="validate_session",
                header_name=CLIENT_TYPE,
                message="Missing Client header",
                correlation_id=correlation_id,
            )

        validation = self._identity_client.validate_session(relayed, correlation_id)
        if has_request_body(request):
            # Polling receive for a disconnect would consume body chunks
            await validation
        else:
            # Empty body, cached so the handler can still read it
            await request.body()
            await run_until_disconnected(
                request,
                validation,
                poll_interval=self._settings.DISCONNECT_POLL_INTERVAL_SECONDS,
                correlation_id=correlation_id,
                operation="validate_session",
            )

        logger.debug("Session accepted", path=path, correlation_id=str(correlation_id))
        return SessionOutcome.PASSED
