"""Identity service client used for session validation."""

from __future__ import annotations

from uuid import UUID

import httpx

from gateway_service_libs.error_handling import raise_transport_failure, raise_upstream_rejected
from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.app.header_relay import (
    RelayedHeaders,
    apply_relayed_headers,
)
from services.session_gateway_service.config import Settings
from services.session_gateway_service.protocols import (
    HttpClientProtocol,
    IdentityClientProtocol,
    MetricsProtocol,
)

logger = create_service_logger("session_gateway.identity_client")

VALIDATE_ENDPOINT_LABEL = "/api/v1/ValidateJWT"


class IdentityServiceClient(IdentityClientProtocol):
    """Asks the identity service whether the caller's session is valid.

    A single attempt is made per call; there is no retry. Any transport
    failure is reported as a rejection (fail-closed).
    """

    def __init__(
        self, http_client: HttpClientProtocol, settings: Settings, metrics: MetricsProtocol
    ) -> None:
        self._http_client = http_client
        self._settings = settings
        self._metrics = metrics

    async def validate_session(self, relayed: RelayedHeaders, correlation_id: UUID) -> None:
        headers: dict[str, str] = {}
        apply_relayed_headers(headers, relayed)

        try:
            with self._metrics.downstream_service_call_duration_seconds.labels(
                service="identity_service", method="POST", endpoint=VALIDATE_ENDPOINT_LABEL
            ).time():
                response = await self._http_client.post(
                    self._settings.validate_session_url,
                    headers=headers,
                    timeout=self._settings.IDENTITY_TIMEOUT_SECONDS,
                )
        except httpx.RequestError as e:
            logger.error(
                "Session validation request failed",
                error_type=type(e).__name__,
                error=str(e),
                correlation_id=str(correlation_id),
            )
            self._metrics.downstream_service_calls_total.labels(
                service="identity_service",
                method="POST",
                endpoint=VALIDATE_ENDPOINT_LABEL,
                status_code="transport_error",
            ).inc()
            raise_transport_failure(
                service="session_gateway_service",
                operation="validate_session",
                target="identity_service",
                message="Failed to validate session",
                correlation_id=correlation_id,
                error_type=type(e).__name__,
            )

        self._metrics.downstream_service_calls_total.labels(
            service="identity_service",
            method="POST",
            endpoint=VALIDATE_ENDPOINT_LABEL,
            status_code=str(response.status_code),
        ).inc()

        if response.status_code != 200:
            logger.info(
                "Identity service rejected session",
                status_code=response.status_code,
                correlation_id=str(correlation_id),
            )
            raise_upstream_rejected(
                service="session_gateway_service",
                operation="validate_session",
                upstream_service="identity_service",
                status_code=response.status_code,
                body=response.text,
                correlation_id=correlation_id,
            )
