"""Test providers for Session Gateway Service tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, provide
from prometheus_client import CollectorRegistry

from services.session_gateway_service.app.metrics import GatewayMetrics
from services.session_gateway_service.config import Settings
from services.session_gateway_service.implementations.file_kind_classifier import (
    FileKindClassifier,
)
from services.session_gateway_service.implementations.http_client import GatewayHttpClient
from services.session_gateway_service.implementations.identity_client_impl import (
    IdentityServiceClient,
)
from services.session_gateway_service.implementations.session_validator_impl import (
    SessionValidator,
)
from services.session_gateway_service.implementations.storage_client_impl import (
    FileStorageClient,
)
from services.session_gateway_service.implementations.update_orchestrator_impl import (
    FileUpdateOrchestrator,
)
from services.session_gateway_service.protocols import (
    ContentSnifferProtocol,
    FileKindClassifierProtocol,
    FileStorageClientProtocol,
    FileUpdateOrchestratorProtocol,
    HttpClientProtocol,
    IdentityClientProtocol,
    MetricsProtocol,
    SessionValidatorProtocol,
)

IDENTITY_URL = "http://identity.test"
STORAGE_URL = "http://storage.test/"


def make_test_settings(**overrides) -> Settings:
    values = {
        "SERVICE_NAME": "session_gateway_service_test",
        "IDENTITY_SERVICE_URL": IDENTITY_URL,
        "FILE_STORAGE_URL": STORAGE_URL,
        "CORS_ORIGINS": "http://localhost:5173, https://app.example.com",
        "DISCONNECT_POLL_INTERVAL_SECONDS": 0.01,
    }
    values.update(overrides)
    return Settings(**values)


class FakeContentSniffer(ContentSnifferProtocol):
    """Signature-prefix sniffer so tests do not need libmagic."""

    SIGNATURES = (
        (b"\xff\xd8\xff", "image/jpeg"),
        (b"\x89PNG\r\n\x1a\n", "image/png"),
        (b"GIF8", "image/gif"),
        (b"%PDF-", "application/pdf"),
        (b"PK\x03\x04", "application/zip"),
    )

    def __init__(self) -> None:
        self.calls: list[bytes] = []

    def sniff(self, head: bytes) -> str:
        self.calls.append(head)
        for prefix, mime in self.SIGNATURES:
            if head.startswith(prefix):
                return mime
        return "application/octet-stream"


class GatewayTestProvider(Provider):
    """
    Test provider mirroring the production GatewayProvider.

    Uses a real httpx client so tests can intercept downstream calls with
    respx, an isolated Prometheus registry and a fake content sniffer.
    """

    scope = Scope.APP

    def __init__(self, settings: Settings | None = None):
        super().__init__()
        self.settings = settings or make_test_settings()

    @provide
    def get_config(self) -> Settings:
        """Provide test settings."""
        return self.settings

    @provide
    async def get_http_client(self) -> AsyncIterator[HttpClientProtocol]:
        """Provide real HTTP client for tests that use respx mocking."""
        async with httpx.AsyncClient() as client:
            yield GatewayHttpClient(client)

    @provide
    def provide_registry(self) -> CollectorRegistry:
        """Provide isolated Prometheus registry."""
        return CollectorRegistry()

    @provide
    def provide_metrics(self, registry: CollectorRegistry) -> MetricsProtocol:
        return GatewayMetrics(registry=registry)

    @provide
    def provide_content_sniffer(self) -> ContentSnifferProtocol:
        return FakeContentSniffer()

    @provide
    def provide_classifier(self, sniffer: ContentSnifferProtocol) -> FileKindClassifierProtocol:
        return FileKindClassifier(sniffer)

    @provide
    def provide_identity_client(
        self, http_client: HttpClientProtocol, config: Settings, metrics: MetricsProtocol
    ) -> IdentityClientProtocol:
        return IdentityServiceClient(http_client, config, metrics)

    @provide
    def provide_session_validator(
        self, config: Settings, identity_client: IdentityClientProtocol
    ) -> SessionValidatorProtocol:
        return SessionValidator(config, identity_client)

    @provide
    def provide_storage_client(
        self,
        http_client: HttpClientProtocol,
        classifier: FileKindClassifierProtocol,
        config: Settings,
        metrics: MetricsProtocol,
    ) -> FileStorageClientProtocol:
        return FileStorageClient(http_client, classifier, config, metrics)

    @provide
    def provide_update_orchestrator(
        self, storage_client: FileStorageClientProtocol
    ) -> FileUpdateOrchestratorProtocol:
        return FileUpdateOrchestrator(storage_client)
