from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, provide
from prometheus_client import REGISTRY, CollectorRegistry

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


class GatewayProvider(Provider):
    scope = Scope.APP

    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self._settings = settings

    @provide
    def get_config(self) -> Settings:
        return self._settings

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Settings) -> AsyncIterator[HttpClientProtocol]:
        # Shared connection pool; per-call timeouts override these defaults
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.HTTP_CLIENT_TIMEOUT_SECONDS,
                connect=config.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS,
            )
        ) as httpx_client:
            yield GatewayHttpClient(httpx_client)

    @provide(scope=Scope.APP)
    def provide_registry(self) -> CollectorRegistry:
        return REGISTRY

    @provide(scope=Scope.APP)
    def provide_metrics(self, registry: CollectorRegistry) -> MetricsProtocol:
        return GatewayMetrics(registry=registry)

    @provide
    def provide_content_sniffer(self) -> ContentSnifferProtocol:
        # Deferred: loading python-magic requires the libmagic system library
        from services.session_gateway_service.implementations.content_sniffer_impl import (
            MagicContentSniffer,
        )

        return MagicContentSniffer()

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
