"""
Protocols for the Session Gateway Service.

Defines the interfaces used for dependency injection. Routers and middleware
depend on these protocols, not on concrete implementations.
"""

from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

import httpx
from prometheus_client import Counter, Histogram
from starlette.requests import Request

from services.session_gateway_service.app.header_relay import RelayedHeaders
from services.session_gateway_service.models.files import (
    FileDetection,
    FileKind,
    StorageLocator,
    StorageOwner,
    UploadedFileProtocol,
)
from services.session_gateway_service.models.identity import SessionOutcome


class HttpClientProtocol(Protocol):
    """Protocol for HTTP client dependencies."""

    async def post(
        self,
        url: str,
        *,
        data: dict | None = None,
        files: list | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> httpx.Response:
        """Send POST request with form data, files or a JSON body."""
        ...

    async def delete(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> httpx.Response:
        """Send DELETE request."""
        ...


class MetricsProtocol(Protocol):
    """Protocol for metrics collection matching GatewayMetrics exactly."""

    @property
    def http_requests_total(self) -> Counter: ...

    @property
    def downstream_service_calls_total(self) -> Counter: ...

    @property
    def downstream_service_call_duration_seconds(self) -> Histogram: ...

    @property
    def session_validations_total(self) -> Counter: ...

    @property
    def api_errors_total(self) -> Counter: ...


class ContentSnifferProtocol(Protocol):
    """Detects a MIME type from the leading bytes of a file."""

    def sniff(self, head: bytes) -> str: ...


class FileKindClassifierProtocol(Protocol):
    def classify(self, filename: str, head: bytes) -> FileKind: ...

    def require_image(self, filename: str, correlation_id: UUID) -> FileKind: ...

    def content_type_for(self, filename: str, head: bytes) -> str: ...

    async def detect(self, upload: UploadedFileProtocol) -> FileDetection: ...


class IdentityClientProtocol(Protocol):
    """Client for the identity service session check."""

    async def validate_session(self, relayed: RelayedHeaders, correlation_id: UUID) -> None:
        """Return on a valid session; raise GatewayError otherwise."""
        ...


class FileStorageClientProtocol(Protocol):
    """Client for the file storage service."""

    async def save_file(
        self,
        upload: UploadedFileProtocol,
        endpoint: str,
        relayed: RelayedHeaders,
        correlation_id: UUID,
        *,
        owner: StorageOwner | None = None,
        force_image: bool | None = None,
        extra_fields: dict[str, str] | None = None,
    ) -> StorageLocator: ...

    async def save_file_from_url(
        self,
        url: str,
        owner: StorageOwner,
        correlation_id: UUID,
        endpoint: str | None = None,
    ) -> StorageLocator: ...

    async def delete_file(
        self,
        locator: str,
        endpoint: str,
        relayed: RelayedHeaders,
        correlation_id: UUID,
    ) -> None: ...


class FileUpdateOrchestratorProtocol(Protocol):
    async def update_file(
        self,
        upload: UploadedFileProtocol,
        old_locator: str,
        save_endpoint: str,
        delete_endpoint: str,
        relayed: RelayedHeaders,
        correlation_id: UUID,
        *,
        owner: StorageOwner | None = None,
        force_image: bool | None = None,
    ) -> StorageLocator: ...


class SessionValidatorProtocol(Protocol):
    """Decides whether a request may reach the application handlers."""

    def is_public_path(self, path: str) -> bool: ...

    async def validate(self, request: Request, correlation_id: UUID) -> SessionOutcome:
        """Return the outcome for an admitted request; raise GatewayError otherwise."""
        ...
