"""
File storage service client.

Proxies uploads, remote-URL imports and deletions to the storage service and
interprets its responses. Every non-200 answer is a hard failure carrying the
upstream status and body.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlsplit
from uuid import UUID

import httpx
from pydantic import ValidationError

from gateway_service_libs.error_handling import (
    raise_decode_failure,
    raise_transport_failure,
    raise_upstream_rejected,
)
from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.app.header_relay import (
    RelayedHeaders,
    apply_relayed_headers,
)
from services.session_gateway_service.config import Settings
from services.session_gateway_service.models.files import (
    FileKind,
    StorageLocator,
    StorageOwner,
    StorageSaveResponse,
    UploadedFileProtocol,
)
from services.session_gateway_service.protocols import (
    FileKindClassifierProtocol,
    FileStorageClientProtocol,
    HttpClientProtocol,
    MetricsProtocol,
)

logger = create_service_logger("session_gateway.storage_client")

SERVICE = "session_gateway_service"
STORAGE_SERVICE = "file_storage_service"

FILE_FIELD = "file"
KIND_FIELD = "Kindfile"
REMOTE_IMAGE_KIND = "images"

# Endpoints whose path contains this marker only accept images
IMAGE_ENDPOINT_MARKER = "Images"


def is_image_endpoint(endpoint: str) -> bool:
    return IMAGE_ENDPOINT_MARKER in endpoint


def _endpoint_label(url: str) -> str:
    return urlsplit(url).path or "/"


class FileStorageClient(FileStorageClientProtocol):
    """Client for the file storage service save, import and delete endpoints."""

    def __init__(
        self,
        http_client: HttpClientProtocol,
        classifier: FileKindClassifierProtocol,
        settings: Settings,
        metrics: MetricsProtocol,
    ) -> None:
        self._http_client = http_client
        self._classifier = classifier
        self._settings = settings
        self._metrics = metrics

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
    ) -> StorageLocator:
        """Forward an upload as multipart and return the storage locator.

        When ``force_image`` is None it is inferred from the endpoint: image
        endpoints reject non-image extensions instead of auto-detecting.
        """
        filename = upload.filename or "unnamed"
        if force_image is None:
            force_image = is_image_endpoint(endpoint)

        if force_image:
            kind = self._classifier.require_image(filename, correlation_id)
            detection = await self._classifier.detect(upload)
        else:
            detection = await self._classifier.detect(upload)
            kind = detection.kind

        if kind is FileKind.UNKNOWN:
            logger.info(
                "Forwarding upload with unknown file kind",
                file_name=filename,
                content_type=detection.content_type,
                correlation_id=str(correlation_id),
            )

        content = await upload.read()

        form_data: dict[str, str] = {KIND_FIELD: kind.value}
        if owner is not None:
            form_data.update(owner.as_form_field())
        for name, value in (extra_fields or {}).items():
            form_data.setdefault(name, value)

        headers: dict[str, str] = {}
        apply_relayed_headers(headers, relayed)

        files = [(FILE_FIELD, (filename, content, detection.content_type))]

        logger.info(
            "Saving file to storage service",
            file_name=filename,
            size_bytes=len(content),
            kind=kind.value,
            content_type=detection.content_type,
            endpoint=endpoint,
            correlation_id=str(correlation_id),
        )

        response = await self._send(
            operation="save_file",
            method="POST",
            url=endpoint,
            correlation_id=correlation_id,
            send=lambda: self._http_client.post(
                endpoint,
                files=files,
                data=form_data,
                headers=headers,
                timeout=self._settings.STORAGE_TIMEOUT_SECONDS,
            ),
        )
        return self._read_locator(response, "save_file", correlation_id)

    async def save_file_from_url(
        self,
        url: str,
        owner: StorageOwner,
        correlation_id: UUID,
        endpoint: str | None = None,
    ) -> StorageLocator:
        """Ask the storage service to import an image from a third-party URL."""
        target = endpoint or self._settings.images_from_url_url
        payload: dict[str, Any] = {
            "Url": url,
            KIND_FIELD: REMOTE_IMAGE_KIND,
            **owner.as_form_field(),
        }

        logger.info(
            "Importing remote image into storage service",
            endpoint=target,
            owner_field=owner.field.value,
            correlation_id=str(correlation_id),
        )

        response = await self._send(
            operation="save_file_from_url",
            method="POST",
            url=target,
            correlation_id=correlation_id,
            send=lambda: self._http_client.post(
                target, json=payload, timeout=self._settings.STORAGE_TIMEOUT_SECONDS
            ),
        )
        return self._read_locator(response, "save_file_from_url", correlation_id)

    async def delete_file(
        self,
        locator: str,
        endpoint: str,
        relayed: RelayedHeaders,
        correlation_id: UUID,
    ) -> None:
        headers: dict[str, str] = {}
        apply_relayed_headers(headers, relayed)

        response = await self._send(
            operation="delete_file",
            method="DELETE",
            url=endpoint,
            correlation_id=correlation_id,
            send=lambda: self._http_client.delete(
                endpoint,
                params={"file_path": locator},
                headers=headers,
                timeout=self._settings.STORAGE_TIMEOUT_SECONDS,
            ),
        )

        if response.status_code != 200:
            logger.warning(
                "Storage service refused file deletion",
                file_path=locator,
                status_code=response.status_code,
                correlation_id=str(correlation_id),
            )
            raise_upstream_rejected(
                service=SERVICE,
                operation="delete_file",
                upstream_service=STORAGE_SERVICE,
                status_code=response.status_code,
                body=response.text,
                correlation_id=correlation_id,
                file_path=locator,
            )

        logger.info("File deleted", file_path=locator, correlation_id=str(correlation_id))

    async def _send(
        self,
        *,
        operation: str,
        method: str,
        url: str,
        correlation_id: UUID,
        send: Callable[[], Awaitable[httpx.Response]],
    ) -> httpx.Response:
        """Issue one downstream call, recording metrics and mapping transport errors."""
        endpoint_label = _endpoint_label(url)
        try:
            with self._metrics.downstream_service_call_duration_seconds.labels(
                service=STORAGE_SERVICE, method=method, endpoint=endpoint_label
            ).time():
                response = await send()
        except httpx.RequestError as e:
            logger.error(
                "Storage service request failed",
                operation=operation,
                url=url,
                error_type=type(e).__name__,
                error=str(e),
                correlation_id=str(correlation_id),
            )
            self._metrics.downstream_service_calls_total.labels(
                service=STORAGE_SERVICE,
                method=method,
                endpoint=endpoint_label,
                status_code="transport_error",
            ).inc()
            raise_transport_failure(
                service=SERVICE,
                operation=operation,
                target=STORAGE_SERVICE,
                message="File storage service is unreachable",
                correlation_id=correlation_id,
                error_type=type(e).__name__,
            )

        self._metrics.downstream_service_calls_total.labels(
            service=STORAGE_SERVICE,
            method=method,
            endpoint=endpoint_label,
            status_code=str(response.status_code),
        ).inc()
        return response

    def _read_locator(
        self, response: httpx.Response, operation: str, correlation_id: UUID
    ) -> StorageLocator:
        if response.status_code != 200:
            logger.warning(
                "Storage service rejected upload",
                operation=operation,
                status_code=response.status_code,
                correlation_id=str(correlation_id),
            )
            raise_upstream_rejected(
                service=SERVICE,
                operation=operation,
                upstream_service=STORAGE_SERVICE,
                status_code=response.status_code,
                body=response.text,
                correlation_id=correlation_id,
            )

        try:
            saved = StorageSaveResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(
                "Could not decode storage service response",
                operation=operation,
                error=str(e),
                correlation_id=str(correlation_id),
            )
            raise_decode_failure(
                service=SERVICE,
                operation=operation,
                upstream_service=STORAGE_SERVICE,
                message="Invalid response from file storage service",
                correlation_id=correlation_id,
            )

        logger.info(
            "File stored",
            operation=operation,
            file_path=saved.file_path,
            correlation_id=str(correlation_id),
        )
        return StorageLocator(saved.file_path)
