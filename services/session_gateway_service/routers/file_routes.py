"""
File routes for Session Gateway Service.

Thin handlers over the storage client and update orchestrator. Sessions are
already validated by the middleware when a handler runs.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile

from gateway_service_libs.error_handling import GatewayError, raise_validation_error
from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.app.disconnect_guard import run_until_disconnected
from services.session_gateway_service.app.header_relay import RelayedHeaders
from services.session_gateway_service.config import Settings
from services.session_gateway_service.models.files import (
    FileLocatorResponse,
    OwnerField,
    SaveFromUrlRequest,
    StorageOwner,
)
from services.session_gateway_service.protocols import (
    FileStorageClientProtocol,
    FileUpdateOrchestratorProtocol,
    MetricsProtocol,
)

router = APIRouter()
logger = create_service_logger("session_gateway.file_routes")

SERVICE = "session_gateway_service"

T = TypeVar("T")


def owner_from_values(acl: str | None, email: str | None) -> StorageOwner | None:
    """Pick the owner tag; ``acl`` wins when both are given."""
    if acl:
        return StorageOwner(field=OwnerField.ACL, value=acl)
    if email:
        return StorageOwner(field=OwnerField.EMAIL, value=email)
    return None


def _form_text(form: FormData, name: str) -> str | None:
    value = form.get(name)
    return value if isinstance(value, str) and value else None


async def _parse_upload_form(
    request: Request, operation: str, correlation_id: UUID
) -> tuple[UploadFile, FormData]:
    try:
        form = await request.form()
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"Form parsing failed: {e}", exc_info=True)
        raise_validation_error(
            service=SERVICE,
            operation=operation,
            field="form",
            message="Failed to parse form data",
            correlation_id=correlation_id,
            error_type=type(e).__name__,
        )

    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise_validation_error(
            service=SERVICE,
            operation=operation,
            field="file",
            message="A file is required in the 'file' form field",
            correlation_id=correlation_id,
        )
    return upload, form


async def _guarded(
    request: Request,
    call: Awaitable[T],
    *,
    config: Settings,
    metrics: MetricsProtocol,
    endpoint: str,
    operation: str,
    correlation_id: UUID,
) -> T:
    """Run a storage call with disconnect cancellation and request metrics."""
    try:
        result = await run_until_disconnected(
            request,
            call,
            poll_interval=config.DISCONNECT_POLL_INTERVAL_SECONDS,
            correlation_id=correlation_id,
            operation=operation,
        )
    except GatewayError as e:
        metrics.api_errors_total.labels(endpoint=endpoint, error_type=e.error_code.lower()).inc()
        raise
    metrics.http_requests_total.labels(
        method=request.method, endpoint=endpoint, http_status="200"
    ).inc()
    return result


async def _save_upload(
    request: Request,
    *,
    endpoint: str,
    target_url: str,
    force_image: bool | None,
    storage_client: FileStorageClientProtocol,
    relayed: RelayedHeaders,
    config: Settings,
    metrics: MetricsProtocol,
    correlation_id: UUID,
) -> FileLocatorResponse:
    upload, form = await _parse_upload_form(request, "save_file", correlation_id)
    owner = owner_from_values(_form_text(form, "acl"), _form_text(form, "email"))

    logger.info(
        "File save requested",
        file_name=upload.filename,
        endpoint=endpoint,
        correlation_id=str(correlation_id),
    )
    locator = await _guarded(
        request,
        storage_client.save_file(
            upload, target_url, relayed, correlation_id, owner=owner, force_image=force_image
        ),
        config=config,
        metrics=metrics,
        endpoint=endpoint,
        operation="save_file",
        correlation_id=correlation_id,
    )
    return FileLocatorResponse(file_path=locator)


@router.post(
    "/files", response_model=FileLocatorResponse, summary="Save a file, detecting its kind"
)
@inject
async def save_file(
    request: Request,
    storage_client: FromDishka[FileStorageClientProtocol],
    relayed: FromDishka[RelayedHeaders],
    config: FromDishka[Settings],
    metrics: FromDishka[MetricsProtocol],
    correlation_id: FromDishka[UUID],
):
    """Multipart ``file`` plus optional ``acl`` or ``email``; returns ``{"file_path": ...}``."""
    return await _save_upload(
        request,
        endpoint="/v1/files",
        target_url=config.file_save_url,
        force_image=False,
        storage_client=storage_client,
        relayed=relayed,
        config=config,
        metrics=metrics,
        correlation_id=correlation_id,
    )


@router.post("/files/images", response_model=FileLocatorResponse, summary="Save an image")
@inject
async def save_image(
    request: Request,
    storage_client: FromDishka[FileStorageClientProtocol],
    relayed: FromDishka[RelayedHeaders],
    config: FromDishka[Settings],
    metrics: FromDishka[MetricsProtocol],
    correlation_id: FromDishka[UUID],
):
    """Like ``POST /files`` but only image extensions are accepted."""
    return await _save_upload(
        request,
        endpoint="/v1/files/images",
        target_url=config.image_save_url,
        force_image=True,
        storage_client=storage_client,
        relayed=relayed,
        config=config,
        metrics=metrics,
        correlation_id=correlation_id,
    )


@router.post(
    "/files/private-images", response_model=FileLocatorResponse, summary="Save a private image"
)
@inject
async def save_private_image(
    request: Request,
    storage_client: FromDishka[FileStorageClientProtocol],
    relayed: FromDishka[RelayedHeaders],
    config: FromDishka[Settings],
    metrics: FromDishka[MetricsProtocol],
    correlation_id: FromDishka[UUID],
):
    return await _save_upload(
        request,
        endpoint="/v1/files/private-images",
        target_url=config.private_image_save_url,
        force_image=True,
        storage_client=storage_client,
        relayed=relayed,
        config=config,
        metrics=metrics,
        correlation_id=correlation_id,
    )


@router.put("/files", response_model=FileLocatorResponse, summary="Replace a stored file")
@inject
async def update_file(
    request: Request,
    orchestrator: FromDishka[FileUpdateOrchestratorProtocol],
    relayed: FromDishka[RelayedHeaders],
    config: FromDishka[Settings],
    metrics: FromDishka[MetricsProtocol],
    correlation_id: FromDishka[UUID],
):
    """Save the uploaded ``file`` and then delete ``old_file_path``.

    Send ``images=true`` to save through the image endpoint. A failure to
    delete the old file does not fail the request.
    """
    upload, form = await _parse_upload_form(request, "update_file", correlation_id)
    old_locator = _form_text(form, "old_file_path")
    if not old_locator:
        raise_validation_error(
            service=SERVICE,
            operation="update_file",
            field="old_file_path",
            message="old_file_path is required in form data",
            correlation_id=correlation_id,
        )

    as_image = (_form_text(form, "images") or "").lower() == "true"
    owner = owner_from_values(_form_text(form, "acl"), _form_text(form, "email"))

    locator = await _guarded(
        request,
        orchestrator.update_file(
            upload,
            old_locator,
            config.image_save_url if as_image else config.file_save_url,
            config.file_delete_url,
            relayed,
            correlation_id,
            owner=owner,
            force_image=as_image,
        ),
        config=config,
        metrics=metrics,
        endpoint="/v1/files",
        operation="update_file",
        correlation_id=correlation_id,
    )
    return FileLocatorResponse(file_path=locator)


@router.delete("/files", summary="Delete a stored file")
@inject
async def delete_file(
    request: Request,
    storage_client: FromDishka[FileStorageClientProtocol],
    relayed: FromDishka[RelayedHeaders],
    config: FromDishka[Settings],
    metrics: FromDishka[MetricsProtocol],
    correlation_id: FromDishka[UUID],
    file_path: str | None = None,
):
    if not file_path:
        raise_validation_error(
            service=SERVICE,
            operation="delete_file",
            field="file_path",
            message="file_path query parameter is required",
            correlation_id=correlation_id,
        )

    await _guarded(
        request,
        storage_client.delete_file(file_path, config.file_delete_url, relayed, correlation_id),
        config=config,
        metrics=metrics,
        endpoint="/v1/files",
        operation="delete_file",
        correlation_id=correlation_id,
    )
    return JSONResponse(status_code=200, content={"file_path": file_path, "deleted": True})


@router.post(
    "/files/from-url", response_model=FileLocatorResponse, summary="Import an image from a URL"
)
@inject
async def save_file_from_url(
    request: Request,
    body: SaveFromUrlRequest,
    storage_client: FromDishka[FileStorageClientProtocol],
    config: FromDishka[Settings],
    metrics: FromDishka[MetricsProtocol],
    correlation_id: FromDishka[UUID],
):
    """JSON ``{"url": ..., "acl"|"email": ...}``; returns ``{"file_path": ...}``."""
    owner = owner_from_values(body.acl, body.email)
    if owner is None:
        raise_validation_error(
            service=SERVICE,
            operation="save_file_from_url",
            field="acl",
            message="Either acl or email is required",
            correlation_id=correlation_id,
        )

    locator = await _guarded(
        request,
        storage_client.save_file_from_url(body.url, owner, correlation_id),
        config=config,
        metrics=metrics,
        endpoint="/v1/files/from-url",
        operation="save_file_from_url",
        correlation_id=correlation_id,
    )
    return FileLocatorResponse(file_path=locator)
