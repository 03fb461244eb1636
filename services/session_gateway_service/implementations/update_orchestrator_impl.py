"""Two-phase file update: save the new file, then delete the old one."""

from __future__ import annotations

from uuid import UUID

from gateway_service_libs.error_handling import GatewayError
from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.app.header_relay import RelayedHeaders
from services.session_gateway_service.models.files import (
    StorageLocator,
    StorageOwner,
    UploadedFileProtocol,
)
from services.session_gateway_service.protocols import (
    FileStorageClientProtocol,
    FileUpdateOrchestratorProtocol,
)

logger = create_service_logger("session_gateway.update_orchestrator")


class FileUpdateOrchestrator(FileUpdateOrchestratorProtocol):
    """Replaces a stored file without ever losing the new upload.

    The order is fixed: the new file is saved first and the old one is only
    deleted after that succeeded. A failed delete leaves an orphaned old file,
    which is logged and not surfaced; the new locator is returned regardless
    and the new file is never rolled back.
    """

    def __init__(self, storage_client: FileStorageClientProtocol) -> None:
        self._storage_client = storage_client

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
    ) -> StorageLocator:
        logger.info(
            "Saving replacement file",
            file_name=upload.filename,
            correlation_id=str(correlation_id),
        )
        # Errors here propagate untouched; the old file is left as is.
        new_locator = await self._storage_client.save_file(
            upload,
            save_endpoint,
            relayed,
            correlation_id,
            owner=owner,
            force_image=force_image,
        )

        if not old_locator:
            return new_locator

        try:
            await self._storage_client.delete_file(
                old_locator, delete_endpoint, relayed, correlation_id
            )
        except GatewayError as e:
            logger.warning(
                "Could not delete replaced file; keeping new file",
                old_file_path=old_locator,
                new_file_path=new_locator,
                error_code=e.error_code,
                error=e.error_detail.message,
                correlation_id=str(correlation_id),
            )
        else:
            logger.info(
                "Replaced file deleted",
                old_file_path=old_locator,
                correlation_id=str(correlation_id),
            )

        return new_locator
