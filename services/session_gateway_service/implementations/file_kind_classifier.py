"""
File kind classification for uploads.

Combines an extension allow-list with content sniffing. The extension wins
when it is known: content sniffing cannot reliably detect formats such as
SVG, and the storage service files uploads by declared type.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Final
from uuid import UUID

from gateway_service_libs.error_handling import raise_validation_error
from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.models.files import (
    FileDetection,
    FileKind,
    UploadedFileProtocol,
)
from services.session_gateway_service.protocols import (
    ContentSnifferProtocol,
    FileKindClassifierProtocol,
)

logger = create_service_logger("session_gateway.file_kind_classifier")

SNIFF_SIZE: Final[int] = 512
DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"

EXTENSION_CONTENT_TYPES: Final[dict[str, str]] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
    ".ico": "image/x-icon",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    ".pdf": "application/pdf",
}

IMAGE_EXTENSIONS: Final[frozenset[str]] = frozenset(
    ext for ext, mime in EXTENSION_CONTENT_TYPES.items() if mime.startswith("image/")
)

MIME_FILE_KINDS: Final[dict[str, FileKind]] = {
    "image/jpeg": FileKind.IMAGE,
    "image/jpg": FileKind.IMAGE,
    "image/png": FileKind.IMAGE,
    "image/gif": FileKind.IMAGE,
    "image/webp": FileKind.IMAGE,
    "image/svg+xml": FileKind.IMAGE,
    "image/tiff": FileKind.IMAGE,
    "image/bmp": FileKind.IMAGE,
    "image/x-icon": FileKind.IMAGE,
    "image/vnd.microsoft.icon": FileKind.IMAGE,
    "application/pdf": FileKind.DOCUMENT,
}


def file_extension(filename: str) -> str:
    return PurePath(filename or "").suffix.lower()


def classify_by_extension(filename: str) -> FileKind:
    ext = file_extension(filename)
    if ext in IMAGE_EXTENSIONS:
        return FileKind.IMAGE
    if ext == ".pdf":
        return FileKind.DOCUMENT
    return FileKind.UNKNOWN


def kind_for_mime(mime_type: str) -> FileKind:
    # Drop parameters such as "; charset=binary"
    base_type = mime_type.split(";", 1)[0].strip().lower()
    return MIME_FILE_KINDS.get(base_type, FileKind.UNKNOWN)


class FileKindClassifier(FileKindClassifierProtocol):
    """Decides whether an upload is an image, a document or unsupported.

    ``classify``, ``content_type_for`` and ``detect`` all resolve through
    ``detection_for``: a known extension decides both kind and Content-Type,
    otherwise a single sniff of the head decides both.
    """

    def __init__(self, sniffer: ContentSnifferProtocol) -> None:
        self._sniffer = sniffer

    def classify_by_content(self, head: bytes) -> str:
        """Return the sniffed MIME type of at most the first SNIFF_SIZE bytes."""
        return self._sniffer.sniff(head[:SNIFF_SIZE])

    def detection_for(self, filename: str, head: bytes) -> FileDetection:
        declared_type = EXTENSION_CONTENT_TYPES.get(file_extension(filename))
        if declared_type:
            return FileDetection(kind=classify_by_extension(filename), content_type=declared_type)

        sniffed = self.classify_by_content(head)
        return FileDetection(
            kind=kind_for_mime(sniffed), content_type=sniffed or DEFAULT_CONTENT_TYPE
        )

    def classify(self, filename: str, head: bytes) -> FileKind:
        return self.detection_for(filename, head).kind

    def content_type_for(self, filename: str, head: bytes) -> str:
        """Explicit Content-Type for the outbound file part."""
        return self.detection_for(filename, head).content_type

    def require_image(self, filename: str, correlation_id: UUID) -> FileKind:
        """Forced-image policy: reject non-image extensions outright."""
        ext = file_extension(filename)
        if ext not in IMAGE_EXTENSIONS:
            logger.warning(
                "Rejected non-image upload on image endpoint",
                file_name=filename,
                extension=ext,
                correlation_id=str(correlation_id),
            )
            raise_validation_error(
                service="session_gateway_service",
                operation="require_image",
                field="file",
                message=f"File must be a valid image, received extension: {ext or '(none)'}",
                correlation_id=correlation_id,
                value=ext,
            )
        return FileKind.IMAGE

    async def detect(self, upload: UploadedFileProtocol) -> FileDetection:
        """Sniff the head of an upload and rewind it for the full read."""
        head = await upload.read(SNIFF_SIZE)
        await upload.seek(0)
        return self.detection_for(upload.filename or "", head)
