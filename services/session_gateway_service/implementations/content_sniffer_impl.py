"""Content sniffing based on libmagic signatures."""

from __future__ import annotations

import magic

from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.protocols import ContentSnifferProtocol

logger = create_service_logger("session_gateway.content_sniffer")

FALLBACK_MIME_TYPE = "application/octet-stream"


class MagicContentSniffer(ContentSnifferProtocol):
    """Detects the MIME type of a buffer using its magic number signature."""

    def __init__(self) -> None:
        self._magic = magic.Magic(mime=True)

    def sniff(self, head: bytes) -> str:
        """Return the detected MIME type; short or empty buffers are not an error."""
        if not head:
            return FALLBACK_MIME_TYPE
        detected = self._magic.from_buffer(head)
        logger.debug("Sniffed content type", detected_mime=detected, head_size=len(head))
        return detected or FALLBACK_MIME_TYPE
