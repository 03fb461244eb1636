"""Tests for the libmagic-backed content sniffer."""

from __future__ import annotations

import pytest

pytest.importorskip("magic")

from services.session_gateway_service.implementations.content_sniffer_impl import (  # noqa: E402
    FALLBACK_MIME_TYPE,
    MagicContentSniffer,
)

PNG_HEADER = bytes.fromhex("89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c489")


def test_sniffs_png_signature() -> None:
    assert MagicContentSniffer().sniff(PNG_HEADER) == "image/png"


def test_sniffs_pdf_signature() -> None:
    assert MagicContentSniffer().sniff(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n") == "application/pdf"


def test_empty_buffer_returns_fallback() -> None:
    assert MagicContentSniffer().sniff(b"") == FALLBACK_MIME_TYPE
