"""
Shared fixtures for Session Gateway Service tests.

App-level tests run the real middleware stack in-process through
httpx.ASGITransport, with downstream services intercepted by respx.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from unittest.mock import Mock

import httpx
import jwt
import pytest
from dishka import make_async_container
from dishka.integrations.fastapi import FastapiProvider
from prometheus_client import CollectorRegistry

from services.session_gateway_service.app.auth_provider import RequestContextProvider
from services.session_gateway_service.app.main import create_app
from services.session_gateway_service.app.metrics import GatewayMetrics
from services.session_gateway_service.config import Settings
from services.session_gateway_service.tests.test_provider import (
    FakeContentSniffer,
    GatewayTestProvider,
    make_test_settings,
)

USER_ID = "5f8d0d55b54764421b7156c9"


def make_token(claims: dict | None = None) -> str:
    """Signed with a throwaway key; the gateway never verifies it."""
    payload = {"_id": USER_ID} if claims is None else claims
    return jwt.encode(payload, "throwaway-key-never-checked-by-the-gateway", algorithm="HS256")


def auth_headers(token: str | None = None, client_type: str = "web") -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token or make_token()}",
        "Client-Type": client_type,
        "X-CSRF-Token": "csrf-123",
        "Cookie": "session=abc",
    }


@pytest.fixture
def test_settings() -> Settings:
    return make_test_settings()


@pytest.fixture
def metrics() -> GatewayMetrics:
    return GatewayMetrics(registry=CollectorRegistry())


@pytest.fixture
def sniffer() -> FakeContentSniffer:
    return FakeContentSniffer()


@pytest.fixture
async def client(test_settings: Settings) -> AsyncIterator[httpx.AsyncClient]:
    """In-process client for the full app with test providers."""
    container = make_async_container(
        GatewayTestProvider(test_settings),
        RequestContextProvider(),
        FastapiProvider(),
    )
    app = create_app(container, config=test_settings)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    await container.close()


def create_mock_metrics() -> Mock:
    """Metrics double whose counters and histograms accept any labels."""

    def create_mock_counter():
        mock_counter = Mock()
        mock_counter.labels.return_value = mock_counter
        mock_counter.inc.return_value = None
        return mock_counter

    def create_mock_histogram():
        mock_histogram = Mock()
        mock_histogram.labels.return_value = mock_histogram
        mock_histogram.time.return_value.__enter__ = Mock()
        mock_histogram.time.return_value.__exit__ = Mock(return_value=None)
        return mock_histogram

    mock_metrics = Mock(spec=GatewayMetrics)
    mock_metrics.http_requests_total = create_mock_counter()
    mock_metrics.downstream_service_calls_total = create_mock_counter()
    mock_metrics.downstream_service_call_duration_seconds = create_mock_histogram()
    mock_metrics.session_validations_total = create_mock_counter()
    mock_metrics.api_errors_total = create_mock_counter()
    return mock_metrics
