"""Metrics definitions for the Session Gateway Service."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram


class GatewayMetrics:
    """A container for all Prometheus metrics for the Session Gateway Service."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics with optional registry for test isolation."""
        if registry is None:
            registry = REGISTRY
        self.http_requests_total = Counter(
            "session_gateway_http_requests_total",
            "Total number of HTTP requests handled by file routes.",
            ["method", "endpoint", "http_status"],
            registry=registry,
        )
        self.downstream_service_calls_total = Counter(
            "session_gateway_downstream_service_calls_total",
            "Total number of calls to downstream services.",
            ["service", "method", "endpoint", "status_code"],
            registry=registry,
        )
        self.downstream_service_call_duration_seconds = Histogram(
            "session_gateway_downstream_service_call_duration_seconds",
            "Duration of calls to downstream services in seconds.",
            ["service", "method", "endpoint"],
            registry=registry,
        )
        self.session_validations_total = Counter(
            "session_gateway_session_validations_total",
            "Session validation outcomes.",
            ["outcome"],
            registry=registry,
        )
        self.api_errors_total = Counter(
            "session_gateway_api_errors_total",
            "Total number of API errors.",
            ["endpoint", "error_type"],
            registry=registry,
        )
