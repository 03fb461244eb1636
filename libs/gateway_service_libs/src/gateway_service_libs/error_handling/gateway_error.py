"""Core exception type carrying a structured ErrorDetail."""

from __future__ import annotations

from typing import Any

from gateway_service_libs.error_handling.error_models import ErrorDetail


class GatewayError(Exception):
    """Exception raised for every expected failure inside a gateway service.

    The wrapped ErrorDetail is the single source of truth; the properties below
    are convenience accessors for logging and response rendering.
    """

    def __init__(self, error_detail: ErrorDetail) -> None:
        super().__init__(f"[{error_detail.error_code.value}] {error_detail.message}")
        self.error_detail = error_detail

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    @property
    def details(self) -> dict[str, Any]:
        return self.error_detail.details

    def __repr__(self) -> str:
        return (
            f"GatewayError(error_code={self.error_code!r}, "
            f"service={self.service!r}, operation={self.operation!r})"
        )
