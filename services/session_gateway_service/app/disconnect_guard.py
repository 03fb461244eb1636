"""Cancellation of outbound calls when the inbound client goes away."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

from starlette.requests import Request

from gateway_service_libs.error_handling import raise_request_cancelled
from gateway_service_libs.logging_utils import create_service_logger

logger = create_service_logger("session_gateway.disconnect_guard")

T = TypeVar("T")


async def run_until_disconnected(
    request: Request,
    awaitable: Awaitable[T],
    *,
    poll_interval: float,
    correlation_id: UUID,
    operation: str,
) -> T:
    """Await ``awaitable`` unless the client disconnects first.

    The inbound body must already be consumed (or buffered) before calling
    this: polling for disconnect reads from the ASGI receive channel.

    On disconnect the outbound task is cancelled and REQUEST_CANCELLED is
    raised. Exceptions from the awaitable propagate unchanged.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()

            if await request.is_disconnected():
                task.cancel()
                await asyncio.wait({task})
                logger.info(
                    "Client disconnected; outbound call cancelled",
                    operation=operation,
                    path=request.url.path,
                    correlation_id=str(correlation_id),
                )
                raise_request_cancelled(
                    service="session_gateway_service",
                    operation=operation,
                    message="Client closed request",
                    correlation_id=correlation_id,
                )
    finally:
        if not task.done():
            task.cancel()
