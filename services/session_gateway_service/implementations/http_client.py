"""HTTP client implementation for the Session Gateway Service.

Conforms to HttpClientProtocol while delegating to httpx. Raw httpx.Response
objects are returned so callers can interpret status codes themselves.
"""

from __future__ import annotations

from typing import Any

import httpx

from services.session_gateway_service.protocols import HttpClientProtocol


class GatewayHttpClient(HttpClientProtocol):
    """Thin wrapper over a shared httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize the HTTP client.

        Args:
            client: The underlying httpx AsyncClient to use
        """
        self._client = client

    async def post(
        self,
        url: str,
        *,
        data: dict | None = None,
        files: list | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> httpx.Response:
        """Send POST request with form data, files or a JSON body.

        Args:
            url: Target URL for the POST request
            data: Form data dictionary (optional)
            files: List of files to upload (optional)
            json: JSON-serializable body (optional)
            headers: Additional HTTP headers (optional)
            timeout: Request timeout (optional, client default when omitted)

        Returns:
            Raw httpx Response object
        """
        kwargs: dict[str, Any] = {"data": data, "files": files, "json": json, "headers": headers}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return await self._client.post(url, **kwargs)

    async def delete(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> httpx.Response:
        """Send DELETE request.

        Returns:
            Raw httpx Response object
        """
        kwargs: dict[str, Any] = {"params": params, "headers": headers}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return await self._client.delete(url, **kwargs)
