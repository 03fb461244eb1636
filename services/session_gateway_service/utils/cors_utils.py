"""CORS utilities: allow-list parsing and the fixed CORS response headers.

The gate never blocks a request. It only decides whether the Origin is echoed
back, so browsers enforce the policy.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Final

ALLOWED_HEADERS: Final[tuple[str, ...]] = (
    "Content-Type",
    "Content-Length",
    "Accept-Encoding",
    "X-CSRF-Token",
    "Authorization",
    "Accept",
    "Origin",
    "Cache-Control",
    "X-Requested-With",
    "client-type",
)

ALLOWED_METHODS: Final[tuple[str, ...]] = ("POST", "OPTIONS", "GET", "PUT", "DELETE", "PATCH")


def parse_allowed_origins(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated allow-list, trimming entries and dropping empties.

    Example:
        >>> parse_allowed_origins(" http://a.test ,,http://b.test")
        ('http://a.test', 'http://b.test')
    """
    if not raw:
        return ()
    origins = (entry.strip() for entry in raw.split(","))
    return tuple(dict.fromkeys(origin for origin in origins if origin))


def get_cors_headers(origin: str | None, allowed_origins: Collection[str]) -> dict[str, str]:
    """Build the CORS headers for a response.

    ``Access-Control-Allow-Origin`` is set only when ``origin`` exactly matches
    an allow-list entry; no wildcard or pattern matching is done.
    """
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
        "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
    }
    if origin and origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
    return headers
