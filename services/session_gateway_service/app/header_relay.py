"""Relay of trust-bearing headers from an inbound request to outbound calls."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Final

from starlette.requests import HTTPConnection

AUTHORIZATION: Final[str] = "Authorization"
CSRF_TOKEN: Final[str] = "X-CSRF-Token"
COOKIE: Final[str] = "Cookie"
CLIENT_TYPE: Final[str] = "Client-Type"
PATH: Final[str] = "Path"

# Inbound headers copied verbatim; PATH is filled from the request URL.
RELAYED_REQUEST_HEADERS: Final[tuple[str, ...]] = (AUTHORIZATION, CSRF_TOKEN, COOKIE, CLIENT_TYPE)
RELAYED_HEADER_NAMES: Final[tuple[str, ...]] = (*RELAYED_REQUEST_HEADERS, PATH)


class RelayedHeaders(Mapping[str, str]):
    """Immutable, ordered mapping over exactly RELAYED_HEADER_NAMES.

    Absent inbound headers are kept as empty strings, never dropped.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        values = values or {}
        unknown = set(values) - set(RELAYED_HEADER_NAMES)
        if unknown:
            raise ValueError(f"Unsupported relayed headers: {sorted(unknown)}")
        self._values: dict[str, str] = {
            name: values.get(name, "") or "" for name in RELAYED_HEADER_NAMES
        }

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        # Credentials stay out of logs and tracebacks
        present = [name for name, value in self._values.items() if value]
        return f"RelayedHeaders(present={present})"

    @property
    def authorization(self) -> str:
        return self._values[AUTHORIZATION]

    @property
    def client_type(self) -> str:
        return self._values[CLIENT_TYPE]


def extract_relayed_headers(connection: HTTPConnection) -> RelayedHeaders:
    """Read the fixed relayed header set plus the request path."""
    values = {name: connection.headers.get(name, "") for name in RELAYED_REQUEST_HEADERS}
    values[PATH] = connection.url.path
    return RelayedHeaders(values)


def apply_relayed_headers(target: MutableMapping[str, str], relayed: RelayedHeaders) -> None:
    """Set every relayed header on ``target``, overwriting same-named values."""
    for name, value in relayed.items():
        target[name] = value
