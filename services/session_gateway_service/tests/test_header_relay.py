"""Tests for relayed header extraction and application."""

from __future__ import annotations

import httpx
import pytest
from starlette.requests import Request

from services.session_gateway_service.app.header_relay import (
    RELAYED_HEADER_NAMES,
    RelayedHeaders,
    apply_relayed_headers,
    extract_relayed_headers,
)


def make_request(headers: dict[str, str], path: str = "/v1/files") -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "scheme": "http",
        "server": ("gateway.test", 80),
        "root_path": "",
        "path": path,
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


def test_extract_yields_exactly_the_fixed_keys() -> None:
    request = make_request(
        {
            "Authorization": "Bearer abc",
            "X-CSRF-Token": "csrf",
            "Cookie": "a=b",
            "Client-Type": "web",
            "X-Unrelated": "dropped",
        },
        path="/v1/files/images",
    )

    relayed = extract_relayed_headers(request)

    assert tuple(relayed) == RELAYED_HEADER_NAMES
    assert dict(relayed) == {
        "Authorization": "Bearer abc",
        "X-CSRF-Token": "csrf",
        "Cookie": "a=b",
        "Client-Type": "web",
        "Path": "/v1/files/images",
    }


def test_missing_headers_become_empty_strings() -> None:
    relayed = extract_relayed_headers(make_request({}))

    assert len(relayed) == 5
    assert relayed.authorization == ""
    assert relayed.client_type == ""
    assert relayed["Path"] == "/v1/files"


def test_inbound_header_lookup_is_case_insensitive() -> None:
    relayed = extract_relayed_headers(make_request({"client-type": "mobile"}))
    assert relayed.client_type == "mobile"


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ValueError):
        RelayedHeaders({"X-Other": "1"})


def test_repr_hides_header_values() -> None:
    relayed = RelayedHeaders({"Authorization": "Bearer secret-token"})
    assert "secret-token" not in repr(relayed)
    assert "Authorization" in repr(relayed)


def test_apply_overwrites_same_named_headers_case_insensitively() -> None:
    target = httpx.Headers({"authorization": "old", "Accept": "application/json"})
    relayed = RelayedHeaders({"Authorization": "Bearer new", "Client-Type": "web"})

    apply_relayed_headers(target, relayed)

    assert target.get_list("authorization") == ["Bearer new"]
    assert target["Accept"] == "application/json"
    assert target["Client-Type"] == "web"
    assert target["Cookie"] == ""


def test_apply_on_plain_dict_sets_all_keys() -> None:
    target: dict[str, str] = {}
    apply_relayed_headers(target, RelayedHeaders())
    assert list(target) == list(RELAYED_HEADER_NAMES)
