"""
Tests for file routes in Session Gateway Service.

Requests go through the full middleware stack; the identity and storage
services are intercepted with respx.
"""

from __future__ import annotations

import json

import httpx
import pytest

from services.session_gateway_service.tests.conftest import auth_headers

VALIDATE_URL = "http://identity.test/api/v1/ValidateJWT"
SAVE_FILE_URL = "http://storage.test/api/v1/SaveFile"
SAVE_IMAGE_URL = "http://storage.test/api/v1/SaveImages"
SAVE_PRIVATE_IMAGE_URL = "http://storage.test/api/v1/SavePrivateImages"
DELETE_URL = "http://storage.test/api/v1/deleteFile"
FROM_URL_URL = "http://storage.test/ImagesFromUrl"

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x02" * 1024


@pytest.fixture
def identity_ok(respx_mock):
    return respx_mock.post(VALIDATE_URL).mock(return_value=httpx.Response(200))


def _sent_body(route) -> bytes:
    request = route.calls.last.request
    request.read()
    return request.content


@pytest.mark.asyncio
async def test_save_image_returns_locator(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    storage = respx_mock.post(SAVE_IMAGE_URL).mock(
        return_value=httpx.Response(200, json={"file_path": "/img/123.jpg"})
    )

    response = await client.post(
        "/v1/files/images",
        headers=auth_headers(),
        files={"file": ("cover.jpg", JPEG_BYTES, "application/octet-stream")},
        data={"acl": "team-3"},
    )

    assert response.status_code == 200
    assert response.json() == {"file_path": "/img/123.jpg"}
    body = _sent_body(storage)
    assert b'name="Kindfile"\r\n\r\nImages\r\n' in body
    assert b'name="Acl"\r\n\r\nteam-3\r\n' in body
    assert b"Content-Type: image/jpeg" in body
    assert storage.calls.last.request.headers["Path"] == "/v1/files/images"


@pytest.mark.asyncio
async def test_save_private_image_uses_private_endpoint(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    storage = respx_mock.post(SAVE_PRIVATE_IMAGE_URL).mock(
        return_value=httpx.Response(200, json={"file_path": "/private/1.png"})
    )

    response = await client.post(
        "/v1/files/private-images",
        headers=auth_headers(),
        files={"file": ("avatar.png", b"\x89PNG\r\n\x1a\nrest", "image/png")},
        data={"email": "owner@example.com"},
    )

    assert response.status_code == 200
    assert b'name="Email"\r\n\r\nowner@example.com\r\n' in _sent_body(storage)


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_non_image_on_image_route_is_400(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    storage = respx_mock.post(SAVE_IMAGE_URL)

    response = await client.post(
        "/v1/files/images",
        headers=auth_headers(),
        files={"file": ("notes.txt", b"plain text", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "File must be a valid image, received extension: .txt"
    assert not storage.called


@pytest.mark.asyncio
async def test_save_file_auto_detects_document(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    storage = respx_mock.post(SAVE_FILE_URL).mock(
        return_value=httpx.Response(200, json={"file_path": "/docs/r.pdf"})
    )

    response = await client.post(
        "/v1/files",
        headers=auth_headers(),
        files={"file": ("report.pdf", b"%PDF-1.7 body", "application/pdf")},
    )

    assert response.status_code == 200
    assert b'name="Kindfile"\r\n\r\nDocuments\r\n' in _sent_body(storage)


@pytest.mark.asyncio
async def test_save_without_file_is_400(client: httpx.AsyncClient, identity_ok) -> None:
    response = await client.post("/v1/files", headers=auth_headers(), data={"acl": "x"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_storage_rejection_is_relayed(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    respx_mock.post(SAVE_FILE_URL).mock(return_value=httpx.Response(413, text="too large"))

    response = await client.post(
        "/v1/files",
        headers=auth_headers(),
        files={"file": ("big.pdf", b"%PDF-1.7", "application/pdf")},
    )

    assert response.status_code == 413
    assert response.json()["error"] == "too large"


@pytest.mark.asyncio
async def test_storage_unreachable_is_500(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    respx_mock.post(SAVE_FILE_URL).mock(side_effect=httpx.ConnectError("refused"))

    response = await client.post(
        "/v1/files",
        headers=auth_headers(),
        files={"file": ("a.pdf", b"%PDF-1.7", "application/pdf")},
    )

    assert response.status_code == 500
    assert response.json()["error_code"] == "TRANSPORT_FAILURE"


@pytest.mark.asyncio
async def test_update_saves_then_deletes_old(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    save = respx_mock.post(SAVE_IMAGE_URL).mock(
        return_value=httpx.Response(200, json={"file_path": "/img/new.jpg"})
    )
    delete = respx_mock.delete(DELETE_URL, params={"file_path": "/img/old.jpg"}).mock(
        return_value=httpx.Response(200)
    )

    response = await client.put(
        "/v1/files",
        headers=auth_headers(),
        files={"file": ("new.jpg", JPEG_BYTES, "image/jpeg")},
        data={"old_file_path": "/img/old.jpg", "images": "true"},
    )

    assert response.status_code == 200
    assert response.json() == {"file_path": "/img/new.jpg"}
    assert save.called
    assert delete.called


@pytest.mark.asyncio
async def test_update_survives_failed_delete(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    respx_mock.post(SAVE_FILE_URL).mock(
        return_value=httpx.Response(200, json={"file_path": "/docs/new.pdf"})
    )
    respx_mock.delete(DELETE_URL).mock(return_value=httpx.Response(500, text="boom"))

    response = await client.put(
        "/v1/files",
        headers=auth_headers(),
        files={"file": ("new.pdf", b"%PDF-1.7", "application/pdf")},
        data={"old_file_path": "/docs/old.pdf"},
    )

    assert response.status_code == 200
    assert response.json() == {"file_path": "/docs/new.pdf"}


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_update_with_failed_save_never_deletes(
    client: httpx.AsyncClient, identity_ok, respx_mock
) -> None:
    respx_mock.post(SAVE_FILE_URL).mock(return_value=httpx.Response(507, text="full"))
    delete = respx_mock.delete(DELETE_URL)

    response = await client.put(
        "/v1/files",
        headers=auth_headers(),
        files={"file": ("new.pdf", b"%PDF-1.7", "application/pdf")},
        data={"old_file_path": "/docs/old.pdf"},
    )

    assert response.status_code == 507
    assert not delete.called


@pytest.mark.asyncio
async def test_update_requires_old_file_path(client: httpx.AsyncClient, identity_ok) -> None:
    response = await client.put(
        "/v1/files",
        headers=auth_headers(),
        files={"file": ("new.pdf", b"%PDF-1.7", "application/pdf")},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_file(client: httpx.AsyncClient, identity_ok, respx_mock) -> None:
    delete = respx_mock.delete(DELETE_URL, params={"file_path": "/img/1.jpg"}).mock(
        return_value=httpx.Response(200)
    )

    response = await client.delete(
        "/v1/files", params={"file_path": "/img/1.jpg"}, headers=auth_headers()
    )

    assert response.status_code == 200
    assert delete.called


@pytest.mark.asyncio
async def test_delete_requires_file_path(client: httpx.AsyncClient, identity_ok) -> None:
    response = await client.delete("/v1/files", headers=auth_headers())

    assert response.status_code == 400
    assert response.json()["error"] == "file_path query parameter is required"


@pytest.mark.asyncio
async def test_save_from_url(client: httpx.AsyncClient, identity_ok, respx_mock) -> None:
    storage = respx_mock.post(FROM_URL_URL).mock(
        return_value=httpx.Response(200, json={"file_path": "/img/remote.png"})
    )

    response = await client.post(
        "/v1/files/from-url",
        headers=auth_headers(),
        json={"url": "https://cdn.example.com/a.png", "acl": "public"},
    )

    assert response.status_code == 200
    assert response.json() == {"file_path": "/img/remote.png"}
    assert json.loads(_sent_body(storage)) == {
        "Url": "https://cdn.example.com/a.png",
        "Kindfile": "images",
        "Acl": "public",
    }


@pytest.mark.asyncio
async def test_save_from_url_requires_owner(client: httpx.AsyncClient, identity_ok) -> None:
    response = await client.post(
        "/v1/files/from-url",
        headers=auth_headers(),
        json={"url": "https://cdn.example.com/a.png"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Either acl or email is required"


@pytest.mark.asyncio
@pytest.mark.respx(assert_all_called=False)
async def test_file_routes_require_a_session(client: httpx.AsyncClient, respx_mock) -> None:
    storage = respx_mock.post(SAVE_FILE_URL)

    response = await client.post(
        "/v1/files", files={"file": ("a.pdf", b"%PDF-1.7", "application/pdf")}
    )

    assert response.status_code == 401
    assert not storage.called
