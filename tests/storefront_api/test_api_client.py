"""Tests for the storefront API client helper functions."""

import json

import httpx
import pytest
import respx
from httpx import Response

from storefront_api import api_client
from storefront_api.api_client import (
    ApiEnvelopeError,
    api_delete,
    api_get,
    api_patch,
    api_post,
    close_http_client,
    get_http_client,
)

BASE_URL = "http://localhost:3000"


@pytest.mark.asyncio
async def test__api_get__request_source_header_set(mock_api: respx.MockRouter) -> None:
    """Test that X-Request-Source header comes from settings."""
    mock_api.get("/test").mock(return_value=Response(200, json={}))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        await api_get(client, "/test", "tok")

    assert mock_api.calls[0].request.headers["x-request-source"] == "storefront-tests"


@pytest.mark.asyncio
async def test__api_get__authorization_header_set(mock_api: respx.MockRouter) -> None:
    """Test that Authorization header is correctly set."""
    mock_api.get("/test").mock(return_value=Response(200, json={}))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        await api_get(client, "/test", "tok_12345")

    assert mock_api.calls[0].request.headers["authorization"] == "Bearer tok_12345"


@pytest.mark.asyncio
async def test__api_get__no_token_omits_authorization(mock_api: respx.MockRouter) -> None:
    """Test that public endpoints can be called without a token."""
    mock_api.get("/test").mock(return_value=Response(200, json=[]))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        await api_get(client, "/test", None)

    assert "authorization" not in mock_api.calls[0].request.headers


@pytest.mark.asyncio
async def test__api_get__unwraps_envelope(mock_api: respx.MockRouter) -> None:
    """Test that the data field of an envelope is returned."""
    mock_api.get("/test").mock(
        return_value=Response(200, json={"error": False, "message": "ok", "data": [{"id": "1"}]}),
    )

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        result = await api_get(client, "/test", "tok")

    assert result == [{"id": "1"}]


@pytest.mark.asyncio
async def test__api_get__bare_payload_passes_through(mock_api: respx.MockRouter) -> None:
    """Test that unwrapped payloads are returned as-is."""
    mock_api.get("/test").mock(return_value=Response(200, json={"id": "1", "name": "x"}))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        result = await api_get(client, "/test", "tok")

    assert result == {"id": "1", "name": "x"}


@pytest.mark.asyncio
async def test__api_get__error_envelope_raises(mock_api: respx.MockRouter) -> None:
    """Test that a 2xx response flagged as error raises with its message."""
    mock_api.get("/test").mock(
        return_value=Response(200, json={"error": True, "message": "Out of stock"}),
    )

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(ApiEnvelopeError, match="Out of stock"):
            await api_get(client, "/test", "tok")


@pytest.mark.asyncio
async def test__api_get__http_error_raises(mock_api: respx.MockRouter) -> None:
    """Test that error status codes raise HTTPStatusError."""
    mock_api.get("/test").mock(return_value=Response(500))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await api_get(client, "/test", "tok")


@pytest.mark.asyncio
async def test__api_post__sends_json(mock_api: respx.MockRouter) -> None:
    """Test that POST sends the JSON body."""
    route = mock_api.post("/test").mock(return_value=Response(201, json={"id": "9"}))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        result = await api_post(client, "/test", "tok", {"name": "value"})

    assert result == {"id": "9"}
    assert json.loads(route.calls[0].request.content) == {"name": "value"}


@pytest.mark.asyncio
async def test__api_patch__request_source_header_set(mock_api: respx.MockRouter) -> None:
    """Test that X-Request-Source header is set for PATCH."""
    mock_api.patch("/test").mock(return_value=Response(200, json={}))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        await api_patch(client, "/test", "tok", {"key": "value"})

    assert mock_api.calls[0].request.headers["x-request-source"] == "storefront-tests"


@pytest.mark.asyncio
async def test__api_delete__empty_body_returns_none(mock_api: respx.MockRouter) -> None:
    """Test that 204 No Content is handled."""
    mock_api.delete("/test/1").mock(return_value=Response(204))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        result = await api_delete(client, "/test/1", "tok")

    assert result is None


@pytest.mark.asyncio
async def test__api_get__non_json_body_raises(mock_api: respx.MockRouter) -> None:
    """Test that a 2xx body that is not JSON raises ApiEnvelopeError."""
    mock_api.get("/test").mock(return_value=Response(200, text="<html>gateway</html>"))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(ApiEnvelopeError, match="Invalid response from server") as exc_info:
            await api_get(client, "/test", "tok")

    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
async def test__api_get__envelope_without_data_returns_none(mock_api: respx.MockRouter) -> None:
    """Test that a success envelope with null data returns None, not the envelope."""
    mock_api.get("/test").mock(
        return_value=Response(200, json={"error": False, "message": "ok", "data": None}),
    )

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        result = await api_get(client, "/test", "tok")

    assert result is None


@pytest.mark.asyncio
async def test__api_delete__non_json_body_returns_none(mock_api: respx.MockRouter) -> None:
    """Test that a plain-text body on a successful DELETE is ignored."""
    mock_api.delete("/test/1").mock(return_value=Response(200, text="OK"))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        result = await api_delete(client, "/test/1", "tok")

    assert result is None


@pytest.mark.asyncio
async def test__api_delete__error_envelope_still_raises(mock_api: respx.MockRouter) -> None:
    """Test that a DELETE flagged as error in its envelope raises."""
    mock_api.delete("/test/1").mock(
        return_value=Response(200, json={"error": True, "message": "In use"}),
    )

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(ApiEnvelopeError, match="In use"):
            await api_delete(client, "/test/1", "tok")


@pytest.mark.asyncio
async def test__get_http_client__reuses_instance(mock_api: respx.MockRouter) -> None:  # noqa: ARG001
    """Test that the shared client is created once and configured from settings."""
    client = await get_http_client()
    try:
        assert await get_http_client() is client
        assert str(client.base_url).rstrip("/") == BASE_URL
        assert client.timeout.read == 5.0
    finally:
        await close_http_client()

    assert api_client._http_client is None


@pytest.mark.asyncio
async def test__get_http_client__recreated_after_close(mock_api: respx.MockRouter) -> None:  # noqa: ARG001
    """Test that a closed shared client is replaced."""
    first = await get_http_client()
    await first.aclose()

    second = await get_http_client()
    try:
        assert second is not first
    finally:
        await close_http_client()
