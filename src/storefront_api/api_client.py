"""HTTP client helpers for talking to the storefront API."""

import logging
from typing import Any

import httpx

from core.config import get_settings

logger = logging.getLogger(__name__)


class ApiEnvelopeError(Exception):
    """
    Raised when a 2xx response carries `"error": true` in its envelope.

    The backend occasionally reports failures this way instead of with an
    error status code.
    """

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# Module-level client for connection reuse (can be overridden in tests)
_http_client: httpx.AsyncClient | None = None


def get_api_base_url() -> str:
    """Get the API base URL from settings."""
    return get_settings().api_url


def get_default_timeout() -> float:
    """Get the default request timeout."""
    return get_settings().api_timeout


async def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared HTTP client for API requests."""
    global _http_client  # noqa: PLW0603
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            base_url=get_api_base_url(),
            timeout=get_default_timeout(),
        )
        logger.info("storefront_http_client_created base_url=%s", _http_client.base_url)
    return _http_client


async def close_http_client() -> None:
    """Close the shared HTTP client, if one was created."""
    global _http_client  # noqa: PLW0603
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
        logger.info("storefront_http_client_closed")
    _http_client = None


def _get_headers(token: str | None) -> dict[str, str]:
    """Get common headers for API requests."""
    headers = {
        "Accept": "application/json",
        "X-Request-Source": get_settings().request_source,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def unwrap_response(response: httpx.Response, require_json: bool = True) -> Any:
    """
    Return the payload of a successful response.

    Responses are either the bare payload or an envelope of the form
    `{"error": bool, "message": str, "data": ...}`. Enveloped payloads are
    unwrapped, so an envelope without data returns None; an envelope flagged
    as an error raises ApiEnvelopeError. Empty bodies (e.g. 204 from DELETE)
    return None.

    A body that is not JSON raises ApiEnvelopeError, unless `require_json` is
    False, in which case it is ignored and None is returned.
    """
    if not response.content:
        return None
    try:
        body = response.json()
    except ValueError:
        if not require_json:
            logger.debug("non_json_body_ignored status=%s", response.status_code)
            return None
        raise ApiEnvelopeError("Invalid response from server", response.status_code) from None
    if isinstance(body, dict) and "error" in body:
        if body["error"] is True:
            raise ApiEnvelopeError(
                body.get("message") or "Something went wrong",
                response.status_code,
            )
        return body.get("data")
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


async def api_get(
    client: httpx.AsyncClient,
    path: str,
    token: str | None,
    params: dict[str, Any] | None = None,
) -> Any:
    """Make a GET request to the API and return the unwrapped payload."""
    response = await client.get(
        path,
        params=params,
        headers=_get_headers(token),
    )
    response.raise_for_status()
    return unwrap_response(response)


async def api_post(
    client: httpx.AsyncClient,
    path: str,
    token: str | None,
    json: dict[str, Any] | None = None,
) -> Any:
    """Make a POST request to the API and return the unwrapped payload."""
    response = await client.post(
        path,
        json=json,
        headers=_get_headers(token),
    )
    response.raise_for_status()
    return unwrap_response(response)


async def api_patch(
    client: httpx.AsyncClient,
    path: str,
    token: str | None,
    json: dict[str, Any],
) -> Any:
    """Make a PATCH request to the API and return the unwrapped payload."""
    response = await client.patch(
        path,
        json=json,
        headers=_get_headers(token),
    )
    response.raise_for_status()
    return unwrap_response(response)


async def api_delete(
    client: httpx.AsyncClient,
    path: str,
    token: str | None,
) -> Any:
    """
    Make a DELETE request to the API and return the unwrapped payload, if any.

    A successful status means the entity is gone, so a non-JSON body is
    ignored rather than treated as a failure.
    """
    response = await client.delete(
        path,
        headers=_get_headers(token),
    )
    response.raise_for_status()
    return unwrap_response(response, require_json=False)
