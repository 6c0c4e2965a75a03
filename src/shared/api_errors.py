"""
Shared API error parsing for the storefront client.

Extracts semantic meaning from HTTP errors returned by the storefront backend.
The resource clients wrap the parsed result in FetchFailedError or
MutationFailedError depending on which side of the contract failed.
"""

from dataclasses import dataclass
from typing import Any, Literal

import httpx

ErrorCategory = Literal[
    "auth",          # 401 - Invalid or expired token
    "forbidden",     # 403 - Access denied
    "not_found",     # 404 - Resource not found
    "validation",    # 400/422 - Validation error
    "conflict",      # 409 - Conflicting state (e.g. duplicate name)
    "unavailable",   # Transport error, no response received
    "internal",      # 5xx, error envelopes, or unexpected errors
]


@dataclass
class ParsedApiError:
    """Parsed API error with semantic category and message."""

    category: ErrorCategory
    message: str
    status_code: int | None = None


def parse_http_error(
    e: httpx.HTTPStatusError,
    entity_type: str = "",
    entity_id: str = "",
) -> ParsedApiError:
    """
    Parse HTTP error into semantic categories.

    The backend reports failures as `{"error": true, "message": "..."}`; the
    server message is preferred over the generic one when present.

    Args:
        e: The HTTP status error from httpx
        entity_type: Type of entity (e.g., "category", "address") for error messages
        entity_id: ID of entity for error messages

    Returns:
        ParsedApiError with category, message and status code
    """
    status = e.response.status_code
    server_message = _extract_message(e)

    if status == 401:
        return ParsedApiError("auth", server_message or "Invalid or expired token", status)

    if status == 403:
        return ParsedApiError("forbidden", server_message or "Access denied", status)

    if status == 404:
        if server_message:
            msg = server_message
        elif entity_id:
            msg = f"{entity_type.title()} '{entity_id}' not found" if entity_type else f"'{entity_id}' not found"  # noqa: E501
        else:
            msg = f"{entity_type.title()} not found" if entity_type else "Not found"
        return ParsedApiError("not_found", msg, status)

    if status == 409:
        return ParsedApiError(
            "conflict", server_message or "A resource with this name already exists", status,
        )

    if status in (400, 422):
        return ParsedApiError("validation", server_message or "Validation error", status)

    return ParsedApiError("internal", server_message or f"API error {status}", status)


def parse_request_error(e: httpx.RequestError) -> ParsedApiError:
    """Parse a transport-level failure (no response was received)."""
    return ParsedApiError("unavailable", f"API unavailable: {e}")


def _extract_message(e: httpx.HTTPStatusError) -> str:
    """Extract a human-readable message from an error response, or ''."""
    try:
        body = e.response.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    message = body.get("message")
    if isinstance(message, list):
        # class-validator style: one message per failed constraint
        return "; ".join(str(m) for m in message)
    if isinstance(message, str) and message:
        return message
    return _detail_message(body.get("detail"))


def _detail_message(detail: Any) -> str:
    """Extract a message from a `detail` field, if the backend sent one."""
    if isinstance(detail, str):
        return detail
    if isinstance(detail, dict):
        return str(detail.get("message", ""))
    if isinstance(detail, list):
        messages = []
        for err in detail:
            if isinstance(err, dict):
                loc = err.get("loc", ["unknown"])
                field = loc[-1] if loc else "unknown"
                messages.append(f"{field}: {err.get('msg', 'invalid')}")
        return "; ".join(messages)
    return ""
