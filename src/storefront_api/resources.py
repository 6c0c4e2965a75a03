"""
Per-resource clients for the storefront API.

Each client implements the collection contract consumed by the cache:
list fetches, lazy child fetches and the create/update/delete mutations.
Transport and HTTP failures are translated into FetchFailedError (queries)
or MutationFailedError (mutations) carrying a displayable message.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

import httpx
from pydantic import ValidationError

from core.config import get_settings
from schemas.address import Address
from schemas.category import Category
from schemas.entity import Entity, EntityRequest
from schemas.payment_method import PaymentMethod
from services.exceptions import FetchFailedError, MutationFailedError, StorefrontApiError
from shared.api_errors import parse_http_error, parse_request_error
from storefront_api.api_client import (
    ApiEnvelopeError,
    api_delete,
    api_get,
    api_patch,
    api_post,
    get_http_client,
)

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=Entity)
EntityT_co = TypeVar("EntityT_co", bound=Entity, covariant=True)

Payload = EntityRequest | Mapping[str, Any]


class CollectionSource(Protocol[EntityT_co]):
    """The server side of a cached collection."""

    async def fetch_all(self) -> list[EntityT_co]: ...

    async def fetch_roots(self) -> list[EntityT_co]: ...

    async def fetch_children(self, parent_id: str) -> list[EntityT_co]: ...

    async def create(self, payload: Payload) -> EntityT_co | None: ...

    async def update(self, entity_id: str, payload: Payload) -> EntityT_co | None: ...

    async def delete(self, entity_id: str) -> None: ...


@dataclass(frozen=True)
class ResourceEndpoints:
    """
    URL layout of one resource.

    `children` is a format string with a `{parent_id}` placeholder; resources
    without a hierarchy leave it unset. `roots` falls back to `collection`.
    """

    collection: str
    roots: str | None = None
    children: str | None = None

    def item(self, entity_id: str) -> str:
        """Path of a single entity."""
        return f"{self.collection}/{entity_id}"


CATEGORY_ENDPOINTS = ResourceEndpoints(
    collection="/categories",
    roots="/categories/root",
    children="/categories/parent/{parent_id}",
)
ADDRESS_ENDPOINTS = ResourceEndpoints(collection="/user/addresses")
PAYMENT_METHOD_ENDPOINTS = ResourceEndpoints(collection="/payment-methods")


def _to_json(payload: Payload) -> dict[str, Any]:
    """Serialize a request schema or pass a plain mapping through."""
    if isinstance(payload, EntityRequest):
        return payload.to_api()
    return dict(payload)


class ResourceClient(Generic[EntityT]):
    """
    Client for one storefront resource.

    Args:
        model: Entity schema used to validate responses.
        endpoints: URL layout of the resource.
        entity_type: Name used in error messages (e.g. "category").
        client: HTTP client to use. Defaults to the shared module client.
        token: Bearer token. Defaults to STOREFRONT_API_TOKEN.
    """

    def __init__(
        self,
        model: type[EntityT],
        endpoints: ResourceEndpoints,
        entity_type: str,
        client: httpx.AsyncClient | None = None,
        token: str | None = None,
    ) -> None:
        self.model = model
        self.endpoints = endpoints
        self.entity_type = entity_type
        self._client = client
        self._token = token

    @property
    def supports_children(self) -> bool:
        """True if the resource has a lazy children endpoint."""
        return self.endpoints.children is not None

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def fetch_all(self) -> list[EntityT]:
        """Fetch the full collection."""
        return self._parse_list(await self._query(self.endpoints.collection))

    async def fetch_roots(self) -> list[EntityT]:
        """Fetch top-level entities only."""
        path = self.endpoints.roots or self.endpoints.collection
        return self._parse_list(await self._query(path))

    async def fetch_children(self, parent_id: str) -> list[EntityT]:
        """Fetch the direct children of `parent_id`."""
        if self.endpoints.children is None:
            raise TypeError(f"{self.entity_type} is a flat collection and has no children")
        path = self.endpoints.children.format(parent_id=parent_id)
        return self._parse_list(await self._query(path, parent_id))

    async def get(self, entity_id: str) -> EntityT:
        """Fetch a single entity."""
        data = await self._query(self.endpoints.item(entity_id), entity_id)
        return self._parse_one(data, FetchFailedError)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create(self, payload: Payload) -> EntityT | None:
        """
        Create an entity. Not safe to retry.

        Returns None if the server confirmed the create without echoing the
        record.
        """
        data = await self._mutate("POST", self.endpoints.collection, _to_json(payload))
        if data is None:
            return None
        return self._parse_one(data, MutationFailedError)

    async def update(self, entity_id: str, payload: Payload) -> EntityT | None:
        """
        Apply a partial update to an entity.

        Returns None if the server confirmed the update without echoing the
        record.
        """
        data = await self._mutate(
            "PATCH", self.endpoints.item(entity_id), _to_json(payload), entity_id,
        )
        if data is None:
            return None
        return self._parse_one(data, MutationFailedError)

    async def delete(self, entity_id: str) -> None:
        """Delete an entity."""
        await self._mutate("DELETE", self.endpoints.item(entity_id), None, entity_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await get_http_client()

    def _get_token(self) -> str | None:
        return self._token or get_settings().api_token

    async def _query(self, path: str, entity_id: str = "") -> Any:
        """GET a path, translating failures into FetchFailedError."""
        client = await self._get_client()
        try:
            return await api_get(client, path, self._get_token())
        except httpx.HTTPStatusError as e:
            parsed = parse_http_error(e, self.entity_type, entity_id)
            logger.debug("fetch_failed path=%s status=%s", path, parsed.status_code)
            raise FetchFailedError.from_parsed(parsed) from e
        except httpx.RequestError as e:
            raise FetchFailedError.from_parsed(parse_request_error(e)) from e
        except ApiEnvelopeError as e:
            raise FetchFailedError(e.message, "internal", e.status_code) from e

    async def _mutate(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None,
        entity_id: str = "",
    ) -> Any:
        """Send a mutation, translating failures into MutationFailedError."""
        client = await self._get_client()
        token = self._get_token()
        try:
            if method == "POST":
                return await api_post(client, path, token, json)
            if method == "PATCH":
                return await api_patch(client, path, token, json or {})
            if method == "DELETE":
                return await api_delete(client, path, token)
            raise ValueError(f"Unsupported method: {method}")
        except httpx.HTTPStatusError as e:
            parsed = parse_http_error(e, self.entity_type, entity_id)
            logger.debug("mutation_failed method=%s path=%s status=%s", method, path, parsed.status_code)  # noqa: E501
            raise MutationFailedError.from_parsed(parsed) from e
        except httpx.RequestError as e:
            raise MutationFailedError.from_parsed(parse_request_error(e)) from e
        except ApiEnvelopeError as e:
            raise MutationFailedError(e.message, "internal", e.status_code) from e

    def _parse_list(self, data: Any) -> list[EntityT]:
        if not isinstance(data, list):
            raise FetchFailedError(f"Unexpected {self.entity_type} list response")
        try:
            return [self.model.model_validate(item) for item in data]
        except ValidationError as e:
            raise FetchFailedError(f"Invalid {self.entity_type} data from server") from e

    def _parse_one(self, data: Any, error_cls: type[StorefrontApiError]) -> EntityT:
        try:
            return self.model.model_validate(data)
        except ValidationError as e:
            raise error_cls(f"Invalid {self.entity_type} data from server") from e


def category_client(
    client: httpx.AsyncClient | None = None,
    token: str | None = None,
) -> ResourceClient[Category]:
    """Client for the category tree."""
    return ResourceClient(Category, CATEGORY_ENDPOINTS, "category", client, token)


def address_client(
    client: httpx.AsyncClient | None = None,
    token: str | None = None,
) -> ResourceClient[Address]:
    """Client for the current user's delivery addresses."""
    return ResourceClient(Address, ADDRESS_ENDPOINTS, "address", client, token)


def payment_method_client(
    client: httpx.AsyncClient | None = None,
    token: str | None = None,
) -> ResourceClient[PaymentMethod]:
    """Client for the current user's payment methods."""
    return ResourceClient(PaymentMethod, PAYMENT_METHOD_ENDPOINTS, "payment method", client, token)
