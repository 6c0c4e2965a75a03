"""Test fixtures for storefront API client tests."""

from collections.abc import Generator
from typing import Any

import pytest
import respx

from storefront_api import api_client


@pytest.fixture
def mock_api() -> Generator[respx.MockRouter]:
    """Context manager for mocking API responses."""
    # Reset the module-level HTTP client to ensure respx captures requests
    api_client._http_client = None
    with respx.mock(base_url="http://localhost:3000") as respx_mock:
        yield respx_mock
    api_client._http_client = None


@pytest.fixture
def sample_categories() -> list[dict[str, Any]]:
    """Category list as returned by GET /categories."""
    return [
        {
            "id": "c1",
            "name": "Engine Parts",
            "description": "Pistons, filters and more",
            "parentId": None,
            "type": "product",
            "isActive": True,
            "productCount": 24,
        },
        {
            "id": "c2",
            "name": "Maintenance",
            "parentId": None,
            "type": "service",
            "isActive": True,
        },
    ]


@pytest.fixture
def sample_child_categories() -> list[dict[str, Any]]:
    """Children of c1 as returned by GET /categories/parent/c1."""
    return [
        {"id": "c3", "name": "Air Filters", "parentId": "c1"},
        {"id": "c4", "name": "Spark Plugs", "parentId": "c1"},
    ]


@pytest.fixture
def sample_addresses() -> list[dict[str, Any]]:
    """Addresses wrapped in the API envelope."""
    return [
        {
            "id": "a1",
            "name": "Home",
            "phone": "0900000001",
            "address": "12 Le Loi",
            "city": "Da Nang",
            "district": "Hai Chau",
            "ward": "Thach Thang",
            "isDefault": True,
        },
        {
            "id": "a2",
            "fullName": "Office",
            "phoneNumber": "0900000002",
            "address": "1 Tran Phu",
            "isDefault": False,
        },
    ]


@pytest.fixture
def sample_payment_method() -> dict[str, Any]:
    """A saved credit card."""
    return {
        "id": "p1",
        "type": "CREDIT_CARD",
        "name": "Personal Visa",
        "lastFourDigits": "4242",
        "cardBrand": "VISA",
        "isDefault": True,
        "createdAt": "2024-01-01T00:00:00Z",
    }
