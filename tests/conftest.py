"""Pytest fixtures shared by all test packages."""
from collections.abc import Generator

import pytest

from core.config import get_settings

API_URL = "http://localhost:3000"


@pytest.fixture(autouse=True)
def storefront_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """
    Pin the client settings for every test.

    Settings are cached, so the cache is cleared before and after each test
    to keep environment changes from leaking between tests.
    """
    monkeypatch.setenv("STOREFRONT_API_URL", API_URL)
    monkeypatch.setenv("STOREFRONT_API_TIMEOUT", "5")
    monkeypatch.setenv("STOREFRONT_REQUEST_SOURCE", "storefront-tests")
    monkeypatch.delenv("STOREFRONT_API_TOKEN", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
