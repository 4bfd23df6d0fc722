"""Pytest configuration and shared fixtures."""

from dataclasses import replace
from typing import Callable, Dict, List, Type, Union

import httpx
import pytest

from pricecrawl.scrapers.base import BaseSourceAdapter


PageBody = Union[str, int]


class FakeCatalog:
    """In-memory site: URL -> markup (or an HTTP status code to fail with).

    Records every requested URL so tests can assert on fetch order.
    """

    def __init__(self, pages: Dict[str, PageBody]):
        self.pages = {str(httpx.URL(url)): body for url, body in pages.items()}
        self.requested: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        body = self.pages.get(url)
        if body is None:
            return httpx.Response(404, text="not found")
        if isinstance(body, int):
            return httpx.Response(body, text="error")
        return httpx.Response(200, text=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_catalog() -> Callable[[Dict[str, PageBody]], FakeCatalog]:
    """Factory for FakeCatalog instances."""
    return FakeCatalog


@pytest.fixture
def make_adapter() -> Callable[..., BaseSourceAdapter]:
    """Build an adapter bound to a fake catalog with request delays disabled."""

    def _make(adapter_cls: Type[BaseSourceAdapter], catalog: FakeCatalog, **config_overrides):
        config = replace(adapter_cls.config, request_delay_ms=0, **config_overrides)
        return adapter_cls(config=config, http_client=catalog.client())

    return _make
