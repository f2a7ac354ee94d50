"""
Pytest configuration and fixtures for SmartReports tests.
"""

import inspect
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from smartreports.builders import FieldSelectionBuilder, default_configuration
from smartreports.catalog import get_fallback_fields
from smartreports.client import SmartReportsClient
from smartreports.schemas.report import (
    DataSourceType,
    FieldMetadata,
    ReportConfiguration,
)

API_URL = "http://testserver/api/reports/smart"
API_PATH = "/api/reports/smart"

Route = httpx.Response | Callable[[httpx.Request], Any]


class MockBackend:
    """
    In-memory stand-in for the back-office smart report endpoints.

    Routes are keyed by method and path relative to the API prefix. A route
    is either a fixed response or a (sync or async) handler receiving the
    request. Unrouted requests answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        route: Route | None = None,
        *,
        json: Any = None,
        status_code: int = 200,
    ) -> None:
        if route is None:
            route = httpx.Response(status_code, json=json)
        self.routes[(method.upper(), path)] = route

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method.upper() and r.url.path == f"{API_PATH}{path}"
        ]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(API_PATH)
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})
        if isinstance(route, httpx.Response):
            return route
        response = route(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def build_fields_payload(data_source: DataSourceType | str) -> list[dict[str, Any]]:
    """Live catalog payload built from the static catalog with server IDs."""
    payload = []
    for metadata in get_fallback_fields(data_source):
        item = metadata.to_wire()
        item["id"] = f"srv-{metadata.data_source.value}-{metadata.field_name}"
        payload.append(item)
    return payload


def build_template_payload(
    template_id: str,
    config: ReportConfiguration,
    name: str = "Monthly expenses",
    is_default: bool = False,
    report_type: str = "FINANCIAL",
) -> dict[str, Any]:
    return {
        "id": template_id,
        "name": name,
        "description": None,
        "reportType": report_type,
        "config": config.to_wire(),
        "isDefault": is_default,
        "isPublic": False,
        "createdAt": "2025-01-01T10:00:00Z",
        "updatedAt": "2025-01-01T10:00:00Z",
    }


@pytest.fixture
def backend() -> MockBackend:
    """Mock backend with no routes."""
    return MockBackend()


@pytest.fixture
def client(backend: MockBackend) -> SmartReportsClient:
    """Client wired to the mock backend."""
    return SmartReportsClient(base_url=API_URL, token="test-token", transport=backend.transport)


@pytest.fixture
def transactions_catalog() -> list[FieldMetadata]:
    return get_fallback_fields(DataSourceType.TRANSACTIONS)


@pytest.fixture
def debts_catalog() -> list[FieldMetadata]:
    return get_fallback_fields(DataSourceType.DEBTS)


@pytest.fixture
def empty_config() -> ReportConfiguration:
    """Transactions configuration without any selection."""
    return default_configuration(DataSourceType.TRANSACTIONS)


@pytest.fixture
def selected_config(
    empty_config: ReportConfiguration, transactions_catalog: list[FieldMetadata]
) -> ReportConfiguration:
    """Transactions configuration with amount, category and date selected."""
    selection = FieldSelectionBuilder(transactions_catalog)
    config = empty_config
    for name in ("amount", "category", "date"):
        config = selection.add_field(config, name)
    return config


@pytest.fixture
def fields_payload() -> Callable[..., list[dict[str, Any]]]:
    """Factory for live ``/fields`` payloads."""
    return build_fields_payload


@pytest.fixture
def template_payload() -> Callable[..., dict[str, Any]]:
    """Factory for ``/templates`` payloads."""
    return build_template_payload
