"""Unit tests for field catalog resolution and caching."""

import httpx
import pytest

from smartreports.catalog import (
    FALLBACK_CATALOG,
    CatalogResolution,
    FetchFailure,
    FetchSuccess,
    FieldMetadataRegistry,
    get_fallback_fields,
    resolve_fields,
)
from smartreports.core.config import Settings
from smartreports.core.exceptions import ApiError, MetadataFetchError
from smartreports.schemas.report import DataSourceType, FieldMetadata


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _metadata(name: str, order: int, source: str = "transactions") -> FieldMetadata:
    return FieldMetadata(
        id=f"{source}-{name}",
        data_source=source,
        field_name=name,
        display_name=name.title(),
        data_type="string",
        default_order=order,
    )


class TestFallbackCatalog:
    """Tests for the static catalog."""

    def test_covers_every_data_source(self):
        """Test each data source has fallback fields."""
        for source in DataSourceType:
            assert FALLBACK_CATALOG[source]

    def test_fields_scoped_and_sorted(self):
        """Test fallback fields belong to their source and are in default order."""
        fields = get_fallback_fields("debts")
        assert all(f.data_source == DataSourceType.DEBTS for f in fields)
        orders = [f.default_order for f in fields]
        assert orders == sorted(orders)

    def test_branch_filter_available(self):
        """Test transactions can be filtered by branch."""
        names = {f.field_name for f in get_fallback_fields("transactions") if f.filterable}
        assert "branchId" in names


class TestResolveFields:
    """Tests for the pure live-or-fallback decision."""

    def test_success_uses_live_catalog(self):
        """Test a successful fetch returns the live catalog sorted."""
        live = [_metadata("b", 2), _metadata("a", 1)]
        resolution = resolve_fields(FetchSuccess(fields=live), "transactions")

        assert not resolution.degraded
        assert resolution.error is None
        assert [f.field_name for f in resolution] == ["a", "b"]

    def test_success_drops_other_sources(self):
        """Test fields of another data source are ignored."""
        live = [_metadata("a", 1), _metadata("x", 1, source="debts")]
        resolution = resolve_fields(FetchSuccess(fields=live), "transactions")
        assert "x" not in resolution
        assert len(resolution) == 1

    def test_failure_uses_fallback(self):
        """Test a failed fetch yields the degraded fallback catalog."""
        resolution = resolve_fields(FetchFailure(error=ApiError("boom")), "inventory")

        assert resolution.degraded
        assert isinstance(resolution.error, MetadataFetchError)
        assert resolution.error.details["reason"] == "boom"
        assert "quantity" in resolution

    def test_failure_without_fallback(self):
        """Test the fallback can be disabled."""
        resolution = resolve_fields(
            FetchFailure(error=ApiError("boom")), "inventory", fallback_enabled=False
        )
        assert resolution.degraded
        assert len(resolution) == 0

    def test_capability_views(self):
        """Test filterable, sortable and aggregatable views."""
        resolution = CatalogResolution(
            data_source=DataSourceType.TRANSACTIONS,
            fields=tuple(get_fallback_fields("transactions")),
        )
        assert "amount" in {f.field_name for f in resolution.aggregatable}
        assert "id" not in {f.field_name for f in resolution.filterable}
        assert resolution.get("amount").data_type.value == "number"


class TestFieldMetadataRegistry:
    """Tests for the caching registry."""

    @pytest.mark.asyncio
    async def test_live_fields_cached(self, backend, client, fields_payload):
        """Test a live catalog is served from cache within the TTL."""
        backend.on("GET", "/fields", json=fields_payload("transactions"))
        clock = FakeClock()
        registry = FieldMetadataRegistry(client, Settings(field_cache_ttl=60), clock=clock)

        first = await registry.get_fields("transactions")
        second = await registry.get_fields("transactions")

        assert not first.degraded
        assert first is second
        assert len(backend.calls("GET", "/fields")) == 1
        assert backend.calls("GET", "/fields")[0].url.params["dataSource"] == "transactions"

        clock.now = 61
        await registry.get_fields("transactions")
        assert len(backend.calls("GET", "/fields")) == 2

    @pytest.mark.asyncio
    async def test_failure_degrades_and_is_not_cached(self, backend, client, caplog):
        """Test a failed fetch serves the fallback, logs a warning and retries next time."""
        backend.on("GET", "/fields", json={"message": "down"}, status_code=503)
        registry = FieldMetadataRegistry(client, Settings())

        resolution = await registry.get_fields("debts")

        assert resolution.degraded
        assert resolution.error.details["reason"] == "down"
        assert "creditorName" in resolution
        assert "using fallback catalog" in caplog.text

        await registry.get_fields("debts")
        assert len(backend.calls("GET", "/fields")) == 2

    @pytest.mark.asyncio
    async def test_transport_error_degrades(self, client):
        """Test a connection failure degrades instead of raising."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client._transport = httpx.MockTransport(refuse)
        registry = FieldMetadataRegistry(client, Settings())

        resolution = await registry.get_fields("salaries")
        assert resolution.degraded
        assert "baseSalary" in resolution

    @pytest.mark.asyncio
    async def test_invalidate(self, backend, client, fields_payload):
        """Test invalidation forces a refetch."""
        backend.on("GET", "/fields", json=fields_payload("branches"))
        registry = FieldMetadataRegistry(client, Settings())

        await registry.get_fields("branches")
        registry.invalidate("branches")
        await registry.get_fields("branches")
        assert len(backend.calls("GET", "/fields")) == 2

    @pytest.mark.asyncio
    async def test_data_sources(self, backend, client):
        """Test the data source list is fetched and cached."""
        backend.on(
            "GET",
            "/data-sources",
            json=[{"value": "transactions", "label": "المعاملات المالية"}],
        )
        registry = FieldMetadataRegistry(client, Settings())

        options = await registry.get_data_sources()
        await registry.get_data_sources()

        assert [o.value for o in options] == [DataSourceType.TRANSACTIONS]
        assert len(backend.calls("GET", "/data-sources")) == 1

    @pytest.mark.asyncio
    async def test_data_sources_fallback(self, backend, client):
        """Test the static data source list is used on failure."""
        backend.on("GET", "/data-sources", json={}, status_code=500)
        registry = FieldMetadataRegistry(client, Settings())

        options = await registry.get_data_sources()
        assert {o.value for o in options} == set(DataSourceType)
