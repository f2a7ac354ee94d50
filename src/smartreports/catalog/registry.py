"""Field metadata registry.

Resolves the field catalog for a data source. The transport outcome is kept
as an explicit :data:`FetchResult`, and one pure function,
:func:`resolve_fields`, decides between the live catalog and the static
fallback catalog. A failed fetch never raises: it yields a degraded
resolution carrying the :class:`MetadataFetchError`.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from smartreports.catalog.fallback import get_fallback_fields
from smartreports.client import SmartReportsClient
from smartreports.core.config import Settings, settings as default_settings
from smartreports.core.exceptions import ApiError, MetadataFetchError
from smartreports.core.logging import LoggerMixin
from smartreports.schemas.report import (
    DATA_SOURCE_LABELS,
    DataSourceOption,
    DataSourceType,
    FieldMetadata,
)


@dataclass(frozen=True)
class FetchSuccess:
    """Live catalog returned by the metadata service."""

    fields: list[FieldMetadata]


@dataclass(frozen=True)
class FetchFailure:
    """Metadata service could not deliver a catalog."""

    error: Exception


FetchResult = Union[FetchSuccess, FetchFailure]


@dataclass(frozen=True)
class CatalogResolution:
    """The field catalog chosen for one data source."""

    data_source: DataSourceType
    fields: tuple[FieldMetadata, ...] = ()
    degraded: bool = False
    error: Optional[MetadataFetchError] = None
    _by_name: dict[str, FieldMetadata] = field(
        init=False, default_factory=dict, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_name", {f.field_name: f for f in self.fields})

    def get(self, field_name: str) -> Optional[FieldMetadata]:
        """Metadata for a field name, if the catalog has it."""
        return self._by_name.get(field_name)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._by_name

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def filterable(self) -> list[FieldMetadata]:
        return [f for f in self.fields if f.filterable]

    @property
    def sortable(self) -> list[FieldMetadata]:
        return [f for f in self.fields if f.sortable]

    @property
    def aggregatable(self) -> list[FieldMetadata]:
        return [f for f in self.fields if f.aggregatable]


def _catalog_order(fields: list[FieldMetadata]) -> tuple[FieldMetadata, ...]:
    return tuple(sorted(fields, key=lambda f: (f.default_order, f.display_name)))


def resolve_fields(
    result: FetchResult,
    data_source: DataSourceType | str,
    fallback_enabled: bool = True,
) -> CatalogResolution:
    """
    Choose the catalog for a data source from a fetch outcome.

    Args:
        result: Outcome of the metadata fetch
        data_source: Data source the fetch was issued for
        fallback_enabled: Serve the static catalog on failure

    Returns:
        Live catalog on success; static catalog marked degraded on failure
    """
    source = DataSourceType(data_source)

    if isinstance(result, FetchSuccess):
        # Metadata is scoped to one data source; drop anything else
        scoped = [f for f in result.fields if f.data_source == source]
        return CatalogResolution(data_source=source, fields=_catalog_order(scoped))

    reason = getattr(result.error, "message", None) or str(result.error)
    reason = reason or type(result.error).__name__
    error = MetadataFetchError(source.value, reason)
    fallback = get_fallback_fields(source) if fallback_enabled else []
    return CatalogResolution(
        data_source=source,
        fields=_catalog_order(fallback),
        degraded=True,
        error=error,
    )


class FieldMetadataRegistry(LoggerMixin):
    """Fetches, resolves and caches field catalogs per data source."""

    def __init__(
        self,
        client: SmartReportsClient,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.settings = settings or default_settings
        self._clock = clock
        self._cache: dict[DataSourceType, tuple[float, CatalogResolution]] = {}
        self._data_sources: Optional[tuple[float, list[DataSourceOption]]] = None

    async def fetch(self, data_source: DataSourceType | str) -> FetchResult:
        """Fetch the live catalog, capturing transport failures as a value."""
        try:
            fields = await self.client.get_fields(data_source)
        except ApiError as e:
            return FetchFailure(error=e)
        return FetchSuccess(fields=fields)

    async def get_fields(self, data_source: DataSourceType | str) -> CatalogResolution:
        """
        Resolve the catalog for a data source.

        Degraded resolutions are logged as warnings and never cached, so the
        next call retries the live service.
        """
        source = DataSourceType(data_source)
        cached = self._cached(source)
        if cached is not None:
            return cached

        result = await self.fetch(source)
        resolution = resolve_fields(
            result, source, fallback_enabled=self.settings.fallback_catalog_enabled
        )

        if resolution.degraded:
            self.logger.warning(
                "Field metadata unavailable, using fallback catalog",
                extra={
                    "data_source": source.value,
                    "reason": resolution.error.details.get("reason") if resolution.error else None,
                    "fallback_fields": len(resolution.fields),
                },
            )
        else:
            if self.settings.field_cache_ttl > 0:
                self._cache[source] = (self._clock(), resolution)
            self.logger.debug(
                "Field metadata loaded",
                extra={"data_source": source.value, "fields": len(resolution.fields)},
            )

        return resolution

    async def get_data_sources(self) -> list[DataSourceOption]:
        """Selectable data sources; the static list is used on failure."""
        ttl = self.settings.data_sources_cache_ttl
        if self._data_sources is not None:
            loaded_at, options = self._data_sources
            if self._clock() - loaded_at < ttl:
                return list(options)

        try:
            options = await self.client.get_data_sources()
        except ApiError as e:
            self.logger.warning(
                "Data source list unavailable, using static list",
                extra={"reason": e.message},
            )
            return [
                DataSourceOption(value=source, label=label)
                for source, label in DATA_SOURCE_LABELS.items()
            ]

        if ttl > 0:
            self._data_sources = (self._clock(), options)
        return list(options)

    def invalidate(self, data_source: DataSourceType | str | None = None) -> None:
        """Drop cached catalogs (all of them when no data source is given)."""
        if data_source is None:
            self._cache.clear()
            self._data_sources = None
        else:
            self._cache.pop(DataSourceType(data_source), None)

    def _cached(self, source: DataSourceType) -> Optional[CatalogResolution]:
        entry = self._cache.get(source)
        if entry is None:
            return None
        loaded_at, resolution = entry
        if self._clock() - loaded_at >= self.settings.field_cache_ttl:
            del self._cache[source]
            return None
        return resolution
