"""Field catalog resolution."""

from smartreports.catalog.fallback import FALLBACK_CATALOG, get_fallback_fields
from smartreports.catalog.registry import (
    CatalogResolution,
    FetchFailure,
    FetchResult,
    FetchSuccess,
    FieldMetadataRegistry,
    resolve_fields,
)

__all__ = [
    "CatalogResolution",
    "FALLBACK_CATALOG",
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "FieldMetadataRegistry",
    "get_fallback_fields",
    "resolve_fields",
]
