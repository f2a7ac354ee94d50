"""Whole-configuration transitions and validation."""

from typing import Iterable, Optional

from smartreports.builders.aggregations import AggregationSpec
from smartreports.builders.filters import FilterPredicateBuilder
from smartreports.builders.selection import FieldSelectionBuilder
from smartreports.builders.sorting import SortSpecBuilder
from smartreports.core.config import settings
from smartreports.core.exceptions import InvalidDataSourceError, ValidationError
from smartreports.schemas.report import (
    DataSource,
    DataSourceType,
    FieldMetadata,
    ReportConfiguration,
    ReportExportOptions,
)


def _data_source(value: DataSourceType | str) -> DataSourceType:
    try:
        return DataSourceType(value)
    except ValueError:
        raise InvalidDataSourceError(str(value)) from None


def default_configuration(data_source: Optional[DataSourceType | str] = None) -> ReportConfiguration:
    """An empty configuration for a data source (the configured default if omitted)."""
    source = _data_source(data_source or settings.default_data_source)
    return ReportConfiguration(
        data_source=DataSource(type=source),
        fields=[],
        filters=[],
        order_by=[],
        export_options=ReportExportOptions(),
    )


def change_data_source(
    config: ReportConfiguration, data_source: DataSourceType | str
) -> ReportConfiguration:
    """
    Switch the data source.

    Field names are only meaningful within one data source, so the selection,
    filters, sort keys and aggregations are emptied. Export options are kept.
    Selecting the current data source again is a no-op.
    """
    source = _data_source(data_source)
    if source == config.data_source_type:
        return config
    return config.model_copy(
        update={
            "data_source": DataSource(type=source),
            "fields": [],
            "filters": [],
            "order_by": [],
            "aggregations": None,
        }
    )


def replace_configuration(
    config: ReportConfiguration, loaded: ReportConfiguration
) -> ReportConfiguration:
    """Replace the whole configuration, e.g. with one loaded from a template."""
    return loaded


def can_execute(config: ReportConfiguration) -> bool:
    """A configuration can run when at least one selected field is visible."""
    return any(f.visible for f in config.fields)


def collect_errors(config: ReportConfiguration, catalog: Iterable[FieldMetadata] = ()) -> list[dict]:
    """Every violation found in the configuration, without raising."""
    catalog = tuple(catalog)
    errors = FieldSelectionBuilder(catalog).validate_fields(config)
    errors.extend(FilterPredicateBuilder(catalog).validate_filters(config))
    errors.extend(SortSpecBuilder(catalog).validate_sorts(config))
    errors.extend(AggregationSpec(catalog).validate_aggregations(config))
    return errors


def validate_configuration(
    config: ReportConfiguration, catalog: Iterable[FieldMetadata] = ()
) -> ReportConfiguration:
    """
    Validate a configuration against the field catalog.

    Returns:
        The configuration, unchanged

    Raises:
        ValidationError: Listing every violation found
    """
    errors = collect_errors(config, catalog)
    if errors:
        raise ValidationError("Report configuration is invalid", errors=errors)
    return config
