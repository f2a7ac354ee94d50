"""Pure builder transitions over ``ReportConfiguration``.

Every operation takes a configuration and returns a new one; the input is
never modified.
"""

from smartreports.builders.aggregations import AggregationSpec
from smartreports.builders.configuration import (
    can_execute,
    change_data_source,
    collect_errors,
    default_configuration,
    replace_configuration,
    validate_configuration,
)
from smartreports.builders.filters import FilterPredicateBuilder
from smartreports.builders.selection import FieldSelectionBuilder
from smartreports.builders.sorting import SortSpecBuilder

__all__ = [
    "AggregationSpec",
    "FieldSelectionBuilder",
    "FilterPredicateBuilder",
    "SortSpecBuilder",
    "can_execute",
    "change_data_source",
    "collect_errors",
    "default_configuration",
    "replace_configuration",
    "validate_configuration",
]
