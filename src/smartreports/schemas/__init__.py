"""Schemas for SmartReports."""

from smartreports.schemas import report, template
from smartreports.schemas.report import (
    AggregationFunction,
    DataSource,
    DataSourceOption,
    DataSourceType,
    ExportFormat,
    FieldDataType,
    FieldFormat,
    FieldMetadata,
    FilterOperator,
    LogicalOperator,
    QueryResult,
    ReportAggregation,
    ReportConfiguration,
    ReportExportOptions,
    ReportField,
    ReportFilter,
    ReportOrderBy,
    ReportType,
    SortDirection,
)
from smartreports.schemas.template import ReportTemplate, TemplateCreate, TemplateUpdate

__all__ = [
    "report",
    "template",
    "AggregationFunction",
    "DataSource",
    "DataSourceOption",
    "DataSourceType",
    "ExportFormat",
    "FieldDataType",
    "FieldFormat",
    "FieldMetadata",
    "FilterOperator",
    "LogicalOperator",
    "QueryResult",
    "ReportAggregation",
    "ReportConfiguration",
    "ReportExportOptions",
    "ReportField",
    "ReportFilter",
    "ReportOrderBy",
    "ReportTemplate",
    "ReportType",
    "SortDirection",
    "TemplateCreate",
    "TemplateUpdate",
]
