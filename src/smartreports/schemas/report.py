"""Report configuration schemas shared by the builders, services and client.

All models are immutable: builder operations return new instances instead of
mutating the ones they receive. Attribute names are snake_case in Python and
camelCase on the wire.
"""

from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from smartreports.core.config import settings


class DataSourceType(str, Enum):
    """Logical categories of reportable records."""

    TRANSACTIONS = "transactions"
    DEBTS = "debts"
    INVENTORY = "inventory"
    SALARIES = "salaries"
    BRANCHES = "branches"


class FieldDataType(str, Enum):
    """Data types a reportable field can have."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    ENUM = "enum"


class FieldFormat(str, Enum):
    """Display format hints attached to a field."""

    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DATE_SHORT = "date-short"
    DATE_LONG = "date-long"
    NUMBER = "number"
    TEXT = "text"


class FilterOperator(str, Enum):
    """Filter operators."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    IN = "in"
    NOT_IN = "notIn"
    GREATER_THAN = "greaterThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN = "lessThan"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    BETWEEN = "between"
    IS_NULL = "isNull"
    IS_NOT_NULL = "isNotNull"


# Operators that take no value
NULL_OPERATORS = frozenset({FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL})
# Operators whose value is a list
LIST_OPERATORS = frozenset({FilterOperator.IN, FilterOperator.NOT_IN})


class LogicalOperator(str, Enum):
    """Filter conjunction."""

    AND = "AND"
    OR = "OR"


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class AggregationFunction(str, Enum):
    """Summary functions computed over a field."""

    SUM = "sum"
    COUNT = "count"
    AVG = "avg"
    MIN = "min"
    MAX = "max"


class ExportFormat(str, Enum):
    """Rendered artifact formats."""

    EXCEL = "excel"
    CSV = "csv"
    PDF = "pdf"


class ReportType(str, Enum):
    """Report type a template is stored under."""

    FINANCIAL = "FINANCIAL"
    DEBTS = "DEBTS"
    INVENTORY = "INVENTORY"
    SALARY = "SALARY"
    BRANCHES = "BRANCHES"
    CUSTOM = "CUSTOM"


DATA_SOURCE_LABELS: dict[DataSourceType, str] = {
    DataSourceType.TRANSACTIONS: "المعاملات المالية",
    DataSourceType.DEBTS: "الديون",
    DataSourceType.INVENTORY: "المخزون",
    DataSourceType.SALARIES: "الرواتب",
    DataSourceType.BRANCHES: "الفروع",
}

DATA_SOURCE_REPORT_TYPES: dict[DataSourceType, ReportType] = {
    DataSourceType.TRANSACTIONS: ReportType.FINANCIAL,
    DataSourceType.DEBTS: ReportType.DEBTS,
    DataSourceType.INVENTORY: ReportType.INVENTORY,
    DataSourceType.SALARIES: ReportType.SALARY,
    DataSourceType.BRANCHES: ReportType.BRANCHES,
}

OPERATOR_LABELS: dict[FilterOperator, str] = {
    FilterOperator.EQUALS: "يساوي",
    FilterOperator.NOT_EQUALS: "لا يساوي",
    FilterOperator.GREATER_THAN: "أكبر من",
    FilterOperator.GREATER_THAN_OR_EQUAL: "أكبر من أو يساوي",
    FilterOperator.LESS_THAN: "أصغر من",
    FilterOperator.LESS_THAN_OR_EQUAL: "أصغر من أو يساوي",
    FilterOperator.CONTAINS: "يحتوي على",
    FilterOperator.STARTS_WITH: "يبدأ بـ",
    FilterOperator.ENDS_WITH: "ينتهي بـ",
    FilterOperator.IN: "ضمن",
    FilterOperator.NOT_IN: "ليس ضمن",
    FilterOperator.BETWEEN: "بين",
    FilterOperator.IS_NULL: "فارغ",
    FilterOperator.IS_NOT_NULL: "غير فارغ",
}

AGGREGATION_LABELS: dict[AggregationFunction, str] = {
    AggregationFunction.SUM: "المجموع",
    AggregationFunction.AVG: "المتوسط",
    AggregationFunction.COUNT: "العدد",
    AggregationFunction.MIN: "الحد الأدنى",
    AggregationFunction.MAX: "الحد الأقصى",
}


def new_id() -> str:
    """Generate an identifier for a selected field or filter."""
    return str(uuid4())


class WireModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON shape the backend expects."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Field Catalog
# =============================================================================


class FieldMetadata(WireModel):
    """Static description of one reportable column of a data source."""

    id: str = Field(..., description="Metadata ID")
    data_source: DataSourceType = Field(..., description="Data source the field belongs to")
    field_name: str = Field(..., min_length=1, description="Backend field name")
    display_name: str = Field(..., min_length=1, description="Label shown to users")
    description: Optional[str] = Field(None, description="Field description")
    data_type: FieldDataType = Field(..., description="Field data type")
    filterable: bool = Field(default=True, description="Can be used in filters")
    sortable: bool = Field(default=True, description="Can be used as sort key")
    aggregatable: bool = Field(default=False, description="Can be aggregated")
    groupable: bool = Field(default=False, description="Can be grouped by")
    default_visible: bool = Field(default=False, description="Selected by default")
    default_order: int = Field(default=0, description="Position among default fields")
    category: Optional[str] = Field(None, description="UI grouping category")
    format: Optional[FieldFormat] = Field(None, description="Display format hint")
    enum_values: Optional[list[str]] = Field(None, description="Allowed values for enum fields")


# =============================================================================
# Configuration Parts
# =============================================================================


class ReportField(WireModel):
    """A selected, ordered, show/hide-able projection of a catalog field."""

    id: str = Field(default_factory=new_id, description="Selection ID")
    source_field: str = Field(..., min_length=1, description="Catalog field name")
    display_name: str = Field(..., min_length=1, description="Column header")
    data_type: FieldDataType = Field(..., description="Field data type")
    visible: bool = Field(default=True, description="Included in preview/export columns")
    order: int = Field(default=0, ge=0, description="Display position")
    format: Optional[FieldFormat] = Field(None, description="Display format hint")


class ReportFilter(WireModel):
    """One typed comparison in the flat AND/OR filter chain."""

    id: str = Field(default_factory=new_id, description="Filter ID")
    field: str = Field(..., min_length=1, description="Catalog field name")
    operator: FilterOperator = Field(..., description="Filter operator")
    value: Any = Field(None, description="Scalar, list, or [low, high] pair")
    logical_operator: Optional[LogicalOperator] = Field(
        None, description="How this filter joins the previous one"
    )


class ReportOrderBy(WireModel):
    """One sort key; list position is its priority."""

    field: str = Field(..., min_length=1, description="Field to sort by")
    direction: SortDirection = Field(default=SortDirection.ASC, description="Sort direction")


class ReportAggregation(WireModel):
    """A summary computation over an aggregatable field."""

    field: str = Field(..., min_length=1, description="Field to aggregate")
    function: AggregationFunction = Field(..., description="Aggregation function")
    alias: str = Field(..., min_length=1, description="Result key")


class ReportExportOptions(WireModel):
    """Export settings carried with the configuration."""

    formats: list[ExportFormat] = Field(
        default_factory=lambda: [ExportFormat(fmt) for fmt in settings.default_export_formats],
        description="Formats offered for download",
    )
    include_charts: bool = Field(default=False, description="Include charts in export")
    include_raw_data: bool = Field(default=True, description="Include raw rows in export")
    file_name: Optional[str] = Field(None, description="Base name of exported files")


class DataSource(WireModel):
    """Data source selector."""

    type: DataSourceType = Field(..., description="Data source type")


class ReportConfiguration(WireModel):
    """The complete, immutable description of a report."""

    data_source: DataSource = Field(..., description="Selected data source")
    fields: list[ReportField] = Field(default_factory=list, description="Selected fields")
    filters: list[ReportFilter] = Field(default_factory=list, description="Filter chain")
    order_by: list[ReportOrderBy] = Field(default_factory=list, description="Sort keys")
    aggregations: Optional[list[ReportAggregation]] = Field(
        None, description="Summary computations"
    )
    export_options: ReportExportOptions = Field(
        default_factory=ReportExportOptions, description="Export settings"
    )

    @property
    def data_source_type(self) -> DataSourceType:
        """Shortcut for ``data_source.type``."""
        return self.data_source.type

    @property
    def visible_fields(self) -> list[ReportField]:
        """Visible fields in display order."""
        return sorted((f for f in self.fields if f.visible), key=lambda f: f.order)

    def get_field(self, field_id: str) -> Optional[ReportField]:
        """Find a selected field by selection ID."""
        return next((f for f in self.fields if f.id == field_id), None)

    def get_filter(self, filter_id: str) -> Optional[ReportFilter]:
        """Find a filter by ID."""
        return next((f for f in self.filters if f.id == filter_id), None)


# =============================================================================
# Results
# =============================================================================


class QueryResult(WireModel):
    """Rows and summaries returned by one execution."""

    data: list[dict[str, Any]] = Field(default_factory=list, description="Result rows")
    total_count: int = Field(default=0, ge=0, description="Rows matching the filters")
    execution_time: float = Field(default=0, ge=0, description="Backend time in ms")
    aggregations: Optional[dict[str, Optional[float]]] = Field(
        None, description="Aggregation results keyed by alias"
    )


class DataSourceOption(WireModel):
    """Selectable data source with its label."""

    value: DataSourceType
    label: str

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Data source label cannot be empty")
        return v
