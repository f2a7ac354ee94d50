"""Predefined report configurations for common reports.

Quick templates cover transactions, debts and inventory. Transactions and
debts are restricted to a date period; any but inventory can be restricted
to one branch.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Optional

from smartreports.builders.base import coerce_choice, error
from smartreports.core.exceptions import ValidationError
from smartreports.schemas.report import (
    AggregationFunction,
    DataSource,
    DataSourceType,
    FieldDataType,
    FieldFormat,
    FilterOperator,
    LogicalOperator,
    ReportAggregation,
    ReportConfiguration,
    ReportExportOptions,
    ReportField,
    ReportFilter,
    ReportOrderBy,
    SortDirection,
)


class DatePeriod(str, Enum):
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"
    CUSTOM = "custom"


QUICK_TEMPLATE_SOURCES = (
    DataSourceType.TRANSACTIONS,
    DataSourceType.DEBTS,
    DataSourceType.INVENTORY,
)

QUICK_TEMPLATE_TITLES: dict[DataSourceType, str] = {
    DataSourceType.TRANSACTIONS: "تقرير المعاملات",
    DataSourceType.DEBTS: "تقرير الديون",
    DataSourceType.INVENTORY: "تقرير المخزون",
}

# (source_field, display_name, data_type, format)
_FIELDS: dict[DataSourceType, list[tuple[str, str, FieldDataType, Optional[FieldFormat]]]] = {
    DataSourceType.TRANSACTIONS: [
        ("date", "التاريخ", FieldDataType.DATE, FieldFormat.DATE_SHORT),
        ("type", "نوع الفاتورة", FieldDataType.ENUM, None),
        ("category", "الفئة", FieldDataType.STRING, None),
        ("amount", "المبلغ", FieldDataType.NUMBER, FieldFormat.CURRENCY),
        ("paymentMethod", "طريقة الدفع", FieldDataType.ENUM, None),
        ("notes", "الملاحظات", FieldDataType.STRING, None),
    ],
    DataSourceType.DEBTS: [
        ("creditorName", "اسم الدائن", FieldDataType.STRING, None),
        ("originalAmount", "المبلغ الأصلي", FieldDataType.NUMBER, FieldFormat.CURRENCY),
        ("remainingAmount", "المبلغ المتبقي", FieldDataType.NUMBER, FieldFormat.CURRENCY),
        ("status", "الحالة", FieldDataType.ENUM, None),
        ("date", "تاريخ الدين", FieldDataType.DATE, FieldFormat.DATE_SHORT),
        ("dueDate", "تاريخ الاستحقاق", FieldDataType.DATE, FieldFormat.DATE_SHORT),
    ],
    DataSourceType.INVENTORY: [
        ("name", "اسم الصنف", FieldDataType.STRING, None),
        ("quantity", "الكمية", FieldDataType.NUMBER, None),
        ("unit", "الوحدة", FieldDataType.ENUM, None),
        ("costPerUnit", "التكلفة لكل وحدة", FieldDataType.NUMBER, FieldFormat.CURRENCY),
    ],
}

# (field, function, alias); every field is aggregatable in the catalog
_AGGREGATIONS: dict[DataSourceType, list[tuple[str, AggregationFunction, str]]] = {
    DataSourceType.TRANSACTIONS: [
        ("amount", AggregationFunction.SUM, "إجمالي المبالغ"),
        ("amount", AggregationFunction.COUNT, "عدد المعاملات"),
    ],
    DataSourceType.DEBTS: [
        ("originalAmount", AggregationFunction.SUM, "إجمالي المبلغ الأصلي"),
        ("remainingAmount", AggregationFunction.SUM, "إجمالي المبلغ المتبقي"),
        ("originalAmount", AggregationFunction.COUNT, "عدد الديون"),
    ],
    DataSourceType.INVENTORY: [
        ("quantity", AggregationFunction.SUM, "إجمالي الكمية"),
        ("costPerUnit", AggregationFunction.SUM, "إجمالي التكلفة"),
        ("quantity", AggregationFunction.COUNT, "عدد الأصناف"),
    ],
}

_SORT_FIELDS: dict[DataSourceType, str] = {
    DataSourceType.TRANSACTIONS: "date",
    DataSourceType.DEBTS: "date",
    DataSourceType.INVENTORY: "name",
}


def date_range(
    period: DatePeriod | str,
    custom_from: Optional[date | str] = None,
    custom_to: Optional[date | str] = None,
    today: Optional[date] = None,
) -> tuple[str, str]:
    """
    ISO ``(from, to)`` dates for a period ending today.

    Weeks start on Saturday. A custom period needs both bounds.

    Raises:
        ValidationError: If a custom period is missing a bound
    """
    period = coerce_choice(DatePeriod, period, ["period"])
    today = today or date.today()

    if period == DatePeriod.CUSTOM:
        if not custom_from or not custom_to:
            raise ValidationError(
                "A custom period needs both a start and an end date",
                errors=[error(["period"], "missing custom date bound")],
            )
        return str(custom_from), str(custom_to)

    if period == DatePeriod.THIS_WEEK:
        # date.weekday(): Monday=0 ... Saturday=5
        start = today - timedelta(days=(today.weekday() - 5) % 7)
    elif period == DatePeriod.THIS_YEAR:
        start = today.replace(month=1, day=1)
    else:
        start = today.replace(day=1)
    return start.isoformat(), today.isoformat()


def build_quick_template(
    data_source: DataSourceType | str,
    period: DatePeriod | str = DatePeriod.THIS_MONTH,
    custom_from: Optional[date | str] = None,
    custom_to: Optional[date | str] = None,
    branch_id: Optional[str] = None,
    today: Optional[date] = None,
) -> ReportConfiguration:
    """
    Build a ready-to-run configuration for a quick template.

    Every call generates fresh field and filter IDs.

    Raises:
        ValidationError: For a data source without a quick template or an
            incomplete custom period
    """
    source = coerce_choice(DataSourceType, data_source, ["data_source"])
    if source not in QUICK_TEMPLATE_SOURCES:
        raise ValidationError(
            f"No quick template for '{source.value}'",
            errors=[error(["data_source"], "no quick template", "unknown_template")],
        )

    fields = [
        ReportField(
            source_field=name,
            display_name=display_name,
            data_type=data_type,
            visible=True,
            order=i,
            format=fmt,
        )
        for i, (name, display_name, data_type, fmt) in enumerate(_FIELDS[source])
    ]

    filters: list[ReportFilter] = []
    if source != DataSourceType.INVENTORY:
        low, high = date_range(period, custom_from, custom_to, today)
        filters.append(ReportFilter(field="date", operator=FilterOperator.BETWEEN, value=[low, high]))
        if branch_id:
            filters.append(
                ReportFilter(
                    field="branchId",
                    operator=FilterOperator.EQUALS,
                    value=branch_id,
                    logical_operator=LogicalOperator.AND,
                )
            )

    return ReportConfiguration(
        data_source=DataSource(type=source),
        fields=fields,
        filters=filters,
        order_by=[ReportOrderBy(field=_SORT_FIELDS[source], direction=SortDirection.DESC)],
        aggregations=[
            ReportAggregation(field=name, function=function, alias=alias)
            for name, function, alias in _AGGREGATIONS[source]
        ],
        export_options=ReportExportOptions(),
    )
