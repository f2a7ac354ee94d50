"""Static field catalog served when the metadata service is unavailable."""

from typing import Any

from smartreports.schemas.report import DataSourceType, FieldMetadata

# (field_name, display_name, data_type, filterable, sortable, aggregatable,
#  groupable, default_visible, default_order, extras)
_FieldRow = tuple[str, str, str, bool, bool, bool, bool, bool, int, dict[str, Any]]

_CATALOG: dict[DataSourceType, list[_FieldRow]] = {
    DataSourceType.TRANSACTIONS: [
        ("id", "المعرف", "string", False, False, False, False, False, 999, {}),
        ("amount", "المبلغ", "number", True, True, True, False, True, 1, {"format": "currency"}),
        ("type", "النوع", "enum", True, True, False, True, True, 2,
         {"enum_values": ["INCOME", "EXPENSE"]}),
        ("category", "الفئة", "string", True, True, False, True, True, 3, {}),
        ("paymentMethod", "طريقة الدفع", "enum", True, True, False, True, True, 4,
         {"enum_values": ["CASH", "MASTER"]}),
        ("employeeVendorName", "اسم الموظف/المورد", "string", True, True, False, False, True, 5, {}),
        ("notes", "الملاحظات", "string", True, False, False, False, False, 6, {}),
        ("date", "التاريخ", "date", True, True, False, True, True, 7, {"format": "date-short"}),
        ("branchId", "الفرع", "string", True, True, False, True, False, 8, {}),
        ("createdAt", "تاريخ الإنشاء", "date", True, True, False, False, False, 10,
         {"format": "date-long"}),
    ],
    DataSourceType.DEBTS: [
        ("id", "المعرف", "string", False, False, False, False, False, 999, {}),
        ("creditorName", "اسم الدائن", "string", True, True, False, True, True, 1, {}),
        ("originalAmount", "المبلغ الأصلي", "number", True, True, True, False, True, 2,
         {"format": "currency"}),
        ("remainingAmount", "المبلغ المتبقي", "number", True, True, True, False, True, 3,
         {"format": "currency"}),
        ("status", "الحالة", "enum", True, True, False, True, True, 4,
         {"enum_values": ["ACTIVE", "PAID", "PARTIAL"]}),
        ("date", "تاريخ الدين", "date", True, True, False, False, True, 5, {"format": "date-short"}),
        ("dueDate", "تاريخ الاستحقاق", "date", True, True, False, False, True, 6,
         {"format": "date-short"}),
        ("branchId", "الفرع", "string", True, True, False, True, False, 7, {}),
        ("notes", "الملاحظات", "string", True, False, False, False, False, 8, {}),
    ],
    DataSourceType.INVENTORY: [
        ("id", "المعرف", "string", False, False, False, False, False, 999, {}),
        ("name", "اسم الصنف", "string", True, True, False, False, True, 1, {}),
        ("quantity", "الكمية", "number", True, True, True, False, True, 2, {}),
        ("unit", "الوحدة", "enum", True, True, False, True, True, 3,
         {"enum_values": ["KG", "PIECE", "LITER", "OTHER"]}),
        ("costPerUnit", "التكلفة لكل وحدة", "number", True, True, True, False, True, 4,
         {"format": "currency"}),
        ("lastUpdated", "آخر تحديث", "date", True, True, False, False, True, 5,
         {"format": "date-long"}),
    ],
    DataSourceType.SALARIES: [
        ("id", "المعرف", "string", False, False, False, False, False, 999, {}),
        ("name", "اسم الموظف", "string", True, True, False, False, True, 1, {}),
        ("position", "المنصب", "string", True, True, False, True, True, 2, {}),
        ("baseSalary", "الراتب الأساسي", "number", True, True, True, False, True, 3,
         {"format": "currency"}),
        ("allowance", "البدل", "number", True, True, True, False, True, 4, {"format": "currency"}),
        ("status", "الحالة", "enum", True, True, False, True, True, 5,
         {"enum_values": ["ACTIVE", "RESIGNED"]}),
        ("hireDate", "تاريخ التوظيف", "date", True, True, False, False, True, 6,
         {"format": "date-short"}),
    ],
    DataSourceType.BRANCHES: [
        ("id", "المعرف", "string", False, False, False, False, False, 999, {}),
        ("name", "اسم الفرع", "string", True, True, False, False, True, 1, {}),
        ("location", "الموقع", "string", True, False, False, False, True, 2, {}),
        ("managerName", "اسم المدير", "string", True, True, False, False, True, 3, {}),
        ("phone", "الهاتف", "string", True, False, False, False, True, 4, {}),
        ("isActive", "نشط", "boolean", True, True, False, True, True, 5, {}),
    ],
}


def _build(data_source: DataSourceType, row: _FieldRow) -> FieldMetadata:
    (
        field_name,
        display_name,
        data_type,
        filterable,
        sortable,
        aggregatable,
        groupable,
        default_visible,
        default_order,
        extras,
    ) = row
    return FieldMetadata(
        id=f"fallback-{data_source.value}-{field_name}",
        data_source=data_source,
        field_name=field_name,
        display_name=display_name,
        data_type=data_type,
        filterable=filterable,
        sortable=sortable,
        aggregatable=aggregatable,
        groupable=groupable,
        default_visible=default_visible,
        default_order=default_order,
        **extras,
    )


FALLBACK_CATALOG: dict[DataSourceType, tuple[FieldMetadata, ...]] = {
    source: tuple(
        sorted(
            (_build(source, row) for row in rows),
            key=lambda f: (f.default_order, f.display_name),
        )
    )
    for source, rows in _CATALOG.items()
}


def get_fallback_fields(data_source: DataSourceType | str) -> list[FieldMetadata]:
    """Static catalog for a data source, in default order."""
    return list(FALLBACK_CATALOG.get(DataSourceType(data_source), ()))
