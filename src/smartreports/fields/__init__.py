"""Field type handlers for SmartReports.

Each report data type has one handler that declares the legal filter
operators for that type and validates and serializes filter values.
All type-dependent behaviour is dispatched through ``FIELD_HANDLERS``.
"""

from smartreports.fields.base import COMMON_OPERATORS, BaseFieldTypeHandler
from smartreports.fields.types.boolean import BooleanFieldHandler
from smartreports.fields.types.date import DateFieldHandler
from smartreports.fields.types.enum_field import EnumFieldHandler
from smartreports.fields.types.number import NumberFieldHandler
from smartreports.fields.types.string_field import StringFieldHandler
from smartreports.schemas.report import FieldDataType, FieldMetadata, FilterOperator

# Registry of field type handlers
FIELD_HANDLERS: dict[str, type[BaseFieldTypeHandler]] = {
    StringFieldHandler.data_type: StringFieldHandler,
    NumberFieldHandler.data_type: NumberFieldHandler,
    DateFieldHandler.data_type: DateFieldHandler,
    BooleanFieldHandler.data_type: BooleanFieldHandler,
    EnumFieldHandler.data_type: EnumFieldHandler,
}


def get_field_handler(data_type: FieldDataType | str) -> type[BaseFieldTypeHandler] | None:
    """
    Get field handler for given data type.

    Args:
        data_type: Field data type identifier

    Returns:
        Field handler class or None if not found
    """
    key = data_type.value if isinstance(data_type, FieldDataType) else data_type
    return FIELD_HANDLERS.get(key)


def operators_for_type(data_type: FieldDataType | str) -> list[FilterOperator]:
    """
    Legal filter operators for a data type, in display order.

    Unknown types only get the common operators.
    """
    handler = get_field_handler(data_type)
    if handler is None:
        return list(COMMON_OPERATORS)
    return list(handler.operators)


def handler_options(metadata: FieldMetadata) -> dict:
    """Validation options derived from a field's metadata."""
    options = {}
    if metadata.enum_values:
        options["enum_values"] = metadata.enum_values
    return options


__all__ = [
    "BaseFieldTypeHandler",
    "BooleanFieldHandler",
    "COMMON_OPERATORS",
    "DateFieldHandler",
    "EnumFieldHandler",
    "FIELD_HANDLERS",
    "NumberFieldHandler",
    "StringFieldHandler",
    "get_field_handler",
    "handler_options",
    "operators_for_type",
]
