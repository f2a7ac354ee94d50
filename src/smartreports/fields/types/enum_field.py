"""Enum field type handler."""

from typing import Any

from smartreports.fields.base import BaseFieldTypeHandler
from smartreports.schemas.report import FilterOperator


class EnumFieldHandler(BaseFieldTypeHandler):
    """
    Handler for enum fields.

    Options:
        - enum_values: list of allowed values; when present, filter values
          must be one of them
    """

    data_type = "enum"
    operators = (
        FilterOperator.EQUALS,
        FilterOperator.NOT_EQUALS,
        FilterOperator.IN,
        FilterOperator.NOT_IN,
        FilterOperator.IS_NULL,
        FilterOperator.IS_NOT_NULL,
    )

    @classmethod
    def serialize(cls, value: Any) -> Any:
        """Convert value to its string member name."""
        if value is None:
            return None
        return str(value).strip()

    @classmethod
    def validate(cls, value: Any, options: dict[str, Any] | None = None) -> bool:
        """
        Validate enum filter value.

        Raises:
            ValueError: If the value is not one of the allowed values
        """
        if value is None:
            return True

        allowed = (options or {}).get("enum_values")
        if allowed and str(value).strip() not in allowed:
            raise ValueError(f"Value '{value}' is not one of {allowed}")

        return True

    @classmethod
    def default(cls) -> Any:
        """Get default value for enum filters."""
        return None
