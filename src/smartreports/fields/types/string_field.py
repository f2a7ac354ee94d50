"""String field type handler."""

from typing import Any

from smartreports.fields.base import COMMON_OPERATORS, BaseFieldTypeHandler
from smartreports.schemas.report import FilterOperator


class StringFieldHandler(BaseFieldTypeHandler):
    """
    Handler for string fields.

    Validation Options:
        - max_length: Maximum length of a filter value (default: 255)
    """

    data_type = "string"
    operators = COMMON_OPERATORS + (
        FilterOperator.CONTAINS,
        FilterOperator.STARTS_WITH,
        FilterOperator.ENDS_WITH,
        FilterOperator.IN,
        FilterOperator.NOT_IN,
    )

    @classmethod
    def serialize(cls, value: Any) -> Any:
        """Convert value to a trimmed string."""
        if value is None:
            return None
        return str(value).strip()

    @classmethod
    def validate(cls, value: Any, options: dict[str, Any] | None = None) -> bool:
        """
        Validate string filter value.

        Args:
            value: Value to validate
            options: Optional dict with 'max_length'

        Returns:
            True if valid

        Raises:
            ValueError: If validation fails
        """
        if value is None:
            return True

        if isinstance(value, (dict, list, tuple)):
            raise ValueError(f"String field requires a text value, got {type(value).__name__}")

        max_length = (options or {}).get("max_length", 255)
        if len(str(value)) > max_length:
            raise ValueError(f"Text value exceeds maximum length of {max_length} characters")

        return True

    @classmethod
    def default(cls) -> Any:
        """Get default value for string filters."""
        return ""
