"""Number field type handler."""

from typing import Any

from smartreports.fields.base import COMMON_OPERATORS, RANGE_OPERATORS, BaseFieldTypeHandler


class NumberFieldHandler(BaseFieldTypeHandler):
    """Handler for number fields."""

    data_type = "number"
    operators = COMMON_OPERATORS + RANGE_OPERATORS

    @classmethod
    def serialize(cls, value: Any) -> Any:
        """Convert value to int or float, keeping integers integral."""
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError(f"Cannot convert {value} to number")
        if isinstance(value, (int, float)):
            return value
        try:
            num = float(str(value).strip())
        except (ValueError, TypeError):
            raise ValueError(f"Cannot convert {value} to number")
        return int(num) if num.is_integer() else num

    @classmethod
    def validate(cls, value: Any, options: dict[str, Any] | None = None) -> bool:
        """
        Validate number filter value.

        Args:
            value: Value to validate
            options: Unused; numbers carry no metadata-driven bounds

        Returns:
            True if valid

        Raises:
            ValueError: If validation fails
        """
        if value is None:
            return True

        if isinstance(value, bool):
            raise ValueError(f"Number field requires numeric value, got {value}")
        try:
            float(value.strip() if isinstance(value, str) else value)
        except (ValueError, TypeError):
            raise ValueError(f"Number field requires numeric value, got {value}")
        return True

    @classmethod
    def default(cls) -> Any:
        """Get default value for number filters."""
        return None
