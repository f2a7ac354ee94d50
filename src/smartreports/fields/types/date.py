"""Date field type handler."""

from datetime import date, datetime
from typing import Any

from smartreports.fields.base import COMMON_OPERATORS, RANGE_OPERATORS, BaseFieldTypeHandler


class DateFieldHandler(BaseFieldTypeHandler):
    """Handler for date fields. Values travel as ISO ``YYYY-MM-DD`` strings."""

    data_type = "date"
    operators = COMMON_OPERATORS + RANGE_OPERATORS

    @classmethod
    def serialize(cls, value: Any) -> Any:
        """Convert value to an ISO date string."""
        if value is None:
            return None

        # datetime is a subclass of date
        if isinstance(value, datetime):
            return value.date().isoformat()

        if isinstance(value, date):
            return value.isoformat()

        if isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.strip())
                return parsed.date().isoformat()
            except ValueError:
                raise ValueError(f"Invalid date format: {value}")

        raise ValueError(
            f"Cannot convert {type(value).__name__} to date, expected date or ISO string"
        )

    @classmethod
    def validate(cls, value: Any, options: dict[str, Any] | None = None) -> bool:
        """
        Validate date filter value.

        Args:
            value: Value to validate
            options: Unused; dates carry no metadata-driven bounds

        Returns:
            True if valid

        Raises:
            ValueError: If validation fails
        """
        if value is None:
            return True

        # Raises ValueError for anything that is not an ISO date
        cls.serialize(value)
        return True

    @classmethod
    def default(cls) -> Any:
        """Get default value for date filters."""
        return None
