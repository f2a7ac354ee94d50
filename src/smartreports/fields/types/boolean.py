"""Boolean field type handler."""

from typing import Any

from smartreports.fields.base import BaseFieldTypeHandler

_TRUE_STRINGS = frozenset({"true", "1", "yes", "نعم"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "لا"})


class BooleanFieldHandler(BaseFieldTypeHandler):
    """Handler for boolean fields. Only the common operators apply."""

    data_type = "boolean"

    @classmethod
    def serialize(cls, value: Any) -> Any:
        """Convert value to bool."""
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise ValueError(f"Cannot convert {value!r} to boolean")

    @classmethod
    def validate(cls, value: Any, options: dict[str, Any] | None = None) -> bool:
        """
        Validate boolean filter value.

        Raises:
            ValueError: If the value is not a recognizable boolean
        """
        if value is None:
            return True
        cls.serialize(value)
        return True

    @classmethod
    def default(cls) -> Any:
        """Get default value for boolean filters."""
        return True
