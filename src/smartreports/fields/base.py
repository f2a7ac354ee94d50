"""Base class for field type handlers."""

from abc import ABC, abstractmethod
from typing import Any

from smartreports.schemas.report import (
    LIST_OPERATORS,
    NULL_OPERATORS,
    FilterOperator,
)

COMMON_OPERATORS: tuple[FilterOperator, ...] = (
    FilterOperator.EQUALS,
    FilterOperator.NOT_EQUALS,
    FilterOperator.IS_NULL,
    FilterOperator.IS_NOT_NULL,
)

RANGE_OPERATORS: tuple[FilterOperator, ...] = (
    FilterOperator.GREATER_THAN,
    FilterOperator.GREATER_THAN_OR_EQUAL,
    FilterOperator.LESS_THAN,
    FilterOperator.LESS_THAN_OR_EQUAL,
    FilterOperator.BETWEEN,
    FilterOperator.IN,
    FilterOperator.NOT_IN,
)


def is_blank(value: Any) -> bool:
    """True for values a user has not filled in."""
    return value is None or (isinstance(value, str) and not value.strip())


class BaseFieldTypeHandler(ABC):
    """
    Base class for field type handlers.

    Each report data type (string, number, date, boolean, enum) implements
    this class to declare its legal filter operators and to provide
    serialization and validation of filter values. Handlers are looked up
    by the field's declared data type, never by the Python type of a value.

    Value shapes by operator:
        - isNull / isNotNull: no value
        - between: a ``[low, high]`` pair, order preserved
        - in / notIn: a non-empty list (comma separated strings are split)
        - anything else: a single scalar

    Example:
        handler = get_field_handler("number")
        handler.serialize_filter_value(FilterOperator.BETWEEN, ["1", "5"])
        # -> [1, 5]
    """

    data_type: str
    operators: tuple[FilterOperator, ...] = COMMON_OPERATORS

    @classmethod
    @abstractmethod
    def serialize(cls, value: Any) -> Any:
        """
        Convert a single value to its wire format.

        Args:
            value: Value entered by the user

        Returns:
            JSON-serializable value
        """
        pass

    @classmethod
    @abstractmethod
    def validate(cls, value: Any, options: dict[str, Any] | None = None) -> bool:
        """
        Validate a single value against the data type.

        Args:
            value: Value to validate
            options: Type-specific options (e.g. ``enum_values``)

        Returns:
            True if valid

        Raises:
            ValueError: If validation fails
        """
        pass

    @classmethod
    @abstractmethod
    def default(cls) -> Any:
        """Default value offered for a new filter on this type."""
        pass

    @classmethod
    def supports(cls, operator: FilterOperator | str) -> bool:
        """Check whether an operator is legal for this data type."""
        try:
            return FilterOperator(operator) in cls.operators
        except ValueError:
            return False

    @classmethod
    def first_operator(cls) -> FilterOperator:
        """Operator a filter is reset to when its field changes."""
        return cls.operators[0]

    @classmethod
    def split_list(cls, value: Any) -> list[Any]:
        """Normalize an ``in``/``notIn`` value to a list."""
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple, set, frozenset)):
            return [item for item in value if not is_blank(item)]
        if is_blank(value):
            return []
        return [value]

    @classmethod
    def validate_filter_value(
        cls,
        operator: FilterOperator | str,
        value: Any,
        options: dict[str, Any] | None = None,
    ) -> bool:
        """
        Validate a filter value for the given operator.

        Raises:
            ValueError: If the value does not fit the operator's shape or type
        """
        operator = FilterOperator(operator)
        if not cls.supports(operator):
            raise ValueError(
                f"Operator '{operator.value}' is not allowed for {cls.data_type} fields"
            )

        if operator in NULL_OPERATORS:
            if not is_blank(value):
                raise ValueError(f"Operator '{operator.value}' does not take a value")
            return True

        if operator == FilterOperator.BETWEEN:
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise ValueError("Operator 'between' requires a [low, high] pair")
            low, high = value
            if is_blank(low) or is_blank(high):
                raise ValueError("Operator 'between' requires both bounds")
            cls.validate(low, options)
            cls.validate(high, options)
            return True

        if operator in LIST_OPERATORS:
            items = cls.split_list(value)
            if not items:
                raise ValueError(f"Operator '{operator.value}' requires at least one value")
            for item in items:
                cls.validate(item, options)
            return True

        if isinstance(value, (list, tuple)):
            raise ValueError(f"Operator '{operator.value}' requires a single value")
        if is_blank(value):
            raise ValueError(f"Operator '{operator.value}' requires a value")
        cls.validate(value, options)
        return True

    @classmethod
    def serialize_filter_value(cls, operator: FilterOperator | str, value: Any) -> Any:
        """Convert a filter value to wire format according to the operator's shape."""
        operator = FilterOperator(operator)
        if operator in NULL_OPERATORS:
            return None
        if operator == FilterOperator.BETWEEN:
            low, high = value
            return [cls.serialize(low), cls.serialize(high)]
        if operator in LIST_OPERATORS:
            return [cls.serialize(item) for item in cls.split_list(value)]
        return cls.serialize(value)
