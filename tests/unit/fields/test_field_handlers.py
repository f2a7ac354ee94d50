"""Unit tests for field type handlers."""

from datetime import date

import pytest

from smartreports.fields import (
    FIELD_HANDLERS,
    BooleanFieldHandler,
    DateFieldHandler,
    EnumFieldHandler,
    NumberFieldHandler,
    StringFieldHandler,
    get_field_handler,
    handler_options,
    operators_for_type,
)
from smartreports.schemas.report import FieldDataType, FieldMetadata, FilterOperator

COMMON = {
    FilterOperator.EQUALS,
    FilterOperator.NOT_EQUALS,
    FilterOperator.IS_NULL,
    FilterOperator.IS_NOT_NULL,
}


class TestOperatorSets:
    """Tests for operator sets per data type."""

    @pytest.mark.parametrize("data_type", list(FieldDataType))
    def test_every_type_has_common_operators(self, data_type):
        """Test every data type offers at least the common operators."""
        operators = operators_for_type(data_type)
        assert operators
        assert COMMON <= set(operators)

    def test_unknown_type_gets_common_operators(self):
        """Test an unregistered type falls back to the common set."""
        assert set(operators_for_type("geometry")) == COMMON

    def test_string_operators(self):
        """Test string operators in display order."""
        assert operators_for_type("string") == [
            FilterOperator.EQUALS,
            FilterOperator.NOT_EQUALS,
            FilterOperator.IS_NULL,
            FilterOperator.IS_NOT_NULL,
            FilterOperator.CONTAINS,
            FilterOperator.STARTS_WITH,
            FilterOperator.ENDS_WITH,
            FilterOperator.IN,
            FilterOperator.NOT_IN,
        ]

    @pytest.mark.parametrize("data_type", ["number", "date"])
    def test_range_operators(self, data_type):
        """Test number and date fields support range comparisons."""
        operators = operators_for_type(data_type)
        for op in (
            FilterOperator.GREATER_THAN,
            FilterOperator.LESS_THAN_OR_EQUAL,
            FilterOperator.BETWEEN,
        ):
            assert op in operators
        assert FilterOperator.CONTAINS not in operators

    def test_enum_starts_with_equals(self):
        """Test enum fields reset to equals and support list membership."""
        assert EnumFieldHandler.first_operator() == FilterOperator.EQUALS
        assert EnumFieldHandler.supports("in")
        assert not EnumFieldHandler.supports("greaterThan")

    def test_boolean_only_common(self):
        """Test boolean fields only get the common operators."""
        assert set(BooleanFieldHandler.operators) == COMMON

    def test_supports_rejects_unknown_operator(self):
        """Test an unknown operator string is not supported."""
        assert not StringFieldHandler.supports("like")


class TestHandlerRegistry:
    """Tests for handler lookup by data type."""

    def test_registry_covers_all_types(self):
        """Test every data type has a handler."""
        assert set(FIELD_HANDLERS) == {t.value for t in FieldDataType}

    def test_lookup_by_enum_and_string(self):
        """Test lookup accepts the enum or its value."""
        assert get_field_handler(FieldDataType.NUMBER) is NumberFieldHandler
        assert get_field_handler("date") is DateFieldHandler

    def test_lookup_unknown(self):
        """Test unknown type returns None."""
        assert get_field_handler("geometry") is None

    def test_handler_options_from_metadata(self):
        """Test enum values are passed as validation options."""
        metadata = FieldMetadata(
            id="1",
            data_source="transactions",
            field_name="type",
            display_name="النوع",
            data_type="enum",
            enum_values=["INCOME", "EXPENSE"],
        )
        assert handler_options(metadata) == {"enum_values": ["INCOME", "EXPENSE"]}


class TestSerialization:
    """Tests for single value serialization."""

    def test_number_from_string(self):
        """Test numeric strings become numbers."""
        assert NumberFieldHandler.serialize("100") == 100
        assert NumberFieldHandler.serialize(" 12.5 ") == 12.5

    def test_number_rejects_bool(self):
        """Test booleans are not numbers."""
        with pytest.raises(ValueError):
            NumberFieldHandler.serialize(True)

    def test_number_rejects_text(self):
        """Test non-numeric text raises."""
        with pytest.raises(ValueError):
            NumberFieldHandler.serialize("abc")

    def test_date_from_date_and_string(self):
        """Test dates serialize to ISO strings."""
        assert DateFieldHandler.serialize(date(2025, 1, 31)) == "2025-01-31"
        assert DateFieldHandler.serialize("2025-01-31T10:00:00") == "2025-01-31"

    def test_values_are_unbounded(self):
        """Test numbers and dates validate without range options."""
        assert NumberFieldHandler.validate("-1e12", {"min_value": 0, "max_value": 10})
        assert DateFieldHandler.validate("1900-01-01", {"min_date": "2000-01-01"})

    def test_date_rejects_garbage(self):
        """Test an unparseable date raises."""
        with pytest.raises(ValueError):
            DateFieldHandler.serialize("31/01/2025")

    def test_boolean_strings(self):
        """Test boolean text values including Arabic yes/no."""
        assert BooleanFieldHandler.serialize("true") is True
        assert BooleanFieldHandler.serialize("نعم") is True
        assert BooleanFieldHandler.serialize("لا") is False

    def test_string_trims(self):
        """Test strings are trimmed."""
        assert StringFieldHandler.serialize("  الإيجار ") == "الإيجار"


class TestFilterValueValidation:
    """Tests for operator-aware filter value validation."""

    def test_scalar_value(self):
        """Test a scalar operator accepts one typed value."""
        assert NumberFieldHandler.validate_filter_value("greaterThan", "100")

    def test_scalar_requires_value(self):
        """Test a scalar operator rejects an empty value."""
        with pytest.raises(ValueError, match="requires a value"):
            StringFieldHandler.validate_filter_value("equals", "  ")

    def test_scalar_rejects_list(self):
        """Test a scalar operator rejects a list."""
        with pytest.raises(ValueError, match="single value"):
            NumberFieldHandler.validate_filter_value("equals", [1, 2])

    def test_type_mismatch(self):
        """Test a value of the wrong type is rejected by the field's handler."""
        with pytest.raises(ValueError):
            NumberFieldHandler.validate_filter_value("equals", "abc")

    def test_null_operator_without_value(self):
        """Test null operators take no value."""
        assert StringFieldHandler.validate_filter_value("isNull", None)
        with pytest.raises(ValueError, match="does not take a value"):
            StringFieldHandler.validate_filter_value("isNotNull", "x")

    def test_between_pair(self):
        """Test between accepts a complete pair."""
        assert DateFieldHandler.validate_filter_value("between", ["2025-01-01", "2025-01-31"])

    @pytest.mark.parametrize(
        "value",
        [["2025-01-01", None], [None, "2025-01-31"], ["2025-01-01", ""]],
    )
    def test_between_open_ended_blocked(self, value):
        """Test a between range with a missing bound is rejected."""
        with pytest.raises(ValueError, match="both bounds"):
            DateFieldHandler.validate_filter_value("between", value)

    def test_between_requires_pair(self):
        """Test between rejects a scalar."""
        with pytest.raises(ValueError, match="pair"):
            NumberFieldHandler.validate_filter_value("between", 5)

    def test_in_accepts_comma_separated(self):
        """Test list operators accept comma separated text."""
        assert EnumFieldHandler.validate_filter_value(
            "in", "INCOME, EXPENSE", {"enum_values": ["INCOME", "EXPENSE"]}
        )

    def test_in_requires_items(self):
        """Test list operators require at least one item."""
        with pytest.raises(ValueError, match="at least one"):
            StringFieldHandler.validate_filter_value("in", " , ")

    def test_enum_value_checked(self):
        """Test enum values are checked against allowed values."""
        with pytest.raises(ValueError, match="not one of"):
            EnumFieldHandler.validate_filter_value("equals", "REFUND", {"enum_values": ["INCOME"]})

    def test_illegal_operator(self):
        """Test operators outside the type's set are rejected."""
        with pytest.raises(ValueError, match="not allowed"):
            BooleanFieldHandler.validate_filter_value("contains", "true")


class TestFilterValueSerialization:
    """Tests for operator-aware filter value serialization."""

    def test_between_keeps_order(self):
        """Test a between pair keeps its order."""
        assert NumberFieldHandler.serialize_filter_value("between", ["10", "5"]) == [10, 5]

    def test_in_splits_text(self):
        """Test list operators split comma separated text."""
        assert StringFieldHandler.serialize_filter_value("notIn", "a, b,,c") == ["a", "b", "c"]

    def test_null_operator_drops_value(self):
        """Test null operators serialize to no value."""
        assert NumberFieldHandler.serialize_filter_value("isNull", "5") is None
