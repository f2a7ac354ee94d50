"""Unit tests for FieldSelectionBuilder."""

import pytest

from smartreports.builders import FieldSelectionBuilder, SortSpecBuilder
from smartreports.catalog import get_fallback_fields
from smartreports.core.exceptions import FieldNotFoundError, ValidationError


@pytest.fixture
def builder(transactions_catalog):
    return FieldSelectionBuilder(transactions_catalog)


def _orders(config):
    return sorted(f.order for f in config.fields)


class TestAddField:
    """Tests for adding fields."""

    def test_appends_visible_field(self, builder, empty_config):
        """Test a field is appended visible at the end."""
        config = builder.add_field(builder.add_field(empty_config, "amount"), "category")
        added = config.fields[-1]

        assert added.source_field == "category"
        assert added.order == 1
        assert added.visible
        assert added.display_name == "الفئة"

    def test_copies_format(self, builder, empty_config):
        """Test the display format is copied from metadata."""
        config = builder.add_field(empty_config, "amount")
        assert config.fields[0].format.value == "currency"

    def test_duplicate_rejected(self, builder, empty_config):
        """Test a field cannot be selected twice."""
        config = builder.add_field(empty_config, "amount")
        with pytest.raises(ValidationError):
            builder.add_field(config, "amount")

    def test_unknown_field(self, builder, empty_config):
        """Test an unknown field name raises."""
        with pytest.raises(FieldNotFoundError):
            builder.add_field(empty_config, "missing")

    def test_other_data_source_rejected(self, builder, empty_config):
        """Test metadata of another data source is rejected."""
        creditor = next(f for f in get_fallback_fields("debts") if f.field_name == "creditorName")
        with pytest.raises(ValidationError):
            builder.add_field(empty_config, creditor)

    def test_select_defaults(self, builder, empty_config, transactions_catalog):
        """Test default-visible fields are selected in default order."""
        config = builder.select_defaults(empty_config)
        expected = [
            f.field_name
            for f in sorted(transactions_catalog, key=lambda f: f.default_order)
            if f.default_visible
        ]
        assert [f.source_field for f in config.visible_fields] == expected

    def test_available_fields_search(self, builder, empty_config):
        """Test searching unselected fields by display or field name."""
        config = builder.add_field(empty_config, "amount")
        names = {f.field_name for f in builder.available_fields(config)}
        assert "amount" not in names
        assert [f.field_name for f in builder.available_fields(config, "payment")] == [
            "paymentMethod"
        ]
        assert [f.field_name for f in builder.available_fields(config, "الفئة")] == ["category"]


class TestRemoveField:
    """Tests for removing fields."""

    def test_orders_repacked(self, builder, selected_config):
        """Test remaining orders stay contiguous."""
        middle = selected_config.fields[1]
        config = builder.remove_field(selected_config, middle.id)

        assert _orders(config) == [0, 1]
        assert [f.source_field for f in config.visible_fields] == ["amount", "date"]

    def test_sort_entry_dropped(self, builder, selected_config, transactions_catalog):
        """Test sorting by a removed field is dropped."""
        config = SortSpecBuilder(transactions_catalog).add_sort(selected_config, "amount", "desc")
        amount = config.fields[0]

        config = builder.remove_field(config, amount.id)
        assert config.order_by == []

    def test_missing_field(self, builder, selected_config):
        """Test removing an unselected field raises."""
        with pytest.raises(FieldNotFoundError):
            builder.remove_field(selected_config, "nope")


class TestVisibility:
    """Tests for showing and hiding fields."""

    def test_toggle(self, builder, selected_config):
        """Test toggling twice restores visibility."""
        field_id = selected_config.fields[0].id
        hidden = builder.toggle_visibility(selected_config, field_id)
        assert not hidden.get_field(field_id).visible
        assert builder.toggle_visibility(hidden, field_id).get_field(field_id).visible

    def test_hiding_drops_sort(self, builder, selected_config, transactions_catalog):
        """Test sorting by a hidden field is dropped."""
        config = SortSpecBuilder(transactions_catalog).add_sort(selected_config, "category")
        category = config.fields[1]

        config = builder.toggle_visibility(config, category.id)
        assert config.order_by == []


class TestReorder:
    """Tests for reordering fields."""

    @pytest.mark.parametrize("from_index,to_index", [(0, 2), (2, 0), (1, 1), (0, 1), (2, 1)])
    def test_orders_contiguous_and_ids_preserved(self, builder, selected_config, from_index, to_index):
        """Test reorder keeps orders 0..n-1 and the same set of fields."""
        config = builder.reorder(selected_config, from_index, to_index)

        assert _orders(config) == [0, 1, 2]
        assert {f.id for f in config.fields} == {f.id for f in selected_config.fields}

    def test_moves_field(self, builder, selected_config):
        """Test the moved field lands at the target position."""
        config = builder.reorder(selected_config, 0, 2)
        assert [f.source_field for f in config.visible_fields] == ["category", "date", "amount"]

    def test_out_of_range(self, builder, selected_config):
        """Test positions outside the selection raise."""
        with pytest.raises(ValidationError):
            builder.reorder(selected_config, 0, 3)


class TestRenameAndValidate:
    """Tests for renaming and validating the selection."""

    def test_rename(self, builder, selected_config):
        """Test a column header can be renamed."""
        field_id = selected_config.fields[0].id
        config = builder.rename_field(selected_config, field_id, " Total ")
        assert config.get_field(field_id).display_name == "Total"

    def test_rename_empty(self, builder, selected_config):
        """Test an empty header is rejected."""
        with pytest.raises(ValidationError):
            builder.rename_field(selected_config, selected_config.fields[0].id, "  ")

    def test_validate_empty_selection(self, builder, empty_config):
        """Test a selection without visible fields is reported."""
        errors = builder.validate_fields(empty_config)
        assert errors[0]["type"] == "no_visible_fields"

    def test_validate_ok(self, builder, selected_config):
        """Test a proper selection has no errors."""
        assert builder.validate_fields(selected_config) == []
