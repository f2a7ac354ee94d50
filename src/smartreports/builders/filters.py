"""Filter predicate builder.

Filters form a flat chain evaluated left to right: ``f0 op1 f1 op2 f2 ...``
where ``opN`` is the ``logical_operator`` of filter N. The first filter never
carries a logical operator. Operator legality and value checks are
dispatched through the field handler registered for the field's data type.
"""

from typing import Any, Iterable, Optional

from smartreports.builders.base import CatalogBuilder, coerce_choice, error
from smartreports.core.exceptions import (
    InvalidOperatorError,
    ItemNotFoundError,
    ValidationError,
)
from smartreports.fields import (
    BaseFieldTypeHandler,
    get_field_handler,
    handler_options,
    operators_for_type,
)
from smartreports.fields.base import COMMON_OPERATORS
from smartreports.schemas.report import (
    NULL_OPERATORS,
    FieldMetadata,
    FilterOperator,
    LogicalOperator,
    ReportConfiguration,
    ReportFilter,
)

_UPDATABLE = frozenset({"field", "operator", "value", "logical_operator"})


class FilterPredicateBuilder(CatalogBuilder):
    """Pure transitions over ``ReportConfiguration.filters``."""

    def __init__(self, catalog: Iterable[FieldMetadata] = ()) -> None:
        super().__init__(catalog)

    def filterable_fields(self) -> list[FieldMetadata]:
        """Catalog fields that may be used in a filter."""
        return [f for f in self.catalog if f.filterable]

    def operators_for(self, field_name: str) -> list[FilterOperator]:
        """Legal operators for a catalog field; the common set for unknown fields."""
        metadata = self.lookup(field_name)
        if metadata is None:
            return list(COMMON_OPERATORS)
        return operators_for_type(metadata.data_type)

    def add_filter(
        self, config: ReportConfiguration, field_name: Optional[str] = None
    ) -> ReportConfiguration:
        """
        Append a filter on ``field_name`` (or on the first filterable field).

        The operator starts as the first legal one for the field's type and
        the value as the handler's default.

        Raises:
            ValidationError: If there is no filterable field to use
            FieldNotFoundError: If ``field_name`` is not in the catalog
        """
        if field_name is None:
            candidates = self.filterable_fields()
            if not candidates:
                raise ValidationError(
                    "No filterable fields available",
                    errors=[error(["filters"], "no filterable field", "no_target")],
                )
            metadata = candidates[0]
        else:
            metadata = self._require_filterable(field_name)

        handler = self._handler(metadata)
        new_filter = ReportFilter(
            field=metadata.field_name,
            operator=handler.first_operator(),
            value=handler.default(),
            logical_operator=LogicalOperator.AND if config.filters else None,
        )
        return config.model_copy(update={"filters": [*config.filters, new_filter]})

    def remove_filter(self, config: ReportConfiguration, filter_id: str) -> ReportConfiguration:
        """Remove a filter; the new first filter loses its logical operator."""
        self._index_of(config, filter_id)
        filters = [f for f in config.filters if f.id != filter_id]
        if filters and filters[0].logical_operator is not None:
            filters[0] = filters[0].model_copy(update={"logical_operator": None})
        return config.model_copy(update={"filters": filters})

    def update_filter(
        self, config: ReportConfiguration, filter_id: str, **changes: Any
    ) -> ReportConfiguration:
        """
        Change ``field``, ``operator``, ``value`` and/or ``logical_operator`` of a filter.

        Changes are applied in that order, so a new field may be combined with
        an operator and value in one call. Changing the field resets the
        operator and clears the value. Moving to a null operator clears the
        value; moving into ``between`` starts an empty ``[None, None]`` pair
        and moving out of it clears the pair.

        Raises:
            ItemNotFoundError: If the filter does not exist
            FieldNotFoundError: If the new field is not in the catalog
            InvalidOperatorError: If the operator is illegal for the field's type
            ValidationError: If the value shape does not fit the operator
        """
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise TypeError(f"Unknown filter attributes: {sorted(unknown)}")

        index = self._index_of(config, filter_id)
        current = config.filters[index]
        field_name = current.field
        operator = current.operator
        value = current.value
        logical_operator = current.logical_operator

        if "field" in changes and changes["field"] != current.field:
            metadata = self._require_filterable(changes["field"])
            field_name = metadata.field_name
            operator = self._handler(metadata).first_operator()
            value = None

        if "operator" in changes:
            new_operator = self._check_operator(field_name, changes["operator"])
            if new_operator in NULL_OPERATORS:
                value = None
            elif new_operator == FilterOperator.BETWEEN and operator != FilterOperator.BETWEEN:
                value = [None, None]
            elif operator == FilterOperator.BETWEEN and new_operator != FilterOperator.BETWEEN:
                value = None
            operator = new_operator

        if "value" in changes:
            value = self._check_shape(operator, changes["value"], index)

        if "logical_operator" in changes and index > 0:
            # Non-first filters always join with AND or OR
            logical_operator = coerce_choice(
                LogicalOperator,
                changes["logical_operator"] or LogicalOperator.AND,
                ["filters", index, "logical_operator"],
            )

        updated = current.model_copy(
            update={
                "field": field_name,
                "operator": operator,
                "value": value,
                "logical_operator": logical_operator if index > 0 else None,
            }
        )
        filters = list(config.filters)
        filters[index] = updated
        return config.model_copy(update={"filters": filters})

    def validate_filters(self, config: ReportConfiguration) -> list[dict]:
        """
        Collect every filter violation.

        Checks field existence, operator legality, value shape and value type
        (including open-ended ``between`` ranges) and the logical operator chain.
        """
        errors = []
        for i, report_filter in enumerate(config.filters):
            loc = ["filters", i]

            if i == 0 and report_filter.logical_operator is not None:
                errors.append(
                    error([*loc, "logical_operator"], "first filter cannot have a logical operator")
                )
            elif i > 0 and report_filter.logical_operator is None:
                errors.append(error([*loc, "logical_operator"], "logical operator is required"))

            metadata = self.lookup(report_filter.field)
            if metadata is None:
                if not self.catalog:
                    continue
                errors.append(
                    error([*loc, "field"], f"Unknown field '{report_filter.field}'", "unknown_field")
                )
                continue
            if not metadata.filterable:
                errors.append(
                    error([*loc, "field"], f"'{report_filter.field}' is not filterable", "not_filterable")
                )
                continue

            handler = self._handler(metadata)
            if not handler.supports(report_filter.operator):
                errors.append(
                    error(
                        [*loc, "operator"],
                        f"Operator '{report_filter.operator.value}' is not allowed "
                        f"for {metadata.data_type.value} fields",
                        "invalid_operator",
                    )
                )
                continue

            try:
                handler.validate_filter_value(
                    report_filter.operator, report_filter.value, handler_options(metadata)
                )
            except ValueError as e:
                errors.append(error([*loc, "value"], str(e)))
        return errors

    def serialize_filters(self, config: ReportConfiguration) -> list[ReportFilter]:
        """Filters with values normalized through their field handlers."""
        serialized = []
        for report_filter in config.filters:
            metadata = self.lookup(report_filter.field)
            if metadata is None:
                serialized.append(report_filter)
                continue
            handler = self._handler(metadata)
            value = handler.serialize_filter_value(report_filter.operator, report_filter.value)
            serialized.append(report_filter.model_copy(update={"value": value}))
        return serialized

    def _require_filterable(self, field_name: str) -> FieldMetadata:
        metadata = self.require(field_name)
        if not metadata.filterable:
            raise ValidationError(
                f"Field '{field_name}' is not filterable",
                errors=[error(["filters", "field"], "not filterable", "not_filterable")],
            )
        return metadata

    def _check_operator(self, field_name: str, operator: Any) -> FilterOperator:
        metadata = self.lookup(field_name)
        data_type = metadata.data_type.value if metadata else "unknown"
        try:
            candidate = FilterOperator(operator)
        except ValueError:
            raise InvalidOperatorError(field_name, data_type, str(operator)) from None
        if candidate not in self.operators_for(field_name):
            raise InvalidOperatorError(field_name, data_type, candidate.value)
        return candidate

    @staticmethod
    def _check_shape(operator: FilterOperator, value: Any, index: int) -> Any:
        if operator in NULL_OPERATORS:
            if value not in (None, ""):
                raise ValidationError(
                    f"Operator '{operator.value}' does not take a value",
                    errors=[error(["filters", index, "value"], "no value allowed")],
                )
            return None
        if operator == FilterOperator.BETWEEN:
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise ValidationError(
                    "Operator 'between' requires a [low, high] pair",
                    errors=[error(["filters", index, "value"], "expected a pair")],
                )
            return list(value)
        if isinstance(value, tuple):
            return list(value)
        return value

    @staticmethod
    def _handler(metadata: FieldMetadata) -> type[BaseFieldTypeHandler]:
        handler = get_field_handler(metadata.data_type)
        if handler is None:
            raise ValidationError(
                f"Unsupported data type '{metadata.data_type}'",
                errors=[error(["filters", "field"], "unsupported data type", "unsupported_type")],
            )
        return handler

    @staticmethod
    def _index_of(config: ReportConfiguration, filter_id: str) -> int:
        for i, report_filter in enumerate(config.filters):
            if report_filter.id == filter_id:
                return i
        raise ItemNotFoundError("filter", filter_id)
