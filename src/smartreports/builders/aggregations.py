"""Aggregation specification."""

from typing import Iterable, Optional

from smartreports.builders.base import CatalogBuilder, coerce_choice, error
from smartreports.core.exceptions import ItemNotFoundError, ValidationError
from smartreports.schemas.report import (
    AGGREGATION_LABELS,
    AggregationFunction,
    FieldMetadata,
    ReportAggregation,
    ReportConfiguration,
)


class AggregationSpec(CatalogBuilder):
    """Pure transitions over ``ReportConfiguration.aggregations``.

    Aggregations are keyed by ``alias``, which is also the key of the value
    in ``QueryResult.aggregations``; aliases are therefore unique.
    """

    def __init__(self, catalog: Iterable[FieldMetadata] = ()) -> None:
        super().__init__(catalog)

    def aggregatable_fields(self) -> list[FieldMetadata]:
        return [f for f in self.catalog if f.aggregatable]

    def default_alias(self, field: str, function: AggregationFunction | str) -> str:
        """``"<function label> <display name>"``, e.g. ``"المجموع المبلغ"``."""
        metadata = self.lookup(field)
        display_name = metadata.display_name if metadata else field
        function = coerce_choice(AggregationFunction, function, ["aggregations", "function"])
        return f"{AGGREGATION_LABELS[function]} {display_name}"

    def add_aggregation(
        self,
        config: ReportConfiguration,
        field: str,
        function: AggregationFunction | str,
        alias: Optional[str] = None,
    ) -> ReportConfiguration:
        """
        Append an aggregation over an aggregatable field.

        Raises:
            FieldNotFoundError: If the field is not in the catalog
            ValidationError: If the field is not aggregatable or the alias is taken
        """
        metadata = self.require(field)
        if not metadata.aggregatable:
            raise ValidationError(
                f"Field '{field}' cannot be aggregated",
                errors=[error(["aggregations", "field"], "not aggregatable", "not_aggregatable")],
            )

        function = coerce_choice(AggregationFunction, function, ["aggregations", "function"])
        alias = (alias or "").strip() or self.default_alias(field, function)
        existing = list(config.aggregations or [])
        if any(a.alias == alias for a in existing):
            raise ValidationError(
                f"Aggregation alias '{alias}' is already used",
                errors=[error(["aggregations", "alias"], "duplicate alias", "duplicate")],
            )

        aggregation = ReportAggregation(field=field, function=function, alias=alias)
        return config.model_copy(update={"aggregations": [*existing, aggregation]})

    def remove_aggregation(self, config: ReportConfiguration, alias: str) -> ReportConfiguration:
        existing = list(config.aggregations or [])
        remaining = [a for a in existing if a.alias != alias]
        if len(remaining) == len(existing):
            raise ItemNotFoundError("aggregation", alias)
        return config.model_copy(update={"aggregations": remaining or None})

    def validate_aggregations(self, config: ReportConfiguration) -> list[dict]:
        """Errors for aggregations over unknown or non-aggregatable fields and repeated aliases."""
        errors = []
        seen = set()
        for i, aggregation in enumerate(config.aggregations or []):
            metadata = self.lookup(aggregation.field)
            if metadata is None and self.catalog:
                errors.append(
                    error(["aggregations", i, "field"], f"Unknown field '{aggregation.field}'", "unknown_field")
                )
            elif metadata is not None and not metadata.aggregatable:
                errors.append(
                    error(
                        ["aggregations", i, "field"],
                        f"'{aggregation.field}' cannot be aggregated",
                        "not_aggregatable",
                    )
                )
            if aggregation.alias in seen:
                errors.append(error(["aggregations", i, "alias"], "duplicate alias", "duplicate"))
            seen.add(aggregation.alias)
        return errors
