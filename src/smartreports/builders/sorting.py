"""Multi-key sort specification.

``order_by`` is a priority list: index 0 is the primary key, index 1 breaks
ties of the primary key, and so on. Sort targets are restricted to fields
that are selected and visible.
"""

from typing import Iterable, Optional

from smartreports.builders.base import CatalogBuilder, coerce_choice, error
from smartreports.core.exceptions import ItemNotFoundError, ValidationError
from smartreports.schemas.report import (
    FieldMetadata,
    ReportConfiguration,
    ReportField,
    ReportOrderBy,
    SortDirection,
)


class SortSpecBuilder(CatalogBuilder):
    """Pure transitions over ``ReportConfiguration.order_by``.

    The catalog is optional; when given, fields it marks as not sortable are
    excluded from the sort targets.
    """

    def __init__(self, catalog: Iterable[FieldMetadata] = ()) -> None:
        super().__init__(catalog)

    def sort_targets(self, config: ReportConfiguration) -> list[ReportField]:
        """Selected, visible fields a sort entry may reference, in display order."""
        targets = []
        for report_field in config.visible_fields:
            metadata = self.lookup(report_field.source_field)
            if metadata is not None and not metadata.sortable:
                continue
            targets.append(report_field)
        return targets

    def add_sort(
        self,
        config: ReportConfiguration,
        field: Optional[str] = None,
        direction: SortDirection | str = SortDirection.ASC,
    ) -> ReportConfiguration:
        """
        Append a sort key.

        Without ``field`` the first target not already sorted on is used.

        Raises:
            ValidationError: If there is no usable sort target
        """
        targets = self._target_names(config)
        used = {entry.field for entry in config.order_by}

        if field is None:
            field = next((name for name in targets if name not in used), None)
            if field is None:
                raise ValidationError(
                    "No field available for sorting",
                    errors=[error(["order_by"], "no sort target", "no_target")],
                )
        else:
            self._check_target(field, targets)
            self._check_unused(field, used)

        direction = coerce_choice(SortDirection, direction, ["order_by", "direction"])
        entry = ReportOrderBy(field=field, direction=direction)
        return config.model_copy(update={"order_by": [*config.order_by, entry]})

    def remove_sort(self, config: ReportConfiguration, index: int) -> ReportConfiguration:
        """Remove the sort key at ``index``; lower-priority keys move up."""
        self._check_index(config, index)
        order_by = [entry for i, entry in enumerate(config.order_by) if i != index]
        return config.model_copy(update={"order_by": order_by})

    def update_sort(
        self,
        config: ReportConfiguration,
        index: int,
        field: Optional[str] = None,
        direction: SortDirection | str | None = None,
    ) -> ReportConfiguration:
        """Change the field and/or direction of one sort key."""
        self._check_index(config, index)
        current = config.order_by[index]
        changes = {}
        if field is not None and field != current.field:
            self._check_target(field, self._target_names(config))
            self._check_unused(field, {entry.field for entry in config.order_by})
            changes["field"] = field
        if direction is not None:
            changes["direction"] = coerce_choice(
                SortDirection, direction, ["order_by", index, "direction"]
            )

        order_by = list(config.order_by)
        order_by[index] = current.model_copy(update=changes)
        return config.model_copy(update={"order_by": order_by})

    def move_sort(
        self, config: ReportConfiguration, from_index: int, to_index: int
    ) -> ReportConfiguration:
        """Change the priority of a sort key."""
        self._check_index(config, from_index)
        self._check_index(config, to_index)
        order_by = list(config.order_by)
        order_by.insert(to_index, order_by.pop(from_index))
        return config.model_copy(update={"order_by": order_by})

    def prune(self, config: ReportConfiguration) -> ReportConfiguration:
        """Drop sort keys whose field is no longer a sort target."""
        targets = set(self._target_names(config))
        order_by = [entry for entry in config.order_by if entry.field in targets]
        if len(order_by) == len(config.order_by):
            return config
        return config.model_copy(update={"order_by": order_by})

    def validate_sorts(self, config: ReportConfiguration) -> list[dict]:
        """Errors for sort keys that reference non-targets or repeat a field."""
        targets = set(self._target_names(config))
        errors = []
        seen = set()
        for i, entry in enumerate(config.order_by):
            if entry.field not in targets:
                errors.append(
                    error(
                        ["order_by", i, "field"],
                        f"'{entry.field}' is not a selected visible sortable field",
                        "invalid_sort_field",
                    )
                )
            elif entry.field in seen:
                errors.append(error(["order_by", i, "field"], "duplicate sort key", "duplicate"))
            seen.add(entry.field)
        return errors

    def _target_names(self, config: ReportConfiguration) -> list[str]:
        return [target.source_field for target in self.sort_targets(config)]

    @staticmethod
    def _check_index(config: ReportConfiguration, index: int) -> None:
        if not 0 <= index < len(config.order_by):
            raise ItemNotFoundError("sort", str(index))

    @staticmethod
    def _check_target(field: str, targets: list[str]) -> None:
        if field not in targets:
            raise ValidationError(
                f"'{field}' is not a selected visible sortable field",
                errors=[error(["order_by", "field"], "invalid sort field", "invalid_sort_field")],
            )

    @staticmethod
    def _check_unused(field: str, used: set[str]) -> None:
        if field in used:
            raise ValidationError(
                f"Already sorting by '{field}'",
                errors=[error(["order_by", "field"], "duplicate sort key", "duplicate")],
            )
