"""Field selection builder.

Selected fields carry a display ``order`` that is always the contiguous
sequence ``0..n-1``. Removing, hiding or renaming a field never leaves the
sort specification pointing at a column that is no longer shown.
"""

from typing import Iterable

from smartreports.builders.base import CatalogBuilder, error
from smartreports.builders.sorting import SortSpecBuilder
from smartreports.core.exceptions import FieldNotFoundError, ValidationError
from smartreports.schemas.report import FieldMetadata, ReportConfiguration, ReportField


def _repack(fields: list[ReportField]) -> list[ReportField]:
    """Assign contiguous orders following the given list order."""
    return [
        f if f.order == i else f.model_copy(update={"order": i}) for i, f in enumerate(fields)
    ]


def _display_order(config: ReportConfiguration) -> list[ReportField]:
    return sorted(config.fields, key=lambda f: f.order)


class FieldSelectionBuilder(CatalogBuilder):
    """Pure transitions over ``ReportConfiguration.fields``."""

    def __init__(self, catalog: Iterable[FieldMetadata] = ()) -> None:
        super().__init__(catalog)
        self.sorting = SortSpecBuilder(self.catalog)

    def available_fields(self, config: ReportConfiguration, search: str = "") -> list[FieldMetadata]:
        """Catalog fields not yet selected, optionally matched by display or field name."""
        selected = {f.source_field for f in config.fields}
        term = search.strip().lower()
        return [
            f
            for f in self.catalog
            if f.field_name not in selected
            and (not term or term in f.display_name.lower() or term in f.field_name.lower())
        ]

    def add_field(
        self, config: ReportConfiguration, field: FieldMetadata | str
    ) -> ReportConfiguration:
        """
        Append a catalog field as a visible column at the end.

        Raises:
            FieldNotFoundError: If a field name is given that the catalog lacks
            ValidationError: If the field is already selected or belongs to
                another data source
        """
        metadata = self.require(field) if isinstance(field, str) else field

        if metadata.data_source != config.data_source_type:
            raise ValidationError(
                f"Field '{metadata.field_name}' belongs to {metadata.data_source.value}",
                errors=[error(["fields"], "field from another data source", "wrong_source")],
            )
        if any(f.source_field == metadata.field_name for f in config.fields):
            raise ValidationError(
                f"Field '{metadata.field_name}' is already selected",
                errors=[error(["fields"], "duplicate field", "duplicate")],
            )

        report_field = ReportField(
            source_field=metadata.field_name,
            display_name=metadata.display_name,
            data_type=metadata.data_type,
            visible=True,
            order=len(config.fields),
            format=metadata.format,
        )
        fields = _repack([*_display_order(config), report_field])
        return config.model_copy(update={"fields": fields})

    def select_defaults(self, config: ReportConfiguration) -> ReportConfiguration:
        """Add every default-visible catalog field, in default order."""
        defaults = sorted(
            (f for f in self.catalog if f.default_visible),
            key=lambda f: (f.default_order, f.display_name),
        )
        for metadata in defaults:
            if any(f.source_field == metadata.field_name for f in config.fields):
                continue
            config = self.add_field(config, metadata)
        return config

    def remove_field(self, config: ReportConfiguration, field_id: str) -> ReportConfiguration:
        """Remove a selected field and re-pack the remaining orders."""
        self._require_selected(config, field_id)
        fields = _repack([f for f in _display_order(config) if f.id != field_id])
        return self.sorting.prune(config.model_copy(update={"fields": fields}))

    def toggle_visibility(self, config: ReportConfiguration, field_id: str) -> ReportConfiguration:
        """Show a hidden field or hide a shown one."""
        target = self._require_selected(config, field_id)
        fields = [
            f.model_copy(update={"visible": not f.visible}) if f.id == field_id else f
            for f in config.fields
        ]
        updated = config.model_copy(update={"fields": fields})
        if target.visible:
            updated = self.sorting.prune(updated)
        return updated

    def rename_field(
        self, config: ReportConfiguration, field_id: str, display_name: str
    ) -> ReportConfiguration:
        """Change the column header of a selected field."""
        self._require_selected(config, field_id)
        display_name = display_name.strip()
        if not display_name:
            raise ValidationError(
                "Display name cannot be empty",
                errors=[error(["fields", field_id, "display_name"], "empty display name")],
            )
        fields = [
            f.model_copy(update={"display_name": display_name}) if f.id == field_id else f
            for f in config.fields
        ]
        return config.model_copy(update={"fields": fields})

    def reorder(
        self, config: ReportConfiguration, from_index: int, to_index: int
    ) -> ReportConfiguration:
        """
        Move the field at display position ``from_index`` to ``to_index``.

        Every order is recomputed in one step so the sequence stays contiguous.
        """
        ordered = _display_order(config)
        for index in (from_index, to_index):
            if not 0 <= index < len(ordered):
                raise ValidationError(
                    f"Field position {index} is out of range",
                    errors=[error(["fields", index], "position out of range", "out_of_range")],
                )
        ordered.insert(to_index, ordered.pop(from_index))
        return config.model_copy(update={"fields": _repack(ordered)})

    def validate_fields(self, config: ReportConfiguration) -> list[dict]:
        """Errors for empty, duplicated, out-of-catalog or mis-ordered selections."""
        errors = []
        if not any(f.visible for f in config.fields):
            errors.append(error(["fields"], "at least one visible field is required", "no_visible_fields"))

        orders = sorted(f.order for f in config.fields)
        if orders != list(range(len(config.fields))):
            errors.append(error(["fields", "order"], "field orders must be 0..n-1", "invalid_order"))

        seen = set()
        for i, report_field in enumerate(config.fields):
            if report_field.source_field in seen:
                errors.append(error(["fields", i, "source_field"], "duplicate field", "duplicate"))
            seen.add(report_field.source_field)
            if self.catalog and self.lookup(report_field.source_field) is None:
                errors.append(
                    error(
                        ["fields", i, "source_field"],
                        f"Unknown field '{report_field.source_field}'",
                        "unknown_field",
                    )
                )
        return errors

    @staticmethod
    def _require_selected(config: ReportConfiguration, field_id: str) -> ReportField:
        report_field = config.get_field(field_id)
        if report_field is None:
            raise FieldNotFoundError(field_id)
        return report_field
