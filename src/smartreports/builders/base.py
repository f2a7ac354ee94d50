"""Shared helpers for configuration builders."""

from enum import Enum
from typing import Any, Iterable, Optional, TypeVar

from smartreports.core.exceptions import FieldNotFoundError, ValidationError
from smartreports.schemas.report import FieldMetadata

E = TypeVar("E", bound=Enum)


def error(loc: list[Any], msg: str, type_: str = "value_error") -> dict[str, Any]:
    """Build one validation error entry."""
    return {"loc": loc, "msg": msg, "type": type_}


def coerce_choice(choices: type[E], value: Any, loc: list[Any]) -> E:
    """
    Convert user input to a member of ``choices``.

    Raises:
        ValidationError: If ``value`` is not one of the enum's values
    """
    try:
        return choices(value)
    except ValueError:
        allowed = ", ".join(str(member.value) for member in choices)
        raise ValidationError(
            f"Invalid {loc[-1]} '{value}'; expected one of: {allowed}",
            errors=[error(loc, f"must be one of: {allowed}", "invalid_choice")],
        ) from None


class CatalogBuilder:
    """Base for builders that need the field catalog of the current data source."""

    def __init__(self, catalog: Iterable[FieldMetadata] = ()) -> None:
        self.catalog: tuple[FieldMetadata, ...] = tuple(catalog)
        self._by_name = {f.field_name: f for f in self.catalog}

    def lookup(self, field_name: str) -> Optional[FieldMetadata]:
        """Metadata for a field name, or None."""
        return self._by_name.get(field_name)

    def require(self, field_name: str) -> FieldMetadata:
        """Metadata for a field name.

        Raises:
            FieldNotFoundError: If the catalog has no such field
        """
        metadata = self._by_name.get(field_name)
        if metadata is None:
            raise FieldNotFoundError(field_name)
        return metadata
