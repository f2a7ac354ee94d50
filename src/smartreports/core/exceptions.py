"""
Custom exceptions for SmartReports.

Provides a hierarchy of exceptions that carry an HTTP-style status code
and structured error information, so every failure can be turned into a
user-visible notification without losing its context.
"""

from typing import Any


class SmartReportsException(Exception):
    """
    Base exception for all SmartReports errors.

    All custom exceptions should inherit from this class.
    """

    # Default status code for base exception
    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for notifications and logs."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


# =============================================================================
# 400 - Client-side validation errors (blocked before any request)
# =============================================================================


class BadRequestError(SmartReportsException):
    """Invalid configuration or operation arguments."""

    status_code = 400


class ValidationError(BadRequestError):
    """Configuration validation failed."""

    def __init__(
        self,
        message: str = "Validation error",
        errors: list[dict[str, Any]] | None = None,
        code: str = "VALIDATION_ERROR",
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details={"errors": errors or []},
        )

    @property
    def errors(self) -> list[dict[str, Any]]:
        """Individual validation errors."""
        return self.details["errors"]


class InvalidDataSourceError(BadRequestError):
    """Unknown data source requested."""

    def __init__(self, data_source: str) -> None:
        super().__init__(
            message=f"Invalid data source: {data_source}",
            code="INVALID_DATA_SOURCE",
            details={"data_source": data_source},
        )


class InvalidOperatorError(BadRequestError):
    """Operator is not legal for the field's data type."""

    def __init__(self, field_name: str, data_type: str, operator: str) -> None:
        super().__init__(
            message=f"Operator '{operator}' is not allowed for {data_type} field '{field_name}'",
            code="INVALID_OPERATOR",
            details={
                "field_name": field_name,
                "data_type": data_type,
                "operator": operator,
            },
        )


class RequestInProgressError(ValidationError):
    """An operation of the same kind is already pending."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            message=f"A {operation} request is already in progress",
            errors=[{"loc": ["request", operation], "msg": "request pending"}],
            code="REQUEST_IN_PROGRESS",
        )


# =============================================================================
# 404 - Not Found Errors
# =============================================================================


class NotFoundError(SmartReportsException):
    """Requested item does not exist."""

    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: str | None = None,
        resource_id: str | None = None,
    ) -> None:
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, code="NOT_FOUND", details=details)


class FieldNotFoundError(NotFoundError):
    """Field is not part of the catalog or the current selection."""

    def __init__(self, field_id: str) -> None:
        super().__init__(
            message=f"Field '{field_id}' not found",
            resource_type="field",
            resource_id=field_id,
        )


class ItemNotFoundError(NotFoundError):
    """Filter, sort entry or aggregation not present in the configuration."""

    def __init__(self, item_type: str, item_id: str) -> None:
        super().__init__(
            message=f"{item_type.capitalize()} '{item_id}' not found",
            resource_type=item_type,
            resource_id=item_id,
        )


# =============================================================================
# Remote collaborator errors
# =============================================================================


class ApiError(SmartReportsException):
    """The backend could not be reached or answered with an error status."""

    status_code = 503

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code="API_ERROR", details=details)
        if status_code is not None:
            self.status_code = status_code


class MetadataFetchError(SmartReportsException):
    """Field catalog could not be fetched; the fallback catalog is used."""

    status_code = 503

    def __init__(self, data_source: str, reason: str) -> None:
        super().__init__(
            message=f"Failed to fetch fields for '{data_source}': {reason}",
            code="METADATA_FETCH_ERROR",
            details={"data_source": data_source, "reason": reason},
        )


class ExecutionError(SmartReportsException):
    """Backend rejected or failed to execute the report configuration."""

    status_code = 422

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="EXECUTION_ERROR", details=details)


class ExportError(SmartReportsException):
    """Backend failed to render the export artifact."""

    status_code = 502

    def __init__(
        self,
        message: str,
        export_format: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="EXPORT_ERROR",
            details={"format": export_format, **(details or {})},
        )


class TemplateError(SmartReportsException):
    """Template persistence operation failed."""

    status_code = 502

    def __init__(
        self,
        message: str,
        template_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if template_id:
            merged["template_id"] = template_id
        super().__init__(message=message, code="TEMPLATE_ERROR", details=merged)


class TemplateNotFoundError(TemplateError):
    """Template does not exist (or is no longer visible)."""

    status_code = 404

    def __init__(self, template_id: str) -> None:
        super().__init__(
            message=f"Template with ID {template_id} not found",
            template_id=template_id,
        )
        self.code = "TEMPLATE_NOT_FOUND"


class SessionClosedError(SmartReportsException):
    """Operation attempted on a builder session that has been torn down."""

    status_code = 409

    def __init__(self) -> None:
        super().__init__(
            message="Report builder session is closed",
            code="SESSION_CLOSED",
        )
