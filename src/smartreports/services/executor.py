"""Query execution service."""

from typing import Any, Iterable

from smartreports.builders import FilterPredicateBuilder, can_execute, validate_configuration
from smartreports.client import SmartReportsClient
from smartreports.core.exceptions import ApiError, ExecutionError
from smartreports.core.logging import LoggerMixin
from smartreports.schemas.report import FieldMetadata, QueryResult, ReportConfiguration


def build_payload(
    config: ReportConfiguration, catalog: Iterable[FieldMetadata] = ()
) -> dict[str, Any]:
    """
    Wire form of a configuration with filter values normalized.

    Values are serialized through the handler of each field's data type, so
    ``"100"`` on a number field is sent as ``100`` and a ``between`` pair keeps
    its ``[low, high]`` order.
    """
    filters = FilterPredicateBuilder(catalog).serialize_filters(config)
    return config.model_copy(update={"filters": filters}).to_wire()


class QueryExecutor(LoggerMixin):
    """Validates a configuration and runs it on the backend."""

    def __init__(self, client: SmartReportsClient) -> None:
        self.client = client

    def can_execute(self, config: ReportConfiguration) -> bool:
        return can_execute(config)

    async def execute(
        self,
        config: ReportConfiguration,
        catalog: Iterable[FieldMetadata] = (),
    ) -> QueryResult:
        """
        Execute a report configuration.

        Args:
            config: Configuration to run; it is never modified
            catalog: Field catalog used for validation and value serialization

        Returns:
            Rows, total count, execution time and aggregation values

        Raises:
            ValidationError: If the configuration is invalid (no request is sent)
            ExecutionError: If the backend fails or rejects the request
        """
        catalog = tuple(catalog)
        validate_configuration(config, catalog)
        payload = build_payload(config, catalog)

        try:
            result = await self.client.execute(payload)
        except ApiError as e:
            self.logger.error(
                "Report execution failed",
                extra={
                    "data_source": config.data_source_type.value,
                    "status_code": e.status_code,
                    "reason": e.message,
                },
            )
            raise ExecutionError(
                e.message,
                details={"status_code": e.status_code, **e.details},
            ) from e

        self.logger.info(
            "Report executed",
            extra={
                "data_source": config.data_source_type.value,
                "rows": len(result.data),
                "total_count": result.total_count,
                "execution_time_ms": result.execution_time,
            },
        )
        return result
