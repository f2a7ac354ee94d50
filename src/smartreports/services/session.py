"""Report builder session.

A session holds the state of one report builder: the current configuration,
the field catalog of its data source, the last query result together with
the configuration that produced it, per-operation request states and the
notifications shown to the user.

Configuration changes are synchronous pure transitions. Remote operations
are coroutines; their responses are applied only while they are still
current, so a slow response can never overwrite newer state:

- a metadata response is dropped when the data source changed or a newer
  metadata request was issued in the meantime
- a query result is dropped when the data source changed or a configuration
  was loaded while it was running
- execute and export refuse to start while their own request is pending
- after :meth:`ReportBuilderSession.close` outstanding requests are
  cancelled and late responses are discarded

Remote failures never escape a session method; they become notifications
and leave the configuration unchanged.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from smartreports.builders import (
    AggregationSpec,
    FieldSelectionBuilder,
    FilterPredicateBuilder,
    SortSpecBuilder,
    can_execute,
    change_data_source,
    default_configuration,
    replace_configuration,
)
from smartreports.builders.base import coerce_choice
from smartreports.catalog import CatalogResolution, FieldMetadataRegistry
from smartreports.client import SmartReportsClient
from smartreports.core.config import Settings, settings as default_settings
from smartreports.core.exceptions import (
    SessionClosedError,
    SmartReportsException,
    ValidationError,
)
from smartreports.core.logging import LoggerMixin
from smartreports.schemas.report import (
    DataSourceOption,
    DataSourceType,
    ExportFormat,
    QueryResult,
    ReportConfiguration,
)
from smartreports.schemas.template import ReportTemplate
from smartreports.services.executor import QueryExecutor
from smartreports.services.export_service import ExportAdapter, ExportArtifact
from smartreports.services.quick_templates import DatePeriod, build_quick_template
from smartreports.services.request_state import RequestKind, RequestState, RequestTracker
from smartreports.services.template_service import TemplateStore

T = TypeVar("T")


@dataclass(frozen=True)
class Notification:
    """A message surfaced to the user."""

    level: str
    message: str
    code: Optional[str] = None

    @classmethod
    def from_error(cls, error: SmartReportsException, level: str = "error") -> "Notification":
        return cls(level=level, message=error.message, code=error.code)


class ReportBuilderSession(LoggerMixin):
    """State and operations of one report builder."""

    def __init__(
        self,
        client: Optional[SmartReportsClient] = None,
        settings: Optional[Settings] = None,
        data_source: Optional[DataSourceType | str] = None,
        registry: Optional[FieldMetadataRegistry] = None,
        executor: Optional[QueryExecutor] = None,
        exporter: Optional[ExportAdapter] = None,
        templates: Optional[TemplateStore] = None,
    ) -> None:
        self.settings = settings or default_settings
        self.client = client or SmartReportsClient(settings=self.settings)
        self.registry = registry or FieldMetadataRegistry(self.client, self.settings)
        self.executor = executor or QueryExecutor(self.client)
        self.exporter = exporter or ExportAdapter(self.client)
        self.templates = templates or TemplateStore(self.client)

        self.config: ReportConfiguration = default_configuration(
            data_source or self.settings.default_data_source
        )
        self.result: Optional[QueryResult] = None
        self.result_config: Optional[ReportConfiguration] = None
        self.requests = RequestTracker()
        self.notifications: list[Notification] = []
        self.closed = False
        self._tasks: set[asyncio.Future] = set()
        self._result_generation = 0
        self._set_catalog(CatalogResolution(data_source=self.config.data_source_type))

    async def __aenter__(self) -> "ReportBuilderSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ==========================================================================
    # State
    # ==========================================================================

    @property
    def data_source(self) -> DataSourceType:
        return self.config.data_source_type

    @property
    def can_execute(self) -> bool:
        """True when the current configuration has at least one visible field."""
        return can_execute(self.config)

    def request_state(self, kind: RequestKind | str) -> RequestState:
        return self.requests.state(kind)

    def notify(self, level: str, message: str, code: Optional[str] = None) -> Notification:
        notification = Notification(level=level, message=message, code=code)
        self.notifications.append(notification)
        return notification

    def clear_notifications(self) -> list[Notification]:
        """Return and forget all pending notifications."""
        notifications, self.notifications = self.notifications, []
        return notifications

    # ==========================================================================
    # Data source and catalog
    # ==========================================================================

    async def list_data_sources(self) -> list[DataSourceOption]:
        self._check_open()
        return await self.registry.get_data_sources()

    async def load_fields(self) -> Optional[CatalogResolution]:
        """
        Resolve the field catalog of the current data source.

        Returns:
            The applied resolution, or None when the response became stale
        """
        self._check_open()
        source = self.data_source
        token = self.requests.begin(RequestKind.METADATA)

        resolution = await self._track(self.registry.get_fields(source))
        if resolution is None:
            return None

        if source != self.data_source or not self.requests.is_current(RequestKind.METADATA, token):
            self.logger.debug(
                "Discarding stale field metadata",
                extra={"data_source": source.value, "current": self.data_source.value},
            )
            return None

        self._set_catalog(resolution)
        if resolution.degraded and resolution.error is not None:
            self.requests.fail(RequestKind.METADATA, token, resolution.error)
            self.notifications.append(Notification.from_error(resolution.error, level="warning"))
        else:
            self.requests.succeed(RequestKind.METADATA, token)
        return resolution

    async def change_data_source(
        self, data_source: DataSourceType | str
    ) -> Optional[CatalogResolution]:
        """Switch data source, clearing the selection and the result, and load its catalog."""
        self._check_open()
        previous = self.config
        if not self._apply(change_data_source, data_source):
            return None
        if self.config is not previous:
            self._clear_result()
            self._set_catalog(CatalogResolution(data_source=self.data_source))
        return await self.load_fields()

    # ==========================================================================
    # Field selection
    # ==========================================================================

    def add_field(self, field_name: str) -> bool:
        return self._apply(self.selection.add_field, field_name)

    def remove_field(self, field_id: str) -> bool:
        return self._apply(self.selection.remove_field, field_id)

    def toggle_field_visibility(self, field_id: str) -> bool:
        return self._apply(self.selection.toggle_visibility, field_id)

    def reorder_fields(self, from_index: int, to_index: int) -> bool:
        return self._apply(self.selection.reorder, from_index, to_index)

    def rename_field(self, field_id: str, display_name: str) -> bool:
        return self._apply(self.selection.rename_field, field_id, display_name)

    def select_default_fields(self) -> bool:
        return self._apply(self.selection.select_defaults)

    # ==========================================================================
    # Filters
    # ==========================================================================

    def add_filter(self, field_name: Optional[str] = None) -> bool:
        return self._apply(self.filters.add_filter, field_name)

    def remove_filter(self, filter_id: str) -> bool:
        return self._apply(self.filters.remove_filter, filter_id)

    def update_filter(self, filter_id: str, **changes: Any) -> bool:
        return self._apply(self.filters.update_filter, filter_id, **changes)

    # ==========================================================================
    # Sorting and aggregations
    # ==========================================================================

    def add_sort(self, field: Optional[str] = None, direction: str = "asc") -> bool:
        return self._apply(self.sorting.add_sort, field, direction)

    def remove_sort(self, index: int) -> bool:
        return self._apply(self.sorting.remove_sort, index)

    def update_sort(
        self, index: int, field: Optional[str] = None, direction: Optional[str] = None
    ) -> bool:
        return self._apply(self.sorting.update_sort, index, field, direction)

    def move_sort(self, from_index: int, to_index: int) -> bool:
        return self._apply(self.sorting.move_sort, from_index, to_index)

    def add_aggregation(self, field: str, function: str, alias: Optional[str] = None) -> bool:
        return self._apply(self.aggregations.add_aggregation, field, function, alias)

    def remove_aggregation(self, alias: str) -> bool:
        return self._apply(self.aggregations.remove_aggregation, alias)

    def set_export_options(self, **changes: Any) -> bool:
        """Change export options, e.g. ``file_name`` or ``include_charts``."""

        def transition(config: ReportConfiguration) -> ReportConfiguration:
            options = config.export_options.model_validate(
                {**config.export_options.model_dump(), **changes}
            )
            return config.model_copy(update={"export_options": options})

        return self._apply(transition)

    # ==========================================================================
    # Execution and export
    # ==========================================================================

    async def execute(self) -> Optional[QueryResult]:
        """
        Run the current configuration.

        The result is stored together with the configuration snapshot that
        produced it. On failure the previous result and the configuration are
        kept and a notification is added.

        Raises:
            RequestInProgressError: If an execution is already pending
            SessionClosedError: If the session is closed
        """
        self._check_open()
        token = self.requests.begin(RequestKind.EXECUTE)
        try:
            return await self._execute(token)
        finally:
            self.requests.release(RequestKind.EXECUTE, token)

    async def _execute(self, token: int) -> Optional[QueryResult]:
        snapshot = self.config
        catalog = self.catalog.fields
        generation = self._result_generation

        try:
            result = await self._track(self.executor.execute(snapshot, catalog))
        except SmartReportsException as e:
            if generation == self._result_generation and self.requests.fail(
                RequestKind.EXECUTE, token, e
            ):
                self.notifications.append(Notification.from_error(e))
            return None

        if result is None:
            return None
        if generation != self._result_generation:
            # Data source changed or a configuration was loaded meanwhile
            self.logger.debug(
                "Discarding stale query result",
                extra={"data_source": snapshot.data_source_type.value},
            )
            return None
        if not self.requests.succeed(RequestKind.EXECUTE, token):
            return None
        self.result = result
        self.result_config = snapshot
        return result

    async def export(self, export_format: ExportFormat | str) -> Optional[ExportArtifact]:
        """
        Export the report that is currently displayed.

        The configuration that produced the current result is exported, so
        edits made since the last execution do not leak into the download.
        Without a result the current configuration is exported.

        Raises:
            RequestInProgressError: If an export is already pending
            SessionClosedError: If the session is closed
        """
        self._check_open()
        try:
            export_format = coerce_choice(ExportFormat, export_format, ["export", "format"])
        except ValidationError as e:
            self.notifications.append(Notification.from_error(e))
            return None

        token = self.requests.begin(RequestKind.EXPORT)
        try:
            return await self._export(token, export_format)
        finally:
            self.requests.release(RequestKind.EXPORT, token)

    async def _export(self, token: int, export_format: ExportFormat) -> Optional[ExportArtifact]:
        snapshot = self.result_config or self.config
        catalog = self.catalog.fields

        try:
            artifact = await self._track(self.exporter.export(snapshot, export_format, catalog))
        except SmartReportsException as e:
            if self.requests.fail(RequestKind.EXPORT, token, e):
                self.notifications.append(Notification.from_error(e))
            return None

        if artifact is None or not self.requests.succeed(RequestKind.EXPORT, token):
            return None
        return artifact

    # ==========================================================================
    # Templates
    # ==========================================================================

    async def list_templates(self) -> list[ReportTemplate]:
        self._check_open()
        templates = await self._remote(self.templates.list_templates)
        return templates if templates is not None else self.templates.templates

    async def save_template(
        self,
        name: str,
        is_default: bool = False,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> Optional[ReportTemplate]:
        """Save the current configuration as a template."""
        self._check_open()
        template = await self._remote(
            self.templates.save,
            name,
            self.config,
            is_default=is_default,
            description=description,
            is_public=is_public,
        )
        if template is not None:
            self.notify("success", f"Template '{template.name}' saved")
        return template

    async def load_template(self, template_id: str) -> Optional[ReportConfiguration]:
        """Replace the configuration with a saved one and clear the result."""
        self._check_open()
        loaded = await self._remote(self.templates.load, template_id)
        if loaded is None:
            return None
        await self._replace(loaded)
        return self.config

    async def delete_template(self, template_id: str) -> bool:
        self._check_open()
        try:
            await self._track(self.templates.delete(template_id))
        except SmartReportsException as e:
            self.notifications.append(Notification.from_error(e))
            return False
        if self.closed:
            return False
        self.notify("success", "Template deleted")
        return True

    async def apply_quick_template(
        self,
        data_source: DataSourceType | str,
        period: DatePeriod | str = DatePeriod.THIS_MONTH,
        custom_from: Optional[str] = None,
        custom_to: Optional[str] = None,
        branch_id: Optional[str] = None,
    ) -> Optional[ReportConfiguration]:
        """Replace the configuration with a quick template and clear the result."""
        self._check_open()
        try:
            loaded = build_quick_template(data_source, period, custom_from, custom_to, branch_id)
        except SmartReportsException as e:
            self.notifications.append(Notification.from_error(e))
            return None
        await self._replace(loaded)
        return self.config

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def close(self) -> None:
        """Cancel outstanding requests; later responses are discarded."""
        if self.closed:
            return
        self.closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.logger.debug("Report builder session closed", extra={"cancelled": len(tasks)})

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _set_catalog(self, catalog: CatalogResolution) -> None:
        self.catalog = catalog
        self.selection = FieldSelectionBuilder(catalog.fields)
        self.filters = FilterPredicateBuilder(catalog.fields)
        self.sorting = SortSpecBuilder(catalog.fields)
        self.aggregations = AggregationSpec(catalog.fields)

    def _clear_result(self) -> None:
        # Invalidates executions still in flight
        self._result_generation += 1
        self.result = None
        self.result_config = None

    async def _replace(self, loaded: ReportConfiguration) -> None:
        source_changed = loaded.data_source_type != self.data_source
        self.config = replace_configuration(self.config, loaded)
        self._clear_result()
        if source_changed or not self.catalog.fields:
            self._set_catalog(CatalogResolution(data_source=self.data_source))
            await self.load_fields()

    def _apply(self, transition: Callable[..., ReportConfiguration], *args: Any, **kwargs: Any) -> bool:
        """Apply a pure transition; failures become notifications."""
        self._check_open()
        try:
            self.config = transition(self.config, *args, **kwargs)
        except SmartReportsException as e:
            self.notifications.append(Notification.from_error(e))
            return False
        return True

    async def _remote(self, operation: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> Optional[T]:
        """Run a template operation; failures become notifications."""
        try:
            result = await self._track(operation(*args, **kwargs))
        except SmartReportsException as e:
            self.notifications.append(Notification.from_error(e))
            return None
        return result

    async def _track(self, awaitable: Awaitable[T]) -> Optional[T]:
        """Await a remote call so that close() can cancel it; None once closed."""
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        try:
            result = await task
        except asyncio.CancelledError:
            if self.closed and task.cancelled():
                return None
            raise
        finally:
            self._tasks.discard(task)
        if self.closed:
            self.logger.debug("Discarding response received after close")
            return None
        return result

    def _check_open(self) -> None:
        if self.closed:
            raise SessionClosedError()
