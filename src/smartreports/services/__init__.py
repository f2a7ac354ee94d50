"""Remote operations and builder session orchestration."""

from smartreports.services.executor import QueryExecutor, build_payload
from smartreports.services.export_service import (
    ExportAdapter,
    ExportArtifact,
    export_file_name,
)
from smartreports.services.quick_templates import DatePeriod, build_quick_template, date_range
from smartreports.services.request_state import (
    RequestKind,
    RequestState,
    RequestStatus,
    RequestTracker,
)
from smartreports.services.session import Notification, ReportBuilderSession
from smartreports.services.template_service import TemplateStore

__all__ = [
    "DatePeriod",
    "ExportAdapter",
    "ExportArtifact",
    "Notification",
    "QueryExecutor",
    "ReportBuilderSession",
    "RequestKind",
    "RequestState",
    "RequestStatus",
    "RequestTracker",
    "TemplateStore",
    "build_payload",
    "build_quick_template",
    "date_range",
    "export_file_name",
]
