"""Export service.

The backend renders the artifact; this module only requests it, names it
and optionally writes it to disk.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from smartreports.builders import validate_configuration
from smartreports.builders.base import coerce_choice
from smartreports.client import SmartReportsClient
from smartreports.core.exceptions import ApiError, ExportError
from smartreports.core.logging import LoggerMixin
from smartreports.schemas.report import ExportFormat, FieldMetadata, ReportConfiguration
from smartreports.services.executor import build_payload

FILE_EXTENSIONS: dict[ExportFormat, str] = {
    ExportFormat.EXCEL: "xlsx",
    ExportFormat.CSV: "csv",
    ExportFormat.PDF: "pdf",
}

MEDIA_TYPES: dict[ExportFormat, str] = {
    ExportFormat.EXCEL: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.CSV: "text/csv",
    ExportFormat.PDF: "application/pdf",
}

DEFAULT_FILE_NAME = "report"


def export_file_name(config: ReportConfiguration, export_format: ExportFormat | str) -> str:
    """``<fileName or "report">.<xlsx|csv|pdf>``"""
    export_format = coerce_choice(ExportFormat, export_format, ["export", "format"])
    base = (config.export_options.file_name or "").strip() or DEFAULT_FILE_NAME
    return f"{base}.{FILE_EXTENSIONS[export_format]}"


@dataclass(frozen=True)
class ExportArtifact:
    """A rendered report file."""

    file_name: str
    content: bytes
    media_type: str
    format: ExportFormat

    @property
    def size(self) -> int:
        return len(self.content)

    def save(self, directory: str | Path) -> Path:
        """Write the artifact into ``directory`` and return its path."""
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / self.file_name
        path.write_bytes(self.content)
        return path


class ExportAdapter(LoggerMixin):
    """Requests rendered artifacts from the backend."""

    def __init__(self, client: SmartReportsClient) -> None:
        self.client = client

    async def export(
        self,
        config: ReportConfiguration,
        export_format: ExportFormat | str,
        catalog: Iterable[FieldMetadata] = (),
        file_name: Optional[str] = None,
    ) -> ExportArtifact:
        """
        Export a configuration in one format.

        Args:
            config: Configuration to render
            export_format: excel, csv or pdf
            catalog: Field catalog used for validation and value serialization
            file_name: Overrides the name derived from the export options

        Returns:
            The rendered artifact

        Raises:
            ValidationError: If the format is unknown or the configuration is
                invalid; no request is sent
            ExportError: If the backend fails to render the artifact
        """
        export_format = coerce_choice(ExportFormat, export_format, ["export", "format"])
        catalog = tuple(catalog)
        validate_configuration(config, catalog)
        payload = build_payload(config, catalog)

        try:
            content, media_type = await self.client.export(payload, export_format)
        except ApiError as e:
            self.logger.error(
                "Report export failed",
                extra={
                    "format": export_format.value,
                    "status_code": e.status_code,
                    "reason": e.message,
                },
            )
            raise ExportError(
                e.message,
                export_format.value,
                details={"status_code": e.status_code},
            ) from e

        artifact = ExportArtifact(
            file_name=file_name or export_file_name(config, export_format),
            content=content,
            media_type=media_type or MEDIA_TYPES[export_format],
            format=export_format,
        )
        self.logger.info(
            "Report exported",
            extra={"format": export_format.value, "file_name": artifact.file_name, "size": artifact.size},
        )
        return artifact
