"""Template persistence service.

Templates are named, persisted report configurations. The store keeps a
local listing that is only changed after the backend confirms an operation;
nothing is removed or replaced optimistically.
"""

from typing import Optional

from smartreports.client import SmartReportsClient
from smartreports.core.exceptions import ApiError, TemplateError, TemplateNotFoundError
from smartreports.core.logging import LoggerMixin
from smartreports.schemas.report import (
    DATA_SOURCE_REPORT_TYPES,
    ReportConfiguration,
    ReportType,
)
from smartreports.schemas.template import ReportTemplate, TemplateCreate, TemplateUpdate


def _listing_order(templates: list[ReportTemplate]) -> list[ReportTemplate]:
    # Default templates first; the backend order is kept otherwise
    return sorted(templates, key=lambda t: not t.is_default)


class TemplateStore(LoggerMixin):
    """Lists, saves, loads, updates and deletes report templates."""

    def __init__(self, client: SmartReportsClient) -> None:
        self.client = client
        self._templates: list[ReportTemplate] = []

    @property
    def templates(self) -> list[ReportTemplate]:
        """The last confirmed listing."""
        return list(self._templates)

    async def list_templates(self) -> list[ReportTemplate]:
        """
        Fetch the template listing, default templates first.

        Raises:
            TemplateError: If the listing cannot be fetched
        """
        try:
            templates = await self.client.list_templates()
        except ApiError as e:
            raise self._template_error(e, "Failed to load templates") from e
        self._templates = _listing_order(templates)
        return self.templates

    async def save(
        self,
        name: str,
        config: ReportConfiguration,
        is_default: bool = False,
        description: Optional[str] = None,
        is_public: bool = False,
        report_type: Optional[ReportType] = None,
    ) -> ReportTemplate:
        """
        Save a configuration as a new template.

        Args:
            name: Template name
            config: Configuration to persist
            is_default: Mark as default template for its report type
            description: Optional description
            is_public: Visible to other users
            report_type: Defaults to the type matching the data source

        Returns:
            The template as stored by the backend

        Raises:
            TemplateError: If the backend rejects or fails the save
        """
        data = TemplateCreate(
            name=name,
            description=description,
            report_type=report_type or DATA_SOURCE_REPORT_TYPES[config.data_source_type],
            config=config,
            is_public=is_public,
            is_default=is_default,
        )
        try:
            template = await self.client.create_template(data)
        except ApiError as e:
            raise self._template_error(e, "Failed to save template") from e

        self._templates = _listing_order([*self._templates, template])
        self.logger.info(
            "Template saved",
            extra={"template_id": template.id, "report_type": template.report_type.value},
        )
        return template

    async def get(self, template_id: str) -> ReportTemplate:
        """
        Fetch one template.

        Raises:
            TemplateNotFoundError: If the template does not exist
            TemplateError: On any other failure
        """
        try:
            return await self.client.get_template(template_id)
        except ApiError as e:
            raise self._template_error(e, "Failed to load template", template_id) from e

    async def load(self, template_id: str) -> ReportConfiguration:
        """The saved configuration of a template, for wholesale replacement."""
        template = await self.get(template_id)
        return template.config

    async def update(
        self,
        template_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        config: Optional[ReportConfiguration] = None,
        is_public: Optional[bool] = None,
        is_default: Optional[bool] = None,
    ) -> ReportTemplate:
        """
        Update selected attributes of a template.

        Raises:
            TemplateNotFoundError: If the template does not exist
            TemplateError: On any other failure
        """
        data = TemplateUpdate(
            name=name,
            description=description,
            config=config,
            is_public=is_public,
            is_default=is_default,
        )
        try:
            template = await self.client.update_template(template_id, data)
        except ApiError as e:
            raise self._template_error(e, "Failed to update template", template_id) from e

        self._templates = _listing_order(
            [template if t.id == template_id else t for t in self._templates]
        )
        return template

    async def set_default(self, template_id: str) -> ReportTemplate:
        """
        Mark a template as the default; the listing is refreshed afterwards.

        A failed refresh does not undo the confirmed update: the local listing
        is adjusted instead and the updated template is returned.
        """
        template = await self.update(template_id, is_default=True)
        try:
            await self.list_templates()
        except TemplateError as e:
            self.logger.warning(
                "Template listing refresh failed",
                extra={"template_id": template_id, "reason": e.message},
            )
            self._templates = _listing_order(
                [
                    t.model_copy(update={"is_default": False})
                    if t.is_default and t.id != template_id
                    else t
                    for t in self._templates
                ]
            )
        return template

    async def delete(self, template_id: str) -> None:
        """
        Delete a template.

        The local listing changes only once the backend confirms.

        Raises:
            TemplateNotFoundError: If the template does not exist
            TemplateError: On any other failure (the listing is unchanged)
        """
        try:
            await self.client.delete_template(template_id)
        except ApiError as e:
            raise self._template_error(e, "Failed to delete template", template_id) from e

        self._templates = [t for t in self._templates if t.id != template_id]
        self.logger.info("Template deleted", extra={"template_id": template_id})

    def _template_error(
        self, error: ApiError, message: str, template_id: Optional[str] = None
    ) -> TemplateError:
        self.logger.error(
            message,
            extra={"template_id": template_id, "status_code": error.status_code, "reason": error.message},
        )
        if template_id and error.status_code == 404:
            return TemplateNotFoundError(template_id)
        return TemplateError(
            f"{message}: {error.message}",
            template_id=template_id,
            details={"status_code": error.status_code},
        )
