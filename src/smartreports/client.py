"""HTTP client for the smart report endpoints of the back-office API.

Every endpoint is treated as an opaque service: the client only moves the
wire shapes of :mod:`smartreports.schemas` back and forth and reports any
transport or status failure as :class:`~smartreports.core.exceptions.ApiError`.
Callers decide how each failure is surfaced.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from smartreports.core.config import Settings, settings as default_settings
from smartreports.core.exceptions import ApiError
from smartreports.schemas.report import (
    DataSourceOption,
    DataSourceType,
    ExportFormat,
    FieldMetadata,
    QueryResult,
)
from smartreports.schemas.template import ReportTemplate, TemplateCreate, TemplateUpdate

logger = logging.getLogger(__name__)


class SmartReportsClient:
    """
    Async client for the smart report RPC endpoints.

    A new ``httpx.AsyncClient`` is opened per call. Pass ``transport`` to
    route requests through a custom transport (e.g. ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        settings: Settings | None = None,
    ) -> None:
        cfg = settings or default_settings
        self.base_url = (base_url or cfg.api_url).rstrip("/")
        self.token = token if token is not None else cfg.api_token
        self.timeout = timeout if timeout is not None else cfg.request_timeout
        self._transport = transport

    # ==========================================================================
    # Catalog
    # ==========================================================================

    async def get_data_sources(self) -> list[DataSourceOption]:
        """GET /data-sources"""
        payload = await self._request("GET", "/data-sources")
        return self._parse_list(DataSourceOption, payload, "data sources")

    async def get_fields(self, data_source: DataSourceType | str) -> list[FieldMetadata]:
        """GET /fields?dataSource="""
        value = DataSourceType(data_source).value
        payload = await self._request("GET", "/fields", params={"dataSource": value})
        return self._parse_list(FieldMetadata, payload, "fields")

    # ==========================================================================
    # Templates
    # ==========================================================================

    async def list_templates(self) -> list[ReportTemplate]:
        """GET /templates"""
        payload = await self._request("GET", "/templates")
        return self._parse_list(ReportTemplate, payload, "templates")

    async def get_template(self, template_id: str) -> ReportTemplate:
        """GET /templates/{id}"""
        payload = await self._request("GET", f"/templates/{template_id}")
        return self._parse(ReportTemplate, payload, "template")

    async def create_template(self, data: TemplateCreate) -> ReportTemplate:
        """POST /templates"""
        payload = await self._request("POST", "/templates", json=data.to_wire())
        return self._parse(ReportTemplate, payload, "template")

    async def update_template(self, template_id: str, data: TemplateUpdate) -> ReportTemplate:
        """PUT /templates/{id}"""
        payload = await self._request("PUT", f"/templates/{template_id}", json=data.to_wire())
        return self._parse(ReportTemplate, payload, "template")

    async def delete_template(self, template_id: str) -> None:
        """DELETE /templates/{id}"""
        await self._request("DELETE", f"/templates/{template_id}", expect_json=False)

    # ==========================================================================
    # Execution
    # ==========================================================================

    async def execute(self, config: dict[str, Any]) -> QueryResult:
        """POST /execute with ``{"config": ...}``."""
        payload = await self._request("POST", "/execute", json={"config": config})
        return self._parse(QueryResult, payload, "query result")

    async def export(
        self, config: dict[str, Any], export_format: ExportFormat | str
    ) -> tuple[bytes, Optional[str]]:
        """
        POST /export?format= with ``{"config": ...}``.

        Returns:
            Rendered file content and the response media type
        """
        response = await self._send(
            "POST",
            "/export",
            params={"format": ExportFormat(export_format).value},
            json={"config": config},
        )
        return response.content, response.headers.get("content-type")

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise ApiError on transport or status failure."""
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                message = self._error_message(e.response) or f"HTTP {status}"
                logger.debug(
                    "Request failed",
                    extra={"method": method, "path": path, "status_code": status},
                )
                raise ApiError(
                    message,
                    status_code=status,
                    details={"method": method, "path": path},
                ) from e
            except httpx.HTTPError as e:
                raise ApiError(
                    f"Request to {path} failed: {e}",
                    details={"method": method, "path": path},
                ) from e
        return response

    async def _request(
        self,
        method: str,
        path: str,
        expect_json: bool = True,
        **kwargs: Any,
    ) -> Any:
        response = await self._send(method, path, **kwargs)
        if not expect_json or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Malformed JSON from {path}", status_code=502) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return response.text or None
        if isinstance(body, dict):
            message = body.get("message") or body.get("detail")
            if isinstance(message, list):
                return "; ".join(str(m) for m in message)
            if message:
                return str(message)
        return None

    @staticmethod
    def _parse(model: Any, payload: Any, what: str) -> Any:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            raise ApiError(
                f"Unexpected {what} payload from server",
                status_code=502,
                details={"errors": e.errors(include_url=False)},
            ) from e

    @classmethod
    def _parse_list(cls, model: Any, payload: Any, what: str) -> list[Any]:
        if not isinstance(payload, list):
            raise ApiError(f"Expected a list of {what} from server", status_code=502)
        return [cls._parse(model, item, what) for item in payload]
