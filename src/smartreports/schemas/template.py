"""Template schemas for saved report configurations."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from smartreports.schemas.report import ReportConfiguration, ReportType, WireModel


def _validate_name(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Template name cannot be empty")
    if len(v.strip()) > 255:
        raise ValueError("Template name cannot exceed 255 characters")
    return v.strip()


class ReportTemplate(WireModel):
    """A named, persisted report configuration."""

    id: str = Field(..., description="Template ID")
    name: str = Field(..., description="Template name")
    description: Optional[str] = Field(None, description="Template description")
    report_type: ReportType = Field(..., description="Report type")
    config: ReportConfiguration = Field(..., description="Saved configuration")
    is_default: bool = Field(default=False, description="Default template for its type")
    is_public: bool = Field(default=False, description="Visible to other users")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TemplateCreate(WireModel):
    """Payload for saving a new template."""

    name: str = Field(..., description="Template name")
    description: Optional[str] = Field(None, description="Template description")
    report_type: ReportType = Field(..., description="Report type")
    config: ReportConfiguration = Field(..., description="Configuration to save")
    is_public: bool = Field(default=False, description="Visible to other users")
    is_default: bool = Field(default=False, description="Default template for its type")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)


class TemplateUpdate(WireModel):
    """Partial update of a saved template."""

    name: Optional[str] = None
    description: Optional[str] = None
    config: Optional[ReportConfiguration] = None
    is_public: Optional[bool] = None
    is_default: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_name(v)
