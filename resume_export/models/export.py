"""Inbound export request models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExportFormat(str, Enum):
    """Every export the service can produce."""

    PDF = "pdf"
    BANNER = "banner-png"
    DOCX = "docx"
    LATEX = "latex"
    JSON = "json"


class ExportQuery(BaseModel):
    """Request to produce one export for a user."""

    model_config = ConfigDict(populate_by_name=True)

    format: ExportFormat
    palette: str | None = None
    language: str | None = Field(default=None, description="Language code (e.g., en, pt)")
    banner_color: str | None = Field(
        default=None, alias="bannerColor", description="Custom banner color (hex)"
    )
    logo_url: str | None = Field(
        default=None, alias="logoUrl", description="Logo URL to include in the banner"
    )
    user_id: str | None = Field(default=None, alias="userId")
    template: str | None = Field(
        default=None,
        description="LaTeX template (simple, moderncv) or JSON variant (jsonresume, portable)",
    )
