"""Render request, deadline and artifact types."""

import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from resume_export.errors import ValidationError
from resume_export.utils.logging import sanitize_url

PALETTE_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")
LANGUAGE_PATTERN = re.compile(r"[a-z]{2}(-[A-Za-z]{2})?")
COLOR_PATTERN = re.compile(r"#?(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})")


class ContentType(str, Enum):
    """MIME types of the produced artifacts."""

    PDF = "application/pdf"
    PNG = "image/png"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    LATEX = "text/x-tex"
    JSON = "application/json"


class RenderKind(str, Enum):
    """Artifacts produced through the browser engine."""

    PDF = "pdf"
    BANNER_PNG = "banner-png"


@dataclass(frozen=True)
class Deadline:
    """An absolute point on the monotonic clock by which work must finish."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at


@dataclass(frozen=True)
class RenderRequest:
    """One browser export job. Style parameters are validated on construction."""

    kind: RenderKind
    deadline: Deadline
    palette: str
    language: str = "en"
    banner_color: str | None = None
    logo_url: str | None = None
    user_id: str | None = None

    def __post_init__(self) -> None:
        if not PALETTE_PATTERN.fullmatch(self.palette):
            raise ValidationError(f"Invalid palette: {self.palette!r}")
        if not LANGUAGE_PATTERN.fullmatch(self.language):
            raise ValidationError(f"Invalid language: {self.language!r}")
        if self.banner_color is not None and not COLOR_PATTERN.fullmatch(self.banner_color):
            raise ValidationError(f"Invalid banner color: {self.banner_color!r}")

    def log_context(self) -> dict[str, Any]:
        """Fields safe to bind to log records. The raw logo URL is excluded."""
        return {
            "format": self.kind.value,
            "palette": self.palette,
            "language": self.language,
            "user_id": self.user_id,
            "logo": sanitize_url(self.logo_url),
        }


@dataclass(frozen=True)
class StyleSnapshot:
    """Presentation state extracted from a live page."""

    stylesheets: list[str] = field(default_factory=list)
    inline_styles: list[str] = field(default_factory=list)
    markup: str = ""
    css_variables: dict[str, str] = field(default_factory=dict)
    html_attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ExportArtifact:
    """Bytes of a finished export plus how to serve them."""

    data: bytes
    content_type: ContentType
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)
