"""Structured document exporters."""

from resume_export.exporters.docx import build_docx
from resume_export.exporters.json_resume import (
    build_json,
    build_json_bytes,
    from_portable,
    to_json_resume,
    to_portable,
)
from resume_export.exporters.latex import escape_latex, render_latex, render_latex_bytes

__all__ = [
    "build_docx",
    "build_json",
    "build_json_bytes",
    "from_portable",
    "to_json_resume",
    "to_portable",
    "escape_latex",
    "render_latex",
    "render_latex_bytes",
]
