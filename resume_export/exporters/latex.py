"""LaTeX rendition of a resume projection."""

import re
from enum import Enum
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from resume_export.errors import ValidationError
from resume_export.exporters.formatting import (
    format_date_range,
    format_month_year,
    labels_for,
    normalize_language,
)
from resume_export.models import ResumeExportModel

TEMPLATE_ROOT = Path(__file__).parent / "templates"

LATEX_SPECIAL_CHARS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}

_LATEX_SPECIAL_RE = re.compile("|".join(re.escape(char) for char in LATEX_SPECIAL_CHARS))

# Characters that cannot appear raw in an \href target nested in another argument
URL_SPECIAL_CHARS = {
    "\\": "%5C",
    "{": "%7B",
    "}": "%7D",
    "%": r"\%",
    "#": r"\#",
}

_URL_SPECIAL_RE = re.compile("|".join(re.escape(char) for char in URL_SPECIAL_CHARS))


class LatexTemplate(str, Enum):
    SIMPLE = "simple"
    MODERNCV = "moderncv"


def escape_latex(value: Any) -> str:
    """
    Escape LaTeX special characters in a single pass.

    ``None`` renders as an empty string so optional fields can be
    interpolated directly.
    """
    if value is None:
        return ""
    return _LATEX_SPECIAL_RE.sub(lambda match: LATEX_SPECIAL_CHARS[match.group()], str(value))


class LatexUrl(str):
    """Text already prepared for a hyperref link target."""


def escape_url(value: Any) -> LatexUrl:
    """Prepare a URL for the first argument of \\href, where hyperref reads it verbatim."""
    if value is None:
        return LatexUrl("")
    return LatexUrl(
        _URL_SPECIAL_RE.sub(lambda match: URL_SPECIAL_CHARS[match.group()], str(value))
    )


def _finalize(value: Any) -> str:
    if isinstance(value, LatexUrl):
        return value
    return escape_latex(value)


def _create_environment() -> Environment:
    # Every \VAR{} goes through escape_latex via finalize, except link targets
    environment = Environment(
        loader=FileSystemLoader(TEMPLATE_ROOT),
        block_start_string=r"\BLOCK{",
        block_end_string="}",
        variable_start_string=r"\VAR{",
        variable_end_string="}",
        comment_start_string=r"\#{",
        comment_end_string="}",
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
        finalize=_finalize,
    )
    environment.filters["link"] = escape_url
    return environment


_environment = _create_environment()


def resolve_template(name: str | None) -> LatexTemplate:
    if not name:
        return LatexTemplate.SIMPLE
    try:
        return LatexTemplate(name)
    except ValueError as e:
        raise ValidationError(f"Unknown LaTeX template: {name!r}") from e


def build_context(model: ResumeExportModel, language: str | None = "en") -> dict[str, Any]:
    """Flatten a projection into plain strings for the templates."""
    lang = normalize_language(language)
    name_parts = model.display_name.split(" ", 1)

    return {
        "labels": labels_for(lang),
        "lang": lang,
        "name": model.display_name,
        "first_name": name_parts[0],
        "last_name": name_parts[1] if len(name_parts) > 1 else "",
        "headline": model.headline,
        "email": model.contact_email,
        "phone": model.contact_phone,
        "location": model.resume.location,
        "summary": model.resume.summary,
        "experiences": [
            {
                "position": exp.position,
                "company": exp.company,
                "dates": format_date_range(exp.start_date, exp.end_date, exp.is_current, lang),
                "location": exp.location,
                "description": exp.description,
            }
            for exp in model.experiences
        ],
        "education": [
            {
                "degree": f"{edu.degree}, {edu.field}" if edu.field else edu.degree,
                "institution": edu.institution,
                "dates": format_date_range(edu.start_date, edu.end_date, edu.is_current, lang),
                "description": edu.description,
            }
            for edu in model.education
        ],
        "skills": ", ".join(skill.name for skill in model.skills),
        "projects": [
            {
                "name": project.name,
                "description": project.description,
                "url": project.url,
            }
            for project in model.projects
        ],
        "languages": [f"{lang_.name} ({lang_.level})" for lang_ in model.languages],
        "certifications": [
            {
                "name": cert.name,
                "issuer": cert.issuer,
                "date": format_month_year(cert.issue_date, lang),
            }
            for cert in model.certifications
        ],
    }


def render_latex(
    model: ResumeExportModel,
    template: str | None = None,
    language: str | None = "en",
) -> str:
    """
    Render a resume projection as LaTeX source.

    Args:
        model: The resume projection
        template: ``simple`` (default) or ``moderncv``
        language: Language for section labels and dates

    Returns:
        LaTeX document text
    """
    chosen = resolve_template(template)
    tex = _environment.get_template(f"{chosen.value}.tex.j2")
    return tex.render(**build_context(model, language))


def render_latex_bytes(
    model: ResumeExportModel,
    template: str | None = None,
    language: str | None = "en",
) -> bytes:
    return render_latex(model, template, language).encode("utf-8")
