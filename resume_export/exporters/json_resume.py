"""JSON renditions of a resume projection: JSON Resume and the portable format."""

import json
from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from resume_export.errors import ValidationError
from resume_export.models import ResumeExportModel

JSON_RESUME_SCHEMA_URL = (
    "https://raw.githubusercontent.com/jsonresume/resume-schema/v1.0.0/schema.json"
)
PORTABLE_FORMAT = "portable"
PORTABLE_VERSION = "1.0"

SKILL_LEVELS = {1: "Beginner", 2: "Intermediate", 3: "Advanced", 4: "Expert", 5: "Expert"}

LANGUAGE_FLUENCY = {
    "native": "Native speaker",
    "fluent": "Fluent",
    "advanced": "Advanced",
    "intermediate": "Intermediate",
    "basic": "Basic",
}


class JsonVariant(str, Enum):
    JSON_RESUME = "jsonresume"
    PORTABLE = "portable"


class JsonResumeBasics(BaseModel):
    name: str
    label: str
    email: str | None = None
    phone: str | None = None
    url: str | None = None
    summary: str | None = None


class JsonResumeWork(BaseModel):
    company: str
    position: str
    start_date: str = Field(alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    summary: str | None = None
    highlights: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class JsonResumeEducation(BaseModel):
    institution: str
    study_type: str = Field(alias="studyType")
    area: str | None = None
    start_date: str = Field(alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")

    model_config = ConfigDict(populate_by_name=True)


class JsonResumeSkill(BaseModel):
    name: str
    level: str
    keywords: list[str] = Field(default_factory=list)


class JsonResumeLanguage(BaseModel):
    language: str
    fluency: str


class JsonResumeProject(BaseModel):
    name: str
    description: str = ""
    url: str | None = None


class JsonResume(BaseModel):
    """Document in the open JSON Resume shape."""

    model_config = ConfigDict(populate_by_name=True)

    schema_url: str = Field(default=JSON_RESUME_SCHEMA_URL, alias="$schema")
    basics: JsonResumeBasics
    work: list[JsonResumeWork] = Field(default_factory=list)
    education: list[JsonResumeEducation] = Field(default_factory=list)
    skills: list[JsonResumeSkill] = Field(default_factory=list)
    languages: list[JsonResumeLanguage] = Field(default_factory=list)
    projects: list[JsonResumeProject] = Field(default_factory=list)


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


def skill_level_name(level: int | None) -> str:
    return SKILL_LEVELS.get(level or 1, "Beginner")


def language_fluency(level: str | None) -> str:
    if not level:
        return "Basic"
    return LANGUAGE_FLUENCY.get(level.lower(), level)


def to_json_resume(model: ResumeExportModel) -> JsonResume:
    """Map a projection into the JSON Resume shape. Every list maps independently."""
    return JsonResume(
        basics=JsonResumeBasics(
            name=model.display_name,
            label=model.headline or "Professional",
            email=model.contact_email,
            phone=model.contact_phone,
            url=model.resume.website,
            summary=model.resume.summary,
        ),
        work=[
            JsonResumeWork(
                company=exp.company,
                position=exp.position,
                start_date=exp.start_date.isoformat(),
                end_date=None if exp.is_current else _iso(exp.end_date),
                summary=exp.description,
                highlights=list(exp.skills),
            )
            for exp in model.experiences
        ],
        education=[
            JsonResumeEducation(
                institution=edu.institution,
                study_type=edu.degree,
                area=edu.field,
                start_date=edu.start_date.isoformat(),
                end_date=None if edu.is_current else _iso(edu.end_date),
            )
            for edu in model.education
        ],
        skills=[
            JsonResumeSkill(
                name=skill.name,
                level=skill_level_name(skill.level),
                keywords=[skill.category] if skill.category else [],
            )
            for skill in model.skills
        ],
        languages=[
            JsonResumeLanguage(language=lang.name, fluency=language_fluency(lang.level))
            for lang in model.languages
        ],
        projects=[
            JsonResumeProject(
                name=contribution.project_name,
                description=contribution.description or "",
                url=contribution.project_url,
            )
            for contribution in model.open_source
        ]
        + [
            JsonResumeProject(
                name=project.name,
                description=project.description or "",
                url=project.url,
            )
            for project in model.projects
        ],
    )


def to_portable(model: ResumeExportModel) -> dict[str, Any]:
    """Wrap the full projection with format and version tags."""
    return {
        "format": PORTABLE_FORMAT,
        "version": PORTABLE_VERSION,
        "resume": model.model_dump(mode="json", by_alias=True),
    }


def from_portable(payload: dict[str, Any]) -> ResumeExportModel:
    """Rebuild a projection from a portable document."""
    if payload.get("format") != PORTABLE_FORMAT:
        raise ValidationError(f"Not a portable resume document: {payload.get('format')!r}")
    return ResumeExportModel.model_validate(payload.get("resume", {}))


def resolve_variant(name: str | None) -> JsonVariant:
    if not name:
        return JsonVariant.JSON_RESUME
    try:
        return JsonVariant(name)
    except ValueError as e:
        raise ValidationError(f"Unknown JSON variant: {name!r}") from e


def build_json(model: ResumeExportModel, variant: str | None = None) -> dict[str, Any]:
    """Build the JSON document for a projection as plain data."""
    if resolve_variant(variant) == JsonVariant.PORTABLE:
        return to_portable(model)
    return to_json_resume(model).model_dump(mode="json", by_alias=True, exclude_none=True)


def dumps(document: dict[str, Any]) -> bytes:
    return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")


def build_json_bytes(model: ResumeExportModel, variant: str | None = None) -> bytes:
    return dumps(build_json(model, variant))
