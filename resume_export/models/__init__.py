"""Data models for resume-export."""

from resume_export.models.export import ExportFormat, ExportQuery
from resume_export.models.render import (
    ContentType,
    Deadline,
    ExportArtifact,
    RenderKind,
    RenderRequest,
    StyleSnapshot,
)
from resume_export.models.resume import (
    Certification,
    Education,
    Experience,
    Language,
    OpenSourceContribution,
    Project,
    ResumeExportModel,
    ResumeInfo,
    Skill,
    UserProfile,
)

__all__ = [
    "ExportFormat",
    "ExportQuery",
    "ContentType",
    "Deadline",
    "ExportArtifact",
    "RenderKind",
    "RenderRequest",
    "StyleSnapshot",
    "Certification",
    "Education",
    "Experience",
    "Language",
    "OpenSourceContribution",
    "Project",
    "ResumeExportModel",
    "ResumeInfo",
    "Skill",
    "UserProfile",
]
