"""Read-only resume projection consumed by the exporters."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class ProjectionModel(BaseModel):
    """Base for projection entities; instances are immutable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class UserProfile(ProjectionModel):
    id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    username: str | None = None
    palette: str | None = None
    banner_color: str | None = Field(default=None, alias="bannerColor")


class ResumeInfo(ProjectionModel):
    id: str
    user_id: str = Field(alias="userId")
    title: str | None = None
    slug: str | None = None
    language: str = "en"
    full_name: str | None = Field(default=None, alias="fullName")
    job_title: str | None = Field(default=None, alias="jobTitle")
    phone: str | None = None
    email_contact: str | None = Field(default=None, alias="emailContact")
    location: str | None = None
    linkedin: str | None = None
    github: str | None = None
    website: str | None = None
    summary: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class Experience(ProjectionModel):
    company: str
    position: str
    start_date: date = Field(alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    is_current: bool = Field(default=False, alias="isCurrent")
    location: str | None = None
    description: str | None = None
    skills: list[str] = Field(default_factory=list)


class Education(ProjectionModel):
    institution: str
    degree: str
    field: str | None = None
    start_date: date = Field(alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    is_current: bool = Field(default=False, alias="isCurrent")
    location: str | None = None
    description: str | None = None
    gpa: str | None = None


class Skill(ProjectionModel):
    name: str
    category: str | None = None
    level: int | None = Field(default=None, ge=1, le=5)


class Project(ProjectionModel):
    name: str
    description: str | None = None
    url: str | None = None
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    is_current: bool = Field(default=False, alias="isCurrent")
    technologies: list[str] = Field(default_factory=list)


class Language(ProjectionModel):
    name: str
    level: str


class Certification(ProjectionModel):
    name: str
    issuer: str
    issue_date: date = Field(alias="issueDate")
    expiry_date: date | None = Field(default=None, alias="expiryDate")
    credential_id: str | None = Field(default=None, alias="credentialId")
    credential_url: str | None = Field(default=None, alias="credentialUrl")


class OpenSourceContribution(ProjectionModel):
    project_name: str = Field(alias="projectName")
    project_url: str = Field(alias="projectUrl")
    role: str
    description: str | None = None
    technologies: list[str] = Field(default_factory=list)
    start_date: date = Field(alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    is_current: bool = Field(default=False, alias="isCurrent")


class ResumeExportModel(ProjectionModel):
    """A resume and every related collection, fully hydrated."""

    resume: ResumeInfo
    user: UserProfile
    experiences: list[Experience] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    languages: list[Language] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)
    open_source: list[OpenSourceContribution] = Field(
        default_factory=list, alias="openSource"
    )

    @property
    def display_name(self) -> str:
        """Name shown in document headers."""
        return self.resume.full_name or self.user.name or "Unknown"

    @property
    def headline(self) -> str:
        return self.resume.job_title or self.resume.title or ""

    @property
    def contact_email(self) -> str | None:
        return self.resume.email_contact or self.user.email

    @property
    def contact_phone(self) -> str | None:
        return self.resume.phone or self.user.phone
