"""Word (DOCX) rendition of a resume projection."""

import io

from docx import Document
from docx.document import Document as DocumentObject
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt

from resume_export.exporters.formatting import format_date_range, format_month_year, labels_for
from resume_export.models import ResumeExportModel

SKILL_SEPARATOR = " • "
CONTACT_SEPARATOR = " | "


def build_docx(model: ResumeExportModel, language: str | None = "en") -> bytes:
    """
    Build a DOCX document from a resume projection.

    Sections with no content are left out entirely.

    Args:
        model: The resume projection
        language: Language for section labels and dates

    Returns:
        The .docx file contents
    """
    labels = labels_for(language)
    doc = Document()

    for section in doc.sections:
        section.top_margin = Inches(0.6)
        section.bottom_margin = Inches(0.6)
        section.left_margin = Inches(0.7)
        section.right_margin = Inches(0.7)

    doc.styles["Normal"].font.size = Pt(10.5)

    _add_header(doc, model)

    if model.resume.summary:
        doc.add_heading(labels["summary"], level=1)
        doc.add_paragraph(model.resume.summary)

    if model.experiences:
        doc.add_heading(labels["experience"], level=1)
        for exp in model.experiences:
            _add_entry_title(doc, f"{exp.position} — {exp.company}")
            _add_meta_line(
                doc,
                format_date_range(exp.start_date, exp.end_date, exp.is_current, language),
                exp.location,
            )
            if exp.description:
                doc.add_paragraph(exp.description)
            if exp.skills:
                doc.add_paragraph(SKILL_SEPARATOR.join(exp.skills))

    if model.education:
        doc.add_heading(labels["education"], level=1)
        for edu in model.education:
            degree = f"{edu.degree} in {edu.field}" if edu.field else edu.degree
            _add_entry_title(doc, f"{degree} — {edu.institution}")
            _add_meta_line(
                doc,
                format_date_range(edu.start_date, edu.end_date, edu.is_current, language),
                edu.location,
            )
            if edu.gpa:
                doc.add_paragraph(f"GPA: {edu.gpa}")
            if edu.description:
                doc.add_paragraph(edu.description)

    if model.skills:
        doc.add_heading(labels["skills"], level=1)
        doc.add_paragraph(SKILL_SEPARATOR.join(skill.name for skill in model.skills))

    if model.projects:
        doc.add_heading(labels["projects"], level=1)
        for project in model.projects:
            _add_entry_title(doc, project.name)
            if project.description:
                doc.add_paragraph(project.description)
            if project.technologies:
                doc.add_paragraph(SKILL_SEPARATOR.join(project.technologies))
            if project.url:
                doc.add_paragraph(project.url)

    if model.languages:
        doc.add_heading(labels["languages"], level=1)
        for lang in model.languages:
            doc.add_paragraph(f"{lang.name} ({lang.level})", style="List Bullet")

    if model.certifications:
        doc.add_heading(labels["certifications"], level=1)
        for cert in model.certifications:
            _add_entry_title(doc, f"{cert.name} — {cert.issuer}")
            _add_meta_line(
                doc,
                format_month_year(cert.issue_date, language),
                f"{labels['credential']}: {cert.credential_id}" if cert.credential_id else None,
            )

    if model.open_source:
        doc.add_heading(labels["open_source"], level=1)
        for contribution in model.open_source:
            _add_entry_title(doc, f"{contribution.project_name} — {contribution.role}")
            _add_meta_line(
                doc,
                format_date_range(
                    contribution.start_date,
                    contribution.end_date,
                    contribution.is_current,
                    language,
                ),
                contribution.project_url,
            )
            if contribution.description:
                doc.add_paragraph(contribution.description)

    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def _add_header(doc: DocumentObject, model: ResumeExportModel) -> None:
    name_para = doc.add_paragraph()
    name_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    name_run = name_para.add_run(model.display_name)
    name_run.bold = True
    name_run.font.size = Pt(20)

    if model.headline:
        headline_para = doc.add_paragraph()
        headline_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        headline_para.add_run(model.headline).font.size = Pt(12)

    contact = [
        value
        for value in (
            model.contact_email,
            model.contact_phone,
            model.resume.location,
            model.resume.linkedin,
            model.resume.github,
            model.resume.website,
        )
        if value
    ]
    if contact:
        contact_para = doc.add_paragraph()
        contact_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        contact_para.add_run(CONTACT_SEPARATOR.join(contact)).font.size = Pt(9)


def _add_entry_title(doc: DocumentObject, text: str) -> None:
    para = doc.add_paragraph()
    para.add_run(text).bold = True
    para.paragraph_format.space_before = Pt(6)
    para.paragraph_format.space_after = Pt(0)


def _add_meta_line(doc: DocumentObject, *parts: str | None) -> None:
    text = CONTACT_SEPARATOR.join(part for part in parts if part)
    if not text:
        return
    para = doc.add_paragraph()
    para.add_run(text).italic = True
    para.paragraph_format.space_after = Pt(2)
