"""Localized labels and date formatting shared by the document exporters."""

from datetime import date

SUPPORTED_LANGUAGES = ("en", "pt")

MONTHS = {
    "en": ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
    "pt": ["jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"],
}

LABELS = {
    "en": {
        "summary": "Summary",
        "experience": "Experience",
        "education": "Education",
        "skills": "Skills",
        "projects": "Projects",
        "languages": "Languages",
        "certifications": "Certifications",
        "open_source": "Open Source",
        "present": "Present",
        "technical": "Technical",
        "credential": "Credential",
    },
    "pt": {
        "summary": "Resumo",
        "experience": "Experiência",
        "education": "Formação",
        "skills": "Competências",
        "projects": "Projetos",
        "languages": "Idiomas",
        "certifications": "Certificações",
        "open_source": "Código Aberto",
        "present": "Atual",
        "technical": "Técnicas",
        "credential": "Credencial",
    },
}


def normalize_language(language: str | None) -> str:
    """Reduce a language tag to a supported one, falling back to English."""
    if not language:
        return "en"
    primary = language.split("-", 1)[0].lower()
    return primary if primary in SUPPORTED_LANGUAGES else "en"


def labels_for(language: str | None) -> dict[str, str]:
    return LABELS[normalize_language(language)]


def format_month_year(value: date | None, language: str | None = "en") -> str:
    """Format a date as ``Mon YYYY``; empty for a missing date."""
    if value is None:
        return ""
    month = MONTHS[normalize_language(language)][value.month - 1]
    return f"{month} {value.year}"


def format_date_range(
    start: date | None,
    end: date | None,
    is_current: bool = False,
    language: str | None = "en",
) -> str:
    """
    Format a period such as ``Jan 2020 - Present``.

    A current entry always ends in the localized "Present" marker, whatever
    its end date says.
    """
    start_text = format_month_year(start, language)
    if is_current:
        end_text = labels_for(language)["present"]
    else:
        end_text = format_month_year(end, language)

    if start_text and end_text:
        return f"{start_text} - {end_text}"
    return start_text or end_text
