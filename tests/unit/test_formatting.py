"""Tests for shared exporter formatting."""

from datetime import date

from resume_export.exporters.formatting import (
    format_date_range,
    format_month_year,
    normalize_language,
)


def test_month_year() -> None:
    assert format_month_year(date(2021, 3, 9)) == "Mar 2021"
    assert format_month_year(date(2021, 2, 9), "pt") == "fev 2021"
    assert format_month_year(None) == ""


def test_current_role_ends_in_present() -> None:
    """Test a current entry ignores any end date."""
    assert format_date_range(date(2020, 1, 1), date(2022, 1, 1), is_current=True) == (
        "Jan 2020 - Present"
    )


def test_date_range_with_missing_end() -> None:
    assert format_date_range(date(2020, 1, 1), None) == "Jan 2020"


def test_normalize_language() -> None:
    assert normalize_language("pt-BR") == "pt"
    assert normalize_language("de") == "en"
    assert normalize_language(None) == "en"
