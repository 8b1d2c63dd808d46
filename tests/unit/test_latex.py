"""Tests for the LaTeX exporter."""

from datetime import date

import pytest

from resume_export.errors import ValidationError
from resume_export.exporters.latex import (
    escape_latex,
    escape_url,
    render_latex,
    render_latex_bytes,
)
from tests.fakes import build_projection, empty_projection


@pytest.mark.parametrize(
    ("raw", "escaped"),
    [
        ("R&D", r"R\&D"),
        ("100%", r"100\%"),
        ("$5", r"\$5"),
        ("C#", r"C\#"),
        ("snake_case", r"snake\_case"),
        ("{x}", r"\{x\}"),
        ("~home", r"\textasciitilde{}home"),
        ("x^2", r"x\textasciicircum{}2"),
        ("a\\b", r"a\textbackslash{}b"),
    ],
)
def test_escape_latex(raw: str, escaped: str) -> None:
    assert escape_latex(raw) == escaped


def test_escape_latex_is_single_pass() -> None:
    """Test a backslash escape is not itself re-escaped."""
    assert escape_latex("\\&") == r"\textbackslash{}\&"


def test_escape_latex_none() -> None:
    assert escape_latex(None) == ""


@pytest.mark.parametrize("template", ["simple", "moderncv"])
def test_special_characters_escaped_in_every_template(template: str) -> None:
    """Test user text with LaTeX specials is escaped wherever it appears."""
    model = build_projection(
        experiences=[
            {
                "company": "R&D_Labs",
                "position": "Lead #1",
                "startDate": date(2019, 3, 1),
                "endDate": date(2021, 5, 1),
                "description": "Cut costs by 30% {fast} ~ $1M ^ up",
            }
        ]
    )

    latex = render_latex(model, template=template)

    assert r"R\&D\_Labs" in latex
    assert r"Lead \#1" in latex
    assert r"30\% \{fast\} \textasciitilde{} \$1M \textasciicircum{} up" in latex
    assert "R&D_Labs" not in latex


def test_simple_template_structure() -> None:
    latex = render_latex(build_projection())

    assert latex.startswith(r"\documentclass[11pt,a4paper]{article}")
    assert r"\textbf{Jane Doe}" in latex
    assert r"\section*{Experience}" in latex
    assert r"\textbf{Backend Engineer} \hfill Jan 2020 - Present\\" in latex
    assert r"\section*{Education}" in latex
    assert "Sep 2014 - Jun 2018" in latex
    assert "Python, Go" in latex
    assert r"\section*{Projects}" not in latex
    assert latex.rstrip().endswith(r"\end{document}")


def test_moderncv_template_structure() -> None:
    latex = render_latex(build_projection(), template="moderncv")

    assert r"\documentclass[11pt,a4paper,sans]{moderncv}" in latex
    assert r"\name{Jane}{Doe}" in latex
    assert (
        r"\cventry{Jan 2020 - Present}{Backend Engineer}{Acme Corp}{}{}"
        r"{Owns the billing platform.}" in latex
    )
    assert r"\cvitem{Technical}{Python, Go}" in latex


def test_portuguese_labels_and_months() -> None:
    latex = render_latex(build_projection(), language="pt")

    assert r"\section*{Experiência}" in latex
    assert "jan 2020 - Atual" in latex
    assert "set 2014 - jun 2018" in latex


@pytest.mark.parametrize(
    ("template", "name_markup"),
    [("simple", r"\textbf{Empty User}"), ("moderncv", r"\name{Empty}{User}")],
)
def test_empty_projection_omits_sections(template: str, name_markup: str) -> None:
    """Test a resume with no collections still renders, without empty sections."""
    latex = render_latex(empty_projection(), template=template)

    assert r"\begin{document}" in latex
    assert name_markup in latex
    for heading in ("Experience", "Education", "Skills", "Projects", "Languages"):
        assert heading not in latex


def test_bytes_output() -> None:
    data = render_latex_bytes(build_projection(), template="moderncv")

    assert data.decode("utf-8") == render_latex(build_projection(), template="moderncv")


def test_unknown_template() -> None:
    with pytest.raises(ValidationError):
        render_latex(build_projection(), template="europass")


def test_escape_url() -> None:
    assert escape_url("https://x.dev/a_b~c?q=1%20&d#top") == r"https://x.dev/a_b~c?q=1\%20&d\#top"
    assert escape_url("https://x.dev/{a}\\b") == "https://x.dev/%7Ba%7D%5Cb"
    assert escape_url(None) == ""


@pytest.mark.parametrize("template", ["simple", "moderncv"])
def test_project_links_keep_url_verbatim(template: str) -> None:
    """Test link targets are not text-escaped while the visible text is."""
    model = build_projection(
        projects=[{"name": "Tool", "url": "https://git.example.com/~jane/my_tool#readme"}]
    )

    latex = render_latex(model, template=template)

    assert (
        r"\href{https://git.example.com/~jane/my_tool\#readme}"
        r"{https://git.example.com/\textasciitilde{}jane/my\_tool\#readme}"
    ) in latex
    assert r"\url{" not in latex
