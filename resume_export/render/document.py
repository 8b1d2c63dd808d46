"""Clean standalone documents rebuilt from a live page's styles."""

import html
import re
from typing import Any

from resume_export.models import StyleSnapshot

# Interactive-only affordances never belong in an exported document
STRIP_INTERACTIVE_CSS = """
*, *::before, *::after {
  transition: none !important;
  animation: none !important;
  caret-color: transparent !important;
}
*:focus, *:focus-visible, *:focus-within, *:hover, *:active {
  outline: none !important;
  box-shadow: none !important;
}
button, [role="button"], .no-export, [data-export-hidden] {
  display: none !important;
}
html, body {
  margin: 0 !important;
  padding: 0 !important;
  overflow: hidden !important;
}
@page {
  margin: 0;
}
"""

CSS_VARIABLE_NAME = re.compile(r"--[A-Za-z0-9_-]+")
ATTRIBUTE_NAME = re.compile(r"[A-Za-z_:][A-Za-z0-9_.:-]*")


def parse_style_snapshot(payload: dict[str, Any]) -> StyleSnapshot:
    """Build a StyleSnapshot from the extraction script's JSON result."""
    return StyleSnapshot(
        stylesheets=[str(href) for href in payload.get("stylesheets") or []],
        inline_styles=[str(css) for css in payload.get("inlineStyles") or []],
        markup=str(payload.get("markup") or ""),
        css_variables={
            str(k): str(v) for k, v in (payload.get("cssVariables") or {}).items()
        },
        html_attributes={
            str(k): str(v) for k, v in (payload.get("htmlAttributes") or {}).items()
        },
    )


def _safe_css(css: str) -> str:
    # Keep style blocks from terminating the surrounding <style> element
    return re.sub(r"</style", r"<\\/style", css, flags=re.IGNORECASE)


def build_clean_document(snapshot: StyleSnapshot) -> str:
    """Standalone HTML containing only the exported element and its styles."""
    attributes = " ".join(
        f'{name}="{html.escape(value, quote=True)}"'
        for name, value in snapshot.html_attributes.items()
        if ATTRIBUTE_NAME.fullmatch(name)
    )
    head: list[str] = ['<meta charset="utf-8">']

    for href in snapshot.stylesheets:
        head.append(f'<link rel="stylesheet" href="{html.escape(href, quote=True)}">')

    for css in snapshot.inline_styles:
        head.append(f"<style>{_safe_css(css)}</style>")

    variables = [
        f"  {name}: {value.replace(';', '').replace('}', '')};"
        for name, value in snapshot.css_variables.items()
        if CSS_VARIABLE_NAME.fullmatch(name)
    ]
    if variables:
        head.append("<style>:root {\n" + "\n".join(variables) + "\n}</style>")

    head.append(f"<style>{STRIP_INTERACTIVE_CSS}</style>")

    html_open = f"<html {attributes}>" if attributes else "<html>"
    return (
        "<!DOCTYPE html>\n"
        f"{html_open}\n<head>\n"
        + "\n".join(head)
        + f"\n</head>\n<body>\n{snapshot.markup}\n</body>\n</html>\n"
    )
