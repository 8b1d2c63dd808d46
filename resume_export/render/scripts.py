"""Page scripts evaluated inside render surfaces."""

from resume_export.render.constants import (
    BANNER_CONTENT_ID,
    BANNER_LOGO_ID,
    BANNER_ROOT_SELECTOR,
    RESUME_READY_ATTRIBUTE,
    RESUME_ROOT_SELECTOR,
)

DOM_CONTENT_LOADED = "document.readyState !== 'loading'"

RESUME_READY = f"document.querySelector('[{RESUME_READY_ATTRIBUTE}=\"true\"]') !== null"

EXTRACT_STYLE_SNAPSHOT = f"""
(() => {{
  const root = document.querySelector('{RESUME_ROOT_SELECTOR}');
  if (!root) return null;

  const stylesheets = Array.from(document.querySelectorAll('link[rel="stylesheet"]'))
    .map((link) => link.href)
    .filter(Boolean);
  const inlineStyles = Array.from(document.querySelectorAll('style'))
    .map((style) => style.textContent || '');

  const computed = getComputedStyle(document.documentElement);
  const cssVariables = {{}};
  const collect = (declaration) => {{
    for (const name of Array.from(declaration)) {{
      if (name.startsWith('--')) {{
        cssVariables[name] = computed.getPropertyValue(name).trim();
      }}
    }}
  }};
  collect(document.documentElement.style);
  for (const sheet of Array.from(document.styleSheets)) {{
    let rules;
    try {{
      rules = sheet.cssRules;
    }} catch (e) {{
      continue;
    }}
    for (const rule of Array.from(rules)) {{
      if (rule.style) collect(rule.style);
    }}
  }}

  const htmlAttributes = {{}};
  for (const attr of Array.from(document.documentElement.attributes)) {{
    htmlAttributes[attr.name] = attr.value;
  }}

  return {{ stylesheets, inlineStyles, markup: root.outerHTML, cssVariables, htmlAttributes }};
}})()
"""

DOCUMENT_SETTLED = """
document.fonts.ready.then(() =>
  Array.from(document.querySelectorAll('link[rel="stylesheet"]')).every((link) => link.sheet !== null)
)
"""

RESUME_CONTENT_HEIGHT = f"""
(() => {{
  const root = document.querySelector('{RESUME_ROOT_SELECTOR}');
  return root ? root.scrollHeight : null;
}})()
"""

BANNER_ROOT_PRESENT = f"document.querySelector('{BANNER_ROOT_SELECTOR}') !== null"

FONTS_READY = "document.fonts.ready.then(() => true)"

LOGO_LOADED = f"""
(() => {{
  const img = document.getElementById('{BANNER_LOGO_ID}');
  return !!img && img.complete && img.naturalWidth > 0;
}})()
"""

HIDE_LOGO = f"""
(() => {{
  const img = document.getElementById('{BANNER_LOGO_ID}');
  if (img) img.style.visibility = 'hidden';
  return true;
}})()
"""

CONTENT_POPULATED = f"""
(() => {{
  const el = document.getElementById('{BANNER_CONTENT_ID}');
  return !!el && el.innerHTML.trim().length > 0;
}})()
"""

APPLY_QUALITY_STYLES = f"""
(() => {{
  const style = document.createElement('style');
  style.textContent = `
    {BANNER_ROOT_SELECTOR}, {BANNER_ROOT_SELECTOR} * {{
      -webkit-font-smoothing: antialiased !important;
      -moz-osx-font-smoothing: grayscale !important;
      text-rendering: optimizeLegibility !important;
      image-rendering: -webkit-optimize-contrast !important;
    }}
  `;
  document.head.appendChild(style);
  return true;
}})()
"""

BANNER_BOUNDS = f"""
(() => {{
  const el = document.querySelector('{BANNER_ROOT_SELECTOR}');
  if (!el) return null;
  const rect = el.getBoundingClientRect();
  return {{
    x: rect.left + window.scrollX,
    y: rect.top + window.scrollY,
    width: rect.width,
    height: rect.height,
  }};
}})()
"""
