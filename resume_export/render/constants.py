"""Viewport, selector, timing and unit constants for browser exports."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int
    scale_factor: float


# A4 proportions, rendered at 2x for crisp text
RESUME_VIEWPORT = Viewport(width=1240, height=1754, scale_factor=2)
# LinkedIn banner size, rendered at 4x for re-encoding
BANNER_VIEWPORT = Viewport(width=1584, height=396, scale_factor=4)

# Selectors shared with the front-end export views
RESUME_ROOT_SELECTOR = "#resume-export"
RESUME_READY_ATTRIBUTE = "data-export-ready"
BANNER_ROOT_SELECTOR = "#banner"
BANNER_LOGO_ID = "company-logo"
BANNER_CONTENT_ID = "code"

# Sub-timeouts in seconds, always capped by the request deadline
BANNER_ROOT_TIMEOUT = 15.0
LOGO_LOAD_TIMEOUT = 5.0
CONTENT_RENDER_TIMEOUT = 10.0
STYLES_SETTLE_TIMEOUT = 10.0

# 96 CSS pixels per inch, 25.4 mm per inch
PX_TO_MM = 0.264583
PDF_PAGE_WIDTH_MM = 210.0
PDF_HEIGHT_BUFFER_MM = 10.0
MM_PER_INCH = 25.4

PDF_FILENAME = "resume.pdf"
BANNER_FILENAME = "linkedin-banner.png"


def px_to_mm(pixels: float) -> float:
    return pixels * PX_TO_MM


def pdf_page_height_mm(content_height_px: float) -> float:
    """Exact page height for content of the given pixel height."""
    return round(px_to_mm(content_height_px) + PDF_HEIGHT_BUFFER_MM, 2)
