"""PDF and banner rendering through the shared browser."""

from typing import Any

from resume_export.browser.governor import GovernedSurface, Governor
from resume_export.browser.surface import ClipRect, EngineError, EngineNavigationError
from resume_export.config import Settings
from resume_export.errors import (
    ElementNotFoundError,
    ExportError,
    NavigationError,
    RenderError,
    RenderTimeoutError,
)
from resume_export.models import ContentType, ExportArtifact, RenderKind, RenderRequest
from resume_export.render import scripts
from resume_export.render.constants import (
    BANNER_FILENAME,
    BANNER_ROOT_SELECTOR,
    BANNER_ROOT_TIMEOUT,
    BANNER_VIEWPORT,
    CONTENT_RENDER_TIMEOUT,
    LOGO_LOAD_TIMEOUT,
    PDF_FILENAME,
    PDF_PAGE_WIDTH_MM,
    RESUME_ROOT_SELECTOR,
    RESUME_VIEWPORT,
    STYLES_SETTLE_TIMEOUT,
    pdf_page_height_mm,
)
from resume_export.render.document import build_clean_document, parse_style_snapshot
from resume_export.render.urls import RenderUrlBuilder, ValidatedUrl
from resume_export.utils.logging import get_logger

logger = get_logger(__name__)


class RenderPipeline:
    """Turns RenderRequests into PDF and PNG artifacts."""

    def __init__(self, governor: Governor, settings: Settings) -> None:
        self._governor = governor
        self._urls = RenderUrlBuilder(settings)

    async def render(self, request: RenderRequest) -> ExportArtifact:
        """
        Produce the artifact a request asks for.

        Engine errors are mapped to the export error taxonomy here and logged
        with the request context.
        """
        log = logger.bind(**request.log_context())
        log.info("Render started", remaining_s=round(request.deadline.remaining(), 2))

        try:
            if request.kind == RenderKind.PDF:
                artifact = await self._render_pdf(request)
            else:
                artifact = await self._render_banner(request)
        except ExportError as e:
            log.error("Render failed", error_type=type(e).__name__, error=str(e))
            raise
        except EngineError as e:
            log.error("Render failed in engine", error_type=type(e).__name__, error=str(e))
            raise RenderError(f"Engine error: {e}") from e

        log.info("Render completed", bytes=artifact.size)
        return artifact

    async def _render_pdf(self, request: RenderRequest) -> ExportArtifact:
        url = self._urls.resume_url(
            palette=request.palette,
            language=request.language,
            banner_color=request.banner_color,
            user_id=request.user_id,
        )

        async with self._governor.surface(request) as surface:
            await surface.set_viewport(RESUME_VIEWPORT)
            await self._navigate(surface, url)
            await surface.wait_for_function(scripts.RESUME_READY, operation="resume ready")

            payload = await surface.evaluate(
                scripts.EXTRACT_STYLE_SNAPSHOT, operation="extract styles"
            )
            if not payload:
                raise ElementNotFoundError(RESUME_ROOT_SELECTOR)
            snapshot = parse_style_snapshot(payload)

            await surface.set_content(build_clean_document(snapshot))
            await surface.wait_for_function(
                scripts.DOCUMENT_SETTLED,
                operation="styles settle",
                timeout=STYLES_SETTLE_TIMEOUT,
            )

            height_px = await surface.evaluate(
                scripts.RESUME_CONTENT_HEIGHT, operation="measure content"
            )
            if not height_px:
                raise ElementNotFoundError(RESUME_ROOT_SELECTOR)

            data = await surface.print_pdf(PDF_PAGE_WIDTH_MM, pdf_page_height_mm(height_px))

        return ExportArtifact(data=data, content_type=ContentType.PDF, filename=PDF_FILENAME)

    async def _render_banner(self, request: RenderRequest) -> ExportArtifact:
        url = self._urls.banner_url(palette=request.palette, logo_url=request.logo_url)

        async with self._governor.surface(request) as surface:
            await surface.set_viewport(BANNER_VIEWPORT)
            await self._navigate(surface, url)

            try:
                await surface.wait_for_function(
                    scripts.BANNER_ROOT_PRESENT,
                    operation="banner root",
                    timeout=BANNER_ROOT_TIMEOUT,
                )
            except RenderTimeoutError as e:
                if not _hit_cap(e, BANNER_ROOT_TIMEOUT):
                    raise
                raise ElementNotFoundError(BANNER_ROOT_SELECTOR) from e

            await surface.wait_for_function(scripts.FONTS_READY, operation="fonts ready")

            if request.logo_url:
                await self._wait_for_logo(surface, request)

            await surface.wait_for_function(
                scripts.CONTENT_POPULATED,
                operation="banner content",
                timeout=CONTENT_RENDER_TIMEOUT,
            )
            await surface.evaluate(scripts.APPLY_QUALITY_STYLES, operation="quality styles")

            bounds = await surface.evaluate(scripts.BANNER_BOUNDS, operation="banner bounds")
            clip = _clip_from_bounds(bounds)
            if clip is None:
                raise ElementNotFoundError(BANNER_ROOT_SELECTOR)

            data = await surface.screenshot(clip)

        return ExportArtifact(data=data, content_type=ContentType.PNG, filename=BANNER_FILENAME)

    async def _navigate(self, surface: GovernedSurface, url: ValidatedUrl) -> None:
        try:
            await surface.navigate(url)
        except EngineNavigationError as e:
            raise NavigationError(f"Navigation failed: {e}") from e

    async def _wait_for_logo(self, surface: GovernedSurface, request: RenderRequest) -> None:
        """Wait briefly for the logo; a logo that never loads is hidden, not fatal."""
        try:
            await surface.wait_for_function(
                scripts.LOGO_LOADED, operation="logo load", timeout=LOGO_LOAD_TIMEOUT
            )
        except RenderTimeoutError as e:
            if not _hit_cap(e, LOGO_LOAD_TIMEOUT):
                raise
            logger.warning("Logo did not load in time, skipping it", **request.log_context())
            await surface.evaluate(scripts.HIDE_LOGO, operation="hide logo")


def _hit_cap(error: RenderTimeoutError, cap: float) -> bool:
    """True when the operation's own cap expired rather than the request deadline."""
    return error.budget >= cap


def _clip_from_bounds(bounds: Any) -> ClipRect | None:
    if not isinstance(bounds, dict):
        return None
    try:
        clip = ClipRect(
            x=float(bounds["x"]),
            y=float(bounds["y"]),
            width=float(bounds["width"]),
            height=float(bounds["height"]),
        )
    except (KeyError, TypeError, ValueError):
        return None
    if clip.width <= 0 or clip.height <= 0:
        return None
    return clip
