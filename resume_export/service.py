"""Export dispatch: one entry point for every export format."""

import asyncio
from collections.abc import Callable
from functools import partial

from resume_export.config import Settings
from resume_export.errors import ValidationError
from resume_export.exporters import build_docx, build_json_bytes, render_latex_bytes
from resume_export.exporters.formatting import normalize_language
from resume_export.models import (
    ContentType,
    Deadline,
    ExportArtifact,
    ExportFormat,
    ExportQuery,
    RenderKind,
    RenderRequest,
)
from resume_export.projection import ResumeProjectionProvider
from resume_export.render.pipeline import RenderPipeline
from resume_export.utils.logging import get_logger

logger = get_logger(__name__)

DOCX_FILENAME = "resume.docx"
LATEX_FILENAME = "resume.tex"
JSON_FILENAME = "resume.json"


class ExportService:
    """Routes export queries to the render pipeline or a structured exporter."""

    def __init__(
        self,
        pipeline: RenderPipeline,
        provider: ResumeProjectionProvider,
        settings: Settings,
    ) -> None:
        self.pipeline = pipeline
        self.provider = provider
        self.settings = settings

    async def export(self, query: ExportQuery, caller_id: str | None = None) -> ExportArtifact:
        """
        Produce the export described by a query.

        Args:
            query: What to export and how
            caller_id: Identity asserted by the upstream gateway; wins over
                any user id in the query

        Returns:
            The finished artifact
        """
        user_id = caller_id or query.user_id
        logger.info("Export requested", format=query.format.value, user_id=user_id)

        if query.format in (ExportFormat.PDF, ExportFormat.BANNER):
            return await self.pipeline.render(self._render_request(query, user_id))

        if not user_id:
            raise ValidationError("A user id is required for this export format")

        model = await self.provider.get_projection(user_id)

        if query.format == ExportFormat.DOCX:
            return await self._generate(
                partial(build_docx, model, self._language(query)),
                ContentType.DOCX,
                DOCX_FILENAME,
            )
        if query.format == ExportFormat.LATEX:
            return await self._generate(
                partial(render_latex_bytes, model, query.template, self._language(query)),
                ContentType.LATEX,
                LATEX_FILENAME,
            )
        return await self._generate(
            partial(build_json_bytes, model, query.template),
            ContentType.JSON,
            JSON_FILENAME,
        )

    def _render_request(self, query: ExportQuery, user_id: str | None) -> RenderRequest:
        kind = RenderKind.PDF if query.format == ExportFormat.PDF else RenderKind.BANNER_PNG
        return RenderRequest(
            kind=kind,
            deadline=Deadline.after(self.settings.request_timeout_seconds),
            palette=query.palette or self.settings.default_palette,
            language=query.language or self.settings.default_language,
            banner_color=query.banner_color,
            logo_url=query.logo_url if kind == RenderKind.BANNER_PNG else None,
            user_id=user_id,
        )

    def _language(self, query: ExportQuery) -> str:
        return normalize_language(query.language or self.settings.default_language)

    async def _generate(
        self, build: Callable[[], bytes], content_type: ContentType, filename: str
    ) -> ExportArtifact:
        # Generators are synchronous and CPU-bound
        data = await asyncio.to_thread(build)
        logger.info("Export generated", content_type=content_type.value, bytes=len(data))
        return ExportArtifact(data=data, content_type=content_type, filename=filename)
