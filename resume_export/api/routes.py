"""API route definitions."""

import math

from fastapi import APIRouter, Depends, FastAPI, Header, Query, Request, status
from fastapi.responses import JSONResponse, Response

from resume_export.errors import (
    Backpressure,
    ExportError,
    NotFoundError,
    RenderTimeoutError,
    ValidationError,
)
from resume_export.models import ExportArtifact, ExportFormat, ExportQuery
from resume_export.service import ExportService
from resume_export.utils.logging import get_logger

router = APIRouter(prefix="/v1/export", tags=["export"])
logger = get_logger(__name__)

GENERIC_FAILURE = "Failed to generate export. Please try again later."


def get_export_service(request: Request) -> ExportService:
    return request.app.state.export_service


def artifact_response(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.data,
        media_type=artifact.content_type.value,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.post(
    "",
    summary="Produce an export",
    description="Render or generate one export for the calling user.",
)
async def create_export(
    query: ExportQuery,
    x_user_id: str | None = Header(default=None),
    service: ExportService = Depends(get_export_service),
) -> Response:
    return artifact_response(await service.export(query, x_user_id))


@router.get("/banner", summary="Export LinkedIn banner image")
async def export_banner(
    palette: str | None = Query(default=None, description="Color palette name"),
    logo: str | None = Query(default=None, description="Logo URL to include in banner"),
    x_user_id: str | None = Header(default=None),
    service: ExportService = Depends(get_export_service),
) -> Response:
    query = ExportQuery(format=ExportFormat.BANNER, palette=palette, logo_url=logo)
    return artifact_response(await service.export(query, x_user_id))


@router.get("/resume/pdf", summary="Export resume as PDF")
async def export_resume_pdf(
    palette: str | None = Query(default=None, description="Color palette name for styling"),
    lang: str | None = Query(default=None, description="Language code (e.g., en, pt)"),
    banner_color: str | None = Query(
        default=None, alias="bannerColor", description="Custom banner color (hex)"
    ),
    x_user_id: str | None = Header(default=None),
    service: ExportService = Depends(get_export_service),
) -> Response:
    query = ExportQuery(
        format=ExportFormat.PDF, palette=palette, language=lang, banner_color=banner_color
    )
    return artifact_response(await service.export(query, x_user_id))


@router.get("/resume/docx", summary="Export resume as DOCX")
async def export_resume_docx(
    lang: str | None = Query(default=None, description="Language code (e.g., en, pt)"),
    x_user_id: str | None = Header(default=None),
    service: ExportService = Depends(get_export_service),
) -> Response:
    query = ExportQuery(format=ExportFormat.DOCX, language=lang)
    return artifact_response(await service.export(query, x_user_id))


@router.get("/resume/latex", summary="Export resume as LaTeX source")
async def export_resume_latex(
    template: str | None = Query(default=None, description="simple or moderncv"),
    lang: str | None = Query(default=None, description="Language code (e.g., en, pt)"),
    x_user_id: str | None = Header(default=None),
    service: ExportService = Depends(get_export_service),
) -> Response:
    query = ExportQuery(format=ExportFormat.LATEX, template=template, language=lang)
    return artifact_response(await service.export(query, x_user_id))


@router.get("/resume/json", summary="Export resume as JSON")
async def export_resume_json(
    template: str | None = Query(default=None, description="jsonresume or portable"),
    x_user_id: str | None = Header(default=None),
    service: ExportService = Depends(get_export_service),
) -> Response:
    query = ExportQuery(format=ExportFormat.JSON, template=template)
    return artifact_response(await service.export(query, x_user_id))


def register_exception_handlers(app: FastAPI) -> None:
    """Translate export errors into HTTP responses."""

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(Backpressure)
    async def handle_backpressure(request: Request, exc: Backpressure) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Export capacity exhausted. Please retry shortly."},
            headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))},
        )

    @app.exception_handler(RenderTimeoutError)
    async def handle_timeout(request: Request, exc: RenderTimeoutError) -> JSONResponse:
        logger.error("Export timed out", path=request.url.path, operation=exc.operation)
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT, content={"detail": GENERIC_FAILURE}
        )

    @app.exception_handler(ExportError)
    async def handle_export_error(request: Request, exc: ExportError) -> JSONResponse:
        logger.error(
            "Export failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": GENERIC_FAILURE}
        )
