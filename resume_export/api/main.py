"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resume_export import __version__
from resume_export.api.routes import register_exception_handlers, router
from resume_export.browser import BrowserLauncher, BrowserSessionManager, ChromeLauncher, Governor
from resume_export.config import Settings, settings
from resume_export.projection import HttpProjectionProvider, ResumeProjectionProvider
from resume_export.render.pipeline import RenderPipeline
from resume_export.service import ExportService
from resume_export.utils.logging import AccessLogMiddleware, get_logger, setup_logging

# Setup logging first
setup_logging()
logger = get_logger(__name__)


def create_app(
    app_settings: Settings | None = None,
    launcher: BrowserLauncher | None = None,
    provider: ResumeProjectionProvider | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        app_settings: Settings to use instead of the environment-derived ones
        launcher: Browser launcher; headless Chrome when omitted
        provider: Projection source; the HTTP projection service when omitted
    """
    config = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown events."""
        logger.info("Starting Resume Export API", version=__version__)

        manager = BrowserSessionManager(
            launcher or ChromeLauncher(config),
            close_timeout=config.surface_close_timeout_seconds,
        )
        await manager.initialize()
        governor = Governor.from_settings(manager, config)
        logger.info(
            "Render governor ready",
            ceiling=governor.ceiling,
            queue_depth=governor.queue_depth,
        )

        projections = provider or HttpProjectionProvider.from_settings(config)

        app.state.session_manager = manager
        app.state.governor = governor
        app.state.export_service = ExportService(
            RenderPipeline(governor, config), projections, config
        )

        yield

        # Cleanup
        logger.info("Shutting down...")
        await manager.shutdown()
        await projections.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Resume Export API",
        description="Resume PDF, banner, DOCX, LaTeX and JSON exports",
        version=__version__,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add access logging middleware
    app.add_middleware(AccessLogMiddleware)

    app.include_router(router)
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check() -> dict[str, object]:
        """Health check endpoint with browser session and governor stats."""
        return {
            "status": "healthy",
            "session": app.state.session_manager.stats(),
            "governor": app.state.governor.stats(),
        }

    return app


app = create_app()
