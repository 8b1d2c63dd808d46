"""In-process fake browser engine and sample resume projections."""

import asyncio
from datetime import date
from typing import Any

from resume_export.browser import (
    BrowserHandle,
    BrowserLauncher,
    ClipRect,
    EngineDisconnectedError,
    EngineNavigationError,
    RenderSurface,
)
from resume_export.config import Settings
from resume_export.models import ResumeExportModel
from resume_export.render import scripts

FAKE_PDF = b"%PDF-1.7\n% fake\n"
FAKE_PNG = b"\x89PNG\r\n\x1a\nfake"

DEFAULT_EVALUATIONS: dict[str, Any] = {
    scripts.EXTRACT_STYLE_SNAPSHOT: {
        "stylesheets": ["http://localhost:3000/_next/static/app.css"],
        "inlineStyles": [".resume { color: var(--accent); }"],
        "markup": '<div id="resume-export" data-export-ready="true">Jane</div>',
        "cssVariables": {"--accent": "#ff0066"},
        "htmlAttributes": {"lang": "en", "data-theme": "dark"},
    },
    scripts.RESUME_CONTENT_HEIGHT: 2000,
    scripts.BANNER_BOUNDS: {"x": 0, "y": 0, "width": 1584, "height": 396},
}


class FakeSurface(RenderSurface):
    """Records every call; behaviour is scripted through its FakeBrowser."""

    def __init__(self, browser: "FakeBrowser") -> None:
        self.browser = browser
        self.calls: list[str] = []
        self.viewport: tuple[int, int, float] | None = None
        self.urls: list[str] = []
        self.content: str | None = None
        self.clip: ClipRect | None = None
        self.pdf_size: tuple[float, float] | None = None
        self.closed = False

    async def set_viewport(self, width: int, height: int, scale_factor: float) -> None:
        self.calls.append("set_viewport")
        self.viewport = (width, height, scale_factor)

    async def navigate(self, url: Any) -> None:
        self.calls.append("navigate")
        self.urls.append(url.value)
        if self.browser.crash_on_navigate:
            self.browser.connected = False
            raise EngineDisconnectedError("browser went away")
        if self.browser.drop_surface_on_navigate:
            raise EngineDisconnectedError("page websocket closed")
        if self.browser.navigation_error:
            raise EngineNavigationError(self.browser.navigation_error)
        if self.browser.navigate_delay:
            await asyncio.sleep(self.browser.navigate_delay)

    async def wait_for_function(self, expression: str, poll_interval: float = 0.1) -> Any:
        self.calls.append("wait_for_function")
        if expression in self.browser.hanging_waits:
            await asyncio.Event().wait()
        return True

    async def evaluate(self, expression: str, await_promise: bool = False) -> Any:
        self.calls.append("evaluate")
        self.browser.evaluated.append(expression)
        return self.browser.evaluations.get(expression)

    async def set_content(self, html: str) -> None:
        self.calls.append("set_content")
        self.content = html

    async def screenshot(self, clip: ClipRect | None = None) -> bytes:
        self.calls.append("screenshot")
        self.clip = clip
        return FAKE_PNG

    async def print_pdf(self, width_mm: float, height_mm: float) -> bytes:
        self.calls.append("print_pdf")
        self.pdf_size = (width_mm, height_mm)
        return FAKE_PDF

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.browser.closed_surfaces += 1


class FakeBrowser(BrowserHandle):
    def __init__(self) -> None:
        self.connected = True
        self.closed = False
        self.surfaces: list[FakeSurface] = []
        self.closed_surfaces = 0
        self.live_peak = 0
        self.evaluations: dict[str, Any] = dict(DEFAULT_EVALUATIONS)
        self.evaluated: list[str] = []
        self.hanging_waits: set[str] = set()
        self.navigation_error: str | None = None
        self.crash_on_navigate = False
        self.drop_surface_on_navigate = False
        self.navigate_delay = 0.0

    @property
    def is_connected(self) -> bool:
        return self.connected and not self.closed

    @property
    def live_surfaces(self) -> int:
        return len(self.surfaces) - self.closed_surfaces

    async def new_surface(self) -> FakeSurface:
        if not self.connected:
            raise EngineDisconnectedError("browser not connected")
        surface = FakeSurface(self)
        self.surfaces.append(surface)
        self.live_peak = max(self.live_peak, self.live_surfaces)
        return surface

    async def close(self) -> None:
        self.closed = True


class FakeLauncher(BrowserLauncher):
    """Hands out FakeBrowsers; ``configure`` is applied to each new one."""

    def __init__(self, launch_delay: float = 0.0, configure: Any = None) -> None:
        self.launch_delay = launch_delay
        self.configure = configure
        self.launches = 0
        self.browsers: list[FakeBrowser] = []

    @property
    def browser(self) -> FakeBrowser:
        return self.browsers[-1]

    async def launch(self) -> FakeBrowser:
        self.launches += 1
        if self.launch_delay:
            await asyncio.sleep(self.launch_delay)
        browser = FakeBrowser()
        if self.configure is not None:
            self.configure(browser)
        self.browsers.append(browser)
        return browser


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "max_concurrent_surfaces": 5,
        "request_timeout_seconds": 5.0,
        "surface_close_timeout_seconds": 1.0,
        "frontend_host": "frontend.internal",
        "frontend_port": 3000,
        "logo_allowed_hosts": ["cdn.example.com", "*.logos.example.org"],
    }
    values.update(overrides)
    return Settings(**values)


def build_projection(**overrides: Any) -> ResumeExportModel:
    data: dict[str, Any] = {
        "resume": {
            "id": "resume-1",
            "userId": "user-1",
            "title": "Backend Resume",
            "fullName": "Jane Doe",
            "jobTitle": "Senior Backend Engineer",
            "emailContact": "jane@example.com",
            "phone": "+1 555 0100",
            "location": "Lisbon",
            "summary": "Builds reliable services.",
        },
        "user": {"id": "user-1", "name": "Jane Doe", "email": "jane@example.com"},
        "experiences": [
            {
                "company": "Acme Corp",
                "position": "Backend Engineer",
                "startDate": date(2020, 1, 1),
                "isCurrent": True,
                "description": "Owns the billing platform.",
                "skills": ["Python", "PostgreSQL"],
            }
        ],
        "education": [
            {
                "institution": "University of Porto",
                "degree": "BSc",
                "field": "Computer Science",
                "startDate": date(2014, 9, 1),
                "endDate": date(2018, 6, 30),
            }
        ],
        "skills": [
            {"name": "Python", "level": 5},
            {"name": "Go", "level": 2},
        ],
        "languages": [{"name": "English", "level": "FLUENT"}],
    }
    data.update(overrides)
    return ResumeExportModel.model_validate(data)


def empty_projection() -> ResumeExportModel:
    return ResumeExportModel.model_validate(
        {
            "resume": {"id": "resume-2", "userId": "user-2"},
            "user": {"id": "user-2", "name": "Empty User"},
        }
    )

