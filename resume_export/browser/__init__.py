"""Browser management module."""

from resume_export.browser.cdp import CDPClient, CDPError, CDPRenderSurface
from resume_export.browser.chrome import ChromeBrowser, ChromeLauncher, ChromeProcess
from resume_export.browser.governor import GovernedSurface, Governor
from resume_export.browser.manager import BrowserSessionManager, SessionState
from resume_export.browser.surface import (
    BrowserHandle,
    BrowserLauncher,
    ClipRect,
    EngineDisconnectedError,
    EngineError,
    EngineNavigationError,
    RenderSurface,
)

__all__ = [
    "CDPClient",
    "CDPError",
    "CDPRenderSurface",
    "ChromeBrowser",
    "ChromeLauncher",
    "ChromeProcess",
    "GovernedSurface",
    "Governor",
    "BrowserSessionManager",
    "SessionState",
    "BrowserHandle",
    "BrowserLauncher",
    "ClipRect",
    "EngineDisconnectedError",
    "EngineError",
    "EngineNavigationError",
    "RenderSurface",
]
