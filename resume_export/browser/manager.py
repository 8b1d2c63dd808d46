"""Browser session manager."""

import asyncio
from enum import Enum
from typing import Any

from resume_export.browser.surface import (
    BrowserHandle,
    BrowserLauncher,
    EngineDisconnectedError,
    EngineError,
    RenderSurface,
)
from resume_export.errors import RenderError, SessionCrashError
from resume_export.utils.logging import get_logger

logger = get_logger(__name__)


class SessionState(str, Enum):
    """Lifecycle of the shared browser session."""

    UNINITIALIZED = "uninitialized"
    LAUNCHING = "launching"
    ACTIVE = "active"
    CRASHED = "crashed"
    CLOSED = "closed"


class BrowserSessionManager:
    """
    Owns the one browser engine of this process.

    The engine is launched lazily on the first acquire and relaunched on the
    acquire after a crash. Callers only ever see render surfaces; the engine
    handle itself never leaves this class.
    """

    def __init__(self, launcher: BrowserLauncher, close_timeout: float = 5.0) -> None:
        self._launcher = launcher
        self._close_timeout = close_timeout
        self._browser: BrowserHandle | None = None
        self._state = SessionState.UNINITIALIZED
        self._init_lock = asyncio.Lock()
        self._launch_task: asyncio.Task[BrowserHandle] | None = None
        self._live: set[RenderSurface] = set()
        self.launch_count = 0
        self.acquired_total = 0
        self.released_total = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def live_surfaces(self) -> int:
        """Number of surfaces acquired and not yet released."""
        return len(self._live)

    @property
    def browser_connected(self) -> bool:
        """Whether the engine process behind the session is still reachable."""
        return self._browser is not None and self._browser.is_connected

    async def initialize(self) -> None:
        """Prepare the manager. The engine itself starts on first use."""
        if self._state == SessionState.CLOSED:
            self._state = SessionState.UNINITIALIZED
        logger.info("Browser session manager initialized", state=self._state.value)

    async def acquire(self) -> RenderSurface:
        """
        Open a new isolated render surface.

        Returns:
            A surface owned exclusively by the caller until release
        """
        browser = await self._ensure_browser()

        try:
            surface = await browser.new_surface()
        except EngineDisconnectedError as e:
            if self.browser_connected:
                logger.warning("Surface connection failed, browser still connected", error=str(e))
                raise RenderError(f"Failed to open surface: {e}") from e
            self.mark_crashed(str(e))
            raise SessionCrashError(f"Browser unreachable while opening surface: {e}") from e

        self._live.add(surface)
        self.acquired_total += 1
        logger.debug("Surface acquired", live=len(self._live))
        return surface

    async def release(self, surface: RenderSurface) -> None:
        """Close a surface. Safe to call more than once; never raises."""
        if surface not in self._live:
            logger.debug("Surface already released")
            return

        self._live.discard(surface)
        self.released_total += 1

        try:
            await asyncio.wait_for(surface.close(), timeout=self._close_timeout)
        except TimeoutError:
            logger.warning("Surface close timed out, abandoning it", timeout=self._close_timeout)
        except EngineError as e:
            logger.warning("Error closing surface", error=str(e))

        logger.debug("Surface released", live=len(self._live))

    def mark_crashed(self, reason: str) -> None:
        """Record that the engine is unreachable; the next acquire relaunches it."""
        if self._state == SessionState.ACTIVE:
            self._state = SessionState.CRASHED
            logger.error("Browser session crashed", reason=reason)

    async def shutdown(self) -> None:
        """Close every live surface and the engine."""
        logger.info("Shutting down browser session", live_surfaces=len(self._live))

        for surface in list(self._live):
            await self.release(surface)

        async with self._init_lock:
            await self._discard_browser()
            self._state = SessionState.CLOSED

        logger.info("Browser session closed")

    async def _ensure_browser(self) -> BrowserHandle:
        browser = self._browser
        if self._state == SessionState.ACTIVE and browser is not None and browser.is_connected:
            return browser

        async with self._init_lock:
            if self._state == SessionState.CLOSED:
                raise RuntimeError("Browser session manager is shut down")

            browser = self._browser
            if self._state == SessionState.ACTIVE and browser is not None and browser.is_connected:
                return browser

            if self._launch_task is None:
                if browser is not None:
                    logger.warning("Browser session lost, relaunching", state=self._state.value)
                    await self._discard_browser()
                self._state = SessionState.LAUNCHING
                self._launch_task = asyncio.create_task(self._launch())
            task = self._launch_task

        # Waiters share one launch; a waiter's deadline must not cancel it
        return await asyncio.shield(task)

    async def _launch(self) -> BrowserHandle:
        try:
            browser = await self._launcher.launch()
        except EngineError as e:
            self._state = SessionState.UNINITIALIZED
            raise SessionCrashError(f"Failed to launch browser: {e}") from e
        except BaseException:
            self._state = SessionState.UNINITIALIZED
            raise
        finally:
            self._launch_task = None

        if self._state == SessionState.CLOSED:
            await browser.close()
            raise RuntimeError("Browser session manager was shut down during launch")

        self._browser = browser
        self._state = SessionState.ACTIVE
        self.launch_count += 1
        logger.info("Browser session active", launch_count=self.launch_count)
        return browser

    async def _discard_browser(self) -> None:
        browser, self._browser = self._browser, None
        if browser is None:
            return
        try:
            await asyncio.wait_for(browser.close(), timeout=self._close_timeout)
        except TimeoutError:
            logger.warning("Browser close timed out")
        except (EngineError, OSError) as e:
            logger.warning("Error closing browser", error=str(e))

    def stats(self) -> dict[str, Any]:
        return {
            "state": self._state.value,
            "launch_count": self.launch_count,
            "live_surfaces": len(self._live),
            "acquired_total": self.acquired_total,
            "released_total": self.released_total,
        }
