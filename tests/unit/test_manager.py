"""Tests for the browser session manager."""

import asyncio

import pytest

from resume_export.browser import BrowserSessionManager, SessionState
from resume_export.browser.surface import EngineDisconnectedError, EngineError
from resume_export.errors import RenderError, SessionCrashError
from tests.fakes import FakeBrowser, FakeLauncher, FakeSurface


@pytest.mark.asyncio
async def test_lazy_launch_on_first_acquire(
    manager: BrowserSessionManager, launcher: FakeLauncher
) -> None:
    """Test the engine starts on first acquire, not on initialize."""
    await manager.initialize()
    assert launcher.launches == 0
    assert manager.state == SessionState.UNINITIALIZED

    surface = await manager.acquire()

    assert launcher.launches == 1
    assert manager.state == SessionState.ACTIVE
    assert manager.live_surfaces == 1
    await manager.release(surface)


@pytest.mark.asyncio
async def test_concurrent_first_use_launches_once() -> None:
    """Test concurrent first acquires share a single launch."""
    launcher = FakeLauncher(launch_delay=0.05)
    manager = BrowserSessionManager(launcher)

    surfaces = await asyncio.gather(*(manager.acquire() for _ in range(10)))

    assert launcher.launches == 1
    assert manager.launch_count == 1
    assert len({id(s) for s in surfaces}) == 10

    for surface in surfaces:
        await manager.release(surface)
    assert manager.live_surfaces == 0


@pytest.mark.asyncio
async def test_surfaces_are_never_reused(manager: BrowserSessionManager) -> None:
    first = await manager.acquire()
    await manager.release(first)
    second = await manager.acquire()

    assert first is not second
    await manager.release(second)


@pytest.mark.asyncio
async def test_release_is_idempotent(
    manager: BrowserSessionManager, launcher: FakeLauncher
) -> None:
    """Test releasing twice closes once and never raises."""
    surface = await manager.acquire()

    await manager.release(surface)
    await manager.release(surface)

    assert launcher.browser.closed_surfaces == 1
    assert manager.released_total == 1
    assert manager.acquired_total == 1


@pytest.mark.asyncio
async def test_release_swallows_close_errors(manager: BrowserSessionManager) -> None:
    surface = await manager.acquire()

    async def failing_close() -> None:
        raise EngineError("target already gone")

    surface.close = failing_close  # type: ignore[method-assign]

    await manager.release(surface)

    assert manager.live_surfaces == 0


@pytest.mark.asyncio
async def test_release_abandons_hung_close(launcher: FakeLauncher) -> None:
    """Test a close that never returns is bounded by the close timeout."""
    manager = BrowserSessionManager(launcher, close_timeout=0.05)
    surface = await manager.acquire()

    async def hung_close() -> None:
        await asyncio.Event().wait()

    surface.close = hung_close  # type: ignore[method-assign]

    await asyncio.wait_for(manager.release(surface), timeout=1.0)

    assert manager.live_surfaces == 0


@pytest.mark.asyncio
async def test_relaunch_after_crash(
    manager: BrowserSessionManager, launcher: FakeLauncher
) -> None:
    """Test the acquire after a crash replaces the engine."""
    surface = await manager.acquire()
    await manager.release(surface)
    first_browser = launcher.browser

    manager.mark_crashed("renderer died")
    assert manager.state == SessionState.CRASHED

    surface = await manager.acquire()

    assert launcher.launches == 2
    assert first_browser.closed
    assert launcher.browser is not first_browser
    assert manager.state == SessionState.ACTIVE
    await manager.release(surface)


@pytest.mark.asyncio
async def test_disconnected_engine_is_relaunched(
    manager: BrowserSessionManager, launcher: FakeLauncher
) -> None:
    """Test a silently disconnected engine is noticed on acquire."""
    await manager.release(await manager.acquire())
    launcher.browser.connected = False

    surface = await manager.acquire()

    assert launcher.launches == 2
    await manager.release(surface)


@pytest.mark.asyncio
async def test_new_surface_disconnect_marks_crash() -> None:
    """Test a disconnect while opening a surface is a session crash."""

    class VanishingBrowser(FakeBrowser):
        async def new_surface(self):  # type: ignore[override]
            self.connected = False
            return await super().new_surface()

    class VanishingLauncher(FakeLauncher):
        async def launch(self) -> FakeBrowser:
            self.launches += 1
            browser = VanishingBrowser()
            self.browsers.append(browser)
            return browser

    vanishing = VanishingLauncher()
    manager = BrowserSessionManager(vanishing)

    with pytest.raises(SessionCrashError):
        await manager.acquire()

    assert manager.state == SessionState.CRASHED
    assert vanishing.launches == 1


@pytest.mark.asyncio
async def test_new_surface_page_failure_keeps_session(
    manager: BrowserSessionManager, launcher: FakeLauncher
) -> None:
    """Test a page socket failure on open fails that acquire only."""
    await manager.release(await manager.acquire())

    async def refuse_page() -> FakeSurface:
        raise EngineDisconnectedError("page websocket refused")

    launcher.browser.new_surface = refuse_page  # type: ignore[method-assign]

    with pytest.raises(RenderError):
        await manager.acquire()

    assert manager.state == SessionState.ACTIVE
    assert launcher.launches == 1
    assert not launcher.browser.closed


@pytest.mark.asyncio
async def test_launch_failure_is_a_session_crash() -> None:
    class BrokenLauncher(FakeLauncher):
        async def launch(self) -> FakeBrowser:
            self.launches += 1
            raise EngineError("chromium binary not found")

    launcher = BrokenLauncher()
    manager = BrowserSessionManager(launcher)

    with pytest.raises(SessionCrashError):
        await manager.acquire()
    assert manager.state == SessionState.UNINITIALIZED

    # The next acquire tries again
    with pytest.raises(SessionCrashError):
        await manager.acquire()
    assert launcher.launches == 2


@pytest.mark.asyncio
async def test_shutdown_closes_everything(
    manager: BrowserSessionManager, launcher: FakeLauncher
) -> None:
    await manager.acquire()
    await manager.acquire()

    await manager.shutdown()

    assert manager.live_surfaces == 0
    assert launcher.browser.closed
    assert launcher.browser.closed_surfaces == 2
    assert manager.state == SessionState.CLOSED

    with pytest.raises(RuntimeError):
        await manager.acquire()


@pytest.mark.asyncio
async def test_stats(manager: BrowserSessionManager) -> None:
    surface = await manager.acquire()

    stats = manager.stats()

    assert stats["state"] == "active"
    assert stats["live_surfaces"] == 1
    assert stats["launch_count"] == 1
    await manager.release(surface)
