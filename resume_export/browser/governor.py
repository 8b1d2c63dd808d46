"""Concurrency ceiling and deadlines around the shared browser session."""

import asyncio
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from resume_export.browser.manager import BrowserSessionManager
from resume_export.browser.surface import ClipRect, EngineDisconnectedError, RenderSurface
from resume_export.config import Settings
from resume_export.errors import (
    Backpressure,
    RenderError,
    RenderTimeoutError,
    SessionCrashError,
)
from resume_export.models import Deadline, RenderRequest
from resume_export.render.constants import Viewport
from resume_export.render.urls import ValidatedUrl
from resume_export.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Governor:
    """
    Gatekeeper for every use of the browser session.

    At most ``ceiling`` surfaces are open at once. Requests beyond that wait
    in a queue of at most ``queue_depth`` entries and are rejected with
    Backpressure once it is full. Every engine call runs under the request's
    deadline.
    """

    def __init__(
        self,
        manager: BrowserSessionManager,
        ceiling: int,
        queue_depth: int,
    ) -> None:
        if ceiling < 1:
            raise ValueError("ceiling must be at least 1")
        self._manager = manager
        self.ceiling = ceiling
        self.queue_depth = queue_depth
        self._semaphore = asyncio.BoundedSemaphore(ceiling)
        self._active = 0
        self._waiting = 0
        self.peak_active = 0
        self.rejected_total = 0
        self.timed_out_total = 0

    @classmethod
    def from_settings(cls, manager: BrowserSessionManager, settings: Settings) -> "Governor":
        return cls(
            manager,
            ceiling=settings.max_concurrent_surfaces,
            queue_depth=settings.effective_queue_depth,
        )

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return self._waiting

    @asynccontextmanager
    async def surface(self, request: RenderRequest) -> AsyncIterator["GovernedSurface"]:
        """
        Hold a render surface for the duration of the block.

        The surface is released when the block exits, whatever the reason.
        """
        await self._admit(request.deadline)
        self._active += 1
        self.peak_active = max(self.peak_active, self._active)

        try:
            raw = await self.run("acquire surface", self._manager.acquire(), request.deadline)
            try:
                yield GovernedSurface(raw, self, request.deadline)
            finally:
                await asyncio.shield(self._manager.release(raw))
        finally:
            self._active -= 1
            self._semaphore.release()

    async def _admit(self, deadline: Deadline) -> None:
        if deadline.expired:
            self.timed_out_total += 1
            raise RenderTimeoutError("admission", 0.0)

        if not self._semaphore.locked():
            # Never suspends while a permit is free
            await self._semaphore.acquire()
            return

        if self._waiting >= self.queue_depth:
            self.rejected_total += 1
            logger.warning(
                "Render queue full, rejecting request",
                active=self._active,
                waiting=self._waiting,
                queue_depth=self.queue_depth,
            )
            raise Backpressure()

        budget = deadline.remaining()
        self._waiting += 1
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=budget)
        except TimeoutError as e:
            self.timed_out_total += 1
            raise RenderTimeoutError("queue wait", budget) from e
        finally:
            self._waiting -= 1

    async def run(
        self,
        operation: str,
        awaitable: Coroutine[Any, Any, T],
        deadline: Deadline,
        cap: float | None = None,
    ) -> T:
        """
        Await an engine call within the remaining request budget.

        Args:
            operation: Name used in errors and logs
            awaitable: The engine coroutine
            deadline: Request deadline
            cap: Optional shorter limit for this call alone

        Returns:
            The coroutine's result
        """
        budget = deadline.remaining()
        if cap is not None:
            budget = min(budget, cap)
        if budget <= 0:
            awaitable.close()
            self.timed_out_total += 1
            raise RenderTimeoutError(operation, 0.0)

        try:
            return await asyncio.wait_for(awaitable, timeout=budget)
        except TimeoutError as e:
            self.timed_out_total += 1
            raise RenderTimeoutError(operation, budget) from e
        except EngineDisconnectedError as e:
            if self._manager.browser_connected:
                # Only this surface's connection is gone
                logger.warning(
                    "Surface connection lost, browser still connected",
                    operation=operation,
                    error=str(e),
                )
                raise RenderError(f"Surface lost during {operation}: {e}") from e
            self._manager.mark_crashed(str(e))
            raise SessionCrashError(f"Browser unreachable during {operation}") from e

    def stats(self) -> dict[str, Any]:
        return {
            "ceiling": self.ceiling,
            "queue_depth": self.queue_depth,
            "active": self._active,
            "waiting": self._waiting,
            "peak_active": self.peak_active,
            "rejected_total": self.rejected_total,
            "timed_out_total": self.timed_out_total,
        }


class GovernedSurface:
    """A render surface whose every call is bounded by the request deadline."""

    def __init__(self, surface: RenderSurface, governor: Governor, deadline: Deadline) -> None:
        self._surface = surface
        self._governor = governor
        self.deadline = deadline

    async def set_viewport(self, viewport: Viewport) -> None:
        await self._governor.run(
            "set viewport",
            self._surface.set_viewport(viewport.width, viewport.height, viewport.scale_factor),
            self.deadline,
        )

    async def navigate(self, url: ValidatedUrl) -> None:
        await self._governor.run("navigate", self._surface.navigate(url), self.deadline)

    async def wait_for_function(
        self,
        expression: str,
        operation: str,
        timeout: float | None = None,
    ) -> Any:
        return await self._governor.run(
            operation, self._surface.wait_for_function(expression), self.deadline, cap=timeout
        )

    async def evaluate(
        self,
        expression: str,
        operation: str = "evaluate",
        await_promise: bool = False,
    ) -> Any:
        return await self._governor.run(
            operation, self._surface.evaluate(expression, await_promise), self.deadline
        )

    async def set_content(self, html: str) -> None:
        await self._governor.run("set content", self._surface.set_content(html), self.deadline)

    async def screenshot(self, clip: ClipRect | None = None) -> bytes:
        return await self._governor.run("screenshot", self._surface.screenshot(clip), self.deadline)

    async def print_pdf(self, width_mm: float, height_mm: float) -> bytes:
        return await self._governor.run(
            "print pdf", self._surface.print_pdf(width_mm, height_mm), self.deadline
        )
