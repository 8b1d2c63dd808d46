"""Engine-neutral render surface interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from resume_export.render.urls import ValidatedUrl


class EngineError(Exception):
    """An operation inside the browser engine failed."""

    pass


class EngineDisconnectedError(EngineError):
    """The browser engine process is no longer reachable."""

    pass


class EngineNavigationError(EngineError):
    """The engine could not load the requested document."""

    pass


@dataclass(frozen=True)
class ClipRect:
    """Region of the page to capture, in CSS pixels."""

    x: float
    y: float
    width: float
    height: float


class RenderSurface(ABC):
    """
    One isolated browsing context, owned by a single export request.

    Implementations perform no timeout handling of their own; every call is
    bounded by the governor.
    """

    @abstractmethod
    async def set_viewport(self, width: int, height: int, scale_factor: float) -> None:
        """Resize the viewport and set the device pixel ratio."""

    @abstractmethod
    async def navigate(self, url: ValidatedUrl) -> None:
        """Load a URL and return once the DOM content has loaded."""

    @abstractmethod
    async def wait_for_function(self, expression: str, poll_interval: float = 0.1) -> Any:
        """Poll a script expression until it is truthy and return its value."""

    @abstractmethod
    async def evaluate(self, expression: str, await_promise: bool = False) -> Any:
        """Evaluate a script expression and return its JSON value."""

    @abstractmethod
    async def set_content(self, html: str) -> None:
        """Replace the current document with the given markup."""

    @abstractmethod
    async def screenshot(self, clip: ClipRect | None = None) -> bytes:
        """Capture a PNG of the page or of the clipped region."""

    @abstractmethod
    async def print_pdf(self, width_mm: float, height_mm: float) -> bytes:
        """Print the document to a single PDF page of the given size."""

    @abstractmethod
    async def close(self) -> None:
        """Close the browsing context. Must be safe to call more than once."""


class BrowserHandle(ABC):
    """A running browser engine that hands out isolated surfaces."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the engine process is still reachable."""

    @abstractmethod
    async def new_surface(self) -> RenderSurface:
        """Open a fresh isolated browsing context."""

    @abstractmethod
    async def close(self) -> None:
        """Shut the engine down."""


class BrowserLauncher(ABC):
    """Starts browser engine processes."""

    @abstractmethod
    async def launch(self) -> BrowserHandle:
        """Launch a browser and return a connected handle."""
