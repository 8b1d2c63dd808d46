"""Chrome DevTools Protocol (CDP) client and CDP-backed render surfaces."""

import asyncio
import base64
import json
from typing import Any

import httpx
import websockets
from websockets import ClientConnection

from resume_export.browser.surface import (
    ClipRect,
    EngineDisconnectedError,
    EngineError,
    EngineNavigationError,
    RenderSurface,
)
from resume_export.render import scripts
from resume_export.render.constants import MM_PER_INCH
from resume_export.render.urls import ValidatedUrl
from resume_export.utils.logging import get_logger

logger = get_logger(__name__)

MAX_MESSAGE_SIZE = 100 * 1024 * 1024


class CDPError(EngineError):
    """CDP protocol error."""

    pass


class CDPConnectionError(CDPError, EngineDisconnectedError):
    """The DevTools websocket is closed or could not be opened."""

    pass


class CDPNavigationError(CDPError, EngineNavigationError):
    """Page.navigate reported an error."""

    pass


async def discover_browser_ws_url(devtools_port: int, timeout: float = 10.0) -> str:
    """
    Poll the DevTools HTTP endpoint until the browser websocket is available.

    Args:
        devtools_port: Port Chrome was started with
        timeout: Give up after this many seconds

    Returns:
        The browser-level webSocketDebuggerUrl
    """
    url = f"http://127.0.0.1:{devtools_port}/json/version"
    loop = asyncio.get_running_loop()
    give_up_at = loop.time() + timeout

    async with httpx.AsyncClient(timeout=2.0) as client:
        while loop.time() < give_up_at:
            try:
                response = await client.get(url)
                if response.status_code == 200:
                    ws_url = response.json().get("webSocketDebuggerUrl")
                    if ws_url:
                        return str(ws_url)
            except httpx.TransportError:
                pass
            await asyncio.sleep(0.25)

    raise CDPConnectionError(f"DevTools endpoint not available after {timeout}s")


class CDPClient:
    """Client for one Chrome DevTools Protocol websocket."""

    def __init__(self, ws_url: str, command_timeout: float = 30.0) -> None:
        self.ws_url = ws_url
        self.command_timeout = command_timeout
        self._ws: ClientConnection | None = None
        self._message_id = 0
        self._pending_responses: dict[int, asyncio.Future[Any]] = {}
        self._receive_task: asyncio.Task[None] | None = None

    @property
    def connected(self) -> bool:
        return (
            self._ws is not None
            and self._receive_task is not None
            and not self._receive_task.done()
        )

    async def connect(self) -> None:
        """Open the websocket and start the message receiver."""
        logger.debug("Connecting to DevTools WebSocket", url=self.ws_url)
        try:
            self._ws = await websockets.connect(self.ws_url, max_size=MAX_MESSAGE_SIZE)
        except (OSError, websockets.WebSocketException) as e:
            raise CDPConnectionError(f"Failed to connect to {self.ws_url}: {e}") from e

        self._receive_task = asyncio.create_task(self._receive_messages())

    async def disconnect(self) -> None:
        """Disconnect from Chrome DevTools."""
        if self._receive_task:
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass
            self._receive_task = None

        if self._ws:
            await self._ws.close()
            self._ws = None

        self._fail_pending("CDP client disconnected")
        logger.debug("CDP disconnected", url=self.ws_url)

    async def _receive_messages(self) -> None:
        """Background task to receive WebSocket messages."""
        if not self._ws:
            return

        try:
            async for message in self._ws:
                data = json.loads(message)

                # Handle response to our command
                if "id" in data:
                    future = self._pending_responses.pop(data["id"], None)
                    if future is None or future.done():
                        continue
                    if "error" in data:
                        error_msg = data["error"].get("message", "Unknown error")
                        future.set_exception(CDPError(error_msg))
                    else:
                        future.set_result(data.get("result", {}))

                elif "method" in data:
                    logger.debug("CDP event", method=data["method"])

        except websockets.ConnectionClosed:
            logger.debug("WebSocket connection closed", url=self.ws_url)
        except Exception as e:
            logger.error("Error receiving CDP messages", error=str(e))
        finally:
            self._fail_pending("DevTools connection closed")

    def _fail_pending(self, reason: str) -> None:
        pending = list(self._pending_responses.values())
        self._pending_responses.clear()
        for future in pending:
            if not future.done():
                future.set_exception(CDPConnectionError(reason))

    async def send(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """
        Send a CDP command and wait for response.

        Args:
            method: CDP method name (e.g., "Page.navigate")
            params: Method parameters

        Returns:
            Command result
        """
        if not self.connected or self._ws is None:
            raise CDPConnectionError("Not connected to DevTools")

        self._message_id += 1
        msg_id = self._message_id

        message = {
            "id": msg_id,
            "method": method,
            "params": params or {},
        }

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending_responses[msg_id] = future

        try:
            await self._ws.send(json.dumps(message))
            logger.debug("CDP command sent", method=method, id=msg_id)
            return await asyncio.wait_for(future, timeout=self.command_timeout)
        except websockets.ConnectionClosed as e:
            raise CDPConnectionError(f"Connection closed while sending {method}") from e
        except TimeoutError as e:
            raise CDPError(f"Timeout waiting for response to {method}") from e
        finally:
            self._pending_responses.pop(msg_id, None)


class CDPRenderSurface(RenderSurface):
    """A page target inside its own browser context."""

    def __init__(
        self,
        page: CDPClient,
        browser: CDPClient,
        target_id: str,
        context_id: str,
    ) -> None:
        self._page = page
        self._browser = browser
        self.target_id = target_id
        self.context_id = context_id
        self._closed = False

    async def set_viewport(self, width: int, height: int, scale_factor: float) -> None:
        await self._page.send(
            "Emulation.setDeviceMetricsOverride",
            {
                "width": width,
                "height": height,
                "deviceScaleFactor": scale_factor,
                "mobile": False,
            },
        )

    async def navigate(self, url: ValidatedUrl) -> None:
        if not isinstance(url, ValidatedUrl):
            raise TypeError("navigate() only accepts a ValidatedUrl")

        await self._page.send("Page.enable")
        result = await self._page.send("Page.navigate", {"url": url.value})
        error_text = result.get("errorText")
        if error_text:
            raise CDPNavigationError(error_text)

        await self.wait_for_function(scripts.DOM_CONTENT_LOADED)

    async def wait_for_function(self, expression: str, poll_interval: float = 0.1) -> Any:
        while True:
            try:
                value = await self.evaluate(expression, await_promise=True)
            except CDPConnectionError:
                raise
            except CDPError as e:
                # Execution contexts are torn down while a page navigates
                logger.debug("Wait expression failed, retrying", error=str(e))
                value = None
            if value:
                return value
            await asyncio.sleep(poll_interval)

    async def evaluate(self, expression: str, await_promise: bool = False) -> Any:
        result = await self._page.send(
            "Runtime.evaluate",
            {
                "expression": expression,
                "returnByValue": True,
                "awaitPromise": await_promise,
            },
        )
        if "exceptionDetails" in result:
            details = result["exceptionDetails"]
            message = details.get("exception", {}).get("description") or details.get("text")
            raise CDPError(f"Script evaluation failed: {message}")
        return result.get("result", {}).get("value")

    async def set_content(self, html: str) -> None:
        tree = await self._page.send("Page.getFrameTree")
        frame_id = tree["frameTree"]["frame"]["id"]
        await self._page.send("Page.setDocumentContent", {"frameId": frame_id, "html": html})
        await self.wait_for_function(scripts.DOM_CONTENT_LOADED)

    async def screenshot(self, clip: ClipRect | None = None) -> bytes:
        params: dict[str, Any] = {"format": "png", "captureBeyondViewport": True}
        if clip is not None:
            params["clip"] = {
                "x": clip.x,
                "y": clip.y,
                "width": clip.width,
                "height": clip.height,
                "scale": 1,
            }
        result = await self._page.send("Page.captureScreenshot", params)
        return base64.b64decode(result.get("data", ""))

    async def print_pdf(self, width_mm: float, height_mm: float) -> bytes:
        result = await self._page.send(
            "Page.printToPDF",
            {
                "paperWidth": width_mm / MM_PER_INCH,
                "paperHeight": height_mm / MM_PER_INCH,
                "marginTop": 0,
                "marginBottom": 0,
                "marginLeft": 0,
                "marginRight": 0,
                "printBackground": True,
                "preferCSSPageSize": False,
                "pageRanges": "1",
            },
        )
        return base64.b64decode(result.get("data", ""))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        try:
            await self._page.disconnect()
        finally:
            if self._browser.connected:
                await self._browser.send("Target.closeTarget", {"targetId": self.target_id})
                await self._browser.send(
                    "Target.disposeBrowserContext", {"browserContextId": self.context_id}
                )
            logger.debug("Surface closed", target_id=self.target_id)
