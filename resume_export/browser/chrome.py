"""Chrome process management."""

import asyncio
import shutil
import signal
import tempfile
from dataclasses import dataclass
from pathlib import Path

from resume_export.browser.cdp import (
    CDPClient,
    CDPConnectionError,
    CDPError,
    CDPRenderSurface,
    discover_browser_ws_url,
)
from resume_export.browser.surface import BrowserHandle, BrowserLauncher, RenderSurface
from resume_export.config import Settings
from resume_export.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ChromeProcess:
    """Represents a running Chrome process."""

    process: asyncio.subprocess.Process
    devtools_port: int
    user_data_dir: str
    ws_url: str | None = None

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def running(self) -> bool:
        return self.process.returncode is None


class ChromeBrowser(BrowserHandle):
    """A launched headless Chrome reachable over its browser-level CDP socket."""

    def __init__(self, chrome_process: ChromeProcess, client: CDPClient) -> None:
        self.chrome_process = chrome_process
        self.client = client

    @property
    def is_connected(self) -> bool:
        return self.chrome_process.running and self.client.connected

    def _page_ws_url(self, target_id: str) -> str:
        return f"ws://127.0.0.1:{self.chrome_process.devtools_port}/devtools/page/{target_id}"

    async def new_surface(self) -> RenderSurface:
        """Create an isolated browser context with one blank page target."""
        context = await self.client.send("Target.createBrowserContext", {"disposeOnDetach": True})
        context_id = context["browserContextId"]
        target_id: str | None = None

        try:
            target = await self.client.send(
                "Target.createTarget",
                {"url": "about:blank", "browserContextId": context_id},
            )
            target_id = target["targetId"]

            page = CDPClient(self._page_ws_url(target_id))
            await page.connect()
        except BaseException:
            # Includes cancellation by the governor's deadline
            if self.client.connected:
                try:
                    await asyncio.shield(
                        self.client.send(
                            "Target.disposeBrowserContext", {"browserContextId": context_id}
                        )
                    )
                except CDPError as e:
                    logger.warning("Failed to dispose browser context", error=str(e))
            raise

        logger.debug("Surface created", target_id=target_id, context_id=context_id)
        return CDPRenderSurface(page, self.client, target_id, context_id)

    async def close(self) -> None:
        try:
            await self.client.disconnect()
        finally:
            await terminate_process(self.chrome_process)


class ChromeLauncher(BrowserLauncher):
    """Launches the single headless Chrome used for exports."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _build_chrome_args(self, devtools_port: int, user_data_dir: str) -> list[str]:
        """Build Chrome command line arguments."""
        return [
            self.settings.chrome_binary,
            "--headless=new",
            f"--remote-debugging-port={devtools_port}",
            "--remote-debugging-address=127.0.0.1",
            f"--user-data-dir={user_data_dir}",
            # Disable features that interfere with automation
            "--no-first-run",
            "--no-default-browser-check",
            "--disable-background-networking",
            "--disable-client-side-phishing-detection",
            "--disable-default-apps",
            "--disable-extensions",
            "--disable-hang-monitor",
            "--disable-popup-blocking",
            "--disable-prompt-on-repost",
            "--disable-sync",
            "--disable-translate",
            "--metrics-recording-only",
            "--safebrowsing-disable-auto-update",
            # Performance
            "--disable-dev-shm-usage",
            "--disable-gpu",
            "--font-render-hinting=none",
            "--hide-scrollbars",
            "--mute-audio",
            "about:blank",
        ]

    async def launch(self) -> ChromeBrowser:
        """
        Launch Chrome and connect to its browser-level DevTools socket.

        Returns:
            ChromeBrowser handle
        """
        profile_base = Path(self.settings.chrome_user_data_base)
        profile_base.mkdir(parents=True, exist_ok=True)
        user_data_dir = tempfile.mkdtemp(prefix="chrome_export_", dir=profile_base)
        devtools_port = self.settings.devtools_port

        args = self._build_chrome_args(devtools_port, user_data_dir)

        logger.info(
            "Launching Chrome",
            binary=self.settings.chrome_binary,
            devtools_port=devtools_port,
            user_data_dir=user_data_dir,
        )

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            shutil.rmtree(user_data_dir, ignore_errors=True)
            raise CDPConnectionError(f"Failed to launch Chrome: {e}") from e

        chrome_process = ChromeProcess(
            process=process,
            devtools_port=devtools_port,
            user_data_dir=user_data_dir,
        )

        try:
            chrome_process.ws_url = await discover_browser_ws_url(
                devtools_port, timeout=self.settings.chrome_launch_timeout_seconds
            )
            if not chrome_process.running:
                raise CDPConnectionError(
                    f"Chrome exited during startup with code {process.returncode}"
                )
            client = CDPClient(chrome_process.ws_url)
            await client.connect()
        except BaseException:
            await terminate_process(chrome_process)
            raise

        logger.info("Chrome launched successfully", pid=chrome_process.pid)
        return ChromeBrowser(chrome_process, client)


async def terminate_process(chrome_process: ChromeProcess, grace_period: float = 1.0) -> None:
    """
    Terminate a Chrome process and remove its profile directory.

    Args:
        chrome_process: Process to stop
        grace_period: Seconds to wait after SIGTERM before SIGKILL
    """
    logger.info("Terminating Chrome", pid=chrome_process.pid)

    try:
        if chrome_process.running:
            chrome_process.process.send_signal(signal.SIGTERM)
            try:
                await asyncio.wait_for(chrome_process.process.wait(), timeout=grace_period)
            except TimeoutError:
                chrome_process.process.kill()
                await chrome_process.process.wait()
                logger.warning("Chrome required force kill", pid=chrome_process.pid)
    except ProcessLookupError:
        logger.debug("Chrome process already terminated", pid=chrome_process.pid)
    finally:
        shutil.rmtree(chrome_process.user_data_dir, ignore_errors=True)
        logger.debug("Cleaned up user data dir", path=chrome_process.user_data_dir)

