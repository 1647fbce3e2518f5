"""
Browser Controller - Playwright-based browser automation
"""
import asyncio
from pathlib import Path
from typing import Optional, List, Dict, Any, Sequence, Tuple
from datetime import datetime

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from .driver import BaseDriver
from ..config import settings
from ..errors import DriverTimeout, DriverUnavailable, ElementNotFound
from ..models.device import DeviceProfile
from ..models.observation import Geometry, PageMetrics


PAGE_METRICS_JS = """
() => ({
    viewportWidth: window.innerWidth,
    viewportHeight: window.innerHeight,
    scrollWidth: Math.max(document.body.scrollWidth, document.documentElement.scrollWidth),
    scrollHeight: Math.max(document.body.scrollHeight, document.documentElement.scrollHeight)
})
"""

GRID_COLUMNS_JS = """
(el) => {
    const style = window.getComputedStyle(el);
    if (style.display.includes('grid')) {
        const cols = style.gridTemplateColumns.split(' ').filter(Boolean).length;
        if (cols > 0) return cols;
    }
    const rows = {};
    for (const child of el.children) {
        const rect = child.getBoundingClientRect();
        if (rect.width === 0 || rect.height === 0) continue;
        const top = Math.round(rect.top);
        rows[top] = (rows[top] || 0) + 1;
    }
    const counts = Object.values(rows);
    return counts.length ? Math.max(...counts) : null;
}
"""


class BrowserLauncher:
    """
    Owns the Playwright instance and one browser for a whole run.
    Hands out drivers that each live in a fresh, isolated context.
    """

    def __init__(self, headless: bool = None):
        self.headless = settings.BROWSER_HEADLESS if headless is None else headless
        self.playwright = None
        self.browser: Optional[Browser] = None

    async def start(self):
        """Start Playwright and launch Chromium."""
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(headless=self.headless)

    async def stop(self):
        """Close the browser and stop Playwright."""
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()

    async def new_driver(self, device: DeviceProfile) -> "BrowserController":
        """
        Open an isolated context emulating a device.

        Args:
            device: Device profile to emulate

        Returns:
            Started BrowserController
        """
        if self.browser is None:
            raise DriverUnavailable("Browser has not been started")
        controller = BrowserController(self.browser)
        await controller.start(device)
        return controller


class BrowserController(BaseDriver):
    """
    Playwright-based driver bound to one browser context.
    Handles navigation, element observation and state capture.
    """

    def __init__(self, browser: Browser):
        self.browser = browser
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.device: Optional[DeviceProfile] = None
        self.console_logs: List[Dict] = []

    async def start(self, device: DeviceProfile):
        """
        Create the browsing context.

        Args:
            device: Device profile whose viewport, scale and input to emulate
        """
        self.device = device
        try:
            self.context = await self.browser.new_context(
                viewport={'width': device.width, 'height': device.height},
                device_scale_factor=device.pixel_ratio,
                is_mobile=device.touch and device.is_mobile,
                has_touch=device.touch,
            )
            self.page = await self.context.new_page()
        except PlaywrightError as e:
            raise DriverUnavailable(f"Could not open browser context: {e}") from e

        # Set up console log capture
        self.page.on("console", self._handle_console)

        # Set timeout
        self.page.set_default_timeout(settings.BROWSER_TIMEOUT)

    async def stop(self):
        """Close the context and clean up resources."""
        if self.context:
            try:
                await self.context.close()
            except PlaywrightError:
                pass  # browser already gone
            self.context = None
            self.page = None

    async def navigate(self, path: str, timeout_ms: Optional[int] = None):
        """
        Navigate to a path.

        Args:
            path: Path relative to settings.BASE_URL, or an absolute URL
            timeout_ms: Navigation timeout
        """
        timeout_ms = timeout_ms or settings.NAVIGATION_TIMEOUT
        page = self._require_page()
        try:
            await page.goto(settings.url(path), wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            raise DriverTimeout(f"navigation to {path}", timeout_ms) from None
        except PlaywrightError as e:
            raise DriverUnavailable(f"Navigation to {path} failed: {e}") from e

    async def settle(self, timeout_ms: Optional[int] = None):
        """Wait for network idle plus the configured settle delay."""
        timeout_ms = timeout_ms or settings.NAVIGATION_TIMEOUT
        page = self._require_page()
        try:
            await page.wait_for_load_state("networkidle", timeout=timeout_ms)
            await page.wait_for_timeout(settings.SETTLE_DELAY_MS)
        except PlaywrightTimeoutError:
            raise DriverTimeout("network idle", timeout_ms) from None
        except PlaywrightError as e:
            raise DriverUnavailable(f"Page closed while settling: {e}") from e

    async def locate(self, selector: str) -> Any:
        page = self._require_page()
        try:
            handle = await page.query_selector(selector)
        except PlaywrightError as e:
            self._raise_if_closed(e)
            raise ElementNotFound(selector) from e
        if handle is None:
            raise ElementNotFound(selector)
        return handle

    async def locate_all(self, selector: str) -> List[Any]:
        page = self._require_page()
        try:
            handles = await page.query_selector_all(selector)
        except PlaywrightError as e:
            self._raise_if_closed(e)
            raise ElementNotFound(selector) from e
        if not handles:
            raise ElementNotFound(selector)
        return handles

    async def observe_geometry(self, handle: Any) -> Optional[Geometry]:
        try:
            box = await handle.bounding_box()
        except PlaywrightError as e:
            self._raise_if_closed(e)
            return None
        if not box:
            return None
        return Geometry(x=box["x"], y=box["y"], width=box["width"], height=box["height"])

    async def is_visible(self, handle: Any) -> bool:
        try:
            return await handle.is_visible()
        except PlaywrightError as e:
            self._raise_if_closed(e)
            return False  # detached between locate and check

    async def text_of(self, handle: Any) -> Optional[str]:
        try:
            text = await handle.text_content()
        except PlaywrightError as e:
            self._raise_if_closed(e)
            return None
        return text.strip() if text else None

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """
        Execute JavaScript in the page context.

        Args:
            script: JavaScript function source
            arg: Optional argument passed to the function

        Returns:
            Result of the script execution
        """
        page = self._require_page()
        try:
            return await page.evaluate(script, arg)
        except PlaywrightError as e:
            raise DriverUnavailable(f"Script evaluation failed: {e}") from e

    async def wait_for(self, selectors: Sequence[str], timeout_ms: int) -> str:
        """
        Wait until any of the selectors is visible.

        Args:
            selectors: Candidate selectors
            timeout_ms: Upper bound on the wait

        Returns:
            The selector that became visible first
        """
        page = self._require_page()
        tasks = {
            asyncio.ensure_future(
                page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
            ): selector
            for selector in selectors
        }
        pending = set(tasks)
        closed = None
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    error = task.exception()
                    if error is None:
                        return tasks[task]
                    if not isinstance(error, PlaywrightTimeoutError):
                        closed = error
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if closed is not None and page.is_closed():
            raise DriverUnavailable(f"Page closed while waiting: {closed}")
        raise DriverTimeout(" or ".join(selectors), timeout_ms)

    async def fill(self, handle: Any, text: str):
        try:
            await handle.fill(text)
        except PlaywrightTimeoutError:
            raise DriverTimeout("input to accept text", settings.BROWSER_TIMEOUT) from None
        except PlaywrightError as e:
            raise DriverUnavailable(f"Fill failed: {e}") from e

    async def click(self, handle: Any):
        try:
            await handle.click()
        except PlaywrightTimeoutError:
            raise DriverTimeout("element to be clickable", settings.BROWSER_TIMEOUT) from None
        except PlaywrightError as e:
            raise DriverUnavailable(f"Click failed: {e}") from e

    async def screenshot(self, path: str, full_page: bool = False) -> str:
        """
        Take a screenshot.

        Args:
            path: Path to save the screenshot
            full_page: Capture full page or just viewport

        Returns:
            Path to the saved screenshot
        """
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        try:
            await self._require_page().screenshot(path=path, full_page=full_page)
        except PlaywrightError as e:
            raise DriverUnavailable(f"Screenshot failed: {e}") from e
        return path

    async def content(self) -> str:
        try:
            return await self._require_page().content()
        except PlaywrightError as e:
            raise DriverUnavailable(f"Could not read DOM: {e}") from e

    def current_url(self) -> str:
        return self._require_page().url

    def viewport(self) -> Tuple[int, int]:
        size = self._require_page().viewport_size
        if size:
            return size["width"], size["height"]
        return self.device.width, self.device.height

    async def page_metrics(self) -> PageMetrics:
        metrics = await self.evaluate(PAGE_METRICS_JS)
        return PageMetrics(
            viewport_width=metrics["viewportWidth"],
            viewport_height=metrics["viewportHeight"],
            scroll_width=metrics["scrollWidth"],
            scroll_height=metrics["scrollHeight"],
        )

    async def grid_column_count(self, selectors: Sequence[str]) -> Optional[int]:
        grid = await self.match_first(selectors)
        if grid is None or not grid.observation.visible:
            return None
        try:
            return await grid.handle.evaluate(GRID_COLUMNS_JS)
        except PlaywrightError as e:
            self._raise_if_closed(e)
            return None

    def get_console_logs(self) -> List[Dict]:
        """Get captured console logs."""
        return self.console_logs.copy()

    def _handle_console(self, message):
        """Handle console messages."""
        self.console_logs.append({
            "timestamp": datetime.now().isoformat(),
            "type": message.type,
            "text": message.text,
        })

    def _require_page(self) -> Page:
        if self.page is None or self.page.is_closed():
            raise DriverUnavailable("Page is not open")
        return self.page

    def _raise_if_closed(self, error: Exception):
        if self.page is None or self.page.is_closed():
            raise DriverUnavailable(f"Page closed: {error}") from error
