"""Rendering environment capability and its headless Chromium implementation.

The orchestrator only talks to the two protocols below, so tests can drive
it with a fake that never starts a browser.
"""
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

class PdfOptions(BaseModel):
    format: str = "Letter"
    margin: str = "12mm"
    print_background: bool = Field(default=True, description="OSMD paints staff elements as backgrounds")

    def to_playwright(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "print_background": self.print_background,
            "margin": {"top": self.margin, "right": self.margin, "bottom": self.margin, "left": self.margin},
        }

class EnvironmentHandle(Protocol):
    def load(self, html: str) -> None: ...

    def wait_for_condition(self, expression: str, timeout_s: float) -> None:
        """Block until ``expression`` is truthy; raise builtin TimeoutError on expiry."""
        ...

    def evaluate(self, expression: str) -> Any: ...

    def capture_pdf(self, options: PdfOptions) -> bytes: ...

    def close(self) -> None: ...

class RenderingEngine(Protocol):
    def launch(self) -> EnvironmentHandle: ...

class ChromiumPage:
    """One Playwright driver + browser + page, owned by a single render."""

    def __init__(self, playwright, browser, page, load_timeout_s: float) -> None:
        self._playwright = playwright
        self._browser = browser
        self._page = page
        self._load_timeout_ms = load_timeout_s * 1000

    def load(self, html: str) -> None:
        self._page.set_content(html, wait_until="networkidle", timeout=self._load_timeout_ms)

    def wait_for_condition(self, expression: str, timeout_s: float) -> None:
        try:
            self._page.wait_for_function(expression, timeout=timeout_s * 1000)
        except PlaywrightTimeoutError as e:
            raise TimeoutError(f"condition not met within {timeout_s:g}s") from e

    def evaluate(self, expression: str) -> Any:
        return self._page.evaluate(expression)

    def capture_pdf(self, options: PdfOptions) -> bytes:
        return self._page.pdf(**options.to_playwright())

    def close(self) -> None:
        try:
            self._browser.close()
        finally:
            self._playwright.stop()

class PlaywrightEngine:
    """Launches a fresh headless Chromium per render; nothing is pooled."""

    def __init__(
        self,
        *,
        executable_path: Optional[str] = None,
        args: Optional[List[str]] = None,
        headless: bool = True,
        viewport: Optional[Dict[str, int]] = None,
        load_timeout_s: float = 30.0,
    ) -> None:
        self._executable_path = executable_path
        self._args = list(args or [])
        self._headless = headless
        self._viewport = viewport or {"width": 1200, "height": 1600}
        self._load_timeout_s = load_timeout_s

    def launch(self) -> ChromiumPage:
        playwright = sync_playwright().start()
        try:
            browser = playwright.chromium.launch(
                executable_path=self._executable_path,
                args=self._args,
                headless=self._headless,
            )
        except PlaywrightError:
            playwright.stop()
            raise
        try:
            page = browser.new_page(viewport=self._viewport)
        except PlaywrightError:
            browser.close()
            playwright.stop()
            raise
        return ChromiumPage(playwright, browser, page, self._load_timeout_s)

def engine_from_settings(settings) -> PlaywrightEngine:
    return PlaywrightEngine(
        executable_path=settings.chromium_executable_path,
        args=settings.chromium_args,
        headless=settings.chromium_headless,
        viewport={"width": settings.viewport_width, "height": settings.viewport_height},
        load_timeout_s=settings.render_timeout_s,
    )
