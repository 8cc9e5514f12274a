"""Headless Chromium rendering of HTML into PDF bytes via Playwright.

Every call starts its own driver and browser and tears both down before
returning, whether the page printed, timed out or crashed.
"""

import logging

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from invoicedesk.app.core.errors import RenderFailure, RenderTimeout

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1200, "height": 800}
PAGE_FORMAT = "A4"
PAGE_MARGIN = {"top": "0.5in", "right": "0.5in", "bottom": "0.5in", "left": "0.5in"}


class HeadlessPdfRenderer:
    def __init__(self, timeout_ms: int = 30000):
        self.timeout_ms = timeout_ms

    def render(self, html: str) -> bytes:
        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(headless=True)
                try:
                    page = browser.new_page(viewport=VIEWPORT)
                    page.set_content(html, wait_until="networkidle", timeout=self.timeout_ms)
                    return page.pdf(
                        format=PAGE_FORMAT,
                        margin=PAGE_MARGIN,
                        print_background=True,
                        prefer_css_page_size=False,
                    )
                finally:
                    browser.close()
        except PlaywrightTimeoutError as exc:
            logger.error("PDF rendering timed out after %sms", self.timeout_ms)
            raise RenderTimeout(
                f"Document did not finish loading within {self.timeout_ms}ms",
                details={"timeout_ms": self.timeout_ms},
            ) from exc
        except PlaywrightError as exc:
            logger.error("PDF rendering failed: %s", exc)
            raise RenderFailure(f"PDF rendering failed: {exc}") from exc
