"""
Playwright (sync API) implementation of the page query protocol.

A session must be launched, used and closed on one thread; the run
orchestrator guarantees that by executing a whole run inside a single job.
"""

from __future__ import annotations

import logging

from playwright.sync_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    sync_playwright,
)

from seller_scraper.config import ScraperSettings
from seller_scraper.scraping.errors import ElementWaitError, NavigationError
from seller_scraper.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]

STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, "webdriver", { get: () => undefined });
window.chrome = { runtime: {} };
"""


class PlaywrightElement:
    def __init__(self, handle: ElementHandle) -> None:
        self._handle = handle

    def text(self) -> str:
        return self._handle.inner_text()

    def attribute(self, name: str) -> str | None:
        return self._handle.get_attribute(name)

    def click(self) -> None:
        self._handle.click()

    def query(self, selector: str) -> PlaywrightElement | None:
        found = self._handle.query_selector(selector)
        return PlaywrightElement(found) if found is not None else None

    def closest(self, selector: str) -> PlaywrightElement | None:
        found = self._handle.evaluate_handle("(el, sel) => el.closest(sel)", selector).as_element()
        return PlaywrightElement(found) if found is not None else None

    def parent(self) -> PlaywrightElement | None:
        found = self._handle.evaluate_handle("el => el.parentElement").as_element()
        return PlaywrightElement(found) if found is not None else None


class PlaywrightPage:
    def __init__(self, page: Page) -> None:
        self._page = page

    def goto(self, url: str, *, timeout_seconds: float) -> None:
        try:
            self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_seconds * 1000)
        except PlaywrightTimeoutError as exc:
            raise NavigationError(url, f"timeout after {timeout_seconds:g}s") from exc
        except PlaywrightError as exc:
            raise NavigationError(url, exc.message) from exc

    def content(self) -> str:
        return self._page.content()

    def title(self) -> str:
        return self._page.title()

    def body_text(self) -> str:
        return self._page.inner_text("body")

    def query(self, selector: str) -> PlaywrightElement | None:
        found = self._page.query_selector(selector)
        return PlaywrightElement(found) if found is not None else None

    def query_all(self, selector: str) -> list[PlaywrightElement]:
        return [PlaywrightElement(handle) for handle in self._page.query_selector_all(selector)]

    def wait_for(self, selector: str, *, timeout_seconds: float) -> PlaywrightElement:
        try:
            found = self._page.wait_for_selector(selector, timeout=timeout_seconds * 1000)
        except PlaywrightTimeoutError as exc:
            raise ElementWaitError(selector, timeout_seconds) from exc
        if found is None:
            raise ElementWaitError(selector, timeout_seconds)
        return PlaywrightElement(found)

    def close(self) -> None:
        self._page.close()


class PlaywrightBrowser:
    """
    One headless Chromium context shared by every page of a run.
    """

    def __init__(self, *, playwright: Playwright, browser: Browser, context: BrowserContext) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context

    @classmethod
    def launch(cls, settings: ScraperSettings) -> PlaywrightBrowser:
        playwright = sync_playwright().start()
        try:
            browser = playwright.chromium.launch(headless=settings.headless, args=LAUNCH_ARGS)
            context = browser.new_context(
                user_agent=settings.user_agent,
                viewport={"width": 1440, "height": 900},
                locale=settings.locale,
                timezone_id=settings.timezone_id,
            )
            context.add_init_script(STEALTH_INIT_SCRIPT)
        except Exception:
            playwright.stop()
            raise

        log_event(
            logger,
            logging.INFO,
            "browser_launched",
            headless=settings.headless,
            locale=settings.locale,
        )
        return cls(playwright=playwright, browser=browser, context=context)

    def new_page(self) -> PlaywrightPage:
        return PlaywrightPage(self._context.new_page())

    def close(self) -> None:
        try:
            self._context.close()
            self._browser.close()
        finally:
            self._playwright.stop()
