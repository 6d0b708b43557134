"""
Page query protocol between the extraction core and browser implementations.

The core only needs a small fixed vocabulary: navigate, read the document,
find elements, read their text or attributes, click, and wait for an element
to appear. Implementations raise `NavigationError` for failed page loads and
`ElementWaitError` when a wait times out.
"""

from __future__ import annotations

from typing import Protocol

from seller_scraper.config import ScraperSettings


class PageElement(Protocol):
    def text(self) -> str:
        ...

    def attribute(self, name: str) -> str | None:
        ...

    def click(self) -> None:
        ...

    def query(self, selector: str) -> "PageElement | None":
        ...

    def closest(self, selector: str) -> "PageElement | None":
        ...

    def parent(self) -> "PageElement | None":
        ...


class BrowserPage(Protocol):
    def goto(self, url: str, *, timeout_seconds: float) -> None:
        ...

    def content(self) -> str:
        ...

    def title(self) -> str:
        ...

    def body_text(self) -> str:
        ...

    def query(self, selector: str) -> PageElement | None:
        ...

    def query_all(self, selector: str) -> list[PageElement]:
        ...

    def wait_for(self, selector: str, *, timeout_seconds: float) -> PageElement:
        ...

    def close(self) -> None:
        ...


class BrowserSession(Protocol):
    def new_page(self) -> BrowserPage:
        ...

    def close(self) -> None:
        ...


class BrowserFactory(Protocol):
    def __call__(self) -> BrowserSession:
        ...


def create_browser_factory(settings: ScraperSettings) -> BrowserFactory:
    """
    Return a factory opening the configured browser implementation.
    """

    if settings.browser == "static":
        from seller_scraper.scraping.browsers.static_browser import StaticBrowser

        return lambda: StaticBrowser(
            user_agent=settings.user_agent,
            accept_language=settings.locale,
        )

    from seller_scraper.scraping.browsers.playwright_browser import PlaywrightBrowser

    return lambda: PlaywrightBrowser.launch(settings)
