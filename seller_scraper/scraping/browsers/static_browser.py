"""
requests + BeautifulSoup implementation of the page query protocol.

Pages are fetched once and queried as static HTML. Nothing is executed, so
`click` is a no-op and `wait_for`
succeeds only when the element is already in the document. This is enough for
server-rendered storefront pages and for HTML fixtures.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

import requests
from bs4 import BeautifulSoup, NavigableString, Tag

from seller_scraper.scraping.errors import ElementWaitError, NavigationError
from seller_scraper.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
        "fieldset", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header",
        "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table", "tbody",
        "td", "tfoot", "th", "thead", "tr", "ul",
    }
)
SKIPPED_TAGS = frozenset({"script", "style", "noscript", "template"})
INLINE_WHITESPACE_REGEX = re.compile(r"[ \t\r\f\v]+")

HtmlFetcher = Callable[[str, float], str]


def inner_text(node: Tag) -> str:
    """
    Approximate the browser's `innerText`: block elements start new lines,
    inline elements flow together, runs of whitespace collapse.
    """

    chunks: list[str] = []

    def walk(current: Tag) -> None:
        for child in current.children:
            if isinstance(child, NavigableString):
                if type(child) is NavigableString:
                    chunks.append(str(child).replace("\n", " "))
                continue
            if not isinstance(child, Tag) or child.name in SKIPPED_TAGS:
                continue
            is_block = child.name in BLOCK_TAGS
            if is_block:
                chunks.append("\n")
            walk(child)
            if is_block:
                chunks.append("\n")

    walk(node)
    lines = (INLINE_WHITESPACE_REGEX.sub(" ", line).strip() for line in "".join(chunks).split("\n"))
    return "\n".join(line for line in lines if line)


class SoupElement:
    """
    Element handle over a BeautifulSoup tag.
    """

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def text(self) -> str:
        return inner_text(self._tag)

    def attribute(self, name: str) -> str | None:
        value = self._tag.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def click(self) -> None:
        # Static documents have no event handlers.
        return None

    def query(self, selector: str) -> SoupElement | None:
        found = self._tag.select_one(selector)
        return SoupElement(found) if found is not None else None

    def closest(self, selector: str) -> SoupElement | None:
        current: Tag | None = self._tag
        while current is not None and not isinstance(current, BeautifulSoup):
            if current.css.match(selector):
                return SoupElement(current)
            current = current.parent
        return None

    def parent(self) -> SoupElement | None:
        parent = self._tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return SoupElement(parent)


class StaticPage:
    """
    One tab holding the most recently fetched document.
    """

    def __init__(self, fetcher: HtmlFetcher) -> None:
        self._fetcher = fetcher
        self._html = ""
        self._soup = BeautifulSoup("", "html.parser")

    def goto(self, url: str, *, timeout_seconds: float) -> None:
        self._html = self._fetcher(url, timeout_seconds)
        self._soup = BeautifulSoup(self._html, "html.parser")

    def set_content(self, html: str) -> None:
        self._html = html
        self._soup = BeautifulSoup(html, "html.parser")

    def content(self) -> str:
        return self._html

    def title(self) -> str:
        title = self._soup.title
        return title.get_text(strip=True) if title is not None else ""

    def body_text(self) -> str:
        body = self._soup.body or self._soup
        return inner_text(body)

    def query(self, selector: str) -> SoupElement | None:
        found = self._soup.select_one(selector)
        return SoupElement(found) if found is not None else None

    def query_all(self, selector: str) -> list[SoupElement]:
        return [SoupElement(tag) for tag in self._soup.select(selector)]

    def wait_for(self, selector: str, *, timeout_seconds: float) -> SoupElement:
        found = self.query(selector)
        if found is None:
            raise ElementWaitError(selector, timeout_seconds)
        return found

    def close(self) -> None:
        self._html = ""
        self._soup = BeautifulSoup("", "html.parser")


class RequestsFetcher:
    """
    Fetch HTML over a shared `requests.Session`.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        user_agent: str,
        accept_language: str = "en-GB",
    ) -> None:
        self._session = session or requests.Session()
        self._headers = {
            "User-Agent": user_agent,
            "Accept-Language": accept_language,
            "Accept": "text/html,application/xhtml+xml",
        }

    def __call__(self, url: str, timeout_seconds: float) -> str:
        try:
            response = self._session.get(
                url,
                headers=self._headers,
                timeout=timeout_seconds,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            raise NavigationError(url, str(exc)) from exc

        # Storefronts answer missing products with a 404 page that still needs inspecting.
        if response.status_code >= 400 and response.status_code != 404:
            log_event(
                logger,
                logging.WARNING,
                "page_fetch_rejected",
                url=url,
                status_code=response.status_code,
                retryable=response.status_code in RETRYABLE_STATUS_CODES,
            )
            raise NavigationError(url, f"status={response.status_code}")
        return response.text

    def close(self) -> None:
        self._session.close()


class StaticBrowser:
    """
    Browser session that renders nothing and shares one HTTP session.
    """

    def __init__(
        self,
        *,
        fetcher: HtmlFetcher | None = None,
        user_agent: str = "",
        accept_language: str = "en-GB",
    ) -> None:
        self._fetcher = fetcher or RequestsFetcher(
            user_agent=user_agent,
            accept_language=accept_language,
        )

    def new_page(self) -> StaticPage:
        return StaticPage(self._fetcher)

    def close(self) -> None:
        close = getattr(self._fetcher, "close", None)
        if callable(close):
            close()
