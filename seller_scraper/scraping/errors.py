"""
Error taxonomy for the scraping pipeline.

Only failures that abort a stage are modelled as exceptions. Bot challenges,
missing products and absent page elements are reported as data.
"""

from __future__ import annotations


class ScraperError(Exception):
    """
    Base class for scraping errors.
    """


class NavigationError(ScraperError):
    """
    A page load exceeded its timeout or failed at the network level.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Navigation to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class PanelError(ScraperError):
    """
    The all-offers panel could not be opened or never rendered.
    """


class ElementWaitError(ScraperError):
    """
    An awaited element did not appear before its timeout.
    """

    def __init__(self, selector: str, timeout_seconds: float) -> None:
        super().__init__(f"Element {selector!r} did not appear within {timeout_seconds:g}s")
        self.selector = selector
        self.timeout_seconds = timeout_seconds
