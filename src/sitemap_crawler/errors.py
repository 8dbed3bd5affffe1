"""
Exception types raised by the crawler.
"""
from __future__ import annotations

from typing import Optional


class CrawlerError(Exception):
    """Base class for all crawler errors."""


class InvalidSeedUrlError(CrawlerError, ValueError):
    """The start URL cannot be crawled. Fatal for the whole run."""

    def __init__(self, seed_url: str, reason: str) -> None:
        super().__init__(f"Invalid start URL: {seed_url!r} ({reason})")
        self.seed_url = seed_url
        self.reason = reason


class InvalidHostError(CrawlerError, ValueError):
    """A URL host has no '.' separated labels to derive a domain from."""

    def __init__(self, url: str) -> None:
        super().__init__(f"URL must contain at least one '.' character in its host: {url!r}")
        self.url = url


class LinkResolutionError(CrawlerError, ValueError):
    """An href found on a page could not be turned into an absolute URL."""

    def __init__(self, page_url: str, href: str) -> None:
        super().__init__(f"Error parsing URL in page. Page: {page_url!r}, URL: {href!r}")
        self.page_url = page_url
        self.href = href


class FetchError(CrawlerError):
    """A page could not be retrieved."""

    def __init__(self, url: str, cause: Optional[BaseException] = None, message: Optional[str] = None) -> None:
        detail = message or (str(cause) if cause is not None else "fetch failed")
        super().__init__(f"Error reading URL {url!r}: {detail}")
        self.url = url
        self.cause = cause
        self.detail = detail
