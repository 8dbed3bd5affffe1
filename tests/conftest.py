from __future__ import annotations

import io
from typing import Callable, Dict, List

import pytest

from sitemap_crawler.errors import FetchError


class FakeFetcher:
    """In-memory site: maps URL to page HTML. Unknown URLs fail like a 404."""

    def __init__(self, pages: Dict[str, str]) -> None:
        self.pages = pages
        self.calls: List[str] = []

    def __call__(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, message="HTTP 404")
        return self.pages[url]


def _page(*hrefs: str) -> str:
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><body>{anchors}</body></html>"


@pytest.fixture()
def page() -> Callable[..., str]:
    """Build a small HTML page linking to each href given."""
    return _page


@pytest.fixture()
def site() -> Callable[[Dict[str, str]], FakeFetcher]:
    return FakeFetcher


@pytest.fixture()
def diag() -> io.StringIO:
    return io.StringIO()


@pytest.fixture()
def out() -> io.StringIO:
    return io.StringIO()
