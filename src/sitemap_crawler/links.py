"""
Anchor link extraction and href resolution.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional, Set
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, SoupStrainer

from sitemap_crawler.errors import LinkResolutionError
from sitemap_crawler.scope import parse_url, url_key

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)


def is_absolute(href: str) -> bool:
    """True if the href carries its own scheme (``http:``, ``mailto:``, ...)."""
    try:
        return bool(urlsplit(href).scheme)
    except ValueError:
        return False


def resolve_href(base_url: str, href: str) -> str:
    """
    Resolve an href found on ``base_url`` to an absolute URL.

    Hrefs with a scheme are returned unchanged, even when they have no host
    (``mailto:``, ``javascript:``); scoping drops those later. Anything else
    is appended to the page URL with a single '/' between them, so
    ``/contact`` on ``http://example.com/dir/page`` becomes
    ``http://example.com/dir/page/contact``.
    """
    if is_absolute(href):
        return href

    joined = base_url.rstrip("/") + "/" + href.lstrip("/")
    try:
        parse_url(joined)
    except ValueError as e:
        raise LinkResolutionError(base_url, href) from e
    return joined


def extract_links(
    base_url: str,
    page_text: str,
    on_error: Optional[Callable[[LinkResolutionError], None]] = None,
) -> Set[str]:
    """
    Extract the absolute URLs of all <a href> links on a page.

    Links differing only in scheme or host case count once; the first one
    on the page is kept.
    """
    soup = BeautifulSoup(page_text, "lxml", parse_only=LINK_STRAINER)
    urls: Dict[str, str] = {}
    for a in soup.find_all("a", href=True):
        href = a.get("href")
        if not isinstance(href, str) or not href.strip():
            continue
        try:
            url = resolve_href(base_url, href.strip())
        except LinkResolutionError as e:
            if on_error is not None:
                on_error(e)
            continue
        urls.setdefault(url_key(url), url)
    return set(urls.values())
