"""
Domain scoping: which URLs belong to the crawl.

The domain limit is the last two labels of the host, lowercased. Multi-part
public suffixes are not special-cased, so ``www.example.co.uk`` has the limit
``co.uk``.
"""
from __future__ import annotations

from urllib.parse import SplitResult, urlsplit, urlunsplit

from sitemap_crawler.errors import InvalidHostError


def parse_url(text: str) -> SplitResult:
    """
    Parse an absolute URL, raising ValueError when it is not one.

    An absolute URL has a scheme and a host, no whitespace or control
    characters, and a numeric port when one is given.
    """
    if not text:
        raise ValueError("empty URL")
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in text):
        raise ValueError(f"URL contains whitespace or control characters: {text!r}")

    parts = urlsplit(text)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"not an absolute URL: {text!r}")
    if not parts.hostname:
        raise ValueError(f"URL has no host: {text!r}")
    # .port raises ValueError itself for non-numeric or out of range ports
    if parts.port == 0:
        raise ValueError(f"URL has port 0: {text!r}")
    return parts


def url_key(url: str) -> str:
    """
    Identity of a URL for deduplication.

    Scheme and host are compared case-insensitively; user info, port, path,
    query and fragment are kept as written.
    """
    parts = urlsplit(url)
    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = userinfo + at + hostport.lower()
    return urlunsplit((parts.scheme.lower(), netloc, parts.path, parts.query, parts.fragment))


def derive_limit(url: str) -> str:
    """Return the domain limit (``secondlevel.tld``) for a URL."""
    host = parse_url(url).hostname or ""
    labels = host.rstrip(".").split(".")
    if len(labels) < 2 or not all(labels[-2:]):
        raise InvalidHostError(url)
    return ".".join(labels[-2:]).lower()


def in_scope(url: str, domain_limit: str) -> bool:
    """Check if URL has the same domain limit. Malformed URLs are out of scope."""
    try:
        return derive_limit(url) == domain_limit
    except ValueError:
        return False
