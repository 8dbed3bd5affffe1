"""
Page retrieval over HTTP.
"""
from __future__ import annotations

import threading
from typing import List, Optional, Protocol

import requests

from sitemap_crawler.errors import FetchError

DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "SitemapCrawler/1.0"


class PageFetcher(Protocol):
    """Anything that maps a URL to its page text, raising FetchError on failure."""

    def __call__(self, url: str) -> str: ...


class HttpFetcher:
    """
    Fetch pages with requests.

    requests.Session is not documented as thread-safe, so each thread that
    calls the fetcher gets its own session. A session passed in explicitly
    is used as-is by every thread.
    """

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self._shared_session = session
        if session is not None:
            session.headers["User-Agent"] = user_agent
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """The session for the calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = self.user_agent
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def __call__(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self.timeout_s, allow_redirects=True)
        except requests.RequestException as e:
            raise FetchError(url, e) from e

        if resp.status_code >= 400:
            raise FetchError(url, message=f"HTTP {resp.status_code}")

        # Only HTML is scanned for links
        content_type = (resp.headers.get("content-type") or "").lower()
        if "html" not in content_type:
            return ""
        return resp.text

    def close(self) -> None:
        if self._shared_session is not None:
            self._shared_session.close()
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
