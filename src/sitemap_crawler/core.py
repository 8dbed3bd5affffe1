"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import sys
import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Set, TextIO, Tuple

from sitemap_crawler.errors import FetchError, InvalidHostError, InvalidSeedUrlError, LinkResolutionError
from sitemap_crawler.fetch import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT, HttpFetcher, PageFetcher
from sitemap_crawler.links import extract_links
from sitemap_crawler.scope import derive_limit, in_scope, parse_url, url_key

FETCH_ERROR = "fetch_error"
LINK_ERROR = "link_error"


@dataclass(slots=True, frozen=True)
class SitemapEntry:
    """One visited page: its URL and how many links away from the start it was found."""
    depth: int
    url: str

    def render(self) -> str:
        return "\t" * self.depth + self.url


@dataclass(slots=True, frozen=True)
class Diagnostic:
    """A non-fatal problem met while crawling a single page."""
    kind: str
    url: str
    detail: str

    def render(self) -> str:
        if self.kind == LINK_ERROR:
            return f'Error parsing URL in page. Page: "{self.url}", URL: "{self.detail}"'
        return f'Error crawling url. URL: "{self.url}", Error: {self.detail}'


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_visited: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def record_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        self.error_counts[diagnostic.kind] += 1


class VisitedSet:
    """
    Set of visited URLs with an atomic check-and-mark.

    URLs are compared by :func:`url_key`, so host case does not matter.
    """

    def __init__(self) -> None:
        self._urls: Set[str] = set()
        self._lock = threading.Lock()

    def add(self, url: str) -> bool:
        """Mark ``url`` visited. Returns False if it already was."""
        key = url_key(url)
        with self._lock:
            if key in self._urls:
                return False
            self._urls.add(key)
            return True

    def __contains__(self, url: object) -> bool:
        if not isinstance(url, str):
            return False
        key = url_key(url)
        with self._lock:
            return key in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)


class Crawler:
    """
    Depth-first sitemap crawler limited to the start URL's domain.

    Args:
        fetcher: Callable returning the text of a page, raising FetchError.
                 Defaults to an HttpFetcher built from timeout_s and user_agent.
        timeout_s: HTTP request timeout in seconds.
        user_agent: User-Agent header to use for requests.
        workers: Number of threads fetching pages ahead of the traversal.
                 1 fetches each page only when it is visited.
        max_pages: Stop after this many pages (None for no limit).
        diagnostics: Stream for non-fatal errors (default: stderr).
    """

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        workers: int = 1,
        max_pages: Optional[int] = None,
        diagnostics: Optional[TextIO] = None,
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        if max_pages is not None and max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")

        self._owns_fetcher = fetcher is None
        self.fetcher: PageFetcher = fetcher if fetcher is not None else HttpFetcher(timeout_s, user_agent)
        self.workers = workers
        self.max_pages = max_pages
        self.diagnostics = diagnostics
        self.stats = CrawlStats()

    def walk(self, seed_url: str) -> Iterator[SitemapEntry]:
        """
        Validate the start URL and return the stream of visited pages.

        Raises InvalidSeedUrlError right away if the start URL cannot be
        crawled. Per-page failures are reported to the diagnostics stream and
        recorded in ``self.stats`` without stopping the walk.
        """
        try:
            parse_url(seed_url)
            domain_limit = derive_limit(seed_url)
        except InvalidHostError as e:
            raise InvalidSeedUrlError(seed_url, "host must contain at least one '.'") from e
        except ValueError as e:
            raise InvalidSeedUrlError(seed_url, str(e)) from e

        self.stats = CrawlStats()
        return self._walk(seed_url, domain_limit, VisitedSet(), self.stats)

    def crawl(self, seed_url: str, out: Optional[TextIO] = None) -> CrawlStats:
        """Write the tab-indented sitemap to ``out`` (default: stdout)."""
        if out is None:
            out = sys.stdout
        for entry in self.walk(seed_url):
            out.write(entry.render() + "\n")
        return self.stats

    def _walk(
        self,
        seed_url: str,
        domain_limit: str,
        visited: VisitedSet,
        stats: CrawlStats,
    ) -> Iterator[SitemapEntry]:
        # Frames are visited when popped, so a page pushed twice is
        # emitted at the depth of whichever path reaches it first.
        stack: List[Tuple[str, int]] = [(seed_url, 0)]
        pending: Dict[str, Future[str]] = {}
        executor = (
            ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="sitemap-fetch")
            if self.workers > 1 else None
        )

        def report_link_error(e: LinkResolutionError) -> None:
            self._report(stats, Diagnostic(LINK_ERROR, e.page_url, e.href))

        try:
            while stack:
                url, depth = stack.pop()
                if not visited.add(url):
                    continue

                stats.pages_visited += 1
                yield SitemapEntry(depth, url)
                if self.max_pages is not None and stats.pages_visited >= self.max_pages:
                    return

                body = self._fetch(url, pending.pop(url_key(url), None), stats)
                if body is None:
                    continue

                children = self._next_links(url, body, domain_limit, visited, report_link_error)
                stack.extend((link, depth + 1) for link in reversed(children))

                if executor is not None:
                    self._prefetch(executor, children, visited, pending)
        finally:
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)

    def _next_links(
        self,
        url: str,
        body: str,
        domain_limit: str,
        visited: VisitedSet,
        on_error: Callable[[LinkResolutionError], None],
    ) -> List[str]:
        """In-scope links on a page that are not yet visited, sorted."""
        page_key = url_key(url)
        return sorted(
            link for link in extract_links(url, body, on_error=on_error)
            if url_key(link) != page_key and in_scope(link, domain_limit) and link not in visited
        )

    def _prefetch(
        self,
        executor: ThreadPoolExecutor,
        links: List[str],
        visited: VisitedSet,
        pending: Dict[str, Future[str]],
    ) -> None:
        # Keep at most two fetches per worker in flight; the rest are fetched on visit.
        for link in links:
            if len(pending) >= self.workers * 2:
                break
            key = url_key(link)
            if key in pending or link in visited:
                continue
            pending[key] = executor.submit(self.fetcher, link)

    def _fetch(self, url: str, future: Optional[Future[str]], stats: CrawlStats) -> Optional[str]:
        try:
            if future is not None:
                return future.result()
            return self.fetcher(url)
        except FetchError as e:
            self._report(stats, Diagnostic(FETCH_ERROR, url, e.detail))
            return None

    def _report(self, stats: CrawlStats, diagnostic: Diagnostic) -> None:
        stats.record_diagnostic(diagnostic)
        stream = self.diagnostics if self.diagnostics is not None else sys.stderr
        stream.write(diagnostic.render() + "\n")
        stream.flush()

    def close(self) -> None:
        if self._owns_fetcher and isinstance(self.fetcher, HttpFetcher):
            self.fetcher.close()

    def __enter__(self) -> Crawler:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def crawl(seed_url: str, out: Optional[TextIO] = None, **options) -> CrawlStats:
    """
    Crawl from ``seed_url`` and write the sitemap to ``out``.

    Keyword options are passed to :class:`Crawler`.
    """
    with Crawler(**options) as crawler:
        return crawler.crawl(seed_url, out)
