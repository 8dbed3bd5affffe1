"""
Web crawler that builds a tab-indented, depth-first sitemap of one domain.
"""
from sitemap_crawler.core import Crawler, CrawlStats, Diagnostic, SitemapEntry, crawl
from sitemap_crawler.errors import (
    CrawlerError,
    FetchError,
    InvalidHostError,
    InvalidSeedUrlError,
    LinkResolutionError,
)

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "Crawler",
    "CrawlStats",
    "Diagnostic",
    "SitemapEntry",
    "CrawlerError",
    "FetchError",
    "InvalidHostError",
    "InvalidSeedUrlError",
    "LinkResolutionError",
]
