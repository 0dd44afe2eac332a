"""
Crawler core components.
"""

from .fetcher import WebFetcher, FetchResult
from .parser import ContentParser, ListingPage
from .scheduler import CrawlerScheduler, CrawlStats, crawl

__all__ = [
    'WebFetcher', 'FetchResult',
    'ContentParser', 'ListingPage',
    'CrawlerScheduler', 'CrawlStats', 'crawl'
]
