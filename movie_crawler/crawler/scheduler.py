"""
Crawler scheduler: walks the listing pages and dispatches detail pages to a
bounded pool of workers that fill the inverted index.
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Set
from dataclasses import dataclass, replace

from .fetcher import WebFetcher
from .parser import ContentParser
from ..exceptions import CrawlError, FormatError, TransportError
from ..storage.index import InvertedIndex
from ..utils.config import Config, validate_config
from ..utils.logger import get_crawler_logger
from ..utils.monitoring import CrawlerMonitor


@dataclass
class CrawlStats:
    """Statistics for one crawl."""
    start_time: float
    listing_pages_fetched: int = 0
    detail_links_dispatched: int = 0
    detail_pages_fetched: int = 0
    movies_indexed: int = 0
    transport_errors: int = 0
    format_errors: int = 0
    unexpected_errors: int = 0

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    @property
    def errors(self) -> int:
        return self.transport_errors + self.format_errors + self.unexpected_errors

    @property
    def pages_per_minute(self) -> float:
        elapsed_minutes = self.elapsed_time / 60
        return self.detail_pages_fetched / elapsed_minutes if elapsed_minutes > 0 else 0


class CrawlerScheduler:
    """
    Drives one crawl.

    Listing pages are fetched one at a time by a single walker. Every detail
    link found is put on a bounded queue consumed by ``workers`` worker tasks;
    when the queue is full the walker waits. A failed listing fetch stops
    pagination and is raised as CrawlError once the queued detail pages have
    been processed. A failed detail page is logged and skipped.
    """

    def __init__(self, config: Config, fetcher: Optional[WebFetcher] = None,
                 parser: Optional[ContentParser] = None,
                 monitor: Optional[CrawlerMonitor] = None):
        validate_config(config)
        self.config = config
        self.logger = get_crawler_logger(__name__)

        # Components
        self.fetcher = fetcher
        self.parser = parser or ContentParser(config.selectors)
        self.monitor = monitor or CrawlerMonitor()

        # Crawl state
        self.stats = CrawlStats(start_time=time.time())
        self.is_running = False
        self.workers: List[asyncio.Task] = []
        self._active_workers = 0

    async def crawl(self, start_url: Optional[str] = None) -> InvertedIndex:
        """
        Crawl from the first listing page and return the populated index.

        Args:
            start_url: First listing page (defaults to the configured one)

        Raises:
            CrawlError: if a listing page could not be fetched; its ``index``
                attribute holds what was indexed before the failure
        """
        if self.is_running:
            raise RuntimeError("Crawler is already running")

        start_url = start_url or self.config.crawler.start_url
        index = InvertedIndex()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.config.crawler.queue_size)

        self.is_running = True
        self.stats = CrawlStats(start_time=time.time())

        owns_fetcher = self.fetcher is None
        if owns_fetcher:
            self.fetcher = WebFetcher(
                user_agent=self.config.crawler.user_agent,
                request_timeout=self.config.crawler.request_timeout,
                max_concurrent_requests=self.config.crawler.workers + 1,
                max_content_bytes=self.config.crawler.max_content_bytes
            )

        failure: Optional[CrawlError] = None
        try:
            num_workers = self.config.crawler.workers
            self.workers = [
                asyncio.create_task(self._worker(f"worker-{i}", queue, index))
                for i in range(num_workers)
            ]
            self.logger.info(f"Started crawling {start_url} with {num_workers} workers")

            try:
                await self._walk(start_url, queue)
            except CrawlError as e:
                failure = e

            # Dispatched detail pages always finish, even after a listing failure
            await queue.join()
        finally:
            self.is_running = False
            await self._cleanup_workers()
            self._log_final_stats(index)
            if owns_fetcher:
                await self.fetcher.close()
                self.fetcher = None

        if failure is not None:
            failure.index = index
            raise failure
        return index

    async def _walk(self, start_url: str, queue: asyncio.Queue):
        """Follow next-page links, queueing every detail link on the way."""
        current_url: Optional[str] = start_url
        visited: Set[str] = set()

        while current_url:
            if current_url in visited:
                self.logger.warning(f"Next page link loops back to {current_url}, stopping")
                break
            visited.add(current_url)

            try:
                result = await self.fetcher.fetch(current_url)
                body = result.raise_for_error()
            except TransportError as e:
                self.monitor.record_error('listing_transport', e.reason)
                self.logger.log_url_event(logging.ERROR, current_url,
                                          f"Failed to fetch listing page: {e.reason}")
                raise CrawlError(current_url, e) from e

            self.stats.listing_pages_fetched += 1
            self.monitor.record_listing_fetched(current_url, result.fetch_time)

            page = self.parser.parse_listing(current_url, body)
            for link in page.detail_links:
                await queue.put(link)
                self.stats.detail_links_dispatched += 1
                self.monitor.update_queue_size(queue.qsize())

            self.logger.info(f"Listing page {self.stats.listing_pages_fetched}: "
                             f"queued {len(page.detail_links)} detail pages")
            current_url = page.next_url

    async def _worker(self, worker_id: str, queue: asyncio.Queue, index: InvertedIndex):
        """Worker coroutine that processes detail pages from the queue."""
        self.logger.debug(f"Worker {worker_id} started")

        while True:
            url = await queue.get()
            self._active_workers += 1
            self.monitor.update_active_workers(self._active_workers)
            try:
                await self._process_detail(url, index, worker_id)
            except Exception as e:
                self.stats.unexpected_errors += 1
                self.monitor.record_error('unexpected', str(e))
                self.logger.log_url_event(logging.ERROR, url,
                                          f"Worker {worker_id} error: {e}", exc_info=True)
            finally:
                self._active_workers -= 1
                self.monitor.update_active_workers(self._active_workers)
                self.monitor.update_queue_size(queue.qsize())
                queue.task_done()

    async def _process_detail(self, url: str, index: InvertedIndex, worker_id: str):
        """Fetch one detail page, extract its movie and index it."""
        try:
            result = await self.fetcher.fetch(url)
            body = result.raise_for_error()
            self.stats.detail_pages_fetched += 1
            self.monitor.record_detail_fetched(url, result.fetch_time)
            movie = self.parser.extract_movie(body, url)
        except TransportError as e:
            self.stats.transport_errors += 1
            self.monitor.record_error('transport', e.reason)
            self.logger.log_url_event(logging.WARNING, url, f"Crawling error: {e}")
            return
        except FormatError as e:
            self.stats.format_errors += 1
            self.monitor.record_error('format', e.reason)
            self.logger.log_url_event(logging.WARNING, url, f"Crawling error: {e}")
            return

        term_count = index.insert_movie(movie)
        self.stats.movies_indexed += 1
        self.monitor.record_movie_indexed(movie.name, term_count)
        self.logger.debug(f"{worker_id} indexed '{movie.name}' from {url}")

    async def _cleanup_workers(self):
        """Cancel and cleanup worker tasks."""
        if self.workers:
            for worker in self.workers:
                if not worker.done():
                    worker.cancel()

            await asyncio.gather(*self.workers, return_exceptions=True)
            self.workers.clear()

    def _log_final_stats(self, index: InvertedIndex):
        """Log final crawl statistics."""
        fetcher_stats = self.fetcher.get_stats() if isinstance(self.fetcher, WebFetcher) else {}

        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"Listing pages fetched: {self.stats.listing_pages_fetched}")
        self.logger.info(f"Detail pages fetched: {self.stats.detail_pages_fetched}")
        self.logger.info(f"Movies indexed: {self.stats.movies_indexed}")
        self.logger.info(f"Errors: {self.stats.errors} "
                         f"(transport={self.stats.transport_errors}, "
                         f"format={self.stats.format_errors})")
        self.logger.info(f"Total time: {self.stats.elapsed_time:.2f} seconds")
        self.logger.info(f"Average rate: {self.stats.pages_per_minute:.1f} pages/min")
        self.logger.info(f"Index stats: {index.get_stats()}")
        if fetcher_stats:
            self.logger.info(f"Fetcher stats: {fetcher_stats}")

    def get_stats(self) -> Dict:
        """Get current crawl statistics."""
        return {
            'listing_pages_fetched': self.stats.listing_pages_fetched,
            'detail_links_dispatched': self.stats.detail_links_dispatched,
            'detail_pages_fetched': self.stats.detail_pages_fetched,
            'movies_indexed': self.stats.movies_indexed,
            'errors': self.stats.errors,
            'elapsed_time': self.stats.elapsed_time,
            'pages_per_minute': self.stats.pages_per_minute,
            'is_running': self.is_running
        }


async def crawl(start_url: str, worker_count: int, fetcher=None,
                config: Optional[Config] = None,
                monitor: Optional[CrawlerMonitor] = None) -> InvertedIndex:
    """
    Crawl ``start_url`` with ``worker_count`` detail workers.

    Convenience wrapper around CrawlerScheduler for callers that only need
    the resulting index.
    """
    config = config or Config()
    config = replace(config, crawler=replace(config.crawler, start_url=start_url,
                                             workers=worker_count))
    validate_config(config)
    scheduler = CrawlerScheduler(config, fetcher=fetcher, monitor=monitor)
    return await scheduler.crawl()
