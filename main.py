#!/usr/bin/env python3
"""
Main entry point for the movie crawler: crawl, then serve term lookups.
"""

import asyncio
import argparse
import logging
import signal
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from movie_crawler import __version__
from movie_crawler.api.server import serve
from movie_crawler.crawler.scheduler import CrawlerScheduler
from movie_crawler.exceptions import CrawlError
from movie_crawler.utils.config import Config, load_config, validate_config
from movie_crawler.utils.logger import setup_logging, log_system_info
from movie_crawler.utils.monitoring import initialize_monitoring


class CrawlerApp:
    """Main application class for the movie crawler."""

    def __init__(self):
        self.scheduler: Optional[CrawlerScheduler] = None
        self.logger = logging.getLogger(__name__)
        self._shutdown_event = asyncio.Event()
        self._crawl_task: Optional[asyncio.Task] = None

    def setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self.request_shutdown, signum)

    def request_shutdown(self, signum):
        """Stop a running crawl, or the query server once crawling is done."""
        self.logger.info(f"Received signal {signum}, initiating shutdown...")
        if self._crawl_task is not None and not self._crawl_task.done():
            self._crawl_task.cancel()
        self._shutdown_event.set()

    async def run(self, config: Config, no_serve: bool = False) -> int:
        """Crawl the listing, then serve the index until shut down."""
        setup_logging(config.logging)
        log_system_info()
        self.setup_signal_handlers()

        self.logger.info("=== MOVIE CRAWLER STARTING ===")
        self.logger.info(f"Start URL: {config.crawler.start_url}")
        self.logger.info(f"Workers: {config.crawler.workers}")
        self.logger.info(f"Queue size: {config.crawler.queue_size}")

        monitor = initialize_monitoring(
            enable_prometheus=config.monitoring.metrics_enabled,
            prometheus_port=config.monitoring.prometheus_port
        )
        self.scheduler = CrawlerScheduler(config, monitor=monitor)

        self._crawl_task = asyncio.create_task(self.scheduler.crawl())
        try:
            index = await self._crawl_task
        except CrawlError as e:
            self.logger.error(f"Crawl failed: {e}")
            return 1
        except asyncio.CancelledError:
            self.logger.warning("Crawl cancelled before completion")
            return 1

        self.logger.info(f"Monitoring summary: {monitor.get_summary()}")

        if not no_serve:
            await serve(index, config.server.host, config.server.port, self._shutdown_event)

        self.logger.info("=== MOVIE CRAWLER FINISHED ===")
        return 0


def build_config(args: argparse.Namespace) -> Config:
    """Load the config file (if any) and apply command line overrides."""
    if Path(args.config).exists():
        config = load_config(args.config)
    elif args.config != 'config.yaml':
        raise FileNotFoundError(f"Configuration file not found: {args.config}")
    else:
        config = Config()

    crawler_overrides = {}
    if args.start_url:
        crawler_overrides['start_url'] = args.start_url
    if args.workers is not None:
        crawler_overrides['workers'] = args.workers
    if crawler_overrides:
        config = replace(config, crawler=replace(config.crawler, **crawler_overrides))

    if args.port is not None:
        config = replace(config, server=replace(config.server, port=args.port))

    validate_config(config)
    return config


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Movie Crawler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                           # Run with config.yaml (or defaults)
  python main.py --config my_config.yaml  # Run with custom config
  python main.py --workers 16             # Use 16 detail workers
  python main.py --no-serve               # Crawl only, then exit
        """
    )

    parser.add_argument(
        '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )

    parser.add_argument(
        '--start-url',
        help='First listing page to crawl'
    )

    parser.add_argument(
        '--workers',
        type=int,
        help='Number of concurrent detail page workers'
    )

    parser.add_argument(
        '--port',
        type=int,
        help='Port for the query server'
    )

    parser.add_argument(
        '--no-serve',
        action='store_true',
        help='Exit after crawling instead of serving queries'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Movie Crawler {__version__}'
    )

    args = parser.parse_args()

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"Error: {e}")
        return 1

    app = CrawlerApp()
    try:
        return asyncio.run(app.run(config, no_serve=args.no_serve))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
