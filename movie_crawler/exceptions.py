"""
Error types raised by the crawl pipeline.
"""

from typing import Optional


class CrawlerError(Exception):
    """Base class for crawler errors."""
    pass


class TransportError(CrawlerError):
    """A page could not be fetched (connection failure or non-success status)."""

    def __init__(self, url: str, reason: str, status_code: int = 0):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class FormatError(CrawlerError):
    """Expected content was not found in a fetched page."""

    def __init__(self, reason: str, url: Optional[str] = None):
        self.reason = reason
        self.url = url
        message = f"{reason} ({url})" if url else reason
        super().__init__(message)


class CrawlError(CrawlerError):
    """
    Fatal crawl failure: a listing page could not be fetched.

    ``index`` holds whatever was indexed before the failure, including the
    work units that were already queued when pagination stopped.
    """

    def __init__(self, url: str, cause: TransportError, index=None):
        self.url = url
        self.cause = cause
        self.index = index
        super().__init__(f"Crawl aborted at listing page {url}: {cause.reason}")
