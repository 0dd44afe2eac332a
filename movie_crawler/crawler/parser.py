"""
HTML parsing for listing pages and movie detail pages.
"""

import re
import logging
from typing import List, Optional, Union
from urllib.parse import urljoin, urlparse, urlunparse
from dataclasses import dataclass, field
from bs4 import BeautifulSoup

from ..exceptions import FormatError
from ..storage.models import Movie
from ..utils.config import SelectorConfig


@dataclass
class ListingPage:
    """Links discovered on one listing page."""
    url: str
    detail_links: List[str] = field(default_factory=list)
    next_url: Optional[str] = None


class ContentParser:
    """
    Parses listing pages into detail links and a next-page link, and detail
    pages into Movie records.

    The parser holds no mutable state and can be shared between workers.
    """

    def __init__(self, selectors: Optional[SelectorConfig] = None):
        self.selectors = selectors or SelectorConfig()
        self.logger = logging.getLogger(__name__)

        self.whitespace_pattern = re.compile(r'\s+')

    def _soup(self, html_content: Union[str, bytes]) -> BeautifulSoup:
        return BeautifulSoup(html_content, 'lxml')

    def parse_listing(self, url: str, html_content: Union[str, bytes]) -> ListingPage:
        """
        Find detail links (in document order) and the next-page link.

        Args:
            url: URL of the listing page, used to resolve relative links
            html_content: Raw HTML content

        Returns:
            ListingPage with absolute URLs
        """
        soup = self._soup(html_content)
        page = ListingPage(url=url)

        for link in soup.select(self.selectors.detail_link):
            href = (link.get('href') or '').strip()
            if not href:
                continue
            page.detail_links.append(self._normalize_url(urljoin(url, href)))

        # A next element without an href ends pagination
        next_node = soup.select_one(self.selectors.next_page)
        if next_node is not None:
            href = (next_node.get('href') or '').strip()
            if href:
                page.next_url = self._normalize_url(urljoin(url, href))

        self.logger.debug(f"Parsed listing {url}: {len(page.detail_links)} detail links, "
                          f"next={page.next_url}")
        return page

    def extract_movie(self, html_content: Union[str, bytes], url: Optional[str] = None) -> Movie:
        """
        Extract a Movie from a detail page.

        Only the title is required; year, director and actors may be absent.

        Raises:
            FormatError: if the page has no title element
        """
        soup = self._soup(html_content)

        # A blank title element gives an empty name; only a missing one fails
        title_node = soup.select_one(self.selectors.title)
        if title_node is None:
            raise FormatError("No title found", url)
        name = self._clean_text(title_node.get_text())

        return Movie(
            name=name,
            year=self._first_text(soup, self.selectors.year),
            director=self._first_text(soup, self.selectors.director),
            actors=tuple(self._all_text(soup, self.selectors.actors)),
        )

    def _first_text(self, soup: BeautifulSoup, selector: str) -> Optional[str]:
        node = soup.select_one(selector)
        if node is None:
            return None
        return self._clean_text(node.get_text()) or None

    def _all_text(self, soup: BeautifulSoup, selector: str) -> List[str]:
        texts = (self._clean_text(node.get_text()) for node in soup.select(selector))
        return [text for text in texts if text]

    def _normalize_url(self, url: str) -> str:
        """Drop the fragment and lowercase the host."""
        parsed = urlparse(url)
        return urlunparse((
            parsed.scheme,
            parsed.netloc.lower(),
            parsed.path,
            parsed.params,
            parsed.query,
            ''
        ))

    def _clean_text(self, text: str) -> str:
        """Collapse runs of whitespace and trim."""
        if not text:
            return ""
        return self.whitespace_pattern.sub(' ', text.strip())
