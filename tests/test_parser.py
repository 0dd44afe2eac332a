"""
Tests for listing and detail page parsing.
"""

import pytest

from movie_crawler.crawler.parser import ContentParser
from movie_crawler.exceptions import FormatError
from movie_crawler.utils.config import SelectorConfig
from tests.pages import BASE_URL, START_URL, detail_page, listing_page


@pytest.fixture
def parser():
    return ContentParser()


def test_listing_links_in_document_order(parser):
    html = listing_page(["/title/tt3/", "/title/tt1/#reviews", "/title/tt2/"])
    page = parser.parse_listing(START_URL, html)
    assert page.detail_links == [
        f"{BASE_URL}/title/tt3/",
        f"{BASE_URL}/title/tt1/",
        f"{BASE_URL}/title/tt2/",
    ]
    assert page.next_url is None


def test_listing_next_link_resolved_against_page(parser):
    page = parser.parse_listing(START_URL, listing_page([], next_href="?page=2"))
    assert page.detail_links == []
    assert page.next_url == f"{BASE_URL}/search/title?page=2"


def test_listing_next_without_href_ends_pagination(parser):
    page = parser.parse_listing(START_URL, listing_page(["/title/tt1/"], next_without_href=True))
    assert page.detail_links == [f"{BASE_URL}/title/tt1/"]
    assert page.next_url is None


def test_listing_skips_anchor_without_href(parser):
    html = ('<span class="lister-item-header"><a>Broken</a></span>'
            '<span class="lister-item-header"><a href="/title/tt9/">Ok</a></span>')
    assert parser.parse_listing(START_URL, html).detail_links == [f"{BASE_URL}/title/tt9/"]


def test_extract_full_movie(parser):
    html = detail_page("The  Godfather\n", "1972", "Francis Ford Coppola",
                       ["Marlon Brando", " Al Pacino "])
    movie = parser.extract_movie(html)
    assert movie.name == "The Godfather"
    assert movie.year == "1972"
    assert movie.director == "Francis Ford Coppola"
    assert movie.actors == ("Marlon Brando", "Al Pacino")


def test_extract_title_only(parser):
    movie = parser.extract_movie(detail_page("Primer"))
    assert movie.name == "Primer"
    assert movie.year is None
    assert movie.director is None
    assert movie.actors == ()


def test_extract_blank_title_gives_empty_name(parser):
    movie = parser.extract_movie(detail_page(" ", "2010"))
    assert movie.name == ""
    assert movie.year == "2010"
    assert movie.index_terms() == ["2010"]


def test_extract_accepts_bytes(parser):
    movie = parser.extract_movie(detail_page("Amelie").encode('utf-8'))
    assert movie.name == "Amelie"


def test_extract_missing_title_is_format_error(parser):
    with pytest.raises(FormatError) as excinfo:
        parser.extract_movie(detail_page(None, "1999", "Someone", ["Actor"]), "http://x/title/1")
    assert excinfo.value.reason == "No title found"
    assert excinfo.value.url == "http://x/title/1"


def test_custom_selectors():
    parser = ContentParser(SelectorConfig(title="h2.name", actors="li.cast"))
    html = '<h2 class="name">Custom</h2><ul><li class="cast">A B</li><li class="cast">C</li></ul>'
    movie = parser.extract_movie(html)
    assert movie.name == "Custom"
    assert movie.actors == ("A B", "C")
