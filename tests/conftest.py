import pytest

from tests.pages import BASE_URL, START_URL, detail_page, listing_page


@pytest.fixture
def two_page_site():
    """Two listing pages, three movies sharing the actor Jane Doe."""
    return {
        START_URL: listing_page(["/title/tt1/", "/title/tt2/"], next_href="?page=2"),
        f"{BASE_URL}/search/title?page=2": listing_page(["/title/tt3/"]),
        f"{BASE_URL}/title/tt1/": detail_page("The First Film", "1994", "Ann Director",
                                              ["Jane Doe", "John Smith"]),
        f"{BASE_URL}/title/tt2/": detail_page("Second Story", "2001", None, ["Jane Doe"]),
        f"{BASE_URL}/title/tt3/": detail_page("Third Time", None, "Bob Director",
                                              ["Mary Major", "Jane Doe"]),
    }
