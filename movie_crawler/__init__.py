"""
Movie Crawler

Crawls a paginated movie listing, extracts one record per detail page and
builds an in-memory inverted index over the extracted words.
"""

__version__ = "1.0.0"
__description__ = "A concurrent crawl-and-index pipeline for movie listing sites"
