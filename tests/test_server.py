"""
Tests for the HTTP query interface.
"""

import asyncio

from aiohttp.test_utils import TestClient, TestServer

from movie_crawler.api.server import create_app
from movie_crawler.storage.index import InvertedIndex
from movie_crawler.storage.models import Movie


def _get(index, path):
    async def run():
        async with TestClient(TestServer(create_app(index))) as client:
            response = await client.get(path)
            return response.status, await response.json()
    return asyncio.run(run())


def _sample_index():
    index = InvertedIndex()
    index.insert_movie(Movie(name="Fargo", year="1996", director="Joel Coen",
                             actors=["Frances McDormand", "William H. Macy"]))
    index.insert_movie(Movie(name="Blood Simple", actors=["Frances McDormand"]))
    return index


def test_query_returns_json_movies():
    status, body = _get(_sample_index(), "/fargo")
    assert status == 200
    assert body == [{
        'name': "Fargo",
        'actors': ["Frances McDormand", "William H. Macy"],
        'year': "1996",
        'director': "Joel Coen",
    }]


def test_query_is_case_insensitive():
    status, body = _get(_sample_index(), "/McDormand")
    assert status == 200
    assert sorted(movie['name'] for movie in body) == ["Blood Simple", "Fargo"]


def test_unknown_term_returns_empty_array():
    status, body = _get(_sample_index(), "/nothing")
    assert status == 200
    assert body == []


def test_missing_optional_fields_are_null():
    status, body = _get(_sample_index(), "/simple")
    assert body == [{'name': "Blood Simple", 'actors': ["Frances McDormand"],
                     'year': None, 'director': None}]


def test_root_returns_index_stats():
    status, body = _get(_sample_index(), "/")
    assert status == 200
    assert body['movies'] == 2
