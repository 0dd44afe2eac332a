"""
Tests for tokenization and the Movie record.
"""

import dataclasses

import pytest

from movie_crawler.storage.models import Movie, tokenize


def test_tokenize_splits_on_whitespace_runs():
    assert tokenize("The  Dark\tKnight\nRises") == ["The", "Dark", "Knight", "Rises"]


def test_tokenize_empty_and_blank():
    assert tokenize("") == []
    assert tokenize("   ") == []


def test_tokenize_keeps_case_and_duplicates():
    assert tokenize("New York New York") == ["New", "York", "New", "York"]


def test_index_terms_order():
    movie = Movie(name="Heat Wave", year="1995", director="Michael Mann",
                  actors=["Al Pacino", "Robert De Niro"])
    assert movie.index_terms() == [
        "Heat", "Wave", "1995", "Michael", "Mann", "Al", "Pacino", "Robert", "De", "Niro"
    ]


def test_index_terms_name_only():
    assert Movie(name="Alien").index_terms() == ["Alien"]


def test_equality_and_hash_by_name_only():
    a = Movie(name="Solaris", year="1972", director="Andrei Tarkovsky")
    b = Movie(name="Solaris", year="2002", director="Steven Soderbergh")
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
    assert Movie(name="solaris") != a


def test_movie_is_immutable():
    movie = Movie(name="Up", actors=["Ed Asner"])
    assert movie.actors == ("Ed Asner",)
    with pytest.raises(dataclasses.FrozenInstanceError):
        movie.name = "Down"


def test_to_dict_shape():
    movie = Movie(name="Up", actors=["Ed Asner"], year="2009")
    assert movie.to_dict() == {
        'name': "Up",
        'actors': ["Ed Asner"],
        'year': "2009",
        'director': None,
    }
    assert Movie.from_dict(movie.to_dict()).actors == ("Ed Asner",)
