"""
Thread-safe inverted index from lowercase terms to movies.
"""

import logging
import threading
from typing import Any, Dict, List, Set

from .models import Movie


class InvertedIndex:
    """
    Maps each term to the set of movies containing it.

    Keys are lowercased on both insert and query, so callers may pass terms
    in any case. One lock guards the whole map and every set in it.
    """

    def __init__(self):
        self._terms: Dict[str, Set[Movie]] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _normalize(term: str) -> str:
        return term.lower()

    def insert(self, term: str, movie: Movie):
        """File a movie under a term. Re-inserting an equal movie is a no-op."""
        key = self._normalize(term)
        with self._lock:
            movies = self._terms.get(key)
            if movies is None:
                movies = set()
                self._terms[key] = movies
            movies.add(movie)

    def insert_movie(self, movie: Movie) -> int:
        """
        File a movie under every one of its index terms.

        Returns:
            Number of terms the movie was filed under
        """
        terms = movie.index_terms()
        for term in terms:
            self.insert(term, movie)
        self.logger.debug(f"Indexed '{movie.name}' under {len(terms)} terms")
        return len(terms)

    def query(self, term: str) -> List[Movie]:
        """Return a snapshot of the movies filed under a term, or an empty list."""
        key = self._normalize(term)
        with self._lock:
            movies = self._terms.get(key)
            if not movies:
                return []
            return list(movies)

    def terms(self) -> List[str]:
        """Return all indexed terms."""
        with self._lock:
            return list(self._terms)

    def movies(self) -> Set[Movie]:
        """Return every distinct indexed movie."""
        with self._lock:
            result: Set[Movie] = set()
            for movies in self._terms.values():
                result.update(movies)
            return result

    def movie_count(self) -> int:
        return len(self.movies())

    def get_stats(self) -> Dict[str, Any]:
        """Get index statistics."""
        with self._lock:
            postings = sum(len(movies) for movies in self._terms.values())
            term_count = len(self._terms)
            movie_count = len(set().union(*self._terms.values()))
        return {
            'terms': term_count,
            'postings': postings,
            'movies': movie_count,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._terms)

    def __contains__(self, term: str) -> bool:
        key = self._normalize(term)
        with self._lock:
            return key in self._terms
