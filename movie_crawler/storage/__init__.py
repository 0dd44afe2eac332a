"""
In-memory storage for crawled movies.
"""

from .models import Movie, tokenize
from .index import InvertedIndex

__all__ = ['Movie', 'tokenize', 'InvertedIndex']
