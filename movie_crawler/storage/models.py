"""
Data models for crawled movies.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


def tokenize(text: str) -> List[str]:
    """Split text into index terms on runs of whitespace."""
    if not text:
        return []
    return text.split()


@dataclass(frozen=True)
class Movie:
    """
    A movie extracted from one detail page.

    Two movies are equal when their names are equal; the other fields do not
    take part in equality or hashing, so an index set keeps a single movie
    per name.
    """
    name: str
    actors: Tuple[str, ...] = field(default=(), compare=False)
    year: Optional[str] = field(default=None, compare=False)
    director: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        # Accept any iterable of actors but store an immutable tuple
        if not isinstance(self.actors, tuple):
            object.__setattr__(self, 'actors', tuple(self.actors))

    def index_terms(self) -> List[str]:
        """Terms of the name, then year, director and actors in order."""
        terms = tokenize(self.name)
        for value in (self.year, self.director):
            if value is not None:
                terms.extend(tokenize(value))
        for actor in self.actors:
            terms.extend(tokenize(actor))
        return terms

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            'name': self.name,
            'actors': list(self.actors),
            'year': self.year,
            'director': self.director,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Movie':
        """Create a Movie from a dictionary."""
        return cls(
            name=data['name'],
            actors=tuple(data.get('actors') or ()),
            year=data.get('year'),
            director=data.get('director'),
        )
