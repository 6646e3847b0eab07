"""Catalog lookup contract consumed by the engine.

The engine never talks to a catalog service directly. It is handed an object
implementing DataProvider and uses it for one thing: turning the last named
item into a subject of the opposite kind when a challenge is issued.
Concrete providers live in the catalog package.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from game.state import EntityKind, SubjectEntity


@dataclass(frozen=True)
class SearchHit:
    """One search result, before its names have been fetched."""
    kind: EntityKind
    entity_id: int
    name: str
    image_url: Optional[str] = None
    popularity: float = 0.0


class DataProvider(ABC):
    """Looks up actors and movies by id or free text."""

    @abstractmethod
    def fetch_details(self, kind: EntityKind, entity_id: int) -> SubjectEntity:
        """Fetch an entity with its answer names, most prominent first.

        Raises:
            RetrievalError: The entity could not be retrieved.
        """

    @abstractmethod
    def search(self, kind: EntityKind, query: str, limit: int = 6) -> List[SearchHit]:
        """Free-text search, best hits first.

        Raises:
            RetrievalError: The search could not be performed.
        """

    def find_best_match(self, kind: EntityKind, query: str) -> Optional[int]:
        """Map free text to the id of the most likely entity, or None."""
        hits = self.search(kind, query, limit=1)
        return hits[0].entity_id if hits else None
