"""Offline catalog read from a JSON file.

Format::

    {
      "actors": [{"id": 6193, "name": "Leonardo DiCaprio", "movies": ["Inception", ...]}],
      "movies": [{"id": 27205, "title": "Inception", "actors": ["Leonardo DiCaprio", ...]}]
    }
"""
import json
import logging
import os
from typing import Any, Dict, List, Optional

from game.errors import RetrievalError
from game.provider import DataProvider, SearchHit
from game.state import EntityKind, SubjectEntity


logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config", "catalog_sample.json"
)


class StaticProvider(DataProvider):
    """DataProvider over an in-memory catalog."""

    def __init__(self, data: Dict[str, Any]):
        self._entries: Dict[EntityKind, Dict[int, Dict[str, Any]]] = {
            EntityKind.ACTOR: {},
            EntityKind.MOVIE: {},
        }
        for item in data.get("actors", []):
            self._entries[EntityKind.ACTOR][int(item["id"])] = {
                "name": item["name"],
                "names": list(item.get("movies", [])),
                "image_url": item.get("image_url"),
            }
        for item in data.get("movies", []):
            self._entries[EntityKind.MOVIE][int(item["id"])] = {
                "name": item["title"],
                "names": list(item.get("actors", [])),
                "image_url": item.get("image_url"),
            }

    @classmethod
    def from_file(cls, path: Optional[str] = None) -> 'StaticProvider':
        """Load a catalog file.

        Raises:
            RetrievalError: The file is missing or not valid JSON.
        """
        path = path or DEFAULT_DATA_FILE
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise RetrievalError(f"Catalog file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise RetrievalError(f"Catalog file {path} is not valid JSON: {e}") from e
        provider = cls(data)
        logger.info("Loaded offline catalog %s: %d actors, %d movies", path,
                    len(provider._entries[EntityKind.ACTOR]),
                    len(provider._entries[EntityKind.MOVIE]))
        return provider

    def fetch_details(self, kind: EntityKind, entity_id: int) -> SubjectEntity:
        entry = self._entries[kind].get(entity_id)
        if entry is None:
            raise RetrievalError(f"No {kind.value} with id {entity_id}")
        return SubjectEntity(
            kind=kind,
            entity_id=entity_id,
            name=entry["name"],
            candidates=tuple(entry["names"]),
            image_url=entry["image_url"],
        )

    def search(self, kind: EntityKind, query: str, limit: int = 6) -> List[SearchHit]:
        needle = query.strip().lower()
        if not needle:
            return []

        matches = []
        for entity_id, entry in self._entries[kind].items():
            name = entry["name"]
            position = name.lower().find(needle)
            if position >= 0:
                # exact names first, then earliest match, then shortest
                rank = (name.lower() != needle, position, len(name))
                matches.append((rank, entity_id, name, entry["image_url"]))
        matches.sort(key=lambda m: m[0])

        return [
            SearchHit(kind=kind, entity_id=entity_id, name=name, image_url=image_url)
            for _, entity_id, name, image_url in matches[:limit]
        ]
