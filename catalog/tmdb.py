"""
TMDB catalog provider.

This module provides:
- TMDBProvider: search and detail lookups against The Movie Database v3 API
- Conversion of TMDB payloads into SubjectEntity / SearchHit values

The API key is read from the TMDB_API_KEY environment variable, falling back
to catalog.api_key in game_settings.json.
"""
import http.client
import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

from game.config_loader import config
from game.errors import RetrievalError
from game.provider import DataProvider, SearchHit
from game.state import EntityKind, SubjectEntity


logger = logging.getLogger(__name__)

API_KEY_ENV = "TMDB_API_KEY"
USER_AGENT = "MovieMatch/1.0"

DEFAULTS = {
    "base_url": "https://api.themoviedb.org/3",
    "image_base_url": "https://image.tmdb.org/t/p",
    "image_size": "w185",
    "language": "en-US",
    "max_names": 30,
    "search_limit": 6,
    "timeout": 10,
}


class TMDBProvider(DataProvider):
    """DataProvider backed by the TMDB REST API."""

    def __init__(self, api_key: Optional[str] = None, settings: Optional[Dict[str, Any]] = None):
        merged = dict(DEFAULTS)
        merged.update(settings if settings is not None else config.get_catalog_settings())
        self.api_key = api_key or os.environ.get(API_KEY_ENV) or merged.get("api_key") or ""
        self.base_url = merged["base_url"].rstrip("/")
        self.image_base_url = merged["image_base_url"].rstrip("/")
        self.image_size = merged["image_size"]
        self.language = merged["language"]
        self.max_names = int(merged["max_names"])
        self.search_limit = int(merged["search_limit"])
        self.timeout = merged["timeout"]

    # --- HTTP ---

    def _build_url(self, path: str, **params) -> str:
        query = {"api_key": self.api_key, "language": self.language}
        query.update(params)
        return f"{self.base_url}{path}?{urllib.parse.urlencode(query)}"

    def _get_json(self, path: str, **params) -> Dict[str, Any]:
        if not self.api_key:
            raise RetrievalError(f"No TMDB API key configured. Set {API_KEY_ENV}.")

        request = urllib.request.Request(
            self._build_url(path, **params),
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                data = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            logger.warning("TMDB %s returned HTTP %d", path, e.code)
            raise RetrievalError(f"HTTP error {e.code}") from e
        except urllib.error.URLError as e:
            logger.warning("TMDB %s unreachable: %s", path, e.reason)
            raise RetrievalError(f"Network error: {e.reason}") from e
        except (TimeoutError, OSError) as e:
            logger.warning("TMDB %s failed: %s", path, e)
            raise RetrievalError(f"Network error: {e}") from e
        except http.client.HTTPException as e:
            logger.warning("TMDB %s broke off mid-response: %r", path, e)
            raise RetrievalError(f"Network error: {e!r}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("TMDB %s sent a malformed response: %s", path, e)
            raise RetrievalError("Malformed response from TMDB") from e

        if not isinstance(data, dict):
            logger.warning("TMDB %s sent %s instead of an object", path, type(data).__name__)
            raise RetrievalError("Malformed response from TMDB")
        return data

    def image_url(self, path: Optional[str]) -> Optional[str]:
        """Full image URL for a TMDB poster or profile path."""
        if not path:
            return None
        return f"{self.image_base_url}/{self.image_size}{path}"

    # --- DataProvider ---

    def search(self, kind: EntityKind, query: str, limit: int = 6) -> List[SearchHit]:
        query = query.strip()
        if not query:
            return []

        endpoint = "/search/person" if kind == EntityKind.ACTOR else "/search/movie"
        data = self._get_json(endpoint, query=query, page=1, include_adult="false")
        limit = min(limit, self.search_limit)

        results = data.get("results", [])
        if not isinstance(results, list):
            raise RetrievalError("Malformed response from TMDB")

        hits = []
        for item in results[:limit]:
            if not isinstance(item, dict):
                continue
            if kind == EntityKind.ACTOR:
                name, image = item.get("name"), item.get("profile_path")
            else:
                name, image = item.get("title"), item.get("poster_path")
            if not name or item.get("id") is None:
                continue
            hits.append(SearchHit(
                kind=kind,
                entity_id=int(item["id"]),
                name=name,
                image_url=self.image_url(image),
                popularity=float(item.get("popularity") or 0.0),
            ))
        logger.debug("Search %s '%s': %d hits", kind.value, query, len(hits))
        return hits

    def fetch_details(self, kind: EntityKind, entity_id: int) -> SubjectEntity:
        if kind == EntityKind.ACTOR:
            data = self._get_json(f"/person/{entity_id}", append_to_response="movie_credits")
            return self.parse_person(data)
        data = self._get_json(f"/movie/{entity_id}", append_to_response="credits")
        return self.parse_movie(data)

    # --- Payload conversion ---

    def parse_person(self, data: Dict[str, Any]) -> SubjectEntity:
        """Actor with their most popular released movies."""
        cast = (data.get("movie_credits") or {}).get("cast") or []
        released = [
            m for m in cast
            if isinstance(m, dict) and m.get("release_date") and m.get("title")
        ]
        released.sort(key=lambda m: m.get("popularity") or 0, reverse=True)
        titles = _unique([m["title"] for m in released])[:self.max_names]

        return SubjectEntity(
            kind=EntityKind.ACTOR,
            entity_id=int(data.get("id", 0)),
            name=data.get("name", ""),
            candidates=tuple(titles),
            image_url=self.image_url(data.get("profile_path")),
        )

    def parse_movie(self, data: Dict[str, Any]) -> SubjectEntity:
        """Movie with its cast in billing order."""
        cast = (data.get("credits") or {}).get("cast") or []
        billed = sorted(
            (a for a in cast if isinstance(a, dict) and a.get("name")),
            key=lambda a: a.get("order", 0),
        )
        names = _unique([a["name"] for a in billed])[:self.max_names]

        return SubjectEntity(
            kind=EntityKind.MOVIE,
            entity_id=int(data.get("id", 0)),
            name=data.get("title", ""),
            candidates=tuple(names),
            image_url=self.image_url(data.get("poster_path")),
        )


def _unique(names: List[str]) -> List[str]:
    """Drop repeats (same title credited twice), keeping the first."""
    seen = set()
    result = []
    for name in names:
        key = name.lower()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result
