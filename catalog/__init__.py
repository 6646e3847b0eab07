"""Catalog providers that turn actor and movie ids into playable subjects."""
from catalog.cache import CachedProvider
from catalog.static import StaticProvider
from catalog.tmdb import TMDBProvider

__all__ = ["CachedProvider", "StaticProvider", "TMDBProvider"]
