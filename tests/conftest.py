"""Shared test fixtures for MOVIE MATCH tests."""
import json
import random
from io import StringIO
from typing import Dict, List, Optional, Tuple

import pytest
from rich.console import Console

from game.config_loader import ConfigLoader
from game.errors import RetrievalError
from game.player import Player
from game.provider import DataProvider, SearchHit
from game.rules import Rules
from game.session import GameSession
from game.state import EntityKind, GameState, SubjectEntity


DICAPRIO = SubjectEntity(
    kind=EntityKind.ACTOR,
    entity_id=6193,
    name="Leonardo DiCaprio",
    candidates=(
        "Inception", "Titanic", "The Revenant", "Shutter Island",
        "The Departed", "Catch Me If You Can",
    ),
)

INCEPTION = SubjectEntity(
    kind=EntityKind.MOVIE,
    entity_id=27205,
    name="Inception",
    candidates=(
        "Leonardo DiCaprio", "Joseph Gordon-Levitt", "Elliot Page",
        "Tom Hardy", "Ken Watanabe", "Cillian Murphy",
    ),
)

TITANIC = SubjectEntity(
    kind=EntityKind.MOVIE,
    entity_id=597,
    name="Titanic",
    candidates=(
        "Leonardo DiCaprio", "Kate Winslet", "Billy Zane",
        "Kathy Bates", "Frances Fisher", "Bill Paxton",
    ),
)

THIN_ACTOR = SubjectEntity(
    kind=EntityKind.ACTOR,
    entity_id=1,
    name="Cameo Only",
    candidates=("Short Film", "Another Short", "Third Short", "Fourth Short"),
)


class FakeProvider(DataProvider):
    """In-memory provider that records every call."""

    def __init__(self, entities: Optional[List[SubjectEntity]] = None, fail: bool = False):
        self.entities: Dict[Tuple[EntityKind, int], SubjectEntity] = {}
        for entity in entities or []:
            self.entities[(entity.kind, entity.entity_id)] = entity
        self.fail = fail
        self.detail_calls: List[Tuple[EntityKind, int]] = []
        self.search_calls: List[Tuple[EntityKind, str]] = []

    def fetch_details(self, kind: EntityKind, entity_id: int) -> SubjectEntity:
        self.detail_calls.append((kind, entity_id))
        if self.fail:
            raise RetrievalError("HTTP error 503")
        entity = self.entities.get((kind, entity_id))
        if entity is None:
            raise RetrievalError(f"No {kind.value} with id {entity_id}")
        return entity

    def search(self, kind: EntityKind, query: str, limit: int = 6) -> List[SearchHit]:
        self.search_calls.append((kind, query))
        if self.fail:
            raise RetrievalError("HTTP error 503")
        needle = query.strip().lower()
        return [
            SearchHit(kind=kind, entity_id=e.entity_id, name=e.name)
            for (k, _), e in self.entities.items()
            if k == kind and needle in e.name.lower()
        ][:limit]


@pytest.fixture(autouse=True)
def deterministic_random():
    """Seed random for reproducible tests."""
    random.seed(42)
    yield
    random.seed()


@pytest.fixture
def temp_config_dir(tmp_path, monkeypatch):
    """Create temporary config directory with a test game_settings.json."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    game_settings = {
        "game": {
            "turn_seconds": 20,
            "max_wrong": 3,
            "win_score": 5,
            "min_candidates": 4,
            "challenges_per_round": 2,
            "min_players": 2,
            "max_players": 4
        },
        "catalog": {
            "base_url": "https://catalog.test/3",
            "image_base_url": "https://images.test/t/p",
            "image_size": "w92",
            "language": "en-GB",
            "max_names": 3,
            "search_limit": 2,
            "timeout": 1,
            "api_key": "from-config"
        }
    }
    (config_dir / "game_settings.json").write_text(json.dumps(game_settings, indent=2))

    # Reset the singleton instance FIRST
    ConfigLoader._instance = None

    # Patch the class-level _config_dir attribute
    monkeypatch.setattr(ConfigLoader, '_config_dir', str(config_dir))

    # Force reload by creating new instance
    from game import config_loader, rules
    from catalog import tmdb
    new_config = ConfigLoader()
    monkeypatch.setattr(config_loader, 'config', new_config)

    # Also patch config in modules that import it
    monkeypatch.setattr(rules, 'config', new_config)
    monkeypatch.setattr(tmdb, 'config', new_config)

    yield config_dir

    # Cleanup: reset singleton
    ConfigLoader._instance = None


@pytest.fixture
def mock_console(monkeypatch):
    """Mock Rich Console for UI tests."""
    output = StringIO()
    console = Console(file=output, force_terminal=False, width=80, legacy_windows=False)

    # Replace global console in ui module
    import game.ui as ui_module
    monkeypatch.setattr(ui_module, 'console', console)

    return console, output


@pytest.fixture
def no_sleep(monkeypatch):
    """Make animation pauses instant."""
    import game.animations as animations_module
    monkeypatch.setattr(animations_module.time, 'sleep', lambda *_: None)


@pytest.fixture
def rules():
    """Default rule set, independent of the config on disk."""
    return Rules()


@pytest.fixture
def fake_provider():
    return FakeProvider([DICAPRIO, INCEPTION, TITANIC, THIN_ACTOR])


@pytest.fixture
def state_factory():
    """Factory for a fresh GameState with named players."""
    def _create(names=("Alice", "Bob", "Carol"), win_score: int = 3) -> GameState:
        players = [Player(i, name) for i, name in enumerate(names)]
        return GameState(players=players, win_score=win_score)

    return _create


@pytest.fixture
def session_factory(fake_provider, rules):
    """Factory for a GameSession wired to the fake provider."""
    def _create(names=("Alice", "Bob", "Carol"), provider=None, rules_config=None) -> GameSession:
        return GameSession(
            list(names),
            provider=provider if provider is not None else fake_provider,
            rules_config=rules_config or rules,
            rng=random.Random(7),
        )

    return _create


@pytest.fixture
def dicaprio():
    """Actor subject with six known movies."""
    return DICAPRIO


@pytest.fixture
def inception():
    """Movie subject with six known cast members."""
    return INCEPTION


@pytest.fixture
def titanic():
    return TITANIC


@pytest.fixture
def thin_actor():
    """Actor with too few movies to play."""
    return THIN_ACTOR
