"""
Game session: the roster, the win condition, and the event surface.

A front-end talks only to GameSession. Every event returns a TurnResult;
rule violations and lookup failures come back as rejected results (with the
error attached) instead of exceptions, and leave the game untouched.
"""

import logging
import random
from typing import Callable, List, Optional, Sequence

from game import subjects
from game.engine import RoundEngine
from game.errors import MovieMatchError, RetrievalError
from game.player import Player
from game.provider import DataProvider, SearchHit
from game.rules import Rules
from game.state import (
    EntityKind, GameState, Outcome, RoundPhase, SubjectEntity, TurnResult,
)


logger = logging.getLogger(__name__)


class GameSession:
    """One game, from the first subject pick to the first player at WIN_SCORE."""

    def __init__(
        self,
        player_names: Sequence[str],
        provider: Optional[DataProvider] = None,
        rules_config: Optional[Rules] = None,
        rng: Optional[random.Random] = None,
    ):
        self.rules = rules_config or Rules.from_config()
        if not self.rules.min_players <= len(player_names) <= self.rules.max_players:
            raise ValueError(
                f"Need {self.rules.min_players}-{self.rules.max_players} players, "
                f"got {len(player_names)}"
            )

        players = [
            Player(i, name.strip() or f"Player {i + 1}")
            for i, name in enumerate(player_names)
        ]
        state = GameState(players=players, win_score=self.rules.win_score)
        self.engine = RoundEngine(state, self.rules, provider)
        self.provider = provider
        self.rng = rng or random.Random()

    @classmethod
    def from_state(cls, state: GameState, provider: Optional[DataProvider] = None,
                   rules_config: Optional[Rules] = None,
                   rng: Optional[random.Random] = None) -> 'GameSession':
        """Resume a saved game."""
        session = cls([p.name for p in state.players], provider, rules_config, rng)
        session.engine.state = state
        return session

    # --- Read-only views ---

    @property
    def state(self) -> GameState:
        return self.engine.state

    @property
    def phase(self) -> RoundPhase:
        return self.engine.phase

    @property
    def players(self) -> List[Player]:
        return self.engine.state.players

    @property
    def active_player(self) -> Optional[Player]:
        return self.engine.state.active_player

    @property
    def winner(self) -> Optional[Player]:
        """The session winner, once someone reaches the win score."""
        return self.engine.state.session_winner

    def get_standings(self) -> List[Player]:
        """Players sorted by score, best first."""
        return sorted(self.players, key=lambda p: (-p.score, p.eliminated, p.player_id))

    # --- Events ---

    def _dispatch(self, action: Callable[..., TurnResult], *args) -> TurnResult:
        try:
            return action(*args)
        except MovieMatchError as e:
            logger.info("Rejected %s: %s", action.__name__, e.message)
            return TurnResult(
                phase=self.phase,
                outcome=Outcome.REJECTED,
                message=e.message,
                error=e,
            )

    def select_subject(self, entity: SubjectEntity) -> TurnResult:
        return self._dispatch(self.engine.select_subject, entity)

    def choose_subject(self, kind: EntityKind, entity_id: int) -> TurnResult:
        """Fetch a subject from the catalog and select it."""
        return self._dispatch(self._choose_subject, kind, entity_id)

    def _choose_subject(self, kind: EntityKind, entity_id: int) -> TurnResult:
        if self.provider is None:
            raise RetrievalError("No catalog is available to look up subjects.")
        try:
            entity = self.provider.fetch_details(kind, entity_id)
        except RetrievalError as e:
            logger.warning("Lookup of %s %d failed: %s", kind.value, entity_id, e.message)
            raise RetrievalError("There was an error retrieving details. Please try again.") from e
        return self.engine.select_subject(entity)

    def random_subject(self, kind: EntityKind) -> TurnResult:
        """Select a random curated actor or movie."""
        entity_id, name = subjects.pick_random(kind, self.rng)
        logger.debug("Random %s picked: %s (%d)", kind.value, name, entity_id)
        return self.choose_subject(kind, entity_id)

    def popular_subjects(self, kind: EntityKind, count: int = 10) -> List[SearchHit]:
        """Curated picks to show before the players search for something."""
        return [
            SearchHit(kind=kind, entity_id=entity_id, name=name)
            for entity_id, name in subjects.popular(kind, count, self.rng)
        ]

    def search(self, kind: EntityKind, query: str) -> List[SearchHit]:
        """Search the catalog; failures yield no hits."""
        if self.provider is None or not query.strip():
            return self.popular_subjects(kind)
        try:
            return self.provider.search(kind, query)
        except RetrievalError as e:
            logger.warning("Search for %r failed: %s", query, e.message)
            return []

    def start_round(self) -> TurnResult:
        return self._dispatch(self.engine.start_round)

    def submit_answer(self, text: str) -> TurnResult:
        return self._dispatch(self.engine.submit_answer, text)

    def confirm_suggestion(self, accept: bool) -> TurnResult:
        return self._dispatch(self.engine.confirm_suggestion, accept)

    def issue_challenge(self, target_id: int, challenger_id: Optional[int] = None) -> TurnResult:
        """Challenge target_id. The challenger defaults to the active player."""
        if challenger_id is None:
            challenger_id = self._active_id()
        return self._dispatch(self.engine.issue_challenge, challenger_id, target_id)

    async def issue_challenge_async(self, target_id: int,
                                    challenger_id: Optional[int] = None) -> TurnResult:
        if challenger_id is None:
            challenger_id = self._active_id()
        try:
            return await self.engine.issue_challenge_async(challenger_id, target_id)
        except MovieMatchError as e:
            logger.info("Rejected challenge: %s", e.message)
            return TurnResult(phase=self.phase, outcome=Outcome.REJECTED,
                              message=e.message, error=e)

    def tick(self) -> TurnResult:
        return self._dispatch(self.engine.tick)

    def next_round(self) -> TurnResult:
        return self._dispatch(self.engine.next_round)

    def reset_session(self) -> TurnResult:
        return self._dispatch(self.engine.reset_session)

    def cycle_character(self, player_id: int) -> Optional[str]:
        """Change a player's character emoji between rounds."""
        if self.phase.is_playing:
            return None
        player = self.state.get_player(player_id)
        if player is None:
            return None
        return player.next_character()

    def _active_id(self) -> int:
        player = self.active_player
        # -1 never matches a seat, so the engine rejects it as unknown
        return player.player_id if player else -1
