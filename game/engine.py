"""Round engine for MOVIE MATCH.

This engine:
- Holds the one GameState of a session and swaps it atomically
- Delegates every transition to the pure functions in game.rules
- Runs the catalog lookup a challenge needs, synchronously or off the
  event loop, and drops results that arrive after the round moved on
"""

import asyncio
import logging
from typing import Optional

from game import rules
from game.errors import MovieMatchError, RetrievalError, StateError
from game.provider import DataProvider
from game.rules import Rules
from game.state import (
    ChallengeRequest, EntityKind, GameState, Outcome, RoundPhase, SubjectEntity, TurnResult,
)


logger = logging.getLogger(__name__)


class RoundEngine:
    """State machine driving rounds, turns, eliminations and challenges."""

    def __init__(
        self,
        state: GameState,
        rules_config: Optional[Rules] = None,
        provider: Optional[DataProvider] = None,
    ):
        self.state = state
        self.rules = rules_config or Rules()
        self.provider = provider

    @property
    def phase(self) -> RoundPhase:
        """Current round phase."""
        return self.state.phase

    @property
    def challenge_pending(self) -> bool:
        return self.state.pending_challenge is not None

    def select_subject(self, entity: SubjectEntity) -> TurnResult:
        self.state, result = rules.select_subject(self.state, entity, self.rules)
        logger.info("Subject selected: %s %s (%d names)",
                    entity.kind.value, entity.name, len(entity.candidates))
        return result

    def start_round(self) -> TurnResult:
        self.state, result = rules.start_round(self.state, self.rules)
        logger.info("Round %d started on %s", self.state.round_num, self.state.subject.name)
        return result

    def submit_answer(self, text: str) -> TurnResult:
        self.state, result = rules.submit_answer(self.state, text, self.rules)
        self._log_turn(result)
        return result

    def confirm_suggestion(self, accept: bool) -> TurnResult:
        self.state, result = rules.confirm_suggestion(self.state, accept, self.rules)
        self._log_turn(result)
        return result

    def on_timer_expired(self) -> TurnResult:
        self.state, result = rules.timer_expired(self.state, self.rules)
        self._log_turn(result)
        return result

    def tick(self) -> TurnResult:
        self.state, result = rules.tick(self.state, self.rules)
        if result.outcome != Outcome.TICK:
            self._log_turn(result)
        return result

    def next_round(self) -> TurnResult:
        self.state, result = rules.next_round(self.state)
        return result

    def reset_session(self) -> TurnResult:
        self.state, result = rules.reset_session(self.state, self.rules)
        logger.info("Session reset")
        return result

    def issue_challenge(self, challenger_id: int, target_id: int) -> TurnResult:
        """Challenge target_id, blocking on the catalog lookup.

        Raises:
            StateError: The challenge is not allowed right now.
            RetrievalError: No usable opposite-kind subject was found. The
                challenger keeps their token.
        """
        self.state, request = rules.begin_challenge(
            self.state, challenger_id, target_id, self.rules
        )
        try:
            entity = self._lookup(request)
        except BaseException:
            self._abort(request)
            raise
        return self._complete(request, entity)

    async def issue_challenge_async(self, challenger_id: int, target_id: int) -> TurnResult:
        """Same as issue_challenge, but the lookup runs in a worker thread.

        While the lookup is in flight the timer is paused and answers are
        refused, so no other event can move the turn under the challenge.
        """
        self.state, request = rules.begin_challenge(
            self.state, challenger_id, target_id, self.rules
        )
        try:
            entity = await asyncio.to_thread(self._lookup, request)
        except BaseException:
            # includes cancellation of the awaiting task
            self._abort(request)
            raise
        return self._complete(request, entity)

    def _lookup(self, request: ChallengeRequest) -> SubjectEntity:
        if self.provider is None:
            raise RetrievalError("No catalog is available for challenges.")

        try:
            entity_id = self.provider.find_best_match(request.kind, request.query)
            if entity_id is None:
                kind = "actor" if request.kind == EntityKind.ACTOR else "movie"
                raise RetrievalError(
                    f"Could not find details for the {kind}. Try a different challenge."
                )
            return self.provider.fetch_details(request.kind, entity_id)
        except MovieMatchError:
            raise
        except Exception as e:
            logger.exception("Challenge lookup for '%s' failed", request.query)
            raise RetrievalError(
                "There was an error retrieving details. Please try again."
            ) from e

    def _abort(self, request: ChallengeRequest) -> None:
        if rules.is_current(self.state, request):
            self.state = rules.abort_challenge(self.state, request)
            logger.info("Challenge on '%s' aborted, token kept", request.query)
        else:
            logger.info("Ignoring failed lookup for stale challenge on '%s'", request.query)

    def _complete(self, request: ChallengeRequest, entity: SubjectEntity) -> TurnResult:
        if not rules.is_current(self.state, request):
            logger.info("Discarding stale challenge lookup for '%s'", request.query)
            raise StateError("The round moved on before the challenge was ready.")
        try:
            self.state, result = rules.complete_challenge(self.state, request, entity, self.rules)
        except RetrievalError:
            self._abort(request)
            raise
        logger.info("Challenge started: player %d -> player %d on %s",
                    request.challenger_id, request.target_id, entity.name)
        return result

    def _log_turn(self, result: TurnResult) -> None:
        logger.debug("Turn result: %s (%s) phase=%s",
                     result.outcome.value, result.message, result.phase.value)
        if result.eliminated_id is not None:
            logger.info("Player %d eliminated", result.eliminated_id)
        if not result.phase.is_playing and result.phase != RoundPhase.AWAITING_SUBJECT:
            logger.info("Round %d over, winner: %s", self.state.round_num, result.winner_id)
