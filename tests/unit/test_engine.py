"""Unit tests for game/engine.py - RoundEngine and challenge lookups."""
import asyncio
import logging
import threading

import pytest

from game.engine import RoundEngine
from game.errors import RetrievalError, StateError
from game.player import Player
from game.state import EntityKind, GameState, Outcome, RoundPhase


@pytest.fixture
def engine_factory(rules, dicaprio, fake_provider):
    """RoundEngine with three players, mid-round, one movie named."""
    def _create(provider=None):
        players = [Player(i, name) for i, name in enumerate(("Alice", "Bob", "Carol"))]
        engine = RoundEngine(GameState(players=players), rules, provider or fake_provider)
        engine.select_subject(dicaprio)
        engine.start_round()
        engine.submit_answer("Inception")
        return engine

    return _create


class BlockingProvider:
    """Wraps a provider and holds fetch_details until released."""

    def __init__(self, inner):
        self.inner = inner
        self.release = threading.Event()
        self.entered = threading.Event()

    def find_best_match(self, kind, query):
        return self.inner.find_best_match(kind, query)

    def fetch_details(self, kind, entity_id):
        self.entered.set()
        self.release.wait(timeout=5)
        return self.inner.fetch_details(kind, entity_id)


class TestEngineTransitions:
    """Tests for the engine's state swapping."""

    def test_phase_tracks_state(self, engine_factory):
        engine = engine_factory()
        assert engine.phase == RoundPhase.IN_PROGRESS
        assert engine.state.active_index == 1

    def test_failed_event_keeps_state(self, engine_factory):
        engine = engine_factory()
        before = engine.state

        with pytest.raises(StateError):
            engine.confirm_suggestion(True)

        assert engine.state is before

    def test_timer_expiry(self, engine_factory):
        engine = engine_factory()
        result = engine.on_timer_expired()

        assert result.outcome == Outcome.TIMEOUT
        assert engine.state.players[1].consecutive_wrong == 1


class TestChallengeLookup:
    """Tests for issue_challenge."""

    def test_successful_challenge(self, engine_factory, fake_provider):
        engine = engine_factory()
        result = engine.issue_challenge(1, 2)

        assert result.outcome == Outcome.CHALLENGE_STARTED
        assert engine.phase == RoundPhase.CHALLENGE_IN_PROGRESS
        assert engine.state.challenge.subject.name == "Inception"
        assert (EntityKind.MOVIE, "Inception") in fake_provider.search_calls
        assert (EntityKind.MOVIE, 27205) in fake_provider.detail_calls

    def test_no_match_keeps_token(self, engine_factory, fake_provider):
        engine = engine_factory()
        fake_provider.entities.pop((EntityKind.MOVIE, 27205))

        with pytest.raises(RetrievalError) as exc_info:
            engine.issue_challenge(1, 2)

        assert exc_info.value.message == (
            "Could not find details for the movie. Try a different challenge."
        )
        assert engine.state.players[1].challenges_remaining == 1
        assert engine.state.pending_challenge is None
        assert engine.state.timer.running
        assert not engine.challenge_pending

    def test_transport_failure_keeps_token(self, engine_factory, fake_provider):
        engine = engine_factory()
        fake_provider.fail = True

        with pytest.raises(RetrievalError):
            engine.issue_challenge(1, 2)

        assert engine.state.players[1].challenges_remaining == 1
        assert engine.phase == RoundPhase.IN_PROGRESS

    def test_no_provider(self, engine_factory):
        engine = engine_factory()
        engine.provider = None

        with pytest.raises(RetrievalError):
            engine.issue_challenge(1, 2)
        assert engine.state.pending_challenge is None

    def test_stale_lookup_discarded(self, engine_factory, fake_provider):
        engine = engine_factory()

        class ResettingProvider:
            def find_best_match(self, kind, query):
                return fake_provider.find_best_match(kind, query)

            def fetch_details(self, kind, entity_id):
                engine.reset_session()
                return fake_provider.fetch_details(kind, entity_id)

        engine.provider = ResettingProvider()

        with pytest.raises(StateError):
            engine.issue_challenge(1, 2)

        assert engine.phase == RoundPhase.AWAITING_SUBJECT
        assert engine.state.challenge is None

    def test_challenge_logged(self, engine_factory, caplog):
        engine = engine_factory()
        with caplog.at_level(logging.INFO, logger="game.engine"):
            engine.issue_challenge(1, 2)

        assert "Challenge started" in caplog.text


class TestAsyncChallenge:
    """Tests for issue_challenge_async."""

    @pytest.mark.asyncio
    async def test_pending_lookup_blocks_other_events(self, engine_factory, fake_provider):
        blocking = BlockingProvider(fake_provider)
        engine = engine_factory(provider=blocking)
        remaining = engine.state.timer.remaining_seconds

        task = asyncio.create_task(engine.issue_challenge_async(1, 2))
        await asyncio.sleep(0)

        assert engine.challenge_pending
        with pytest.raises(StateError):
            engine.submit_answer("Titanic")
        result = engine.tick()
        assert result.outcome == Outcome.TICK
        assert engine.state.timer.remaining_seconds == remaining

        blocking.release.set()
        result = await task

        assert result.outcome == Outcome.CHALLENGE_STARTED
        assert engine.state.active_index == 2
        assert not engine.challenge_pending

    @pytest.mark.asyncio
    async def test_async_lookup_failure(self, engine_factory, fake_provider):
        engine = engine_factory()
        fake_provider.fail = True

        with pytest.raises(RetrievalError):
            await engine.issue_challenge_async(1, 2)

        assert not engine.challenge_pending
        assert engine.state.players[1].challenges_remaining == 1

    @pytest.mark.asyncio
    async def test_round_moves_on_during_lookup(self, engine_factory, fake_provider):
        blocking = BlockingProvider(fake_provider)
        engine = engine_factory(provider=blocking)

        task = asyncio.create_task(engine.issue_challenge_async(1, 2))
        await asyncio.sleep(0)
        engine.reset_session()
        blocking.release.set()

        with pytest.raises(StateError):
            await task
        assert engine.phase == RoundPhase.AWAITING_SUBJECT

    @pytest.mark.asyncio
    async def test_cancelled_lookup_releases_the_turn(self, engine_factory, fake_provider):
        blocking = BlockingProvider(fake_provider)
        engine = engine_factory(provider=blocking)
        remaining = engine.state.timer.remaining_seconds

        task = asyncio.create_task(engine.issue_challenge_async(1, 2))
        await asyncio.sleep(0)
        assert engine.challenge_pending

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        blocking.release.set()

        assert not engine.challenge_pending
        assert engine.state.players[1].challenges_remaining == 1
        engine.tick()
        assert engine.state.timer.remaining_seconds == remaining - 1
        assert engine.submit_answer("Titanic").outcome == Outcome.CORRECT


class BrokenProvider:
    """Provider with a bug: every lookup raises something unexpected."""

    def find_best_match(self, kind, query):
        raise KeyError("results")

    def fetch_details(self, kind, entity_id):
        raise AssertionError("not reached")


class TestUnexpectedLookupErrors:
    """Lookup failures other than RetrievalError leave the game playable."""

    def test_sync_challenge(self, engine_factory):
        engine = engine_factory(provider=BrokenProvider())

        with pytest.raises(RetrievalError) as exc_info:
            engine.issue_challenge(1, 2)

        assert isinstance(exc_info.value.__cause__, KeyError)
        assert not engine.challenge_pending
        assert engine.state.players[1].challenges_remaining == 1
        assert engine.state.timer.running
        assert engine.submit_answer("Titanic").outcome == Outcome.CORRECT

    @pytest.mark.asyncio
    async def test_async_challenge(self, engine_factory):
        engine = engine_factory(provider=BrokenProvider())

        with pytest.raises(RetrievalError):
            await engine.issue_challenge_async(1, 2)

        assert not engine.challenge_pending
        assert engine.phase == RoundPhase.IN_PROGRESS

    def test_failure_is_logged(self, engine_factory, caplog):
        engine = engine_factory(provider=BrokenProvider())

        with caplog.at_level(logging.ERROR, logger="game.engine"):
            with pytest.raises(RetrievalError):
                engine.issue_challenge(1, 2)

        assert "Challenge lookup for 'Inception' failed" in caplog.text
