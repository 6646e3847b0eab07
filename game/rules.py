"""Round rules as pure state transitions.

Every public function takes a GameState and returns a new one (plus a
TurnResult describing what happened). The input state is never modified:
work happens on a deep copy, so a transition that raises leaves the caller's
state untouched.

Turn flow:
    select_subject -> start_round -> (submit_answer | confirm_suggestion |
    tick/timer_expired | begin_challenge + complete_challenge)* -> round end
"""
import copy
from dataclasses import dataclass
from typing import Optional, Tuple

from game.config_loader import config
from game.errors import InsufficientDataError, RetrievalError, StateError, ValidationError
from game.state import (
    ChallengeRequest, ChallengeState, ChallengeStatus, EntityKind, GameMode,
    GameState, Outcome, RoundPhase, SubjectEntity, TurnResult,
)
from game.timer import TimerController
from game.validator import MatchKind, validate


@dataclass(frozen=True)
class Rules:
    """Tunable rule constants."""
    turn_seconds: int = 30
    max_wrong: int = 2
    win_score: int = 3
    min_candidates: int = 5
    challenges_per_round: int = 1
    min_players: int = 2
    max_players: int = 6

    @classmethod
    def from_config(cls) -> 'Rules':
        settings = config.get_game_settings()
        defaults = cls()
        return cls(
            turn_seconds=settings.get('turn_seconds', defaults.turn_seconds),
            max_wrong=settings.get('max_wrong', defaults.max_wrong),
            win_score=settings.get('win_score', defaults.win_score),
            min_candidates=settings.get('min_candidates', defaults.min_candidates),
            challenges_per_round=settings.get('challenges_per_round', defaults.challenges_per_round),
            min_players=settings.get('min_players', defaults.min_players),
            max_players=settings.get('max_players', defaults.max_players),
        )


Transition = Tuple[GameState, TurnResult]


def _noun(kind: EntityKind) -> str:
    return "actor" if kind == EntityKind.ACTOR else "movie"


def _plural(kind: EntityKind) -> str:
    return _noun(kind) + "s"


def _result(state: GameState, outcome: Outcome, message: str = "", **kwargs) -> TurnResult:
    return TurnResult(phase=state.phase, outcome=outcome, message=message, **kwargs)


def _require_not_over(state: GameState) -> None:
    if state.phase == RoundPhase.SESSION_COMPLETE:
        raise StateError("The game is over. Reset the session to play again.")


def _require_turn(state: GameState) -> None:
    _require_not_over(state)
    if not state.phase.is_playing:
        raise StateError("No turn is being played right now.")
    if state.pending_challenge is not None:
        raise StateError("Hold on, a challenge is being set up.")


def check_subject(entity: SubjectEntity, rules: Rules) -> None:
    """Reject subjects that do not have enough names to play a round."""
    if len(entity.candidates) >= rules.min_candidates:
        return
    if entity.kind == EntityKind.ACTOR:
        message = "This person doesn't have enough known movies. Please select another actor."
    else:
        message = "This movie doesn't have enough known actors. Please select another movie."
    raise InsufficientDataError(
        message, available=len(entity.candidates), required=rules.min_candidates
    )


def select_subject(state: GameState, entity: SubjectEntity, rules: Rules) -> Transition:
    """Choose the subject for the next round."""
    _require_not_over(state)
    if state.phase.is_playing:
        raise StateError("A round is already in progress.")
    check_subject(entity, rules)

    new = copy.deepcopy(state)
    new.subject = entity
    new.mode = GameMode.for_subject(entity.kind)
    new.phase = RoundPhase.AWAITING_SUBJECT
    new.named.clear()
    new.challenge = None
    new.pending_suggestion = None
    new.generation += 1
    TimerController(new.timer).pause()

    return new, _result(
        new, Outcome.SUBJECT_SELECTED,
        f"{entity.name} selected ({len(entity.candidates)} {_plural(entity.answer_kind)} known)."
    )


def start_round(state: GameState, rules: Rules) -> Transition:
    """Begin play on the selected subject with the first seat active."""
    _require_not_over(state)
    if state.phase != RoundPhase.AWAITING_SUBJECT:
        raise StateError("A round can only start once a subject has been chosen.")
    if state.subject is None:
        raise StateError("Select an actor or movie first.")
    if len(state.players) < rules.min_players:
        raise StateError(f"At least {rules.min_players} players are needed.")
    check_subject(state.subject, rules)

    new = copy.deepcopy(state)
    new.named.clear()
    for player in new.players:
        player.reset_for_round(rules.challenges_per_round)
    new.active_index = 0
    new.last_correct_index = None
    new.challenge = None
    new.pending_challenge = None
    new.pending_suggestion = None
    new.last_challenge_status = None
    new.round_winner_index = None
    new.round_num += 1
    new.generation += 1
    new.phase = RoundPhase.IN_PROGRESS
    TimerController(new.timer).reset(rules.turn_seconds)

    first = new.player_at(0)
    return new, _result(
        new, Outcome.ROUND_STARTED,
        f"Round {new.round_num}: name {_plural(new.subject.answer_kind)} for {new.subject.name}! "
        f"{first.name} goes first.",
        player_id=first.player_id,
    )


def submit_answer(state: GameState, text: str, rules: Rules) -> Transition:
    """Check the active player's answer against the subject in scope."""
    _require_turn(state)
    if state.pending_suggestion is not None:
        raise StateError("Confirm or reject the suggestion first.")
    if not text or not text.strip():
        raise StateError("Type an answer first.")

    subject = state.scope_subject
    check = validate(text, subject.candidates, state.named)
    new = copy.deepcopy(state)
    answer_noun = _noun(subject.answer_kind)

    if check.kind == MatchKind.EXACT:
        return _correct(new, check.canonical, rules)

    if check.kind == MatchKind.SUGGESTION:
        new.pending_suggestion = check.canonical
        return new, _result(
            new, Outcome.SUGGESTION, f"Did you mean \"{check.canonical}\"?",
            player_id=new.player_at(new.active_index).player_id,
            suggestion=check.canonical,
        )

    if check.kind == MatchKind.DUPLICATE:
        return _incorrect(new, f"This {answer_noun} has already been named!", rules, Outcome.DUPLICATE)

    if subject.kind == EntityKind.ACTOR:
        message = "That movie doesn't star this actor."
    else:
        message = "That actor isn't in this movie."
    return _incorrect(new, message, rules, Outcome.INCORRECT)


def confirm_suggestion(state: GameState, accept: bool, rules: Rules) -> Transition:
    """Resolve a pending "did you mean?" suggestion."""
    _require_turn(state)
    if state.pending_suggestion is None:
        raise StateError("There is no suggestion to confirm.")

    new = copy.deepcopy(state)
    suggestion = new.pending_suggestion
    new.pending_suggestion = None

    if accept and suggestion not in new.named:
        return _correct(new, suggestion, rules)
    return _incorrect(new, "Incorrect answer.", rules, Outcome.INCORRECT)


def timer_expired(state: GameState, rules: Rules) -> Transition:
    """The active player ran out of time: same as a wrong answer."""
    _require_turn(state)
    new = copy.deepcopy(state)
    new.pending_suggestion = None
    return _incorrect(new, "Time's up!", rules, Outcome.TIMEOUT)


def tick(state: GameState, rules: Rules) -> Transition:
    """Advance the turn timer by one second, expiring the turn at zero."""
    new = copy.deepcopy(state)
    if not new.phase.is_playing or new.pending_challenge is not None:
        return state, _result(state, Outcome.TICK, player_id=None)

    if TimerController(new.timer).tick():
        return timer_expired(new, rules)

    return new, _result(
        new, Outcome.TICK, f"{new.timer.remaining_seconds}s left",
        player_id=new.player_at(new.active_index).player_id,
    )


def begin_challenge(state: GameState, challenger_id: int, target_id: int,
                    rules: Rules) -> Tuple[GameState, ChallengeRequest]:
    """Validate a challenge and park it while its subject is looked up.

    The returned state has the timer paused and the request recorded; the
    caller must follow up with complete_challenge or abort_challenge.
    """
    _require_not_over(state)
    if state.phase != RoundPhase.IN_PROGRESS:
        raise StateError("Challenges can only be issued during normal play.")
    if state.pending_challenge is not None:
        raise StateError("A challenge is already being set up.")
    if state.pending_suggestion is not None:
        raise StateError("Confirm or reject the suggestion first.")

    challenger = state.get_player(challenger_id)
    target = state.get_player(target_id)
    if challenger is None or target is None:
        raise StateError("Unknown player.")
    if challenger_id == target_id:
        raise StateError("You can't challenge yourself.")
    if challenger.eliminated:
        raise StateError("Eliminated players can't issue challenges.")
    if challenger.challenges_remaining <= 0:
        raise StateError(f"{challenger.name} has no challenges left this round.")
    if target.eliminated:
        raise StateError(f"{target.name} has already been eliminated.")

    last_named = state.named.last
    if last_named is None:
        raise StateError("No items have been named yet to challenge!")

    request = ChallengeRequest(
        challenger_id=challenger_id,
        target_id=target_id,
        query=last_named,
        kind=state.subject.kind.opposite,
        generation=state.generation,
    )

    new = copy.deepcopy(state)
    new.pending_challenge = request
    TimerController(new.timer).pause()
    return new, request


def is_current(state: GameState, request: ChallengeRequest) -> bool:
    """True while the game is still waiting on this exact lookup."""
    return state.pending_challenge == request and state.generation == request.generation


def abort_challenge(state: GameState, request: ChallengeRequest) -> GameState:
    """Drop a pending challenge without spending the challenger's token."""
    if state.pending_challenge != request:
        return state
    new = copy.deepcopy(state)
    new.pending_challenge = None
    TimerController(new.timer).resume()
    return new


def complete_challenge(state: GameState, request: ChallengeRequest,
                       entity: Optional[SubjectEntity], rules: Rules) -> Transition:
    """Start the challenge turn once its subject has been retrieved."""
    if not is_current(state, request):
        raise StateError("Challenge lookup is no longer relevant.")
    if entity is None or entity.kind != request.kind or len(entity.candidates) < rules.min_candidates:
        raise RetrievalError(
            f"Could not find details for the {_noun(request.kind)}. Try a different challenge."
        )

    new = copy.deepcopy(state)
    challenger = new.get_player(request.challenger_id)
    target_index = new.index_of(request.target_id)
    target = new.player_at(target_index)

    challenger.challenges_remaining -= 1
    new.challenge = ChallengeState(
        challenger_id=request.challenger_id,
        challenged_id=request.target_id,
        subject=entity,
    )
    new.pending_challenge = None
    new.last_challenge_status = None
    new.active_index = target_index
    new.phase = RoundPhase.CHALLENGE_IN_PROGRESS
    TimerController(new.timer).reset(rules.turn_seconds)

    return new, _result(
        new, Outcome.CHALLENGE_STARTED,
        f"{challenger.name} challenges {target.name}: name {_plural(entity.answer_kind)} "
        f"for {entity.name}!",
        player_id=target.player_id,
    )


def next_round(state: GameState) -> Transition:
    """Leave the results screen and go back to picking a subject."""
    _require_not_over(state)
    if state.phase != RoundPhase.ROUND_COMPLETE:
        raise StateError("The current round hasn't finished yet.")

    new = copy.deepcopy(state)
    new.subject = None
    new.named.clear()
    new.challenge = None
    new.last_challenge_status = None
    new.phase = RoundPhase.AWAITING_SUBJECT
    new.generation += 1
    return new, _result(new, Outcome.SESSION_RESET, "Pick a new actor or movie.")


def reset_session(state: GameState, rules: Rules) -> Transition:
    """Start over: zero scores, fresh tokens, no subject."""
    new = copy.deepcopy(state)
    for player in new.players:
        player.score = 0
        player.reset_for_round(rules.challenges_per_round)
    new.phase = RoundPhase.AWAITING_SUBJECT
    new.mode = None
    new.subject = None
    new.named.clear()
    new.active_index = 0
    new.last_correct_index = None
    new.challenge = None
    new.pending_challenge = None
    new.pending_suggestion = None
    new.last_challenge_status = None
    new.round_winner_index = None
    new.round_num = 0
    new.generation += 1
    TimerController(new.timer).stop()
    return new, _result(new, Outcome.SESSION_RESET, "New game! Scores have been reset.")


def _correct(new: GameState, canonical: str, rules: Rules) -> Transition:
    player = new.player_at(new.active_index)
    new.named.add(canonical)
    player.consecutive_wrong = 0
    new.last_correct_index = new.active_index

    status = None
    message = "Correct!"
    if new.phase == RoundPhase.CHALLENGE_IN_PROGRESS:
        status = ChallengeStatus.SUCCESS
        message = "Correct! Challenge survived!"
        _clear_challenge(new, status)

    round_over = _advance_turn(new, rules)
    return new, _result(
        new, Outcome.CORRECT, message + (round_over or ""),
        player_id=player.player_id,
        challenge_status=status,
        winner_id=_winner_id(new) if round_over else None,
    )


def _incorrect(new: GameState, reason: str, rules: Rules, outcome: Outcome) -> Transition:
    player = new.player_at(new.active_index)
    player.consecutive_wrong = min(rules.max_wrong, player.consecutive_wrong + 1)

    eliminated_id = None
    wrongs_remaining = rules.max_wrong - player.consecutive_wrong
    if wrongs_remaining > 0:
        plural = "s" if wrongs_remaining > 1 else ""
        message = f"{reason} {wrongs_remaining} more incorrect answer{plural} and you're out!"
    else:
        player.eliminated = True
        eliminated_id = player.player_id
        message = f"{reason} You've been eliminated for this round!"

    status = None
    if new.phase == RoundPhase.CHALLENGE_IN_PROGRESS:
        status = ChallengeStatus.FAILED

    if player.eliminated and len(new.remaining_players) <= 1:
        message += _end_round(new)
    else:
        if status is not None:
            _clear_challenge(new, status)
        round_over = _advance_turn(new, rules)
        if round_over:
            message += round_over

    return new, _result(
        new, outcome, message,
        player_id=player.player_id,
        eliminated_id=eliminated_id,
        challenge_status=status,
        winner_id=_winner_id(new) if not new.phase.is_playing else None,
        error=ValidationError(reason) if outcome != Outcome.TIMEOUT else None,
    )


def _clear_challenge(new: GameState, status: ChallengeStatus) -> None:
    new.challenge = None
    new.last_challenge_status = status
    new.phase = RoundPhase.IN_PROGRESS


def _advance_turn(new: GameState, rules: Rules) -> Optional[str]:
    """Move to the next non-eliminated seat, wrapping once.

    Returns the round-end message if nobody is left to play, else None.
    """
    seats = len(new.players)
    for step in range(1, seats + 1):
        index = (new.active_index + step) % seats
        if not new.player_at(index).eliminated:
            new.active_index = index
            TimerController(new.timer).reset(rules.turn_seconds)
            return None
    return _end_round(new)


def _end_round(new: GameState) -> str:
    """Close the round, award the point and detect the session winner."""
    TimerController(new.timer).stop()
    if new.challenge is not None:
        new.last_challenge_status = new.last_challenge_status or ChallengeStatus.FAILED
    new.challenge = None
    new.pending_challenge = None
    new.pending_suggestion = None
    new.generation += 1

    winner_index = new.last_correct_index
    if winner_index is None:
        remaining = [i for i, p in enumerate(new.players) if not p.eliminated]
        if len(remaining) == 1:
            winner_index = remaining[0]
    new.round_winner_index = winner_index

    if winner_index is None:
        new.phase = RoundPhase.ROUND_COMPLETE
        return " Round over. Nobody scores this time."

    winner = new.player_at(winner_index)
    winner.score += 1
    if winner.score >= new.win_score:
        new.phase = RoundPhase.SESSION_COMPLETE
        return f" {winner.name} wins the game with {winner.score} points!"

    new.phase = RoundPhase.ROUND_COMPLETE
    return f" {winner.name} wins the round!"


def _winner_id(new: GameState) -> Optional[int]:
    if new.round_winner_index is None:
        return None
    return new.player_at(new.round_winner_index).player_id
