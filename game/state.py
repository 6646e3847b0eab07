"""Game state definitions.

GameState is the single source of truth for a session: players, phase,
subject, timer and challenge all live here, and it round-trips through
plain dicts so a game can be saved or sent over the wire.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from game.player import Player
from game.timer import TimerState


class EntityKind(Enum):
    """What a subject (or an answer) is."""
    ACTOR = "actor"
    MOVIE = "movie"

    @property
    def opposite(self) -> 'EntityKind':
        return EntityKind.MOVIE if self == EntityKind.ACTOR else EntityKind.ACTOR

    @property
    def label(self) -> str:
        return "person" if self == EntityKind.ACTOR else "movie"


class GameMode(Enum):
    """Which way round a game is played."""
    ACTOR_TO_MOVIES = "actor_to_movies"
    MOVIE_TO_ACTORS = "movie_to_actors"

    @property
    def subject_kind(self) -> EntityKind:
        return EntityKind.ACTOR if self == GameMode.ACTOR_TO_MOVIES else EntityKind.MOVIE

    @classmethod
    def for_subject(cls, kind: EntityKind) -> 'GameMode':
        return cls.ACTOR_TO_MOVIES if kind == EntityKind.ACTOR else cls.MOVIE_TO_ACTORS


class RoundPhase(Enum):
    """Phases of the round state machine."""
    AWAITING_SUBJECT = "awaiting_subject"
    IN_PROGRESS = "in_progress"
    CHALLENGE_IN_PROGRESS = "challenge_in_progress"
    ROUND_COMPLETE = "round_complete"
    SESSION_COMPLETE = "session_complete"

    @property
    def is_playing(self) -> bool:
        return self in (RoundPhase.IN_PROGRESS, RoundPhase.CHALLENGE_IN_PROGRESS)


class Outcome(Enum):
    """What an event did, for the front-end to react to."""
    SUBJECT_SELECTED = "subject_selected"
    ROUND_STARTED = "round_started"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    DUPLICATE = "duplicate"
    SUGGESTION = "suggestion"
    TIMEOUT = "timeout"
    TICK = "tick"
    CHALLENGE_STARTED = "challenge_started"
    SESSION_RESET = "session_reset"
    REJECTED = "rejected"


class ChallengeStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SubjectEntity:
    """An actor or movie, with the names that count as answers for it."""
    kind: EntityKind
    entity_id: int
    name: str
    candidates: Tuple[str, ...] = ()
    image_url: Optional[str] = None

    @property
    def answer_kind(self) -> EntityKind:
        """Kind of the items players must name for this subject."""
        return self.kind.opposite

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'entity_id': self.entity_id,
            'name': self.name,
            'candidates': list(self.candidates),
            'image_url': self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SubjectEntity':
        return cls(
            kind=EntityKind(data['kind']),
            entity_id=data['entity_id'],
            name=data['name'],
            candidates=tuple(data.get('candidates', [])),
            image_url=data.get('image_url'),
        )


@dataclass
class NamedItemSet:
    """Ordered, case-insensitively unique names accepted this round."""

    _items: List[str] = field(default_factory=list)

    def __contains__(self, name: str) -> bool:
        lowered = name.strip().lower()
        return any(item.lower() == lowered for item in self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def last(self) -> Optional[str]:
        return self._items[-1] if self._items else None

    def add(self, name: str) -> None:
        """Append a name. Raises ValueError if it was already named."""
        if name in self:
            raise ValueError(f"'{name}' has already been named")
        self._items.append(name)

    def clear(self) -> None:
        self._items.clear()

    def to_list(self) -> List[str]:
        return list(self._items)


@dataclass
class ChallengeState:
    """An in-flight challenge: who forced whom, and on which subject."""
    challenger_id: int
    challenged_id: int
    subject: SubjectEntity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'challenger_id': self.challenger_id,
            'challenged_id': self.challenged_id,
            'subject': self.subject.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChallengeState':
        return cls(
            challenger_id=data['challenger_id'],
            challenged_id=data['challenged_id'],
            subject=SubjectEntity.from_dict(data['subject']),
        )


@dataclass(frozen=True)
class ChallengeRequest:
    """A challenge waiting on its catalog lookup."""
    challenger_id: int
    target_id: int
    query: str
    kind: EntityKind
    generation: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'challenger_id': self.challenger_id,
            'target_id': self.target_id,
            'query': self.query,
            'kind': self.kind.value,
            'generation': self.generation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChallengeRequest':
        return cls(
            challenger_id=data['challenger_id'],
            target_id=data['target_id'],
            query=data['query'],
            kind=EntityKind(data['kind']),
            generation=data['generation'],
        )


@dataclass
class TurnResult:
    """What an event produced: the new phase plus anything worth showing."""
    phase: RoundPhase
    outcome: Outcome
    message: str = ""
    player_id: Optional[int] = None
    suggestion: Optional[str] = None
    eliminated_id: Optional[int] = None
    winner_id: Optional[int] = None
    challenge_status: Optional[ChallengeStatus] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """False only when the event was refused and changed nothing."""
        return self.outcome != Outcome.REJECTED


@dataclass
class GameState:
    """Complete, serializable state of one game session."""

    players: List[Player] = field(default_factory=list)
    win_score: int = 3
    phase: RoundPhase = RoundPhase.AWAITING_SUBJECT
    mode: Optional[GameMode] = None
    subject: Optional[SubjectEntity] = None
    named: NamedItemSet = field(default_factory=NamedItemSet)
    active_index: int = 0
    last_correct_index: Optional[int] = None
    challenge: Optional[ChallengeState] = None
    pending_challenge: Optional[ChallengeRequest] = None
    pending_suggestion: Optional[str] = None
    last_challenge_status: Optional[ChallengeStatus] = None
    timer: TimerState = field(default_factory=TimerState)
    round_num: int = 0
    generation: int = 0
    round_winner_index: Optional[int] = None

    @property
    def active_player(self) -> Optional[Player]:
        """The player whose turn it is, if a turn is being played."""
        if not self.phase.is_playing:
            return None
        return self.player_at(self.active_index)

    @property
    def remaining_players(self) -> List[Player]:
        """Players not eliminated this round."""
        return [p for p in self.players if not p.eliminated]

    @property
    def scope_subject(self) -> Optional[SubjectEntity]:
        """The subject answers are currently checked against."""
        if self.phase == RoundPhase.CHALLENGE_IN_PROGRESS and self.challenge:
            return self.challenge.subject
        return self.subject

    @property
    def session_winner(self) -> Optional[Player]:
        for player in self.players:
            if player.score >= self.win_score:
                return player
        return None

    def player_at(self, index: int) -> Player:
        if index < 0 or index >= len(self.players):
            raise IndexError(f"No player at seat {index} (have {len(self.players)})")
        return self.players[index]

    def index_of(self, player_id: int) -> Optional[int]:
        for index, player in enumerate(self.players):
            if player.player_id == player_id:
                return index
        return None

    def get_player(self, player_id: int) -> Optional[Player]:
        index = self.index_of(player_id)
        return self.players[index] if index is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the whole game to a JSON-compatible dict."""
        return {
            'players': [p.to_dict() for p in self.players],
            'win_score': self.win_score,
            'phase': self.phase.value,
            'mode': self.mode.value if self.mode else None,
            'subject': self.subject.to_dict() if self.subject else None,
            'named': self.named.to_list(),
            'active_index': self.active_index,
            'last_correct_index': self.last_correct_index,
            'challenge': self.challenge.to_dict() if self.challenge else None,
            'pending_challenge': self.pending_challenge.to_dict() if self.pending_challenge else None,
            'pending_suggestion': self.pending_suggestion,
            'last_challenge_status': (
                self.last_challenge_status.value if self.last_challenge_status else None
            ),
            'timer': self.timer.to_dict(),
            'round_num': self.round_num,
            'generation': self.generation,
            'round_winner_index': self.round_winner_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameState':
        """Deserialize a game from a dict produced by to_dict()."""
        mode = data.get('mode')
        subject = data.get('subject')
        challenge = data.get('challenge')
        pending = data.get('pending_challenge')
        status = data.get('last_challenge_status')
        return cls(
            players=[Player.from_dict(p) for p in data.get('players', [])],
            win_score=data.get('win_score', 3),
            phase=RoundPhase(data.get('phase', RoundPhase.AWAITING_SUBJECT.value)),
            mode=GameMode(mode) if mode else None,
            subject=SubjectEntity.from_dict(subject) if subject else None,
            named=NamedItemSet(list(data.get('named', []))),
            active_index=data.get('active_index', 0),
            last_correct_index=data.get('last_correct_index'),
            challenge=ChallengeState.from_dict(challenge) if challenge else None,
            pending_challenge=ChallengeRequest.from_dict(pending) if pending else None,
            pending_suggestion=data.get('pending_suggestion'),
            last_challenge_status=ChallengeStatus(status) if status else None,
            timer=TimerState.from_dict(data.get('timer', {})),
            round_num=data.get('round_num', 0),
            generation=data.get('generation', 0),
            round_winner_index=data.get('round_winner_index'),
        )
