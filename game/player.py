"""Player state with serialization support."""
from dataclasses import dataclass
from typing import Any, Dict


# Color palette for players
PLAYER_COLORS = ["red", "yellow", "blue", "green", "magenta", "cyan", "bright_red", "bright_blue"]

# Character options players can cycle through
CHARACTERS = ["🎭", "🎬", "🎞️", "🎥", "🍿", "🎪", "🎟️", "🎫", "🎤", "🎼"]


@dataclass
class Player:
    """
    A seat at the table.

    Score survives across rounds; the other counters are per-round and are
    reset by the engine whenever a round starts.
    """

    player_id: int
    name: str
    score: int = 0
    challenges_remaining: int = 1
    consecutive_wrong: int = 0
    eliminated: bool = False
    character: str = ""

    def __post_init__(self):
        if not self.character:
            self.character = CHARACTERS[self.player_id % len(CHARACTERS)]

    @property
    def color(self) -> str:
        """Get player color based on id."""
        return PLAYER_COLORS[self.player_id % len(PLAYER_COLORS)]

    @property
    def active(self) -> bool:
        """Still playing in the current round."""
        return not self.eliminated

    def reset_for_round(self, challenges: int = 1) -> None:
        """Clear everything that only lasts one round."""
        self.consecutive_wrong = 0
        self.eliminated = False
        self.challenges_remaining = challenges

    def next_character(self) -> str:
        """Cycle to the next character emoji."""
        try:
            index = CHARACTERS.index(self.character)
        except ValueError:
            index = -1
        self.character = CHARACTERS[(index + 1) % len(CHARACTERS)]
        return self.character

    def to_dict(self) -> Dict[str, Any]:
        """Serialize player to dictionary."""
        return {
            'player_id': self.player_id,
            'name': self.name,
            'score': self.score,
            'challenges_remaining': self.challenges_remaining,
            'consecutive_wrong': self.consecutive_wrong,
            'eliminated': self.eliminated,
            'character': self.character,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        """Deserialize player from dictionary."""
        return cls(
            player_id=data['player_id'],
            name=data['name'],
            score=data.get('score', 0),
            challenges_remaining=data.get('challenges_remaining', 1),
            consecutive_wrong=data.get('consecutive_wrong', 0),
            eliminated=data.get('eliminated', False),
            character=data.get('character', ''),
        )
