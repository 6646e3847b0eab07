"""Exception hierarchy for the game engine.

Every error a transition can raise derives from MovieMatchError. None of them
is fatal: the session turns them into a rejected TurnResult and the game state
stays exactly as it was before the call.
"""


class MovieMatchError(Exception):
    """Base exception for all game errors."""

    code = "ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(MovieMatchError):
    """An answer was rejected (duplicate name or no match)."""

    code = "VALIDATION"


class RetrievalError(MovieMatchError):
    """A catalog lookup failed or returned nothing usable."""

    code = "RETRIEVAL"


class InsufficientDataError(MovieMatchError):
    """A subject does not carry enough candidate names to be played."""

    code = "INSUFFICIENT_DATA"

    def __init__(self, message: str, available: int = 0, required: int = 0):
        self.available = available
        self.required = required
        super().__init__(message)


class StateError(MovieMatchError):
    """An event arrived that is not legal in the current phase."""

    code = "STATE"
