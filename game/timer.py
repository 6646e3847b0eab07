"""
Turn timer management.

Handles:
- A single per-turn countdown, advanced one second per tick
- Expiry reported exactly once per reset
- Pausing while no turn is being played
- An asyncio clock that drives tick() in real time
"""

import asyncio
from dataclasses import dataclass, asdict
from typing import Any, Awaitable, Callable, Dict, Optional, Union


DEFAULT_TURN_SECONDS = 30


@dataclass
class TimerState:
    """Current state of a timer."""
    total_seconds: int = DEFAULT_TURN_SECONDS
    remaining_seconds: int = DEFAULT_TURN_SECONDS
    running: bool = False
    expired: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimerState':
        return cls(
            total_seconds=data.get('total_seconds', DEFAULT_TURN_SECONDS),
            remaining_seconds=data.get('remaining_seconds', DEFAULT_TURN_SECONDS),
            running=data.get('running', False),
            expired=data.get('expired', False),
        )


class TimerController:
    """
    Countdown for the active turn.

    The controller works on a TimerState it does not own, so the timer can
    live inside the serializable game state. It knows nothing about players
    or rounds: tick() returns True on the tick that reaches zero and the
    owner decides what expiry means.
    """

    def __init__(self, state: Optional[TimerState] = None,
                 on_expire: Optional[Callable[[], Any]] = None):
        self.state = state if state is not None else TimerState()
        self.on_expire = on_expire

    @property
    def remaining(self) -> int:
        """Get remaining seconds."""
        return self.state.remaining_seconds

    @property
    def is_running(self) -> bool:
        """Check if the countdown is currently advancing."""
        return self.state.running and not self.state.expired

    def reset(self, seconds: int = DEFAULT_TURN_SECONDS) -> None:
        """Restart the countdown at the given number of seconds."""
        if seconds <= 0:
            raise ValueError(f"Timer duration must be positive, got {seconds}")
        self.state.total_seconds = seconds
        self.state.remaining_seconds = seconds
        self.state.expired = False
        self.state.running = True

    def pause(self) -> None:
        """Freeze the countdown without losing the remaining time."""
        self.state.running = False

    def resume(self) -> None:
        """Continue a paused countdown. Inert once expired."""
        if not self.state.expired and self.state.remaining_seconds > 0:
            self.state.running = True

    def stop(self) -> None:
        """Stop the countdown entirely."""
        self.state.running = False
        self.state.remaining_seconds = 0

    def tick(self) -> bool:
        """Advance one second.

        Returns:
            True only on the tick that reaches zero.
        """
        if not self.is_running:
            return False

        self.state.remaining_seconds = max(0, self.state.remaining_seconds - 1)
        if self.state.remaining_seconds > 0:
            return False

        self.state.expired = True
        self.state.running = False
        if self.on_expire:
            self.on_expire()
        return True


TickCallback = Callable[[], Union[None, Awaitable[None]]]


class TurnClock:
    """
    Calls a tick callback once per interval until stopped.

    Used by real-time front-ends; the engine itself never sleeps.
    """

    def __init__(self, on_tick: TickCallback, interval: float = 1.0):
        self.on_tick = on_tick
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Restarts the clock if already running."""
        self.stop()
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval)
                result = self.on_tick()
                if asyncio.iscoroutine(result):
                    await result
        except asyncio.CancelledError:
            pass

    def stop(self) -> None:
        """Cancel the clock."""
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None
