"""Short terminal flashes for game events."""

import time
from typing import Optional, Sequence

from rich.console import Console
from rich.text import Text


FLASH_WIDTH = 50


def _flash(message: str, styles: Sequence[str], pause: float = 0.25,
           console: Optional[Console] = None):
    """Print message once per style, centered, with a short pause between."""
    console = console or Console()
    for style in styles:
        console.print(Text(message.center(FLASH_WIDTH), style=style))
        time.sleep(pause)


def play_correct_animation(console: Optional[Console] = None):
    """Flash after an accepted answer."""
    _flash(">>> CORRECT! <<<", ["bold green"], pause=0.2, console=console)


def play_incorrect_animation(console: Optional[Console] = None):
    """Flash after a wrong answer or a timeout."""
    _flash(">>> WRONG <<<", ["bold red", "bold yellow"], pause=0.15, console=console)


def play_elimination_animation(console: Optional[Console] = None):
    """Flash when a player is out for the round."""
    _flash(">>> ELIMINATED <<<", ["bold red", "bold yellow", "bold red"], console=console)
    time.sleep(0.3)


def play_victory_animation(console: Optional[Console] = None):
    """Flash when a player wins the game."""
    _flash(">>> VICTORY! <<<", ["bold green", "bold yellow", "bold green"], pause=0.3,
           console=console)
    time.sleep(0.5)
