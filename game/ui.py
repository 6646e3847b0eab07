"""Terminal UI helpers using rich library."""
import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from game.animations import (
    play_correct_animation, play_elimination_animation, play_incorrect_animation,
    play_victory_animation,
)
from game.player import Player
from game.provider import SearchHit
from game.state import ChallengeStatus, EntityKind, GameState, Outcome, RoundPhase, TurnResult


console = Console()

ANSWER_OUTCOMES = (Outcome.CORRECT, Outcome.INCORRECT, Outcome.DUPLICATE, Outcome.TIMEOUT)


def flush_input():
    """Flush any buffered keyboard input (prevents enter spam from skipping prompts)."""
    if sys.platform == 'win32':
        import msvcrt
        while msvcrt.kbhit():
            msvcrt.getch()
    else:
        try:
            import termios
            termios.tcflush(sys.stdin, termios.TCIOFLUSH)
        except (ImportError, OSError, ValueError):
            # stdin is not a tty (piped input, tests)
            pass


def clear():
    """Clear the console."""
    if sys.platform == 'win32':
        os.system('cls')
    else:
        os.system('clear')
    console.clear()


def print_header(text: str, color: str = "cyan"):
    """Print a styled header."""
    console.print(f"\n[bold {color}]{'=' * 50}[/bold {color}]")
    console.print(f"[bold {color}]{text.center(50)}[/bold {color}]")
    console.print(f"[bold {color}]{'=' * 50}[/bold {color}]\n")


def player_label(player: Player) -> str:
    return f"{player.character} [{player.color}]{player.name}[/{player.color}]"


def print_standings(players: List[Player], active_id: Optional[int] = None):
    """Print scores, challenge tokens and who is still in the round."""
    ranked = sorted(players, key=lambda p: (-p.score, p.player_id))

    table = Table(title="Current Standings", show_header=True)
    table.add_column("Rank", style="cyan", width=6)
    table.add_column("Player", style="green")
    table.add_column("Score", justify="right", style="yellow")
    table.add_column("Challenges", justify="right", style="magenta")
    table.add_column("Status")

    for i, player in enumerate(ranked, 1):
        if player.eliminated:
            status = "[red]Out[/red]"
        elif player.player_id == active_id:
            status = "[bold green]▶ Playing[/bold green]"
        elif player.consecutive_wrong:
            status = f"[yellow]{player.consecutive_wrong} wrong[/yellow]"
        else:
            status = "[dim]Waiting[/dim]"
        table.add_row(
            f"{i}.",
            player_label(player),
            str(player.score),
            str(player.challenges_remaining),
            status,
        )

    console.print(table)
    console.print()


def print_mode_menu():
    """Print the game-mode choice."""
    console.print("[bold]CHOOSE A GAME MODE:[/bold]\n")
    console.print("  [1] 🎭 Actor → Movies  [dim](name movies the actor starred in)[/dim]")
    console.print("  [2] 🎬 Movie → Actors  [dim](name actors in the movie's cast)[/dim]")
    console.print()


def print_search_results(hits: List[SearchHit], title: str = "Results"):
    """Numbered list of search hits to pick from."""
    if not hits:
        console.print("[yellow]No results found. Try another search.[/yellow]\n")
        return

    console.print(f"[bold]{title}:[/bold]")
    for i, hit in enumerate(hits, 1):
        emoji = "🎭" if hit.kind == EntityKind.ACTOR else "🎬"
        console.print(f"  [{i}] {emoji} {hit.name}")
    console.print()


def print_round_banner(state: GameState):
    """Show the subject of the round and what players must name."""
    subject = state.subject
    if subject is None:
        return
    noun = "movies" if subject.answer_kind == EntityKind.MOVIE else "actors"
    verb = "starring" if subject.kind == EntityKind.ACTOR else "in"
    print_header(f"ROUND {state.round_num}: {subject.name.upper()}", "magenta")
    console.print(f"[bold]Name {noun} {verb} [cyan]{subject.name}[/cyan]![/bold]")
    console.print(f"[dim]{len(subject.candidates)} known answers. First to {state.win_score} wins.[/dim]\n")


def print_named_items(state: GameState):
    """Everything named so far this round, most recent last."""
    named = state.named.to_list()
    if not named:
        console.print("[dim]Nothing named yet.[/dim]\n")
        return
    console.print(f"[bold]Named so far ({len(named)}):[/bold] " + ", ".join(named))
    console.print()


def print_turn_prompt(state: GameState):
    """Whose turn it is, against which subject, and the clock."""
    player = state.active_player
    if player is None:
        return

    subject = state.scope_subject
    remaining = state.timer.remaining_seconds
    clock_color = "red" if remaining <= 5 else "yellow" if remaining <= 10 else "green"

    if state.phase == RoundPhase.CHALLENGE_IN_PROGRESS and state.challenge:
        print_challenge(state)
    console.print(
        f"{player_label(player)}'s turn "
        f"([{clock_color}]⏱ {remaining}s[/{clock_color}]) - subject: [cyan]{subject.name}[/cyan]"
    )


def print_challenge(state: GameState):
    """Panel describing the active challenge."""
    challenge = state.challenge
    if challenge is None:
        return
    challenger = state.get_player(challenge.challenger_id)
    challenged = state.get_player(challenge.challenged_id)
    subject = challenge.subject
    noun = "movie" if subject.answer_kind == EntityKind.MOVIE else "actor"

    lines = [
        f"{player_label(challenger)} challenges {player_label(challenged)}!",
        "",
        f"Name one {noun} for [bold cyan]{subject.name}[/bold cyan]!",
    ]
    console.print(Panel("\n".join(lines), title="⚔️  CHALLENGE", border_style="red"))
    console.print()


def print_suggestion(suggestion: str):
    """Ask the active player to confirm a near miss."""
    console.print(f"[yellow]🤔 Did you mean \"[bold]{suggestion}[/bold]\"?[/yellow] [dim](y/n)[/dim]")


def print_result(result: TurnResult, state: GameState, animate: bool = True):
    """Show what an event did, with a flash for the big moments."""
    outcome = result.outcome
    if outcome in (Outcome.CORRECT, Outcome.CHALLENGE_STARTED, Outcome.ROUND_STARTED):
        console.print(f"[green]✅ {result.message}[/green]")
        if animate and outcome == Outcome.CORRECT:
            play_correct_animation(console)
    elif outcome in (Outcome.INCORRECT, Outcome.DUPLICATE, Outcome.TIMEOUT):
        console.print(f"[red]❌ {result.message}[/red]")
        if animate:
            play_incorrect_animation(console)
    elif outcome == Outcome.SUGGESTION:
        print_suggestion(result.suggestion or "")
    elif outcome == Outcome.REJECTED:
        console.print(f"[yellow]⚠️  {result.message}[/yellow]")
    elif result.message:
        console.print(result.message)

    if result.eliminated_id is not None:
        player = state.get_player(result.eliminated_id)
        if player is not None:
            console.print(f"[bold red]💀 {player_label(player)} is out for this round![/bold red]")
            if animate:
                play_elimination_animation(console)
    console.print()

    if outcome in ANSWER_OUTCOMES and not result.phase.is_playing:
        print_round_summary(result, state, animate)


def print_round_summary(result: TurnResult, state: GameState, animate: bool = True):
    """Standings after a round, or the game-over banner once the game is won."""
    if result.challenge_status == ChallengeStatus.FAILED:
        console.print("[dim]The challenge was not answered.[/dim]")

    if result.phase == RoundPhase.SESSION_COMPLETE:
        winner = state.session_winner
        if winner is not None:
            print_game_over(winner, animate)
    else:
        print_standings(state.players)


def print_game_over(winner: Player, animate: bool = True):
    """Print game over message."""
    if animate:
        play_victory_animation(console)
    console.print()
    console.print("[bold green]" + "=" * 50 + "[/bold green]")
    console.print(f"[bold green]🎉 {player_label(winner)} WINS with {winner.score} points! 🎉[/bold green]")
    console.print("[bold green]" + "=" * 50 + "[/bold green]")
    console.print()


def print_help():
    """Commands available during a turn."""
    console.print("[dim]Type an answer, or: /challenge <player #>, /standings, /named, /quit[/dim]\n")


def get_player_input(prompt: str, valid_range: range = None, color: str = "green") -> str:
    """Get input from player with optional validation."""
    while True:
        response = console.input(f"[bold {color}]{prompt}[/bold {color}] ")
        if valid_range:
            try:
                num = int(response)
                if num in valid_range:
                    return response
                console.print(f"[red]Please enter a number between {valid_range.start} and {valid_range.stop - 1}[/red]")
            except ValueError:
                console.print("[red]Invalid input. Please enter a number[/red]")
        else:
            return response


def create_progress_spinner():
    """Create a progress spinner for catalog lookups."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )
