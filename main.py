"""
MOVIE MATCH - a hot-seat movie trivia game

Players take turns naming movies an actor starred in (or actors in a
movie's cast). Wrong answers and timeouts knock players out of the round;
the last correct answer wins it, and the first to three round wins takes
the game.
"""
import sys
import io

# Fix Windows console encoding for emojis
if sys.platform == 'win32':
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import argparse
import logging
import time
from typing import List, Optional

from catalog import CachedProvider, StaticProvider, TMDBProvider
from game import ui
from game.errors import RetrievalError
from game.provider import DataProvider
from game.rules import Rules
from game.session import GameSession
from game.state import EntityKind, Outcome, RoundPhase, TurnResult


logger = logging.getLogger("movie_match")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MOVIE MATCH - hot-seat movie trivia")
    parser.add_argument("--players", type=int, help="Number of players")
    parser.add_argument("--names", help="Comma-separated player names")
    parser.add_argument("--offline", action="store_true",
                        help="Use the bundled offline catalog instead of TMDB")
    parser.add_argument("--data", help="Path to an offline catalog JSON file (implies --offline)")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity")
    return parser.parse_args(argv)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_provider(args: argparse.Namespace) -> DataProvider:
    """Pick the catalog: a file for offline play, TMDB otherwise."""
    if args.offline or args.data:
        return CachedProvider(StaticProvider.from_file(args.data))

    provider = TMDBProvider()
    if not provider.api_key:
        ui.console.print("[yellow]No TMDB_API_KEY set, falling back to the offline catalog.[/yellow]\n")
        return CachedProvider(StaticProvider.from_file())
    return CachedProvider(provider)


def ask_player_names(args: argparse.Namespace, rules: Rules) -> List[str]:
    if args.names:
        return [name.strip() for name in args.names.split(",")]

    count = args.players
    if count is None:
        valid = range(rules.min_players, rules.max_players + 1)
        count = int(ui.get_player_input(
            f"How many players? ({rules.min_players}-{rules.max_players}):", valid
        ))

    names = []
    for i in range(count):
        name = ui.console.input(f"[bold green]Name for player {i + 1}:[/bold green] ").strip()
        names.append(name or f"Player {i + 1}")
    return names


def choose_kind() -> EntityKind:
    ui.print_mode_menu()
    choice = ui.get_player_input("Mode:", range(1, 3))
    return EntityKind.ACTOR if choice == "1" else EntityKind.MOVIE


def choose_subject(session: GameSession) -> bool:
    """Search or roll a subject until one is accepted. False if the players quit."""
    kind = choose_kind()
    label = "actor" if kind == EntityKind.ACTOR else "movie"
    hits = session.popular_subjects(kind)
    ui.print_search_results(hits, title=f"Popular {label}s")

    while True:
        ui.console.print(f"[dim]Search for an {label}, pick a number, 'r' for random, 'q' to quit.[/dim]")
        entry = ui.console.input("[bold cyan]>[/bold cyan] ").strip()

        if entry.lower() == "q":
            return False
        if entry.lower() == "r":
            with ui.create_progress_spinner() as progress:
                progress.add_task(f"[cyan]Picking a random {label}...", total=None)
                result = session.random_subject(kind)
        elif entry.isdigit() and 1 <= int(entry) <= len(hits):
            hit = hits[int(entry) - 1]
            with ui.create_progress_spinner() as progress:
                progress.add_task(f"[cyan]Loading {hit.name}...", total=None)
                result = session.choose_subject(kind, hit.entity_id)
        else:
            hits = session.search(kind, entry)
            ui.print_search_results(hits)
            continue

        if result.ok:
            ui.console.print(f"[green]✓ {result.message}[/green]\n")
            return True
        ui.print_result(result, session.state, animate=False)


def drain_clock(session: GameSession, started: float) -> Optional[TurnResult]:
    """Apply one tick per second spent thinking. Returns the timeout, if any."""
    elapsed = int(time.monotonic() - started)
    for _ in range(elapsed):
        result = session.tick()
        if result.outcome != Outcome.TICK:
            return result
    return None


def resolve_suggestion(session: GameSession, result: TurnResult, started: float) -> TurnResult:
    """Keep asking y/n until the suggestion is settled."""
    while result.outcome == Outcome.SUGGESTION:
        ui.print_suggestion(result.suggestion or "")
        reply = ui.console.input("[bold cyan]>[/bold cyan] ").strip().lower()
        timeout = drain_clock(session, started)
        if timeout is not None:
            return timeout
        started = time.monotonic()
        if reply in ("y", "yes"):
            result = session.confirm_suggestion(True)
        elif reply in ("n", "no"):
            result = session.confirm_suggestion(False)
    return result


def handle_command(session: GameSession, command: str) -> Optional[TurnResult]:
    """Slash commands typed instead of an answer."""
    parts = command.split()
    name = parts[0].lower()

    if name == "/standings":
        ui.print_standings(session.players, session.active_player.player_id)
    elif name == "/named":
        ui.print_named_items(session.state)
    elif name == "/challenge":
        if len(parts) < 2 or not parts[1].isdigit():
            ui.console.print("[yellow]Usage: /challenge <player #>[/yellow]\n")
            return None
        target = session.players[int(parts[1]) - 1] if 0 < int(parts[1]) <= len(session.players) else None
        if target is None:
            ui.console.print("[yellow]No such player.[/yellow]\n")
            return None
        with ui.create_progress_spinner() as progress:
            progress.add_task("[cyan]Setting up the challenge...", total=None)
            return session.issue_challenge(target.player_id)
    else:
        ui.print_help()
    return None


def play_round(session: GameSession) -> bool:
    """Run turns until the round ends. False if the players quit."""
    ui.print_round_banner(session.state)
    ui.print_help()

    while session.phase.is_playing:
        ui.print_turn_prompt(session.state)
        ui.flush_input()
        started = time.monotonic()
        entry = ui.console.input("[bold cyan]>[/bold cyan] ").strip()

        timeout = drain_clock(session, started)
        if timeout is not None:
            ui.print_result(timeout, session.state)
            continue

        if entry.lower() in ("/quit", "/q"):
            return False
        if entry.startswith("/"):
            result = handle_command(session, entry)
            if result is not None:
                ui.print_result(result, session.state, animate=False)
            continue

        started = time.monotonic()
        result = session.submit_answer(entry)
        if result.outcome == Outcome.SUGGESTION:
            result = resolve_suggestion(session, result, started)
        ui.print_result(result, session.state)
    return True


def change_characters(session: GameSession):
    """Between rounds, let players cycle their character emoji."""
    while True:
        entry = ui.console.input(
            "\n[dim]Player # to change character, or Enter for the next round:[/dim] "
        ).strip()
        if not entry:
            return
        if not entry.isdigit() or not 0 < int(entry) <= len(session.players):
            ui.console.print("[yellow]No such player.[/yellow]")
            continue
        player = session.players[int(entry) - 1]
        if session.cycle_character(player.player_id) is not None:
            ui.console.print(f"{ui.player_label(player)} changed character.")


def play_game(session: GameSession):
    """Rounds until someone reaches the win score or the players quit."""
    while True:
        if not choose_subject(session):
            return

        result = session.start_round()
        if not result.ok:
            ui.print_result(result, session.state, animate=False)
            continue
        if not play_round(session):
            return

        if session.phase == RoundPhase.SESSION_COMPLETE:
            again = ui.console.input("[bold]Play again? (y/n):[/bold] ").strip().lower()
            if again not in ("y", "yes"):
                return
            session.reset_session()
        else:
            change_characters(session)
            session.next_round()
        ui.clear()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for MOVIE MATCH."""
    args = parse_args(argv)
    configure_logging(args.log_level)

    ui.clear()
    ui.console.print("\n[bold cyan]╔═══════════════════════════════════════╗[/bold cyan]")
    ui.console.print("[bold cyan]║            🎬 MOVIE MATCH 🎭           ║[/bold cyan]")
    ui.console.print("[bold cyan]╚═══════════════════════════════════════╝[/bold cyan]\n")

    try:
        provider = build_provider(args)
    except RetrievalError as e:
        ui.console.print(f"[bold red]{e.message}[/bold red]")
        return 1

    rules = Rules.from_config()
    names = ask_player_names(args, rules)
    try:
        session = GameSession(names, provider=provider, rules_config=rules)
    except ValueError as e:
        ui.console.print(f"[bold red]{e}[/bold red]")
        return 1

    logger.info("Starting game with %d players", len(names))
    play_game(session)
    ui.console.print("\n[bold]Thanks for playing MOVIE MATCH![/bold]\n")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        ui.console.print("\n\n[yellow]Game interrupted. Thanks for playing![/yellow]\n")
        sys.exit(0)
