#!/usr/bin/env python3
"""
TallyLax command line tracker

Keeps a team's roster, games, attendance and per-player stats in a local
data directory, and prints per-game and season summaries.

Usage:
    python tallylax_cli.py team "Rock Hawks"
    python tallylax_cli.py add-player "Sam Reed" 7 --role goalie
    python tallylax_cli.py add-game "Stealth" --date 2025-04-12
    python tallylax_cli.py attend 1 7
    python tallylax_cli.py stat 1 7 "Shots Faced"
    python tallylax_cli.py stat 1 7 "Shots Faced" --delta -1
    python tallylax_cli.py lock 1
    python tallylax_cli.py season
    python tallylax_cli.py export backup.json
    python tallylax_cli.py import backup.json
    python tallylax_cli.py reset --yes

Games can be referenced by id or by their 1-based position in `games`;
players by id or by jersey number.
"""

import argparse
import logging
import sys
from pathlib import Path

from tallylax import TrackerStore
from tallylax.config import get_backup_filename, get_log_dir, get_storage_dir
from tallylax.constants import (
    GOALIE,
    ROLES,
    RUNNER_CATEGORIES,
    SAVE_PCT,
    SAVES,
    categories_for_role,
)
from tallylax.excel_export import export_season_workbook
from tallylax.exceptions import TallyError, UnknownGameError, UnknownPlayerError
from tallylax.logging_config import setup_logging
from tallylax.storage import LocalStorage

logger = logging.getLogger('tallylax.cli')


def resolve_game(store: TrackerStore, ref: str):
    """Find a game by id or 1-based position."""
    game = store.state.find_game(ref)
    if game is not None:
        return game
    if ref.isdigit() and 1 <= int(ref) <= len(store.games):
        return store.games[int(ref) - 1]
    raise UnknownGameError(ref)


def resolve_player(store: TrackerStore, ref: str):
    """Find a roster player by id or jersey number."""
    player = store.state.find_player(ref)
    if player is not None:
        return player
    matches = [p for p in store.roster if p.number == ref.lstrip('#')]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise TallyError(f'More than one player wears #{ref.lstrip("#")}; use the player id')
    raise UnknownPlayerError(ref)


def confirm(prompt: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    answer = input(f'{prompt} [y/N] ')
    return answer.strip().lower() in ('y', 'yes')


def print_table(title: str, rows, columns) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)
    if not rows:
        print("  (no players on roster)")
        return
    for player, values in rows:
        recorded = {c: values[c] for c in columns if values[c]}
        line = ", ".join(f"{c}: {v}" for c, v in recorded.items()) or "-"
        print(f"  #{player.number} {player.name}: {line}")


def cmd_team(store, args):
    if args.name is not None:
        store.set_team_name(args.name)
    print(f"Team: {store.team.name}")


def cmd_add_player(store, args):
    player = store.add_player(args.name, args.number, args.role)
    print(f"Added {player.label} ({player.role}) id={player.id}")


def cmd_remove_player(store, args):
    player = resolve_player(store, args.player)
    if not confirm(f"Remove {player.name}?", args.yes):
        print("Cancelled.")
        return
    store.remove_player(player.id)
    print(f"Removed {player.label}")


def cmd_players(store, args):
    if not store.roster:
        print("No players on roster.")
    for player in store.roster:
        print(f"  {player.label} ({player.role}) id={player.id}")


def cmd_add_game(store, args):
    game = store.add_game(args.opponent, args.date)
    print(f"Added game {game.label} id={game.id}")


def cmd_games(store, args):
    if not store.games:
        print("No games yet.")
    for i, game in enumerate(store.games, 1):
        status = " [locked]" if store.is_locked(game.id) else ""
        print(f"  {i}. {game.label}{status} id={game.id}")


def cmd_attend(store, args):
    game = resolve_game(store, args.game)
    for ref in args.players:
        player = resolve_player(store, ref)
        present = store.toggle_attendance(game.id, player.id)
        print(f"{player.label}: {'present' if present else 'absent'}")


def cmd_stat(store, args):
    game = resolve_game(store, args.game)
    player = resolve_player(store, args.player)
    stats = store.apply_stat_event(game.id, player.id, args.category, args.delta)
    shown = ", ".join(f"{k}: {v}" for k, v in stats.items())
    print(f"{player.label} vs {game.opponent}: {shown}")


def cmd_lock(store, args):
    game = resolve_game(store, args.game)
    if store.is_locked(game.id):
        print(f"Game {game.label} is already locked.")
        return
    if not confirm(f"Lock {game.label}? This cannot be undone.", args.yes):
        print("Cancelled.")
        return
    store.lock_game(game.id)
    print(f"Locked {game.label}. Stats are read-only.")


def cmd_summary(store, args):
    games = [resolve_game(store, args.game)] if args.game else store.games
    if not games:
        print("No games yet.")
    for game in games:
        title = f"{game.label}{' (locked)' if store.is_locked(game.id) else ''}"
        print_table(title, store.game_summary(game.id), RUNNER_CATEGORIES)
        if args.game:
            present = store.present_players(game.id)
            print(f"\n  Present: {', '.join(p.label for p in present) or 'nobody'}")
            for player in present:
                if player.role == GOALIE:
                    stats = store.player_stats(game.id, player.id)
                    goalie = ", ".join(
                        f"{c}: {stats.get(c, 0)}" for c in categories_for_role(GOALIE)
                    )
                    print(f"  {player.label} (goalie): {goalie}, "
                          f"{SAVES}: {stats.get(SAVES, 0)}, {SAVE_PCT}: {stats.get(SAVE_PCT, '0.0')}")


def cmd_season(store, args):
    rows = store.season_table(by_role=args.by_role or None)
    columns = list(rows[0][1]) if rows else RUNNER_CATEGORIES
    print_table(f"{store.team.name} - Season Totals", rows, columns)


def cmd_export(store, args):
    path = store.export_backup_file(args.path or get_backup_filename())
    print(f"Backup written to {path}")


def cmd_import(store, args):
    store.import_backup_file(args.path)
    print(f"Imported {len(store.roster)} players and {len(store.games)} games from {args.path}")


def cmd_excel(store, args):
    by_role = args.by_role or store.season_by_role
    path = export_season_workbook(args.path, store.state, by_role=by_role)
    print(f"Workbook saved to {path}")


def cmd_reset(store, args):
    if not confirm("Are you sure you want to reset all data?", args.yes):
        print("Cancelled.")
        return
    store.reset_all_data(confirmed=True)
    print("All data reset.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TallyLax roster and game stat tracker")
    parser.add_argument(
        "--data-dir", "-d",
        default=None,
        help="Directory holding the stored state (defaults to the configured storage dir)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging on the console",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Don't write a log file",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("team", help="Show or set the team name")
    p.add_argument("name", nargs="?", default=None)
    p.set_defaults(func=cmd_team)

    p = sub.add_parser("add-player", help="Add a player to the roster")
    p.add_argument("name")
    p.add_argument("number")
    p.add_argument("--role", "-r", choices=ROLES, default="runner")
    p.set_defaults(func=cmd_add_player)

    p = sub.add_parser("remove-player", help="Remove a player from the roster")
    p.add_argument("player")
    p.add_argument("--yes", "-y", action="store_true", help="Don't ask for confirmation")
    p.set_defaults(func=cmd_remove_player)

    p = sub.add_parser("players", help="List the roster")
    p.set_defaults(func=cmd_players)

    p = sub.add_parser("add-game", help="Add a game")
    p.add_argument("opponent")
    p.add_argument("--date", default=None, help="ISO date (default: today)")
    p.set_defaults(func=cmd_add_game)

    p = sub.add_parser("games", help="List games")
    p.set_defaults(func=cmd_games)

    p = sub.add_parser("attend", help="Toggle attendance for one or more players")
    p.add_argument("game")
    p.add_argument("players", nargs="+")
    p.set_defaults(func=cmd_attend)

    p = sub.add_parser("stat", help="Record a stat for a present player")
    p.add_argument("game")
    p.add_argument("player")
    p.add_argument("category")
    p.add_argument("--delta", type=int, default=1, help="Change to apply (default: 1)")
    p.set_defaults(func=cmd_stat)

    p = sub.add_parser("lock", help="Lock a game (permanent)")
    p.add_argument("game")
    p.add_argument("--yes", "-y", action="store_true", help="Don't ask for confirmation")
    p.set_defaults(func=cmd_lock)

    p = sub.add_parser("summary", help="Per-game stat tables")
    p.add_argument("game", nargs="?", default=None)
    p.set_defaults(func=cmd_summary)

    p = sub.add_parser("season", help="Season totals for the current roster")
    p.add_argument("--by-role", action="store_true", help="Total each player over their role's categories")
    p.set_defaults(func=cmd_season)

    p = sub.add_parser("export", help="Write a JSON backup")
    p.add_argument("path", nargs="?", default=None)
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Replace all data with a JSON backup")
    p.add_argument("path")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("excel", help="Write season and game tables to an .xlsx workbook")
    p.add_argument("path")
    p.add_argument("--by-role", action="store_true", help="Total each player over their role's categories")
    p.set_defaults(func=cmd_excel)

    p = sub.add_parser("reset", help="Delete all stored data")
    p.add_argument("--yes", "-y", action="store_true", help="Don't ask for confirmation")
    p.set_defaults(func=cmd_reset)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        log_dir=get_log_dir(),
        level=logging.DEBUG,
        log_to_file=not args.no_log_file,
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    data_dir = Path(args.data_dir) if args.data_dir else get_storage_dir()
    store = TrackerStore(storage=LocalStorage(data_dir))

    try:
        args.func(store, args)
    except (TallyError, ValueError, OSError) as e:
        logger.debug(f'{args.command} failed: {e!r}')
        print(f"❌ {e}")
        return 1

    if store.last_persist_error is not None:
        print(f"⚠️  Changes were not saved: {store.last_persist_error}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
