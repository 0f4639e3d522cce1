"""Season totals and per-game summary tables.

Everything here is a pure function of its inputs: nothing is cached, and the
totals are recomputed in full on every call.
"""

from typing import Any, Iterable

from .constants import RUNNER_CATEGORIES, categories_for_role
from .models import Game, Player


def compute_season_totals(
    games: Iterable[Game],
    roster: Iterable[Player],
    stats_by_game: dict[str, dict[str, dict[str, Any]]],
    by_role: bool = False,
) -> dict[str, dict[str, int]]:
    """
    Sum per-game stats into season totals per player.

    Games are folded in list order, then players in recorded order. Every
    player id found in a game's stat map gets a row, including players who
    have since been removed from the roster.

    By default every player is totalled over the runner categories, which is
    what the season table shows (goalie-only counts are left out). With
    ``by_role=True`` each player is totalled over their own role's list;
    ids missing from the roster fall back to the runner list.

    Args:
        games: Games to include
        roster: Current roster (only consulted when by_role is set)
        stats_by_game: gameId -> playerId -> category -> count
        by_role: Aggregate each player over their own role's categories

    Returns:
        Dict mapping player id -> {category: total}
    """
    roles = {p.id: p.role for p in roster}
    totals: dict[str, dict[str, int]] = {}

    for game in games:
        for player_id, player_stats in stats_by_game.get(game.id, {}).items():
            if by_role and player_id in roles:
                categories = categories_for_role(roles[player_id])
            else:
                categories = RUNNER_CATEGORIES

            player_totals = totals.setdefault(player_id, {})
            for cat in categories:
                player_totals[cat] = player_totals.get(cat, 0) + (player_stats.get(cat, 0) or 0)

    return totals


def game_summary(
    game: Game,
    roster: Iterable[Player],
    stats_by_game: dict[str, dict[str, dict[str, Any]]],
) -> list[tuple[Player, dict[str, int]]]:
    """Per-game table: one row per roster player over the runner categories."""
    game_stats = stats_by_game.get(game.id, {})
    rows = []
    for player in roster:
        stats = game_stats.get(player.id, {})
        rows.append((player, {cat: stats.get(cat, 0) or 0 for cat in RUNNER_CATEGORIES}))
    return rows


def season_table(
    roster: Iterable[Player],
    totals: dict[str, dict[str, int]],
    categories: Iterable[str] = RUNNER_CATEGORIES,
) -> list[tuple[Player, dict[str, int]]]:
    """Season table rows for the current roster; totals for removed players are not listed."""
    categories = tuple(categories)
    return [
        (player, {cat: totals.get(player.id, {}).get(cat, 0) for cat in categories})
        for player in roster
    ]
