"""Stat ledger: per-game, per-player counters and derived goalie fields."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .constants import (
    DERIVED_FIELDS,
    GOALS_ALLOWED,
    SAVE_INPUTS,
    SAVE_PCT,
    SAVES,
    SHOTS_FACED,
    categories_for_role,
)
from .exceptions import UnknownCategoryError, UnknownPlayerError
from .locks import ensure_unlocked
from .models import TrackerState

logger = logging.getLogger('tallylax.ledger')


def save_percentage(shots_faced: int, goals_allowed: int) -> str:
    """
    Format a goalie's save percentage with one decimal.

    Save % = 100 * Saves / Shots Faced, where Saves = max(0, shots - goals).
    Zero shots faced gives "0.0". Halves round up ("6.25" -> "6.3").

    Args:
        shots_faced: Shots the goalie faced
        goals_allowed: Goals the goalie allowed

    Returns:
        Percentage string such as "70.0"
    """
    if shots_faced <= 0:
        return '0.0'
    saves = max(0, shots_faced - goals_allowed)
    pct = Decimal(100 * saves) / Decimal(shots_faced)
    return str(pct.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def recompute_goalie_fields(stats: dict[str, Any]) -> dict[str, Any]:
    """Recompute Saves and Save % in place from Shots Faced and Goals Allowed."""
    shots = stats.get(SHOTS_FACED, 0)
    goals = stats.get(GOALS_ALLOWED, 0)
    stats[SAVES] = max(0, shots - goals)
    stats[SAVE_PCT] = save_percentage(shots, goals)
    return stats


def player_game_stats(state: TrackerState, game_id: str, player_id: str) -> dict[str, Any]:
    """Return a copy of a player's stat map for one game (empty if nothing recorded)."""
    return dict(state.stats_by_game.get(game_id, {}).get(player_id, {}))


def apply_stat_event(
    state: TrackerState,
    game_id: str,
    player_id: str,
    category: str,
    delta: int,
) -> dict[str, Any]:
    """
    Apply one counted event to a player's stats for a game.

    The count is clamped at zero. Writing Shots Faced or Goals Allowed also
    recomputes Saves and Save %. Attendance is not checked here; callers
    gate stat entry on ``attendance.is_eligible``.

    Args:
        state: State tree to update
        game_id: Game the event happened in
        player_id: Player the event is credited to (must be on the roster)
        category: Stat category from the player's role list
        delta: Change to apply (usually +1 or -1)

    Returns:
        Copy of the player's full updated stat map for the game

    Raises:
        LockedGameError: If the game is locked
        UnknownPlayerError: If the player is not on the roster
        UnknownCategoryError: If the category is derived or not tracked for the role
    """
    ensure_unlocked(state, game_id)

    player = state.find_player(player_id)
    if player is None:
        raise UnknownPlayerError(player_id)

    if category in DERIVED_FIELDS or category not in categories_for_role(player.role):
        logger.warning(f'Rejected {category!r} for {player.role} {player.name}')
        raise UnknownCategoryError(category, player.role)

    if isinstance(delta, bool) or not isinstance(delta, int):
        raise TypeError(f'Stat delta must be an integer, got {delta!r}')

    game_stats = state.stats_by_game.setdefault(game_id, {})
    stats = game_stats.setdefault(player_id, {})
    stats[category] = max(0, stats.get(category, 0) + delta)

    if category in SAVE_INPUTS:
        recompute_goalie_fields(stats)

    logger.debug(f'{player.name} {category} {delta:+d} -> {stats[category]} (game {game_id})')
    return dict(stats)
