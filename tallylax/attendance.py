"""Attendance register: which roster players were present for a game."""

import logging

from .locks import ensure_unlocked
from .models import Player, TrackerState

logger = logging.getLogger('tallylax.attendance')


def is_eligible(state: TrackerState, game_id: str, player_id: str) -> bool:
    """A player may have stats entered only when marked present for the game."""
    return state.attendance_by_game.get(game_id, {}).get(player_id) is True


def toggle_attendance(state: TrackerState, game_id: str, player_id: str) -> bool:
    """
    Flip a player's attendance mark for a game.

    Missing entries count as absent, so the first toggle marks the player
    present.

    Args:
        state: State tree to update
        game_id: Game the attendance belongs to
        player_id: Player to toggle

    Returns:
        The new attendance value

    Raises:
        LockedGameError: If the game is locked (state is left unchanged)
    """
    ensure_unlocked(state, game_id)

    marks = state.attendance_by_game.setdefault(game_id, {})
    present = not marks.get(player_id, False)
    marks[player_id] = present

    logger.debug(f'Attendance for {player_id} in game {game_id}: {present}')
    return present


def present_players(state: TrackerState, game_id: str) -> list[Player]:
    """Roster players marked present for a game, in roster order."""
    return [p for p in state.roster if is_eligible(state, game_id, p.id)]
