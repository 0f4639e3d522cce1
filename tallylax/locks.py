"""Game lock state machine.

Each game is either UNLOCKED (the default) or LOCKED. The only transition is
UNLOCKED -> LOCKED; once locked, attendance and stats for that game are
read-only for good. Reads never consult the lock.
"""

import logging

from .exceptions import LockedGameError
from .models import TrackerState

logger = logging.getLogger('tallylax.locks')


def is_locked(state: TrackerState, game_id: str) -> bool:
    """Check whether a game has been locked."""
    return bool(state.locked_games.get(game_id, False))


def ensure_unlocked(state: TrackerState, game_id: str) -> None:
    """Raise LockedGameError if the game is locked."""
    if is_locked(state, game_id):
        logger.warning(f'Rejected mutation of locked game {game_id}')
        raise LockedGameError(game_id)


def lock_game(state: TrackerState, game_id: str) -> bool:
    """
    Lock a game permanently.

    Locking an already-locked game is a no-op rather than an error.

    Args:
        state: State tree to update
        game_id: Game to lock

    Returns:
        True if this call locked the game, False if it was already locked
    """
    if is_locked(state, game_id):
        logger.debug(f'Game {game_id} already locked')
        return False

    state.locked_games[game_id] = True
    logger.info(f'Locked game {game_id}')
    return True
