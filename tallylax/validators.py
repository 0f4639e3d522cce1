"""Consistency checks for a tracker state tree."""

from .constants import (
    ALL_CATEGORIES,
    DERIVED_FIELDS,
    GOALIE,
    GOALS_ALLOWED,
    SAVE_PCT,
    SAVES,
    SHOTS_FACED,
)
from .ledger import save_percentage
from .models import TrackerState


def _duplicates(ids: list[str]) -> set[str]:
    seen = set()
    duplicates = set()
    for item in ids:
        if item in seen:
            duplicates.add(item)
        seen.add(item)
    return duplicates


def validate_roster_and_games(state: TrackerState) -> list[str]:
    """
    Check that player and game ids are unique.

    Args:
        state: State tree to check

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    duplicate_players = _duplicates([p.id for p in state.roster])
    if duplicate_players:
        errors.append(f'Duplicate player ids: {", ".join(sorted(duplicate_players))}')

    duplicate_games = _duplicates([g.id for g in state.games])
    if duplicate_games:
        errors.append(f'Duplicate game ids: {", ".join(sorted(duplicate_games))}')

    return errors


def validate_counters(state: TrackerState) -> list[str]:
    """
    Check that every stored counter is a non-negative integer.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    for game_id, players in state.stats_by_game.items():
        for player_id, stats in players.items():
            for category, value in stats.items():
                if category == SAVE_PCT:
                    continue
                if isinstance(value, bool) or not isinstance(value, int):
                    errors.append(f'{game_id}/{player_id}: {category} is not an integer ({value!r})')
                elif value < 0:
                    errors.append(f'{game_id}/{player_id}: {category} is negative ({value})')
    return errors


def check_references(state: TrackerState) -> list[str]:
    """
    Look for records that point at games or players that don't exist,
    stats for players not marked present, and unknown categories.

    None of these block loading: removed players keep their history, and
    older data may carry categories this version doesn't track.

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []
    game_ids = {g.id for g in state.games}
    player_ids = {p.id for p in state.roster}

    for label, mapping in (
        ('stats', state.stats_by_game),
        ('attendance', state.attendance_by_game),
        ('lock', state.locked_games),
    ):
        for game_id in mapping:
            if game_id not in game_ids:
                warnings.append(f'{label} recorded for unknown game {game_id}')

    for game_id, players in state.stats_by_game.items():
        present = state.attendance_by_game.get(game_id, {})
        for player_id, stats in players.items():
            if player_id not in player_ids:
                warnings.append(f'Game {game_id} has stats for player {player_id} not on the roster')
            elif present.get(player_id) is not True:
                warnings.append(f'Game {game_id} has stats for absent player {player_id}')

            unknown = sorted(set(stats) - ALL_CATEGORIES - set(DERIVED_FIELDS))
            if unknown:
                warnings.append(
                    f'Game {game_id} player {player_id} has unknown categories: {", ".join(unknown)}'
                )

    return warnings


def check_goalie_fields(state: TrackerState) -> list[str]:
    """
    Check that stored Saves / Save % match Shots Faced and Goals Allowed.

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []
    roles = {p.id: p.role for p in state.roster}

    for game_id, players in state.stats_by_game.items():
        for player_id, stats in players.items():
            if SHOTS_FACED not in stats and GOALS_ALLOWED not in stats:
                continue
            if player_id in roles and roles[player_id] != GOALIE:
                warnings.append(f'Game {game_id}: non-goalie {player_id} has goalie stats')

            shots = stats.get(SHOTS_FACED, 0)
            goals = stats.get(GOALS_ALLOWED, 0)
            if not isinstance(shots, int) or not isinstance(goals, int):
                continue

            expected_saves = max(0, shots - goals)
            expected_pct = save_percentage(shots, goals)
            if stats.get(SAVES) != expected_saves or stats.get(SAVE_PCT) != expected_pct:
                warnings.append(
                    f'Game {game_id} player {player_id}: stored {SAVES}={stats.get(SAVES)!r} '
                    f'{SAVE_PCT}={stats.get(SAVE_PCT)!r}, expected {expected_saves} / {expected_pct}'
                )

    return warnings


def validate_state(state: TrackerState) -> tuple[list[str], list[str]]:
    """
    Validate a whole state tree.

    Args:
        state: State tree to check

    Returns:
        Tuple of (errors, warnings)
        - errors: Problems that make the state unusable (reject an import)
        - warnings: Issues worth logging that don't block loading
    """
    errors = validate_roster_and_games(state) + validate_counters(state)
    warnings = check_references(state) + check_goalie_fields(state)
    return errors, warnings
