from .models import Game, Player, Team, TrackerState
from .constants import (
    GOALIE,
    GOALIE_CATEGORIES,
    RUNNER,
    RUNNER_CATEGORIES,
    categories_for_role,
)
from .exceptions import (
    ConfirmationRequiredError,
    IneligiblePlayerError,
    LockedGameError,
    MalformedImportError,
    StoragePersistError,
    TallyError,
    UnknownCategoryError,
    UnknownGameError,
    UnknownPlayerError,
)
from .ledger import apply_stat_event, recompute_goalie_fields, save_percentage
from .attendance import is_eligible, present_players, toggle_attendance
from .locks import is_locked, lock_game
from .aggregation import compute_season_totals, game_summary, season_table
from .backup import dumps_backup, export_state, parse_backup
from .storage import LocalStorage
from .store import TrackerStore

__all__ = [
    # Models
    'Game',
    'Player',
    'Team',
    'TrackerState',
    # Categories
    'GOALIE',
    'GOALIE_CATEGORIES',
    'RUNNER',
    'RUNNER_CATEGORIES',
    'categories_for_role',
    # Errors
    'ConfirmationRequiredError',
    'IneligiblePlayerError',
    'LockedGameError',
    'MalformedImportError',
    'StoragePersistError',
    'TallyError',
    'UnknownCategoryError',
    'UnknownGameError',
    'UnknownPlayerError',
    # Ledger, attendance, locks
    'apply_stat_event',
    'recompute_goalie_fields',
    'save_percentage',
    'is_eligible',
    'present_players',
    'toggle_attendance',
    'is_locked',
    'lock_game',
    # Aggregation
    'compute_season_totals',
    'game_summary',
    'season_table',
    # Backup and storage
    'dumps_backup',
    'export_state',
    'parse_backup',
    'LocalStorage',
    'TrackerStore',
]
