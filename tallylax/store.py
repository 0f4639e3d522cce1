"""TrackerStore: the single owner of tracker state and its mutation entry point."""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from . import aggregation, attendance, backup, ledger, locks
from .config import get_default_team_name, get_season_by_role, get_storage_dir
from .constants import (
    ATTENDANCE_KEY,
    GAMES_KEY,
    LOCKS_KEY,
    ROLES,
    ROSTER_KEY,
    RUNNER,
    RUNNER_CATEGORIES,
    SEASON_COLUMNS_BY_ROLE,
    STATE_KEYS,
    STATS_KEY,
    TEAM_KEY,
)
from .exceptions import (
    ConfirmationRequiredError,
    IneligiblePlayerError,
    StoragePersistError,
    UnknownGameError,
    UnknownPlayerError,
)
from .models import Game, Player, Team, TrackerState
from .storage import LocalStorage

logger = logging.getLogger('tallylax.store')


class TrackerStore:
    """
    In-memory state tree mirrored to local storage.

    All changes go through the methods below. Each mutation updates the
    in-memory tree first, then writes the keys it touched. A failed write
    is logged and kept in ``last_persist_error``; the in-memory state stays
    authoritative for the session and the next successful write supersedes
    the failed one.
    """

    def __init__(
        self,
        storage: Optional[LocalStorage] = None,
        default_team_name: Optional[str] = None,
        season_by_role: Optional[bool] = None,
    ):
        """
        Initialize the store and load persisted state.

        Args:
            storage: Storage backend (default: LocalStorage in the configured directory)
            default_team_name: Team name when none is stored or imported, and after
                a reset (default: from config)
            season_by_role: Aggregate season totals by each player's role (default: from config)
        """
        self.storage = storage if storage is not None else LocalStorage(get_storage_dir())
        self.default_team_name = default_team_name or get_default_team_name()
        self.season_by_role = get_season_by_role() if season_by_role is None else season_by_role
        self.last_persist_error: Optional[StoragePersistError] = None

        self.state = self.storage.load_state(self.default_team_name)

    def _persist(self, *keys: str) -> None:
        try:
            self.storage.save_state(self.state, keys or STATE_KEYS)
        except StoragePersistError as e:
            logger.warning(f'Changes kept in memory but not saved: {e}')
            self.last_persist_error = e
        else:
            self.last_persist_error = None

    # ============ Lookups ============

    @property
    def team(self) -> Team:
        return self.state.team

    @property
    def roster(self) -> list[Player]:
        return self.state.roster

    @property
    def games(self) -> list[Game]:
        return self.state.games

    def get_player(self, player_id: str) -> Player:
        player = self.state.find_player(player_id)
        if player is None:
            raise UnknownPlayerError(player_id)
        return player

    def get_game(self, game_id: str) -> Game:
        game = self.state.find_game(game_id)
        if game is None:
            raise UnknownGameError(game_id)
        return game

    def is_locked(self, game_id: str) -> bool:
        return locks.is_locked(self.state, game_id)

    def is_eligible(self, game_id: str, player_id: str) -> bool:
        return attendance.is_eligible(self.state, game_id, player_id)

    def present_players(self, game_id: str) -> list[Player]:
        """Players that can receive stats for a game."""
        self.get_game(game_id)
        return attendance.present_players(self.state, game_id)

    def player_stats(self, game_id: str, player_id: str) -> dict[str, Any]:
        return ledger.player_game_stats(self.state, game_id, player_id)

    # ============ Team and roster ============

    def set_team_name(self, name: str) -> Team:
        if name is None:
            raise ValueError('Team name is required')
        self.state.team = Team(name=name)
        self._persist(TEAM_KEY)
        return self.state.team

    def add_player(self, name: str, number: str, role: str = RUNNER) -> Player:
        """
        Add a player to the roster.

        Raises:
            ValueError: If name or number is blank, or the role is unknown
        """
        name = (name or '').strip()
        number = str(number or '').strip()
        if not name or not number:
            raise ValueError('Player name and number are required')
        if role not in ROLES:
            raise ValueError(f'Invalid role: {role}')

        player = Player(name=name, number=number, role=role)
        self.state.roster.append(player)
        self._persist(ROSTER_KEY)
        logger.info(f'Added {role} {player.label}')
        return player

    def remove_player(self, player_id: str) -> Player:
        """
        Remove a player from the roster.

        Their recorded stats and attendance stay in place and still count
        toward season totals.
        """
        player = self.get_player(player_id)
        self.state.roster = [p for p in self.state.roster if p.id != player_id]
        self._persist(ROSTER_KEY)
        logger.info(f'Removed {player.label}')
        return player

    # ============ Games ============

    def add_game(self, opponent: str, game_date: Optional[str] = None) -> Game:
        """
        Add a game. The date defaults to today.

        Raises:
            ValueError: If the date is not an ISO YYYY-MM-DD string
        """
        if game_date is None:
            game_date = date.today().isoformat()
        else:
            date.fromisoformat(game_date)

        game = Game(opponent=(opponent or '').strip(), date=game_date)
        self.state.games.append(game)
        self._persist(GAMES_KEY)
        logger.info(f'Added game {game.label}')
        return game

    # ============ Attendance, stats, locks ============

    def toggle_attendance(self, game_id: str, player_id: str) -> bool:
        """Flip a roster player's attendance for a game and return the new value."""
        self.get_game(game_id)
        self.get_player(player_id)
        present = attendance.toggle_attendance(self.state, game_id, player_id)
        self._persist(ATTENDANCE_KEY)
        return present

    def apply_stat_event(
        self, game_id: str, player_id: str, category: str, delta: int = 1
    ) -> dict[str, Any]:
        """
        Record a stat event for a player marked present for the game.

        Returns:
            The player's full updated stat map for the game

        Raises:
            UnknownGameError: If the game doesn't exist
            LockedGameError: If the game is locked
            UnknownPlayerError: If the player is not on the roster
            IneligiblePlayerError: If the player is not marked present
            UnknownCategoryError: If the category doesn't apply to the player's role
        """
        self.get_game(game_id)
        locks.ensure_unlocked(self.state, game_id)
        self.get_player(player_id)
        if not attendance.is_eligible(self.state, game_id, player_id):
            raise IneligiblePlayerError(game_id, player_id)

        stats = ledger.apply_stat_event(self.state, game_id, player_id, category, delta)
        self._persist(STATS_KEY)
        return stats

    def lock_game(self, game_id: str) -> bool:
        """Lock a game for good. Returns False if it was already locked."""
        self.get_game(game_id)
        changed = locks.lock_game(self.state, game_id)
        if changed:
            self._persist(LOCKS_KEY)
        return changed

    # ============ Summaries ============

    def season_totals(self, by_role: Optional[bool] = None) -> dict[str, dict[str, int]]:
        if by_role is None:
            by_role = self.season_by_role
        return aggregation.compute_season_totals(
            self.state.games, self.state.roster, self.state.stats_by_game, by_role=by_role
        )

    def season_table(self, by_role: Optional[bool] = None) -> list[tuple[Player, dict[str, int]]]:
        if by_role is None:
            by_role = self.season_by_role
        columns = SEASON_COLUMNS_BY_ROLE if by_role else RUNNER_CATEGORIES
        return aggregation.season_table(self.state.roster, self.season_totals(by_role), columns)

    def game_summary(self, game_id: str) -> list[tuple[Player, dict[str, int]]]:
        game = self.get_game(game_id)
        return aggregation.game_summary(game, self.state.roster, self.state.stats_by_game)

    # ============ Backup / reset ============

    def export_backup(self) -> dict[str, Any]:
        return backup.export_state(self.state)

    def export_backup_file(self, path: Path | str) -> Path:
        return backup.write_backup(self.state, path)

    def import_backup(self, document: Any) -> TrackerState:
        """
        Replace all state with a backup document.

        Raises:
            MalformedImportError: If the document is invalid; state is unchanged
        """
        self.state = backup.parse_backup(document, self.default_team_name)
        self._persist()
        logger.info(
            f'Imported backup: {len(self.state.roster)} players, {len(self.state.games)} games'
        )
        return self.state

    def import_backup_file(self, path: Path | str) -> TrackerState:
        """Replace all state with the contents of a backup file."""
        self.state = backup.read_backup(path, self.default_team_name)
        self._persist()
        logger.info(f'Imported backup from {path}')
        return self.state

    def reset_all_data(self, confirmed: bool = False) -> TrackerState:
        """
        Clear all stored data and return to an empty tracker.

        This cannot be undone, so the caller must pass ``confirmed=True``.

        Raises:
            ConfirmationRequiredError: If not confirmed
        """
        if not confirmed:
            raise ConfirmationRequiredError('Resetting all data requires confirmation')

        self.state = TrackerState(team=Team(name=self.default_team_name))
        try:
            self.storage.clear()
        except StoragePersistError as e:
            logger.warning(f'Reset in memory but stored data could not be cleared: {e}')
            self.last_persist_error = e
        else:
            self.last_persist_error = None
        logger.info('All data reset')
        return self.state
