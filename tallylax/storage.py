"""Durable local storage: one JSON file per state key."""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .constants import DEFAULT_TEAM_NAME, LEGACY_TEAM_STATS_KEY, STATE_KEYS
from .exceptions import StoragePersistError
from .models import TrackerState
from .schemas import BackupFile
from .utils import load_json, save_json

logger = logging.getLogger('tallylax.storage')


class LocalStorage:
    """
    Key/value store backed by a directory of JSON files.

    Each of the six state keys lives in ``<directory>/<key>.json``. A key
    that is missing or unreadable loads as its default; a failed write
    raises StoragePersistError and leaves the caller's in-memory copy alone.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f'{key}.json'

    def load(self, key: str, default: Any = None) -> Any:
        """Load one key, falling back to ``default`` if missing or unreadable."""
        try:
            return load_json(self.path_for(key))
        except FileNotFoundError:
            return default
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f'Could not read stored {key!r}, using default: {e}')
            return default

    def save(self, key: str, value: Any) -> None:
        """
        Write one key.

        Raises:
            StoragePersistError: If the file cannot be written
        """
        try:
            save_json(self.path_for(key), value)
        except (OSError, TypeError) as e:
            raise StoragePersistError(key, e) from e

    def clear(self) -> None:
        """
        Remove every stored key.

        Raises:
            StoragePersistError: If a key file cannot be removed
        """
        for key in (*STATE_KEYS, LEGACY_TEAM_STATS_KEY):
            path = self.path_for(key)
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StoragePersistError(key, e) from e
        logger.info(f'Cleared stored data in {self.directory}')

    def load_state(self, default_team_name: str = DEFAULT_TEAM_NAME) -> TrackerState:
        """
        Load all six keys into a state tree.

        A team key that is missing or unusable gets ``default_team_name``.

        Keys are validated one at a time; a key whose stored value doesn't
        match the expected shape is dropped (with a warning) and replaced
        by its default, the way a corrupt entry is skipped at startup.
        """
        data = {}
        for key in STATE_KEYS:
            value = self.load(key)
            if value is None:
                continue
            try:
                BackupFile.model_validate({key: value})
            except ValidationError as e:
                logger.warning(f'Stored {key!r} has an unexpected shape, using default: {e}')
                continue
            data[key] = value

        state = TrackerState.from_dict(
            BackupFile.model_validate(data).to_state_dict(), default_team_name
        )
        logger.debug(
            f'Loaded state from {self.directory}: {len(state.roster)} players, '
            f'{len(state.games)} games'
        )
        return state

    def save_state(self, state: TrackerState, keys: tuple[str, ...] = STATE_KEYS) -> None:
        """
        Write the given keys of a state tree.

        Every key is attempted; the first failure is raised after the rest
        have been written.

        Raises:
            StoragePersistError: If any key could not be written
        """
        failure = None
        for key in keys:
            try:
                self.save(key, state.key_value(key))
            except StoragePersistError as e:
                logger.error(str(e))
                if failure is None:
                    failure = e
        if failure is not None:
            raise failure
