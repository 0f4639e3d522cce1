"""Bulk export and import of the full tracker state.

A backup is a single JSON document holding the six state keys (``team``,
``roster``, ``games``, ``statsByGame``, ``attendanceByGame``,
``lockedGames``). Import is all-or-nothing: a document that fails to parse,
fails schema validation, or fails the state checks raises
MalformedImportError and nothing is applied.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .constants import DEFAULT_TEAM_NAME
from .exceptions import MalformedImportError
from .models import TrackerState
from .schemas import BackupFile
from .utils import load_json, save_json
from .validators import validate_state

logger = logging.getLogger('tallylax.backup')


def export_state(state: TrackerState) -> dict[str, Any]:
    """Return the backup document for a state tree."""
    return state.to_dict()


def dumps_backup(state: TrackerState, indent: int = 2) -> str:
    """Serialize a state tree as a human-readable backup document."""
    return json.dumps(export_state(state), indent=indent, ensure_ascii=False)


def write_backup(state: TrackerState, path: Path | str) -> Path:
    """Write a backup document to ``path``."""
    path = Path(path)
    save_json(path, export_state(state))
    logger.info(f'Exported backup to {path}')
    return path


def parse_backup(
    document: str | bytes | Mapping[str, Any],
    default_team_name: str = DEFAULT_TEAM_NAME,
) -> TrackerState:
    """
    Parse and validate a backup document into a new state tree.

    Missing keys fall back to empty defaults: ``default_team_name`` for the
    team, and empty roster, games and maps.

    Args:
        document: JSON text, or an already-decoded mapping
        default_team_name: Team name used when the document has none

    Returns:
        A fresh TrackerState; the caller decides whether to install it

    Raises:
        MalformedImportError: If the document is not valid JSON, has an
            unexpected shape, or contains inconsistent data
    """
    if isinstance(document, (str, bytes)):
        try:
            data = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedImportError(f'Invalid backup file: {e}') from e
    else:
        data = document

    if not isinstance(data, Mapping):
        raise MalformedImportError(
            f'Invalid backup file: expected a JSON object, got {type(data).__name__}'
        )

    try:
        backup = BackupFile.model_validate(dict(data))
    except ValidationError as e:
        raise MalformedImportError(f'Invalid backup file:\n{e}') from e

    if backup.team_stats_by_game:
        logger.info('Ignoring legacy teamStatsByGame data in backup')

    state = TrackerState.from_dict(backup.to_state_dict(), default_team_name)

    errors, warnings = validate_state(state)
    for warning in warnings:
        logger.warning(f'Backup: {warning}')
    if errors:
        raise MalformedImportError('Invalid backup file:\n' + '\n'.join(errors))

    return state


def read_backup(path: Path | str, default_team_name: str = DEFAULT_TEAM_NAME) -> TrackerState:
    """
    Read and parse a backup file.

    Raises:
        MalformedImportError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        data = load_json(path)
    except FileNotFoundError as e:
        raise MalformedImportError(f'Backup file not found: {path}') from e
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        raise MalformedImportError(f'Invalid backup file {path}: {e}') from e
    return parse_backup(data, default_team_name)
