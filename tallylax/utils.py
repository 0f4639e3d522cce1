"""JSON file helpers for the storage, backup and config layers."""

import json
import logging
import os
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('tallylax.utils')


def _tmp_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + '.tmp')


def load_json(path: Path | str) -> Any:
    """
    Read one JSON document from disk.

    Raises:
        FileNotFoundError: If nothing has been written at ``path``
        json.JSONDecodeError: If the file holds broken JSON
    """
    path = Path(path)
    with open(path, encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
            raise
    logger.debug(f'Read {path}')
    return data


def save_json(path: Path | str, data: Any) -> None:
    """
    Write ``data`` to ``path`` as indented UTF-8 JSON, replacing the file in one step.

    The document goes to ``<path>.tmp`` first and is renamed over ``path``
    only once it is fully on disk, so a failed write leaves the previous
    copy of the file as it was.

    Raises:
        TypeError: If ``data`` can't be encoded as JSON
        OSError: If the directory or file can't be written
    """
    path = Path(path)
    text = json.dumps(data, indent=2, ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = _tmp_path(path)
    try:
        with open(tmp, 'w', encoding='utf-8') as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError as e:
        logger.error(f'Failed to write {path}: {e}')
        try:
            tmp.unlink(missing_ok=True)
        except OSError as cleanup_error:
            logger.warning(f'Could not remove {tmp}: {cleanup_error}')
        raise
    logger.debug(f'Wrote {path}')


def load_json_safe(path: Path | str, schema: type[T]) -> T | None:
    """Read and validate a settings file, or return None if it is missing or invalid."""
    try:
        return schema.model_validate(load_json(path))
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f'Ignoring unreadable {path}: {e}')
        return None
    except ValidationError as e:
        logger.warning(f'Ignoring invalid {path}: {e}')
        return None
