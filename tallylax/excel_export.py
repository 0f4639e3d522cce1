"""Excel workbook export of season totals and per-game summaries."""

import logging
import re
from pathlib import Path

import openpyxl
from openpyxl.styles import Font

from .aggregation import compute_season_totals, game_summary, season_table
from .constants import RUNNER_CATEGORIES, SEASON_COLUMNS_BY_ROLE
from .models import Player, TrackerState

logger = logging.getLogger('tallylax.excel_export')

# Characters Excel does not allow in sheet titles
_INVALID_TITLE_CHARS = re.compile(r'[\[\]:*?/\\]')
MAX_TITLE_LENGTH = 31


def sheet_title(label: str, used: set[str]) -> str:
    """
    Build a unique, Excel-safe sheet title from a game label.

    Examples:
        "2025-04-12 vs Rock/Stars" -> "2025-04-12 vs Rock-Stars"
        a second identical label   -> "2025-04-12 vs Rock-Stars (2)"
    """
    base = _INVALID_TITLE_CHARS.sub('-', label).strip() or 'Game'
    base = base[:MAX_TITLE_LENGTH]
    title = base
    n = 2
    while title.lower() in used:
        suffix = f' ({n})'
        title = base[: MAX_TITLE_LENGTH - len(suffix)] + suffix
        n += 1
    used.add(title.lower())
    return title


def _write_table(ws, header: list[str], rows: list[tuple[Player, dict[str, int]]], columns):
    ws.append(header)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for player, values in rows:
        ws.append([f'#{player.number}', player.name, player.role] + [values[c] for c in columns])
    ws.freeze_panes = 'D2'


def export_season_workbook(
    path: Path | str,
    state: TrackerState,
    by_role: bool = False,
) -> Path:
    """
    Write season totals and game summaries to an .xlsx workbook.

    The first sheet ("Season") holds the season table for the current
    roster. Each game then gets its own sheet, in game order, with the
    per-game runner stats.

    Args:
        path: Output workbook path
        state: State tree to export
        by_role: Aggregate season totals by each player's role

    Returns:
        Path the workbook was saved to
    """
    path = Path(path)
    wb = openpyxl.Workbook()

    ws = wb.active
    ws.title = 'Season'
    columns = SEASON_COLUMNS_BY_ROLE if by_role else RUNNER_CATEGORIES
    totals = compute_season_totals(state.games, state.roster, state.stats_by_game, by_role=by_role)
    _write_table(
        ws,
        ['#', 'Player', 'Role'] + list(columns),
        season_table(state.roster, totals, columns),
        columns,
    )

    used = {'season'}
    for game in state.games:
        gs = wb.create_sheet(title=sheet_title(game.label, used))
        _write_table(
            gs,
            ['#', 'Player', 'Role'] + list(RUNNER_CATEGORIES),
            game_summary(game, state.roster, state.stats_by_game),
            RUNNER_CATEGORIES,
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    wb.close()
    logger.info(f'Workbook saved to {path}')
    return path
