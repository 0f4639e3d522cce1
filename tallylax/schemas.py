"""Pydantic schemas for backup documents, stored keys and configuration."""

from datetime import date
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)

from .constants import (
    DEFAULT_BACKUP_FILENAME,
    DEFAULT_TEAM_NAME,
    DERIVED_FIELDS,
    SAVE_PCT,
)


class TeamModel(BaseModel):
    """Team record. A missing name takes the configured default team name."""

    name: Optional[str] = None

    class Config:
        extra = 'forbid'


class PlayerModel(BaseModel):
    """Roster entry."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    number: str
    role: str = Field(..., pattern=r'^(runner|goalie)$')

    class Config:
        extra = 'forbid'


class GameModel(BaseModel):
    """Game entry."""

    id: str = Field(..., min_length=1)
    opponent: str
    date: str

    @field_validator('date')
    @classmethod
    def validate_date(cls, v):
        """Ensure the date is an ISO YYYY-MM-DD string."""
        try:
            date.fromisoformat(v)
        except ValueError:
            raise ValueError(f'Invalid ISO date: {v!r}') from None
        return v

    class Config:
        extra = 'forbid'


StatMap = dict[str, Union[StrictInt, StrictStr]]


class BackupFile(BaseModel):
    """Complete backup document (also the shape of the persisted keys).

    Missing or null keys fall back to empty defaults. The ``teamStatsByGame``
    key written by older backups is accepted and ignored.
    """

    team: Optional[TeamModel] = None
    roster: list[PlayerModel] = Field(default_factory=list)
    games: list[GameModel] = Field(default_factory=list)
    stats_by_game: dict[str, dict[str, StatMap]] = Field(default_factory=dict, alias='statsByGame')
    attendance_by_game: dict[str, dict[str, StrictBool]] = Field(
        default_factory=dict, alias='attendanceByGame'
    )
    locked_games: dict[str, StrictBool] = Field(default_factory=dict, alias='lockedGames')
    team_stats_by_game: dict[str, Any] | None = Field(default=None, alias='teamStatsByGame')

    @model_validator(mode='before')
    @classmethod
    def drop_null_keys(cls, data):
        """Treat null top-level values like missing keys."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator('stats_by_game')
    @classmethod
    def validate_stat_values(cls, v):
        """Counters are non-negative integers; only Save % is a string."""
        for game_id, players in v.items():
            for player_id, stats in players.items():
                for category, value in stats.items():
                    if category == SAVE_PCT:
                        if not isinstance(value, str):
                            raise ValueError(f'{SAVE_PCT} must be a string ({game_id}/{player_id})')
                        continue
                    if not isinstance(value, int):
                        raise ValueError(
                            f'{category} must be an integer ({game_id}/{player_id}), got {value!r}'
                        )
                    if value < 0 and category not in DERIVED_FIELDS:
                        raise ValueError(
                            f'{category} is negative ({game_id}/{player_id}): {value}'
                        )
        return v

    def to_state_dict(self) -> dict[str, Any]:
        """Six-key layout as consumed by ``TrackerState.from_dict``."""
        return self.model_dump(by_alias=True, exclude={'team_stats_by_game'}, exclude_none=True)

    class Config:
        extra = 'forbid'


class TrackerConfig(BaseModel):
    """Tracker configuration settings."""

    storage_dir: str = Field(default='data/storage', min_length=1)
    default_team_name: str = Field(default=DEFAULT_TEAM_NAME, min_length=1)
    season_totals_by_role: bool = False
    backup_filename: str = Field(default=DEFAULT_BACKUP_FILENAME, min_length=1)
    log_dir: str = Field(default='logs', min_length=1)

    class Config:
        extra = 'forbid'
