"""Data models for the TallyLax stat tracker."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any
from uuid import uuid4

from .constants import (
    ATTENDANCE_KEY,
    DEFAULT_TEAM_NAME,
    GAMES_KEY,
    LOCKS_KEY,
    ROSTER_KEY,
    RUNNER,
    STATE_KEYS,
    STATS_KEY,
    TEAM_KEY,
)


def new_id() -> str:
    """Generate a unique id for a player or game."""
    return uuid4().hex


@dataclass
class Team:
    """The tracked team."""
    name: str = DEFAULT_TEAM_NAME

    def to_dict(self) -> dict[str, Any]:
        return {'name': self.name}


@dataclass
class Player:
    """A roster entry. ``id`` never changes once assigned."""
    name: str
    number: str
    role: str = RUNNER
    id: str = field(default_factory=new_id)

    @property
    def label(self) -> str:
        return f'#{self.number} {self.name}'

    def to_dict(self) -> dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'number': self.number, 'role': self.role}


@dataclass
class Game:
    """A single match against an opponent."""
    opponent: str
    date: str = field(default_factory=lambda: date.today().isoformat())
    id: str = field(default_factory=new_id)

    @property
    def label(self) -> str:
        return f'{self.date} vs {self.opponent}'

    def to_dict(self) -> dict[str, Any]:
        return {'id': self.id, 'opponent': self.opponent, 'date': self.date}


@dataclass
class TrackerState:
    """Container for the whole persisted state tree."""
    team: Team = field(default_factory=Team)
    roster: list[Player] = field(default_factory=list)
    games: list[Game] = field(default_factory=list)
    stats_by_game: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)
    # stats_by_game[game_id][player_id][category] = count (plus 'Saves' / 'Save %')
    attendance_by_game: dict[str, dict[str, bool]] = field(default_factory=dict)
    locked_games: dict[str, bool] = field(default_factory=dict)

    def find_player(self, player_id: str) -> Player | None:
        for player in self.roster:
            if player.id == player_id:
                return player
        return None

    def find_game(self, game_id: str) -> Game | None:
        for game in self.games:
            if game.id == game_id:
                return game
        return None

    def key_value(self, key: str) -> Any:
        """Return the JSON-ready value stored under one persisted key."""
        if key == TEAM_KEY:
            return self.team.to_dict()
        if key == ROSTER_KEY:
            return [p.to_dict() for p in self.roster]
        if key == GAMES_KEY:
            return [g.to_dict() for g in self.games]
        if key == STATS_KEY:
            return {
                game_id: {pid: dict(stats) for pid, stats in players.items()}
                for game_id, players in self.stats_by_game.items()
            }
        if key == ATTENDANCE_KEY:
            return {game_id: dict(marks) for game_id, marks in self.attendance_by_game.items()}
        if key == LOCKS_KEY:
            return dict(self.locked_games)
        raise KeyError(key)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the six-key backup/storage layout."""
        return {
            key: self.key_value(key)
            for key in STATE_KEYS
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], default_team_name: str = DEFAULT_TEAM_NAME
    ) -> 'TrackerState':
        """Build a state tree from the six-key layout, defaulting missing keys.

        A missing team or team name becomes ``default_team_name``.

        Assumes ``data`` has already been validated (see ``tallylax.schemas``).
        """
        team_name = (data.get(TEAM_KEY) or {}).get('name')
        return cls(
            team=Team(name=default_team_name if team_name is None else team_name),
            roster=[
                Player(id=p['id'], name=p['name'], number=p['number'], role=p['role'])
                for p in data.get(ROSTER_KEY) or []
            ],
            games=[
                Game(id=g['id'], opponent=g['opponent'], date=g['date'])
                for g in data.get(GAMES_KEY) or []
            ],
            stats_by_game={
                game_id: {pid: dict(stats) for pid, stats in players.items()}
                for game_id, players in (data.get(STATS_KEY) or {}).items()
            },
            attendance_by_game={
                game_id: dict(marks)
                for game_id, marks in (data.get(ATTENDANCE_KEY) or {}).items()
            },
            locked_games=dict(data.get(LOCKS_KEY) or {}),
        )
