"""Constants and category lists for the TallyLax stat tracker."""

# Player roles
RUNNER = 'runner'
GOALIE = 'goalie'
ROLES = (RUNNER, GOALIE)

# Stat categories tracked for runners (also the season view columns)
RUNNER_CATEGORIES = (
    'Shots Taken',
    'Shots on Net',
    'Goals',
    'Power Play Goals',
    'Short Handed Goals',
    'Assists',
    'Loose Balls',
    'Blocked Shots',
    'Caused Turnovers',
    'Turnovers',
    'Face Offs Taken',
    'Face Offs Won',
    'Penalty Minutes',
)

# Stat categories tracked for goalies
SHOTS_FACED = 'Shots Faced'
GOALS_ALLOWED = 'Goals Allowed'
GOALIE_CATEGORIES = (SHOTS_FACED, GOALS_ALLOWED, 'Goals', 'Assists')

# Derived goalie fields, recomputed from Shots Faced / Goals Allowed
SAVES = 'Saves'
SAVE_PCT = 'Save %'
DERIVED_FIELDS = (SAVES, SAVE_PCT)
SAVE_INPUTS = frozenset({SHOTS_FACED, GOALS_ALLOWED})

CATEGORIES_BY_ROLE = {
    RUNNER: RUNNER_CATEGORIES,
    GOALIE: GOALIE_CATEGORIES,
}

ALL_CATEGORIES = frozenset(RUNNER_CATEGORIES) | frozenset(GOALIE_CATEGORIES)

# Season table columns when totals are aggregated by each player's role
SEASON_COLUMNS_BY_ROLE = RUNNER_CATEGORIES + (SHOTS_FACED, GOALS_ALLOWED)

# Persisted state keys (one record per key)
TEAM_KEY = 'team'
ROSTER_KEY = 'roster'
GAMES_KEY = 'games'
STATS_KEY = 'statsByGame'
ATTENDANCE_KEY = 'attendanceByGame'
LOCKS_KEY = 'lockedGames'
STATE_KEYS = (TEAM_KEY, ROSTER_KEY, GAMES_KEY, STATS_KEY, ATTENDANCE_KEY, LOCKS_KEY)

# Key written by older backups; accepted on import and discarded
LEGACY_TEAM_STATS_KEY = 'teamStatsByGame'

DEFAULT_TEAM_NAME = 'My Team'
DEFAULT_BACKUP_FILENAME = 'tallylax-backup.json'


def categories_for_role(role: str) -> tuple[str, ...]:
    """Return the stat categories a player with the given role may record."""
    try:
        return CATEGORIES_BY_ROLE[role]
    except KeyError:
        raise ValueError(f'Invalid role: {role}') from None
