"""Exceptions raised by the TallyLax core.

All of them are recoverable: the operation that raised is rejected and the
in-memory state is left exactly as it was before the call.
"""


class TallyError(Exception):
    """Base class for all tracker errors."""


# ============ Game / player lookups ============

class UnknownGameError(TallyError, KeyError):
    """Game id is not in the games list."""

    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f'Game {game_id} not found')

    def __str__(self):
        return self.args[0]


class UnknownPlayerError(TallyError, KeyError):
    """Player id is not on the current roster."""

    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f'Player {player_id} not found')

    def __str__(self):
        return self.args[0]


# ============ Stat entry ============

class LockedGameError(TallyError):
    """Mutation attempted on a locked game."""

    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f'Game {game_id} is locked; stats and attendance are read-only')


class UnknownCategoryError(TallyError, ValueError):
    """Category is not recordable for the player's role."""

    def __init__(self, category, role):
        self.category = category
        self.role = role
        super().__init__(f'Category {category!r} is not tracked for {role} players')


class IneligiblePlayerError(TallyError):
    """Player is not marked present for the game."""

    def __init__(self, game_id, player_id):
        self.game_id = game_id
        self.player_id = player_id
        super().__init__(f'Player {player_id} is not marked present for game {game_id}')


# ============ Persistence ============

class MalformedImportError(TallyError):
    """Backup document failed to parse or has an unexpected shape."""


class StoragePersistError(TallyError):
    """Writing the durable copy of a state key failed."""

    def __init__(self, key, reason):
        self.key = key
        self.reason = reason
        super().__init__(f'Failed to persist {key!r}: {reason}')


class ConfirmationRequiredError(TallyError):
    """Irreversible operation called without explicit confirmation."""
