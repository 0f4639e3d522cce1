"""Integration tests for TrackerStore: persistence, backup and reset."""

import json
from unittest.mock import patch

import pytest

from tallylax.exceptions import (
    ConfirmationRequiredError,
    IneligiblePlayerError,
    LockedGameError,
    MalformedImportError,
    UnknownGameError,
    UnknownPlayerError,
)
from tallylax.storage import LocalStorage
from tallylax.store import TrackerStore


def make_store(path, **overrides):
    kwargs = {
        'storage': LocalStorage(path),
        'default_team_name': 'My Team',
        'season_by_role': False,
    }
    kwargs.update(overrides)
    return TrackerStore(**kwargs)


@pytest.fixture
def store(tmp_path):
    """Store with a runner, a goalie and one game, both players present."""
    s = make_store(tmp_path / 'storage')
    s.set_team_name('Rock Hawks')
    runner = s.add_player('Riley Runner', '12')
    goalie = s.add_player('Gale Goalie', '30', role='goalie')
    game = s.add_game('Stealth', '2025-04-12')
    s.toggle_attendance(game.id, runner.id)
    s.toggle_attendance(game.id, goalie.id)
    s.ids = {'runner': runner.id, 'goalie': goalie.id, 'game': game.id}
    return s


class TestRosterAndGames:
    """Tests for team, roster and game operations."""

    def test_fresh_store_defaults(self, tmp_path):
        """An empty storage directory gives default state."""
        s = make_store(tmp_path / 'empty', default_team_name='Home Side')
        assert s.team.name == 'Home Side'
        assert s.roster == []
        assert s.games == []

    def test_add_player_requires_name_and_number(self, tmp_path):
        """Blank name or number is rejected."""
        s = make_store(tmp_path / 's')
        with pytest.raises(ValueError):
            s.add_player('', '4')
        with pytest.raises(ValueError):
            s.add_player('Ash', '')
        assert s.roster == []

    def test_add_player_rejects_bad_role(self, tmp_path):
        """Only runner and goalie are valid roles."""
        s = make_store(tmp_path / 's')
        with pytest.raises(ValueError):
            s.add_player('Ash', '4', role='coach')

    def test_player_ids_unique(self, tmp_path):
        """Every player gets a distinct id."""
        s = make_store(tmp_path / 's')
        ids = {s.add_player(f'P{i}', str(i)).id for i in range(20)}
        assert len(ids) == 20

    def test_add_game_validates_date(self, tmp_path):
        """Game dates must be ISO dates."""
        s = make_store(tmp_path / 's')
        with pytest.raises(ValueError):
            s.add_game('Rush', '12/04/2025')

    def test_add_game_defaults_to_today(self, tmp_path):
        """Omitting the date uses today's date."""
        from datetime import date

        s = make_store(tmp_path / 's')
        game = s.add_game('Rush')
        assert game.date == date.today().isoformat()

    def test_unknown_game(self, store):
        """Operations on a missing game raise UnknownGameError."""
        with pytest.raises(UnknownGameError):
            store.toggle_attendance('missing', store.ids['runner'])
        with pytest.raises(UnknownGameError):
            store.lock_game('missing')

    def test_remove_player_keeps_history(self, store):
        """Removing a player leaves their stats and season totals in place."""
        ids = store.ids
        store.apply_stat_event(ids['game'], ids['runner'], 'Goals', 1)
        store.remove_player(ids['runner'])

        assert store.state.find_player(ids['runner']) is None
        assert store.state.stats_by_game[ids['game']][ids['runner']] == {'Goals': 1}
        assert store.season_totals()[ids['runner']]['Goals'] == 1
        assert ids['runner'] not in [p.id for p, _ in store.season_table()]

    def test_remove_unknown_player(self, store):
        with pytest.raises(UnknownPlayerError):
            store.remove_player('nobody')


class TestStatEntry:
    """Tests for stat entry through the store."""

    def test_stat_event_for_present_player(self, store):
        """Present players can have stats recorded."""
        ids = store.ids
        result = store.apply_stat_event(ids['game'], ids['runner'], 'Goals')
        assert result == {'Goals': 1}

    def test_absent_player_is_ineligible(self, store):
        """Players not marked present can't receive stats."""
        ids = store.ids
        store.toggle_attendance(ids['game'], ids['runner'])

        with pytest.raises(IneligiblePlayerError):
            store.apply_stat_event(ids['game'], ids['runner'], 'Goals')
        assert store.player_stats(ids['game'], ids['runner']) == {}

    def test_goalie_save_percentage(self, store):
        """ShotsFaced=10, GoalsAllowed=3 -> Saves 7, Save % 70.0."""
        ids = store.ids
        store.apply_stat_event(ids['game'], ids['goalie'], 'Shots Faced', 10)
        result = store.apply_stat_event(ids['game'], ids['goalie'], 'Goals Allowed', 3)
        assert result['Saves'] == 7
        assert result['Save %'] == '70.0'

    def test_lock_freezes_game(self, store):
        """After locking, stats and attendance are rejected and unchanged."""
        ids = store.ids
        store.apply_stat_event(ids['game'], ids['runner'], 'Goals')
        assert store.lock_game(ids['game']) is True

        before_stats = json.dumps(store.state.stats_by_game, sort_keys=True)
        before_attendance = json.dumps(store.state.attendance_by_game, sort_keys=True)

        with pytest.raises(LockedGameError):
            store.apply_stat_event(ids['game'], ids['runner'], 'Goals')
        with pytest.raises(LockedGameError):
            store.toggle_attendance(ids['game'], ids['runner'])

        assert json.dumps(store.state.stats_by_game, sort_keys=True) == before_stats
        assert json.dumps(store.state.attendance_by_game, sort_keys=True) == before_attendance

    def test_relock_is_noop(self, store):
        """Locking again returns False and leaves the lock set alone."""
        ids = store.ids
        store.lock_game(ids['game'])
        assert store.lock_game(ids['game']) is False
        assert store.state.locked_games == {ids['game']: True}

    def test_present_players(self, store):
        ids = store.ids
        assert [p.id for p in store.present_players(ids['game'])] == [ids['runner'], ids['goalie']]


class TestPersistence:
    """Tests for the durable copy of the state."""

    def test_state_survives_reload(self, store, tmp_path):
        """A new store over the same directory sees every change."""
        ids = store.ids
        store.apply_stat_event(ids['game'], ids['runner'], 'Assists', 2)
        store.lock_game(ids['game'])

        reloaded = make_store(tmp_path / 'storage')
        assert reloaded.state.to_dict() == store.state.to_dict()
        assert reloaded.team.name == 'Rock Hawks'

    def test_one_file_per_key(self, store, tmp_path):
        """Each state key is stored separately."""
        names = sorted(p.name for p in (tmp_path / 'storage').iterdir())
        assert names == ['attendanceByGame.json', 'games.json', 'roster.json', 'team.json']

    def test_corrupt_key_falls_back_to_default(self, store, tmp_path):
        """An unreadable key loads as its default without losing the others."""
        (tmp_path / 'storage' / 'roster.json').write_text('{not json', encoding='utf-8')
        reloaded = make_store(tmp_path / 'storage')
        assert reloaded.roster == []
        assert len(reloaded.games) == 1

    def test_persist_failure_keeps_memory_state(self, store):
        """A failed write is reported but the in-memory change stands."""
        ids = store.ids
        with patch('tallylax.storage.save_json', side_effect=OSError('disk full')):
            result = store.apply_stat_event(ids['game'], ids['runner'], 'Goals')

        assert result['Goals'] == 1
        assert store.player_stats(ids['game'], ids['runner'])['Goals'] == 1
        assert store.last_persist_error is not None
        assert store.last_persist_error.key == 'statsByGame'

    def test_next_successful_write_clears_error(self, store):
        """No retry: the next good write simply supersedes the failure."""
        ids = store.ids
        with patch('tallylax.storage.save_json', side_effect=OSError('disk full')):
            store.apply_stat_event(ids['game'], ids['runner'], 'Goals')
        store.apply_stat_event(ids['game'], ids['runner'], 'Goals')

        assert store.last_persist_error is None

    def test_failed_write_keeps_previous_copy(self, tmp_path):
        """A write that fails partway leaves the last saved roster on disk."""
        directory = tmp_path / 'storage'
        s = make_store(directory)
        s.add_player('Ash', '4')

        with patch('tallylax.utils.os.fsync', side_effect=OSError(28, 'No space left on device')):
            s.add_player('Blake', '5')

        assert s.last_persist_error is not None
        assert s.last_persist_error.key == 'roster'
        assert [p.name for p in s.roster] == ['Ash', 'Blake']

        reloaded = make_store(directory)
        assert [p.name for p in reloaded.roster] == ['Ash']
        assert list(directory.glob('*.tmp')) == []

    def test_failed_rename_keeps_previous_copy(self, tmp_path):
        """If the finished file can't be moved into place the old one stays."""
        directory = tmp_path / 'storage'
        s = make_store(directory)
        s.set_team_name('Rock Hawks')

        with patch('tallylax.utils.os.replace', side_effect=OSError(28, 'No space left on device')):
            s.set_team_name('Stealth')

        assert s.team.name == 'Stealth'
        assert s.last_persist_error.key == 'team'
        assert make_store(directory).team.name == 'Rock Hawks'
        assert list(directory.glob('*.tmp')) == []

    @pytest.mark.parametrize('contents', ['{not json', '["Rock Hawks"]', '{"name": 7}'])
    def test_unusable_team_uses_configured_default(self, tmp_path, contents):
        """A broken team key loads with the configured team name."""
        directory = tmp_path / 'storage'
        s = make_store(directory, default_team_name='Home Side')
        s.set_team_name('Rock Hawks')
        s.add_player('Ash', '4')
        (directory / 'team.json').write_text(contents, encoding='utf-8')

        reloaded = make_store(directory, default_team_name='Home Side')
        assert reloaded.team.name == 'Home Side'
        assert [p.name for p in reloaded.roster] == ['Ash']


class TestBackup:
    """Tests for export, import and reset."""

    def test_export_has_six_keys(self, store):
        doc = store.export_backup()
        assert set(doc) == {
            'team', 'roster', 'games', 'statsByGame', 'attendanceByGame', 'lockedGames'
        }

    def test_round_trip(self, store, tmp_path):
        """Export then import reproduces the state tree."""
        ids = store.ids
        store.apply_stat_event(ids['game'], ids['goalie'], 'Shots Faced', 10)
        store.apply_stat_event(ids['game'], ids['goalie'], 'Goals Allowed', 3)
        store.apply_stat_event(ids['game'], ids['runner'], 'Goals', 2)
        store.lock_game(ids['game'])
        exported = store.export_backup()

        other = make_store(tmp_path / 'other')
        other.import_backup(json.dumps(exported))
        assert other.export_backup() == exported

    def test_round_trip_through_file(self, store, tmp_path):
        path = store.export_backup_file(tmp_path / 'backup.json')
        other = make_store(tmp_path / 'other')
        other.import_backup_file(path)
        assert other.export_backup() == store.export_backup()

    def test_import_persists(self, store, tmp_path):
        """Imported state is written to storage."""
        exported = store.export_backup()
        other = make_store(tmp_path / 'other')
        other.import_backup(exported)
        assert make_store(tmp_path / 'other').export_backup() == exported

    def test_missing_keys_fall_back_to_defaults(self, store):
        """Only some keys present -> the rest are empty."""
        store.import_backup('{"team": {"name": "Imported"}}')
        assert store.team.name == 'Imported'
        assert store.roster == []
        assert store.games == []
        assert store.state.stats_by_game == {}
        assert store.state.locked_games == {}

    @pytest.mark.parametrize(
        'document',
        [
            '{not json',
            '[1, 2, 3]',
            '{"roster": "nope"}',
            '{"roster": [{"id": "x", "name": "A", "number": "1", "role": "coach"}]}',
            '{"games": [{"id": "g", "opponent": "B", "date": "someday"}]}',
            '{"statsByGame": {"g": {"p": {"Goals": -1}}}}',
            '{"statsByGame": {"g": {"p": {"Goals": "3"}}}}',
            '{"lockedGames": {"g": "yes"}}',
            '{"unexpected": 1}',
        ],
    )
    def test_malformed_import_leaves_state_unchanged(self, store, document):
        """A bad document raises and nothing is applied."""
        before = store.export_backup()
        with pytest.raises(MalformedImportError):
            store.import_backup(document)
        assert store.export_backup() == before

    def test_duplicate_ids_rejected(self, store):
        doc = store.export_backup()
        doc['roster'].append(dict(doc['roster'][0]))
        with pytest.raises(MalformedImportError):
            store.import_backup(doc)

    def test_legacy_team_stats_key_accepted(self, store):
        """Older backups with teamStatsByGame still import."""
        doc = store.export_backup()
        doc['teamStatsByGame'] = {'g': {'Goals': 3}}
        del doc['lockedGames']
        store.import_backup(doc)
        assert store.state.locked_games == {}
        assert 'teamStatsByGame' not in store.export_backup()

    def test_missing_backup_file(self, store, tmp_path):
        with pytest.raises(MalformedImportError):
            store.import_backup_file(tmp_path / 'nope.json')

    def test_reset_requires_confirmation(self, store):
        """Reset without confirmation does nothing."""
        before = store.export_backup()
        with pytest.raises(ConfirmationRequiredError):
            store.reset_all_data()
        assert store.export_backup() == before

    def test_reset_clears_everything(self, store, tmp_path):
        """Confirmed reset restores defaults in memory and on disk."""
        store.reset_all_data(confirmed=True)

        assert store.team.name == 'My Team'
        assert store.roster == [] and store.games == []
        assert list((tmp_path / 'storage').glob('*.json')) == []

        reloaded = make_store(tmp_path / 'storage')
        assert reloaded.export_backup() == store.export_backup()

    def test_reset_when_storage_cannot_be_cleared(self, store, tmp_path):
        """Reset still empties the tracker in memory and reports the failure."""
        with patch('pathlib.Path.unlink', side_effect=PermissionError(13, 'Permission denied')):
            state = store.reset_all_data(confirmed=True)

        assert state is store.state
        assert store.team.name == 'My Team'
        assert store.roster == [] and store.games == []
        assert store.state.stats_by_game == {}
        assert store.state.attendance_by_game == {}
        assert store.last_persist_error is not None
        assert store.last_persist_error.key == 'team'
        assert (tmp_path / 'storage' / 'team.json').exists()

    @pytest.mark.parametrize('document', ['{"roster": []}', '{"team": null}', '{"team": {}}'])
    def test_import_without_team_uses_configured_default(self, tmp_path, document):
        """A backup with no team name gets the configured default."""
        s = make_store(tmp_path / 's', default_team_name='Home Side')
        s.set_team_name('Rock Hawks')

        s.import_backup(document)

        assert s.team.name == 'Home Side'
        assert make_store(tmp_path / 's', default_team_name='Home Side').team.name == 'Home Side'

    def test_import_file_without_team_uses_configured_default(self, tmp_path):
        path = tmp_path / 'backup.json'
        path.write_text('{"games": []}', encoding='utf-8')
        s = make_store(tmp_path / 's', default_team_name='Home Side')

        s.import_backup_file(path)

        assert s.team.name == 'Home Side'
