"""Tests for the persisted services: store, accounts, activity, saved data."""

import json
import os
import sys
from datetime import datetime

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.errors import ValidationError
from model.History import HistoryBuffer, HistoryEntry
from services.activity_service import (
    ACTIVITIES_KEY,
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    ActivityIcon,
    ActivityService,
    ActivityType,
    format_relative_time,
    icon_for,
)
from services.auth_service import CURRENT_USER_KEY, USERS_KEY, AuthService, hash_password, verify_password
from services.data_service import DataService
from services.favorites_service import FavoritesService
from services.history_store import HistoryStore, history_key
from services.storage import JsonFileStore, MemoryStore, load_json, load_json_list, save_json

NOW = 1_700_000_000_000


@pytest.fixture
def store():
    return MemoryStore()


class TestStores:
    def test_memory_store(self, store):
        store.set('a', '1')
        assert store.get('a') == '1'
        store.remove('a')
        store.remove('missing')
        assert store.get('a') is None

    def test_json_file_store_persists(self, tmp_path):
        path = str(tmp_path / 'data' / 'store.json')
        JsonFileStore(path).set('key', 'value')
        assert os.path.exists(path)
        assert JsonFileStore(path).get('key') == 'value'

    def test_json_file_store_remove(self, tmp_path):
        path = str(tmp_path / 'store.json')
        first = JsonFileStore(path)
        first.set('key', 'value')
        first.remove('key')
        assert JsonFileStore(path).get('key') is None

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / 'store.json'
        path.write_text('{not json')
        store = JsonFileStore(str(path))
        assert store.get('key') is None
        store.set('key', 'value')
        assert json.loads(path.read_text()) == {'key': 'value'}

    def test_non_object_file_reads_empty(self, tmp_path):
        path = tmp_path / 'store.json'
        path.write_text('[1, 2]')
        assert JsonFileStore(str(path)).get('0') is None

    def test_json_helpers(self, store):
        save_json(store, 'k', {'x': 1})
        assert load_json(store, 'k') == {'x': 1}
        assert load_json(store, 'missing', 'default') == 'default'
        store.set('bad', '{oops')
        assert load_json(store, 'bad', []) == []
        assert load_json_list(store, 'k') == []


class TestAuthService:
    def test_password_hashing(self):
        hashed = hash_password('secret')
        assert hashed != 'secret'
        assert verify_password('secret', hashed)
        assert not verify_password('wrong', hashed)
        assert not verify_password('secret', 'not-a-hash')

    def test_register_and_login(self, store):
        auth = AuthService(store)
        assert auth.register('alice', 'correct-horse')
        assert 'correct-horse' not in store.get(USERS_KEY)
        assert auth.login('alice', 'correct-horse')
        assert auth.current_user().username == 'alice'

    def test_duplicate_username(self, store):
        auth = AuthService(store)
        auth.register('alice', 'pw')
        assert auth.register('alice', 'other') is False

    def test_wrong_password(self, store):
        auth = AuthService(store)
        auth.register('alice', 'pw')
        assert auth.login('alice', 'nope') is False
        assert auth.login('bob', 'pw') is False
        assert auth.current_user() is None

    def test_logout(self, store):
        auth = AuthService(store)
        auth.register('alice', 'pw')
        auth.login('alice', 'pw')
        auth.logout()
        assert store.get(CURRENT_USER_KEY) is None
        assert auth.current_user() is None

    @pytest.mark.parametrize("username,password", [('', 'pw'), ('  ', 'pw'), ('alice', '')])
    def test_missing_credentials(self, store, username, password):
        with pytest.raises(ValidationError):
            AuthService(store).register(username, password)

    def test_malformed_user_records_skipped(self, store):
        store.set(USERS_KEY, json.dumps([{'username': 'no-id'}, 'junk']))
        auth = AuthService(store)
        assert auth.register('alice', 'pw')
        assert auth.login('alice', 'pw')


class TestRelativeTime:
    @pytest.mark.parametrize("age,expected", [
        (0, 'just now'),
        (59 * 1000, 'just now'),
        (MS_PER_MINUTE, '1 minute ago'),
        (5 * MS_PER_MINUTE, '5 minutes ago'),
        (MS_PER_HOUR, '1 hour ago'),
        (23 * MS_PER_HOUR, '23 hours ago'),
        (MS_PER_DAY, '1 day ago'),
        (6 * MS_PER_DAY, '6 days ago'),
    ])
    def test_recent(self, age, expected):
        assert format_relative_time(NOW - age, NOW) == expected

    def test_older_than_a_week_shows_date(self):
        timestamp = NOW - 10 * MS_PER_DAY
        expected = datetime.fromtimestamp(timestamp / 1000).strftime('%Y-%m-%d')
        assert format_relative_time(timestamp, NOW) == expected


class TestActivityService:
    def test_add_and_filter_by_user(self, store):
        service = ActivityService(store)
        service.add_activity('u1', ActivityType.CALCULATION, '1 + 1 = 2', NOW)
        service.add_activity('u2', ActivityType.EXCHANGE, '10 USD', NOW)
        service.add_activity('u1', 'coin-flip', 'heads', NOW + 1)
        activities = service.get_user_activities('u1')
        assert [a.description for a in activities] == ['heads', '1 + 1 = 2']
        assert activities[0].icon == ActivityIcon.COINS

    def test_recent_limit(self, store):
        service = ActivityService(store)
        for i in range(5):
            service.add_activity('u1', ActivityType.DATE, f'd{i}', NOW + i)
        assert [a.description for a in service.get_recent_activities('u1')] == ['d4', 'd3', 'd2']

    def test_log_capped_at_one_hundred(self, store):
        service = ActivityService(store)
        for i in range(105):
            service.add_activity('u1', ActivityType.CALCULATION, str(i), NOW + i)
        activities = service.get_user_activities('u1')
        assert len(activities) == 100
        assert activities[0].description == '104'
        assert activities[-1].description == '5'

    def test_unknown_type_rejected(self, store):
        with pytest.raises(ValueError):
            ActivityService(store).add_activity('u1', 'gardening', 'x')

    def test_stats_windows(self, store):
        service = ActivityService(store)
        for age in (0, 2 * MS_PER_HOUR, 3 * MS_PER_DAY, 20 * MS_PER_DAY, 40 * MS_PER_DAY):
            service.add_activity('u1', ActivityType.INVESTMENT, 'x', NOW - age)
        service.add_activity('u2', ActivityType.INVESTMENT, 'x', NOW)
        stats = service.get_activity_stats('u1', NOW)
        assert (stats.today, stats.this_week, stats.this_month) == (2, 3, 4)

    def test_icon_fallback(self):
        assert icon_for('programming') == ActivityIcon.CODE
        assert icon_for('unknown') == ActivityIcon.HISTORY

    def test_malformed_records_skipped(self, store):
        store.set(ACTIVITIES_KEY, json.dumps([{'id': 'x'}]))
        assert ActivityService(store).get_user_activities('u1') == []


class TestDataService:
    def test_save_get_clear(self, store):
        service = DataService(store)
        service.save_data('u1', 'loans', {'principal': 1000})
        service.save_data('u1', 'loans', {'principal': 2000})
        items = service.get_data('u1', 'loans')
        assert [i.data['principal'] for i in items] == [1000, 2000]
        assert items[0].user_id == 'u1'
        assert store.get('u1_loans') is not None
        service.clear_data('u1', 'loans')
        assert service.get_data('u1', 'loans') == []

    def test_types_are_separate(self, store):
        service = DataService(store)
        service.save_data('u1', 'dates', '2024-01-01')
        assert service.get_data('u1', 'loans') == []


class TestFavoritesService:
    def test_toggle(self, store):
        favorites = FavoritesService(store)
        assert favorites.toggle('aapl') is True
        assert favorites.is_favorite('AAPL')
        assert favorites.list() == ['AAPL']
        assert favorites.toggle('AAPL') is False
        assert favorites.list() == []


class TestHistoryStore:
    def test_round_trip_keeps_order(self, store):
        history = HistoryBuffer(10)
        history.append(HistoryEntry('1 + 1', '2'))
        history.append(HistoryEntry('2 + 2', '4'))
        histories = HistoryStore(store)
        histories.save('u1', history)
        loaded = histories.load('u1')
        assert [e.text for e in loaded] == ['2 + 2 = 4', '1 + 1 = 2']
        assert loaded.capacity == 10

    def test_clear(self, store):
        histories = HistoryStore(store)
        histories.save('u1', HistoryBuffer(10, [HistoryEntry('1', '1')]))
        histories.clear('u1')
        histories.clear(None)
        assert store.get(history_key('u1')) is None
        assert len(histories.load('u1')) == 0

    def test_malformed_entries_skipped(self, store):
        store.set(history_key('u1'), json.dumps(['junk', {'calculation': '3', 'result': '3',
                                                          'timestamp': 'yesterday'},
                                                 {'calculation': '1 + 2', 'result': '3'}]))
        assert [e.text for e in HistoryStore(store).load('u1')] == ['1 + 2 = 3']
