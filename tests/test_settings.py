"""Tests for settings loading and environment overrides."""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from settings import DEFAULT_SETTINGS_PATH, AppSettings, load_settings

ENV_VARS = ('CALC_SUITE_SETTINGS', 'CALC_SUITE_DATA_DIR', 'CALC_SUITE_LOCALE',
            'EXCHANGE_API_KEY', 'FINNHUB_API_KEY', 'MY_RATES_KEY')


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def write_settings(tmp_path, data):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps(data))
    return str(path)


def test_default_file_loads():
    assert os.path.exists(DEFAULT_SETTINGS_PATH)
    settings = load_settings()
    assert settings.precision == 8
    assert settings.exchange.default_from == 'USD'
    assert 'AAPL' in settings.quotes.popular_stocks
    assert settings.exchange.api_key is None


def test_values_from_file(tmp_path):
    path = write_settings(tmp_path, {
        'locale': 'tr-TR',
        'precision': 4,
        'dataDir': str(tmp_path / 'data'),
        'exchange': {'refreshIntervalSeconds': 60, 'defaultTo': 'TRY'},
    })
    settings = load_settings(path)
    assert settings.locale == 'tr-TR'
    assert settings.precision == 4
    assert settings.exchange.refresh_interval_seconds == 60
    assert settings.exchange.default_to == 'TRY'
    assert settings.store_path == os.path.join(str(tmp_path / 'data'), 'store.json')


def test_environment_overrides(tmp_path, monkeypatch):
    path = write_settings(tmp_path, {'locale': 'en-US', 'exchange': {'apiKeyEnv': 'MY_RATES_KEY'}})
    monkeypatch.setenv('CALC_SUITE_SETTINGS', path)
    monkeypatch.setenv('CALC_SUITE_DATA_DIR', str(tmp_path / 'override'))
    monkeypatch.setenv('CALC_SUITE_LOCALE', 'de-DE')
    monkeypatch.setenv('MY_RATES_KEY', 'abc123')
    monkeypatch.setenv('FINNHUB_API_KEY', 'fh-token')
    settings = load_settings()
    assert settings.data_dir == str(tmp_path / 'override')
    assert settings.locale == 'de-DE'
    assert settings.exchange.api_key == 'abc123'
    assert settings.quotes.api_key == 'fh-token'


@pytest.mark.parametrize("content", ['{broken', '[1, 2, 3]'])
def test_unusable_file_falls_back_to_defaults(tmp_path, content):
    path = tmp_path / 'settings.json'
    path.write_text(content)
    settings = load_settings(str(path))
    assert settings.locale == AppSettings().locale
    assert settings.precision == 8


def test_missing_file_falls_back_to_defaults(tmp_path):
    settings = load_settings(str(tmp_path / 'nope.json'))
    assert settings.exchange.base_url == 'https://v6.exchangerate-api.com/v6'
    assert settings.quotes.popular_cryptos == []
