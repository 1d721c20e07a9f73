"""Tests for currency conversion helpers."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.errors import ValidationError
from calc.exchange import cross_rate, exchange, sanitize_amount

RATES = {'USD': 1.0, 'EUR': 0.9, 'TRY': 30.0}


class TestSanitizeAmount:
    @pytest.mark.parametrize("raw,expected", [
        ('$1,234.56', '1234.56'),
        ('.5', '0.5'),
        ('1.2.3', '1.23'),
        ('abc', ''),
        ('', ''),
        ('1234567890123456', '123456789012'),
    ])
    def test_cleaning(self, raw, expected):
        assert sanitize_amount(raw) == expected


class TestExchange:
    def test_converts_with_rate(self):
        assert exchange(100, RATES, 'eur') == pytest.approx(90)

    def test_numeric_text(self):
        assert exchange('10', RATES, 'TRY') == pytest.approx(300)

    def test_negative_amount_clamped(self):
        assert exchange(-5, RATES, 'EUR') == 0

    def test_missing_rate(self):
        with pytest.raises(ValidationError, match="GBP"):
            exchange(1, RATES, 'GBP')

    @pytest.mark.parametrize("amount", ['abc', None, float('nan'), False])
    def test_bad_amount(self, amount):
        with pytest.raises(ValidationError):
            exchange(amount, RATES, 'EUR')


def test_cross_rate():
    assert cross_rate(RATES, 'eur', 'try') == pytest.approx(33.3333, abs=1e-4)
    with pytest.raises(ValidationError):
        cross_rate(RATES, 'EUR', 'XYZ')
    with pytest.raises(ValidationError, match='ABC'):
        cross_rate(RATES, 'abc', 'EUR')
