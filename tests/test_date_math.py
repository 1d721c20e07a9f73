"""Tests for date differences and date shifting."""

import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.date_math import add_period, diff_days, parse_date, subtract_period
from calc.errors import FormatError, ValidationError


class TestDiffDays:
    def test_two_months(self):
        diff = diff_days('2024-01-01', '2024-03-01')
        assert diff.total_days == 60
        assert (diff.years, diff.months, diff.days) == (0, 2, 0)

    def test_order_does_not_matter(self):
        assert diff_days('2024-03-01', '2024-01-01').total_days == 60

    def test_breakdown_uses_fixed_month_length(self):
        # 400 days: 1 year, 35 days left -> 1 month; days is 400 % 30
        diff = diff_days('2023-01-01', '2024-02-05')
        assert diff.total_days == 400
        assert (diff.years, diff.months, diff.days) == (1, 1, 10)
        assert diff.describe() == "1 years, 1 months, 10 days"

    def test_partial_day_rounds_up(self):
        assert diff_days('2024-01-01T00:00', '2024-01-02T01:00').total_days == 2

    def test_same_date(self):
        assert diff_days(date(2024, 5, 5), '2024-05-05').total_days == 0

    def test_offset_aware_mixed_with_naive(self):
        assert diff_days('2024-01-01T00:00:00+00:00', '2024-01-05').total_days == 4

    def test_offset_converted_to_utc(self):
        assert parse_date('2024-01-01T02:00:00+02:00') == parse_date('2024-01-01T00:00:00')
        assert diff_days('2024-01-02T00:00:00-05:00', '2024-01-02T05:00:00').total_days == 0

    def test_invalid_date(self):
        with pytest.raises(FormatError):
            diff_days('not-a-date', '2024-01-01')
        with pytest.raises(FormatError):
            parse_date(20240101)


class TestAddPeriod:
    def test_month_end_clamps_in_leap_year(self):
        assert add_period('2024-01-31', 1, 'months') == date(2024, 2, 29)

    def test_month_end_clamps_in_common_year(self):
        assert add_period('2023-01-31', 1, 'months') == date(2023, 2, 28)

    def test_leap_day_plus_one_year(self):
        assert add_period('2024-02-29', 1, 'years') == date(2025, 2, 28)

    def test_days_cross_year(self):
        assert add_period('2024-12-31', 1, 'days') == date(2025, 1, 1)

    def test_months_cross_year(self):
        assert add_period('2024-11-15', 3, 'Months') == date(2025, 2, 15)

    def test_subtract(self):
        assert subtract_period('2024-03-31', 1, 'months') == date(2024, 2, 29)
        assert subtract_period('2024-01-01', 1, 'days') == date(2023, 12, 31)

    def test_whole_float_amount_accepted(self):
        assert add_period('2024-01-01', 2.0, 'days') == date(2024, 1, 3)

    @pytest.mark.parametrize("amount,unit", [
        (1.5, 'days'),
        ('3', 'days'),
        (True, 'days'),
        (1, 'weeks'),
        (1, ''),
    ])
    def test_invalid_amount_or_unit(self, amount, unit):
        with pytest.raises(ValidationError):
            add_period('2024-01-01', amount, unit)

    def test_result_out_of_range(self):
        with pytest.raises(ValidationError):
            add_period('9999-12-01', 1, 'months')
        with pytest.raises(ValidationError):
            add_period('9999-12-31', 1, 'days')
        with pytest.raises(ValidationError):
            add_period('2024-01-01', 10 ** 12, 'months')
        with pytest.raises(ValidationError):
            subtract_period('0001-06-01', 1, 'years')
