"""Tests for radix conversion and 32-bit bitwise operations."""

import itertools
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.base_converter import (
    apply_bitwise,
    convert_base,
    is_valid_digit,
    parse_integer,
    to_base_string,
    to_int32,
)
from calc.errors import FormatError, ValidationError


class TestConvertBase:
    @pytest.mark.parametrize("digits,from_radix,to_radix,expected", [
        ('255', 10, 16, 'FF'),
        ('ff', 16, 2, '11111111'),
        ('777', 8, 10, '511'),
        ('Z', 36, 10, '35'),
        ('0', 10, 2, '0'),
        ('-10', 10, 2, '-1010'),
    ])
    def test_conversions(self, digits, from_radix, to_radix, expected):
        assert convert_base(digits, from_radix, to_radix) == expected

    @pytest.mark.parametrize("from_radix,to_radix", list(itertools.product((2, 8, 10, 16), repeat=2)))
    @pytest.mark.parametrize("value", [0, 1, 255, -4096, 2 ** 40 + 7])
    def test_round_trip_between_common_radices(self, value, from_radix, to_radix):
        digits = to_base_string(value, from_radix)
        there = convert_base(digits, from_radix, to_radix)
        assert convert_base(there, to_radix, from_radix) == digits

    def test_large_values_stay_exact(self):
        big = '123456789012345678901234567890'
        assert convert_base(convert_base(big, 10, 36), 36, 10) == big

    def test_digit_outside_radix(self):
        with pytest.raises(FormatError, match="Invalid digit '2'"):
            convert_base('102', 2, 10)

    def test_empty_input(self):
        with pytest.raises(FormatError):
            parse_integer('', 10)
        with pytest.raises(FormatError):
            parse_integer('-', 10)

    @pytest.mark.parametrize("radix", [1, 37, 0, True])
    def test_radix_out_of_range(self, radix):
        with pytest.raises(ValidationError):
            convert_base('1', 10, radix)


class TestDigits:
    def test_valid_digits(self):
        assert is_valid_digit('1', 2)
        assert not is_valid_digit('2', 2)
        assert is_valid_digit('f', 16)
        assert not is_valid_digit('G', 16)
        assert not is_valid_digit('12', 10)

    def test_to_base_string_uses_upper_case(self):
        assert to_base_string(48879, 16) == 'BEEF'


class TestBitwise:
    def test_to_int32_wraps(self):
        assert to_int32(0xFFFFFFFF) == -1
        assert to_int32(0x80000000) == -2147483648
        assert to_int32(2 ** 40 + 5) == 5

    def test_not_zero(self):
        assert apply_bitwise('0', 10, 'NOT') == '-1'

    def test_left_shift_overflows_sign_bit(self):
        assert apply_bitwise('7FFFFFFF', 16, 'LSH') == '-2'

    def test_right_shift_is_arithmetic(self):
        assert apply_bitwise('-8', 10, 'RSH') == '-4'
        assert apply_bitwise('1010', 2, 'rsh') == '101'

    def test_unknown_operation(self):
        with pytest.raises(ValidationError):
            apply_bitwise('1', 10, 'XOR')
