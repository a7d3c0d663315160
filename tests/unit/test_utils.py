"""
Unit tests for utils and log_config modules.
"""

import logging
import math

import numpy as np
import pytest

from hodlplan import log_config
from hodlplan.utils import (
    clamp,
    finite_or,
    fit_length,
    format_currency,
    format_quantity,
    is_finite_number,
    parse_nullable_number,
)


class TestNumericCoercion:
    """Tests for numeric coercion helpers."""

    @pytest.mark.parametrize("value,expected", [
        (1, True),
        (1.5, True),
        (np.float64(2.0), True),
        (float("nan"), False),
        (float("inf"), False),
        (True, False),
        ("1", False),
        (None, False),
    ])
    def test_is_finite_number(self, value, expected):
        assert is_finite_number(value) is expected

    @pytest.mark.parametrize("value,expected", [
        ("12", 12.0),
        (" 3.5 ", 3.5),
        (7, 7.0),
        ("", None),
        ("abc", None),
        ("nan", None),
        ("inf", None),
        (None, None),
        (False, None),
        ([1], None),
    ])
    def test_parse_nullable_number(self, value, expected):
        assert parse_nullable_number(value) == expected

    def test_finite_or(self):
        assert finite_or("4", 1.0) == 4.0
        assert finite_or(math.nan, 1.0) == 1.0
        assert finite_or(None, 2.0) == 2.0

    def test_clamp(self):
        assert clamp(5, 0, 1) == 1
        assert clamp(-5, 0, 1) == 0
        assert clamp(0.5, 0, 1) == 0.5


class TestFitLength:
    """Tests for fit_length."""

    def test_pad_and_truncate(self):
        np.testing.assert_allclose(fit_length([1, 2], 4), [1, 2, 2, 2])
        np.testing.assert_allclose(fit_length([1, 2, 3], 2), [1, 2])

    def test_empty_uses_fill(self):
        np.testing.assert_allclose(fit_length([], 2, fill=9), [9, 9])

    @pytest.mark.parametrize("values", [42, None, "123"])
    def test_non_sequence_reads_as_empty(self, values):
        np.testing.assert_allclose(fit_length(values, 3, fill=5), [5, 5, 5])

    def test_zero_length(self):
        assert fit_length([1, 2], 0).shape == (0,)


class TestFormatting:
    """Tests for formatting helpers."""

    def test_format_quantity(self):
        assert format_quantity(0.166666666) == "0.16666667"
        assert format_quantity(1, decimals=4) == "1.0000"

    def test_format_currency(self):
        assert format_currency(6666.666) == "6,666.67 €"
        assert format_currency(600, decimals=0, symbol="$") == "600 $"


class TestLogConfig:
    """Tests for log_config.setup."""

    def test_level_name(self):
        log_config.setup("INFO")
        assert logging.getLogger().level == logging.INFO

    def test_verbose_forces_debug(self):
        log_config.setup("ERROR", verbose=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back(self):
        log_config.setup("LOUD")
        assert logging.getLogger().level == logging.WARNING
