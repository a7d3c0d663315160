"""
Unit tests for prices module.

Tests actual/projected price series construction and price variation.
"""

import pytest
import numpy as np

from hodlplan.prices import (
    PriceSeries,
    build_price_series,
    fit_price_series,
    interpolate_prices,
    projected_price_from_variation,
)


class TestInterpolatePrices:
    """Tests for interpolate_prices."""

    def test_linear_path(self):
        np.testing.assert_allclose(
            interpolate_prices(100, 200, 5), [100, 125, 150, 175, 200]
        )

    def test_single_period_holds_end(self):
        np.testing.assert_allclose(interpolate_prices(100, 200, 1), [200])

    def test_zero_periods(self):
        assert interpolate_prices(100, 200, 0).shape == (0,)

    def test_missing_prices_read_as_zero(self):
        np.testing.assert_allclose(interpolate_prices(None, 100, 3), [0, 50, 100])


class TestFitPriceSeries:
    """Tests for fit_price_series."""

    def test_truncates(self):
        np.testing.assert_allclose(fit_price_series([1, 2, 3, 4], 2), [1, 2])

    def test_pads_with_last_value(self):
        np.testing.assert_allclose(fit_price_series([1, 2], 4), [1, 2, 2, 2])

    def test_empty_uses_fallback(self):
        np.testing.assert_allclose(fit_price_series([], 3, fallback=50), [50, 50, 50])

    def test_invalid_entries_become_zero(self):
        np.testing.assert_allclose(
            fit_price_series([10, float("nan"), -5, 20], 4), [10, 0, 0, 20]
        )


class TestBuildPriceSeries:
    """Tests for build_price_series."""

    def test_actual_is_flat_current_price(self):
        series = build_price_series(40_000, 50_000, periods=3)
        np.testing.assert_allclose(series.actual, [40_000] * 3)

    def test_projected_interpolates(self):
        series = build_price_series(40_000, 50_000, periods=3)
        np.testing.assert_allclose(series.projected, [40_000, 45_000, 50_000])

    def test_projected_missing_is_zero(self):
        series = build_price_series(40_000, None, periods=4)
        np.testing.assert_allclose(series.projected, np.zeros(4))

    def test_projected_without_current_holds_projected(self):
        series = build_price_series(None, 50_000, periods=3)
        np.testing.assert_allclose(series.actual, np.zeros(3))
        np.testing.assert_allclose(series.projected, [50_000] * 3)

    def test_explicit_series_override(self):
        series = build_price_series(
            40_000, 50_000, periods=4,
            actual_series=[20_000, 20_500],
            projected_series=[1, 2, 3, 4, 5],
        )
        np.testing.assert_allclose(series.actual, [20_000, 20_500, 20_500, 20_500])
        np.testing.assert_allclose(series.projected, [1, 2, 3, 4])

    def test_lengths_match_periods(self):
        series = build_price_series(40_000, 50_000, periods=7)
        assert len(series) == 7
        assert series.projected.shape == (7,)

    def test_arrays_are_read_only(self):
        series = build_price_series(40_000, 50_000, periods=3)
        with pytest.raises(ValueError):
            series.actual[0] = 1.0
        with pytest.raises(ValueError):
            series.projected[0] = 1.0

    def test_to_dict(self):
        data = build_price_series(100, 200, periods=2).to_dict()
        assert data == {"actual": [100.0, 100.0], "projected": [100.0, 200.0]}

    def test_is_price_series(self):
        assert isinstance(build_price_series(1, 1, 1), PriceSeries)


class TestProjectedPriceFromVariation:
    """Tests for projected_price_from_variation."""

    def test_positive_variation(self):
        assert projected_price_from_variation(40_000, 25) == pytest.approx(50_000)

    def test_negative_variation(self):
        assert projected_price_from_variation(40_000, -25) == pytest.approx(30_000)

    def test_variation_is_clamped(self):
        assert projected_price_from_variation(40_000, 500) == pytest.approx(64_000)
        assert projected_price_from_variation(40_000, -90) == pytest.approx(20_000)

    def test_unknown_current_price(self):
        assert projected_price_from_variation(None, 10) == 0.0
        assert projected_price_from_variation(0, 10) == 0.0
