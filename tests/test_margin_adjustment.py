"""
TEST_MARGIN_ADJUSTMENT.PY - Bounded margin-of-outcome adjustment
================================================================

Tests verify:
1. Linear region inside the threshold (60% of max at the threshold)
2. Diminishing returns beyond the threshold, bounded by max_adjustment
3. Market rules (over/under direction, spread, moneyline)
4. Missing actual/line yields 0

Run with: python -m pytest tests/test_margin_adjustment.py -v
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.pick_schema import Leg
from models.scoring_config import MarginSettings
from signals.margin_adjustment import (
    apply_diminishing_returns,
    bounded_sigmoid,
    calculate_margin_adjustment,
    margin_adjustment_result,
    raw_margin,
    volatility_adjusted_margin,
)


def ou(pick_type="OVER", line=25.5, actual=30.5, **fields) -> Leg:
    return Leg(prop_type="OVER_UNDER", pick_type=pick_type, line_value=line, actual_result=actual, **fields)


class TestCurve:
    """apply_diminishing_returns with default settings (max 5, threshold 7, scale 0.5)."""

    def test_zero_margin(self):
        assert apply_diminishing_returns(0, 5, 0.5, 7) == 0

    def test_linear_inside_threshold(self):
        assert apply_diminishing_returns(3.5, 5, 0.5, 7) == pytest.approx(1.5)
        assert apply_diminishing_returns(7, 5, 0.5, 7) == pytest.approx(3.0)

    def test_symmetric(self):
        assert apply_diminishing_returns(-10, 5, 0.5, 7) == pytest.approx(-apply_diminishing_returns(10, 5, 0.5, 7))

    def test_beyond_threshold_uses_sigmoid(self):
        """margin 10: 3 + 2 * sigmoid(1.5)."""
        expected = 3.0 + 2.0 * bounded_sigmoid(1.5)
        assert apply_diminishing_returns(10, 5, 0.5, 7) == pytest.approx(expected)

    def test_diminishing_returns(self):
        """Each extra point past the threshold is worth less."""
        gains = [
            apply_diminishing_returns(m + 1, 5, 0.5, 7) - apply_diminishing_returns(m, 5, 0.5, 7)
            for m in (8, 12, 20)
        ]
        assert gains[0] > gains[1] > gains[2] > 0

    @pytest.mark.parametrize("margin", [-1000, -50, -7.5, 0.1, 7.5, 50, 1000])
    def test_bounded(self, margin):
        assert -5 <= apply_diminishing_returns(margin, 5, 0.5, 7) <= 5


class TestMarketRules:
    """Raw margin per market."""

    def test_over_pick(self):
        assert raw_margin(ou(actual=30.5)) == pytest.approx(5.0)

    def test_under_pick_flips_sign(self):
        assert raw_margin(ou(pick_type="UNDER", actual=20.5)) == pytest.approx(5.0)

    def test_spread(self):
        prop = Leg(prop_type="SPREAD", line_value=3.5, actual_result=10.5)
        assert raw_margin(prop) == pytest.approx(7.0)

    def test_moneyline(self):
        assert raw_margin(Leg(prop_type="MONEYLINE", line_value=0, actual_result=1, is_win=True)) == 10
        assert raw_margin(Leg(prop_type="MONEYLINE", line_value=0, actual_result=0, is_win=False)) == -10

    def test_over_under_without_direction(self):
        assert raw_margin(ou(pick_type=None)) is None

    def test_adjustment_for_over_win(self):
        """Margin 5 inside threshold: 5/7 * 3."""
        assert calculate_margin_adjustment(ou(actual=30.5)) == pytest.approx(15 / 7)


class TestMissingData:
    """Missing inputs yield 0 reported as defaulted."""

    def test_missing_actual(self):
        result = margin_adjustment_result(ou(actual=None))
        assert result.value == 0
        assert result.used_default is True

    def test_missing_line(self):
        assert calculate_margin_adjustment(ou(line=None)) == 0

    def test_zero_actual_is_valid(self):
        """An actual result of 0 is data, not a missing value."""
        result = margin_adjustment_result(ou(line=0.5, actual=0, pick_type="UNDER"))
        assert result.used_default is False
        assert result.value > 0

    def test_unsupported_prop_type(self):
        prop = Leg(prop_type="FUTURES", line_value=1, actual_result=2)
        assert margin_adjustment_result(prop).used_default is True


class TestSettings:
    """Config-supplied margin settings and the volatility-adjusted form."""

    def test_custom_max(self):
        settings = MarginSettings(max_adjustment=10, threshold=7, scaling_factor=0.5)
        assert calculate_margin_adjustment(ou(actual=32.5), settings) == pytest.approx(6.0)

    def test_volatility_adjusted_margin(self):
        base = calculate_margin_adjustment(ou(actual=30.5))
        assert volatility_adjusted_margin(ou(actual=30.5), 1.25) == pytest.approx(base / 1.25)

    def test_volatility_adjusted_margin_rejects_non_positive(self):
        with pytest.raises(ValueError):
            volatility_adjusted_margin(ou(), 0)
