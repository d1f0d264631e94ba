"""
TEST_SUB_SCORES.PY - Base sub-score calculators
================================================

Tests verify:
1. Trend / matchup / line value / role stability bucket boundaries
2. EV from American odds (win_probability, else l10_hit_rate)
3. Missing data falls to the lowest bucket with used_default=True

Run with: python -m pytest tests/test_sub_scores.py -v
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.pick_schema import Leg
from signals.sub_scores import (
    american_odds_payout,
    calculate_confidence_score,
    calculate_expected_value,
    calculate_line_value_score,
    calculate_matchup_score,
    calculate_role_stability,
    calculate_trend_score,
    expected_value_result,
    line_value_score_result,
    resolve_odds,
    role_stability_result,
    trend_score_result,
)


def leg(**fields) -> Leg:
    return Leg.model_validate({"sport": "NBA", **fields})


class TestTrendScore:
    """l10_hit_rate buckets."""

    @pytest.mark.parametrize("rate,expected", [
        (0.75, 5), (0.70, 5), (0.65, 4), (0.60, 4),
        (0.55, 3), (0.50, 3), (0.45, 2), (0.40, 2), (0.39, 1), (0.0, 1),
    ])
    def test_buckets(self, rate, expected):
        assert calculate_trend_score(leg(l10_hit_rate=rate)) == expected

    def test_missing_rate_defaults_to_one(self):
        """Missing hit rate scores 1 and is reported as defaulted."""
        result = trend_score_result(leg())
        assert result.value == 1
        assert result.used_default is True


class TestMatchupScore:
    """dvp_rank buckets (1 = softest defense)."""

    @pytest.mark.parametrize("rank,expected", [
        (1, 5), (5, 5), (6, 4), (10, 4), (11, 3), (20, 3), (21, 2), (25, 2), (26, 1), (30, 1),
    ])
    def test_buckets(self, rank, expected):
        assert calculate_matchup_score(leg(dvp_rank=rank)) == expected

    def test_missing_rank_defaults_to_one(self):
        assert calculate_matchup_score(leg()) == 1


class TestExpectedValue:
    """EV% from probability and American odds."""

    def test_payout_conversion(self):
        assert american_odds_payout(150) == pytest.approx(1.5)
        assert american_odds_payout(-110) == pytest.approx(100 / 110)
        assert american_odds_payout(None) is None
        assert american_odds_payout(0) is None

    def test_ev_uses_hit_rate_when_no_probability(self):
        """0.75 at -110: 0.75 * 0.909 - 0.25 = 43%."""
        assert calculate_expected_value(leg(l10_hit_rate=0.75, odds=-110)) == 43

    def test_win_probability_preferred(self):
        """0.5 at +150: 0.5 * 1.5 - 0.5 = 25%."""
        prop = leg(l10_hit_rate=0.9, win_probability=0.5, odds=150)
        assert calculate_expected_value(prop) == 25

    def test_negative_ev(self):
        """0.4 at -110: 0.4 * 0.909 - 0.6 = -24%."""
        assert calculate_expected_value(leg(l10_hit_rate=0.4, odds=-110)) == -24

    def test_falls_back_to_over_under_odds(self):
        prop = leg(l10_hit_rate=0.5, over_odds=100)
        assert resolve_odds(prop) == 100
        assert calculate_expected_value(prop) == 0

    def test_missing_odds_defaults_to_zero(self):
        result = expected_value_result(leg(l10_hit_rate=0.8))
        assert result.value == 0
        assert result.used_default is True


class TestConfidenceScore:
    """0.4 * trend + 0.3 * matchup + 0.3 * EV/10."""

    def test_blend(self):
        assert calculate_confidence_score(5, 5, 43) == pytest.approx(4.79)

    def test_negative_ev_lowers_confidence(self):
        assert calculate_confidence_score(1, 1, -20) == pytest.approx(0.1)


class TestLineValueScore:
    """Predicted edge over the posted line, direction-aware."""

    @pytest.mark.parametrize("predicted,expected", [
        (23.0, 5),   # 15%
        (22.0, 4),   # 10%
        (21.0, 3),   # 5%
        (20.5, 2),   # 2.5%
        (20.2, 1),   # 1%
        (18.0, 1),   # negative edge
    ])
    def test_over_buckets(self, predicted, expected):
        prop = leg(pick_type="OVER", line_value=20.0, predicted_line=predicted)
        assert calculate_line_value_score(prop) == expected

    def test_under_flips_direction(self):
        """An UNDER pick wants the predicted line below the posted line."""
        prop = leg(pick_type="UNDER", line_value=20.0, predicted_line=17.0)
        assert calculate_line_value_score(prop) == 5

    def test_missing_prediction_defaults(self):
        result = line_value_score_result(leg(line_value=20.0))
        assert result.value == 1
        assert result.used_default is True

    def test_zero_line_defaults(self):
        result = line_value_score_result(leg(line_value=0.0, predicted_line=3.0))
        assert result.used_default is True


class TestRoleStability:
    """Coefficient of variation of recent minutes."""

    def test_constant_minutes_is_most_stable(self):
        assert calculate_role_stability(leg(minutes_history=[34, 34, 34, 34])) == 5

    def test_volatile_minutes(self):
        assert calculate_role_stability(leg(minutes_history=[10, 35, 20, 40])) == 1

    def test_moderate_variation(self):
        """Mean 30, population std ~2.45 -> CV ~0.082."""
        assert calculate_role_stability(leg(minutes_history=[27, 30, 33])) == 4

    def test_fewer_than_three_games_defaults(self):
        result = role_stability_result(leg(minutes_history=[30, 31]))
        assert result.value == 1
        assert result.used_default is True

    def test_zero_minutes_scores_lowest(self):
        result = role_stability_result(leg(minutes_history=[0, 0, 0]))
        assert result.value == 1
        assert result.used_default is False
