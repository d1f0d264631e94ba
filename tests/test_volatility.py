"""
TEST_VOLATILITY.PY - Volatility factor and asymmetric adjustment
================================================================

Tests verify:
1. Multiplicative stages (sport, market, ticket, total, history, situational)
2. Stage toggles via VolatilityOptions
3. Config-supplied tables override defaults
4. Positive scores divided by sqrt(factor), negative scores multiplied

Run with: python -m pytest tests/test_volatility.py -v
"""

import math
import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.pick_schema import HistoricalVarianceContext, Prop
from models.scoring_config import ScoringConfig
from signals.volatility import (
    VolatilityOptions,
    analyze_volatility,
    apply_volatility_adjustment,
    calculate_volatility_adjusted_score,
    calculate_volatility_factor,
    historical_variance_volatility,
    sport_volatility_stats,
    total_points_volatility,
)


class TestStages:
    """Individual stage multipliers."""

    def test_nba_prop_bet_single(self, nba_prop):
        analysis = analyze_volatility(Prop.model_validate(nba_prop))
        assert analysis.factor == pytest.approx(0.8 * 1.3)
        assert "total_points" not in analysis.stages

    def test_nfl_game_total(self):
        """NFL 1.2 x OVER_UNDER 1.1 x total <= 45 1.3."""
        prop = Prop(sport="NFL", prop_type="OVER_UNDER", pick_type="UNDER", line_value=44.5)
        assert calculate_volatility_factor(prop) == pytest.approx(1.2 * 1.1 * 1.3)

    def test_leg_uses_parent_bet_type(self, nba_prop):
        leg = Prop.model_validate({**nba_prop, "parent_bet_type": "parlay"})
        assert calculate_volatility_factor(leg) == pytest.approx(0.8 * 1.3 * 1.5)

    def test_unknown_sport_uses_default(self):
        assert calculate_volatility_factor(Prop(sport="CRICKET")) == pytest.approx(1.0)

    @pytest.mark.parametrize("line,expected", [
        (None, 1.0), (0, 1.0), (8.5, 1.5), (30, 1.5), (44.5, 1.3), (51.5, 1.1), (180, 1.0), (225.5, 0.9),
    ])
    def test_total_points(self, line, expected):
        assert total_points_volatility(line) == expected

    def test_historical_variance(self):
        assert historical_variance_volatility(None) == 1.0
        assert historical_variance_volatility(HistoricalVarianceContext(variance_factor=1.2)) == 1.2
        assert historical_variance_volatility(HistoricalVarianceContext(mean=20, standard_deviation=12)) == 1.5
        assert historical_variance_volatility(HistoricalVarianceContext(mean=20, standard_deviation=5)) == 1.1
        assert historical_variance_volatility(HistoricalVarianceContext(mean=20, standard_deviation=1)) == 0.9

    def test_nba_situational(self, nba_prop):
        prop = Prop.model_validate({**nba_prop, "context": {
            "schedule": {"is_back_to_back": True},
            "team_profile": {"pace_factor": 110},
        }})
        analysis = analyze_volatility(prop)
        assert analysis.stages["situational"] == pytest.approx(1.15 * 0.9)

    def test_nfl_late_season_without_stakes(self):
        prop = Prop(sport="NFL", prop_type="SPREAD", context={
            "game": {"is_late_season": True, "has_playoff_implications": False},
        })
        assert analyze_volatility(prop).stages["situational"] == pytest.approx(1.3)

    def test_nfl_late_season_unknown_stakes(self):
        """Unknown playoff implications do not count as none."""
        prop = Prop(sport="NFL", prop_type="SPREAD", context={"game": {"is_late_season": True}})
        assert analyze_volatility(prop).stages["situational"] == pytest.approx(1.0)

    def test_mlb_pitching(self):
        prop = Prop(sport="MLB", context={"team_profile": {"starting_pitcher_tier": "ace", "bullpen_strength": "weak"}})
        assert analyze_volatility(prop).stages["situational"] == pytest.approx(0.9 * 1.15)

    def test_nhl_goalie(self):
        prop = Prop(sport="NHL", context={"team_profile": {"starting_goalie_quality": "Poor"}})
        assert analyze_volatility(prop).stages["situational"] == pytest.approx(1.25)


class TestOptionsAndConfig:
    """Stage toggles and config tables."""

    def test_all_stages_off(self, nba_prop):
        options = VolatilityOptions(
            enable_sport_adjustments=False,
            enable_market_type_adjustments=False,
            enable_bet_type_adjustments=False,
            enable_total_based_adjustments=False,
            enable_historical_variance_adjustments=False,
            enable_situational_adjustments=False,
        )
        analysis = analyze_volatility(Prop.model_validate(nba_prop), options=options)
        assert analysis.factor == 1.0
        assert analysis.stages == {}

    def test_base_volatility(self, nba_prop):
        options = VolatilityOptions(base_volatility=2.0)
        assert calculate_volatility_factor(Prop.model_validate(nba_prop), options=options) == pytest.approx(2.08)

    def test_config_table_override(self, nba_prop):
        config = ScoringConfig(sport_volatility={"NBA": 1.0})
        assert calculate_volatility_factor(Prop.model_validate(nba_prop), config) == pytest.approx(1.3)

    def test_factor_clamped_positive(self, nba_prop):
        config = ScoringConfig(sport_volatility={"NBA": 0.001})
        assert calculate_volatility_factor(Prop.model_validate(nba_prop), config) == pytest.approx(0.05)


class TestAdjustment:
    """Asymmetric square-root adjustment."""

    def test_positive_divides(self):
        assert apply_volatility_adjustment(16.0, 4.0) == pytest.approx(8.0)

    def test_negative_multiplies(self):
        assert apply_volatility_adjustment(-4.0, 4.0) == pytest.approx(-8.0)

    def test_zero_stays_zero(self):
        assert apply_volatility_adjustment(0.0, 2.5) == 0.0

    def test_low_volatility_boosts_positive(self):
        assert apply_volatility_adjustment(10.0, 0.81) == pytest.approx(10 / 0.9)

    @pytest.mark.parametrize("factor", [0, -1])
    def test_non_positive_factor_raises(self, factor):
        with pytest.raises(ValueError):
            apply_volatility_adjustment(10.0, factor)

    def test_adjusted_score_for_prop(self, nba_prop):
        prop = Prop.model_validate(nba_prop)
        assert calculate_volatility_adjusted_score(prop, 16.79) == pytest.approx(16.79 / math.sqrt(1.04))


class TestSportStats:
    """Reference volatility stats."""

    def test_nba(self):
        stats = sport_volatility_stats("nba")
        assert stats.base_volatility == 0.8
        assert stats.points_per_game == 220.0

    def test_unprofiled_sport(self):
        stats = sport_volatility_stats("GOLF")
        assert stats.base_volatility == 1.3
        assert stats.points_per_game == 0.0
