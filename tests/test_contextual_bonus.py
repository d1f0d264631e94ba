"""
TEST_CONTEXTUAL_BONUS.PY - Contextual and sport-specific bonuses
================================================================

Tests verify:
1. Bonuses apply to winning picks only
2. Each check reads only its own context record
3. Total is capped at max_bonus
4. Sport-specific bonuses per sport

Run with: python -m pytest tests/test_contextual_bonus.py -v
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.pick_schema import (
    GameSituationContext,
    InjuryContext,
    Leg,
    TrendContext,
    WeatherContext,
)
from signals.contextual_bonus import (
    analyze_contextual_bonus,
    analyze_sport_specific_bonus,
    calculate_contextual_bonus,
    calculate_sport_specific_bonus,
    contextual_bonus_result,
    has_adverse_weather,
    has_key_injuries,
    is_counter_trend,
    is_high_leverage,
    is_road_underdog,
    sport_specific_bonus_result,
)


class TestChecks:
    """Individual flag checks."""

    def test_road_underdog_spread(self, nfl_spread_prop):
        assert is_road_underdog(Leg.model_validate(nfl_spread_prop))

    def test_home_favorite_is_not_road_underdog(self, nfl_spread_prop):
        prop = Leg.model_validate({**nfl_spread_prop, "is_home": True, "line_value": -3.5})
        assert not is_road_underdog(prop)

    def test_road_underdog_from_context(self):
        prop = Leg(prop_type="PROP_BET", context={"venue_type": "away", "is_underdog": True})
        assert is_road_underdog(prop)

    @pytest.mark.parametrize("weather,expected", [
        ({"temperature_fahrenheit": 20}, True),
        ({"temperature_fahrenheit": 100}, True),
        ({"temperature_fahrenheit": 60}, False),
        ({"wind_speed_mph": 25}, True),
        ({"wind_speed_mph": 20}, False),
        ({"precipitation_type": "snow"}, True),
        ({"precipitation_type": "NONE"}, False),
        ({"extreme_weather": True}, True),
    ])
    def test_adverse_weather(self, weather, expected):
        assert has_adverse_weather(WeatherContext(**weather)) is expected

    def test_missing_records_are_absent(self):
        assert has_adverse_weather(None) is False
        assert has_key_injuries(None) is False
        assert is_high_leverage(None) is False
        assert is_counter_trend(None) is False

    def test_key_injuries(self):
        assert has_key_injuries(InjuryContext(star_player_out=True))
        assert has_key_injuries(InjuryContext(injured_starters=["A", "B"]))
        assert not has_key_injuries(InjuryContext(injured_starters=["A"]))

    def test_close_game_uses_absolute_differential(self):
        assert is_high_leverage(GameSituationContext(final_score_differential=-3))
        assert is_high_leverage(GameSituationContext(final_score_differential=2))
        assert not is_high_leverage(GameSituationContext(final_score_differential=14))

    def test_public_fade_needs_consensus(self):
        assert is_counter_trend(TrendContext(public_consensus_percentage=75, against_public_consensus=True))
        assert not is_counter_trend(TrendContext(public_consensus_percentage=60, against_public_consensus=True))


class TestContextualBonus:
    """Weighted sum, wins only, capped."""

    def test_road_underdog_rivalry_win(self, nfl_spread_prop):
        """road_underdog 2.0 + high_leverage 2.5."""
        analysis = analyze_contextual_bonus(Leg.model_validate(nfl_spread_prop))
        assert analysis.total == pytest.approx(4.5)
        assert analysis.flags["road_underdog"] and analysis.flags["high_leverage"]

    def test_loss_gets_nothing(self, nfl_spread_prop):
        prop = Leg.model_validate({**nfl_spread_prop, "is_win": False})
        result = contextual_bonus_result(prop)
        assert result.value == 0
        assert result.used_default is False

    def test_unknown_outcome_is_defaulted(self, nfl_spread_prop):
        prop = Leg.model_validate({**nfl_spread_prop, "is_win": None})
        result = contextual_bonus_result(prop)
        assert result.value == 0
        assert result.used_default is True

    def test_capped_at_max(self, nfl_spread_prop):
        context = {
            "game": {"is_playoff": True},
            "weather": {"wind_speed_mph": 30},
            "injuries": {"quarterback_injured": True},
            "trends": {"against_team_trend": True},
        }
        prop = Leg.model_validate({**nfl_spread_prop, "context": context})
        assert calculate_contextual_bonus(prop) == pytest.approx(5.0)
        assert calculate_contextual_bonus(prop, max_bonus=3.0) == pytest.approx(3.0)

    def test_win_without_context(self):
        assert calculate_contextual_bonus(Leg(is_win=True, prop_type="PROP_BET")) == 0


class TestSportSpecificBonus:
    """Per-sport situational bonuses."""

    def test_nfl_division_game(self, nfl_spread_prop):
        analysis = analyze_sport_specific_bonus(Leg.model_validate(nfl_spread_prop))
        assert analysis.total == pytest.approx(0.5)

    def test_nba_schedule_spot(self):
        prop = Leg(sport="NBA", is_win=True, context={
            "schedule": {"is_back_to_back": True, "is_third_in_four_nights": True},
        })
        assert calculate_sport_specific_bonus(prop) == pytest.approx(1.75)

    def test_nba_road_trip_needs_length(self):
        short = Leg(sport="NBA", is_win=True, context={
            "schedule": {"is_end_of_road_trip": True, "road_trip_length": 2},
        })
        long = Leg(sport="NBA", is_win=True, context={
            "schedule": {"is_end_of_road_trip": True, "road_trip_length": 5},
        })
        assert calculate_sport_specific_bonus(short) == 0
        assert calculate_sport_specific_bonus(long) == pytest.approx(0.5)

    def test_mlb_extreme_park(self):
        prop = Leg(sport="MLB", is_win=True, context={"team_profile": {"park_factor": 1.3}})
        assert calculate_sport_specific_bonus(prop) == pytest.approx(0.5)

    def test_nhl_backup_goalie(self):
        prop = Leg(sport="NHL", is_win=True, context={"injuries": {"is_backup_goalie_starting": True}})
        assert calculate_sport_specific_bonus(prop) == pytest.approx(1.0)

    def test_requires_win(self):
        prop = Leg(sport="NHL", is_win=False, context={"injuries": {"is_backup_goalie_starting": True}})
        assert calculate_sport_specific_bonus(prop) == 0

    def test_unknown_sport(self):
        result = sport_specific_bonus_result(Leg(sport="SOCCER", is_win=True))
        assert result.value == 0
        assert result.used_default is False
