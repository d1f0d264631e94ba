"""
Contextual Bonus - credit for correct picks made in hard spots
==============================================================

Applies ONLY to winning picks. Independent checks, each with a fixed weight:

    road_underdog    2.0   away team that was also the underdog
    adverse_weather  1.5   freezing/extreme heat, wind > 20 mph, rain/snow
    key_injuries     2.0   key/star players out, 2+ starters out, QB hurt
    high_leverage    2.5   playoffs, rivalry, national TV, one-score game, clutch
    counter_trend    1.5   picked against a strong trend or 70%+ public side

Total capped at max_bonus (default 5.0).

Sport-specific bonuses (also wins only, uncapped) layer on top:
NFL division / short week / west-coast early kick / weather total,
NBA back-to-back / 3-in-4 / long road trip / minutes-restricted prop,
MLB day-after-night / tired bullpen / extreme park / getaway day,
NHL back-to-back / backup goalie / long road trip / late-season stakes.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.scoring_contract import CONTEXTUAL_BONUS_WEIGHTS, MAX_CONTEXTUAL_BONUS
from core.sports import Sport, normalize_sport
from models.pick_schema import (
    GameSituationContext,
    InjuryContext,
    Leg,
    PropContext,
    PropType,
    ScheduleContext,
    TeamProfileContext,
    TrendContext,
    WeatherContext,
)
from signals.base import ScoreResult, check_flag, defaulted, guarded, is_true


# ============================================
# CONSTANTS
# ============================================

FREEZING_F = 32
EXTREME_HEAT_F = 95
HIGH_WIND_MPH = 20
ADVERSE_PRECIPITATION = {"RAIN", "SNOW"}
CLOSE_GAME_MARGIN = 3
PUBLIC_CONSENSUS_MIN_PCT = 70
LONG_ROAD_TRIP_GAMES = 4
PARK_FACTOR_NEUTRAL_BAND = (0.8, 1.2)

SPORT_BONUS_WEIGHTS = {
    Sport.NFL: {
        "division_game": 0.5,
        "short_week": 0.75,
        "west_coast_early": 1.0,
        "weather_total": 1.0,
    },
    Sport.NBA: {
        "back_to_back": 0.75,
        "third_in_four_nights": 1.0,
        "end_of_road_trip": 0.5,
        "minutes_restricted_prop": 1.5,
    },
    Sport.MLB: {
        "day_after_night": 0.5,
        "bullpen_depleted": 0.75,
        "extreme_park": 0.5,
        "getaway_day": 0.5,
    },
    Sport.NHL: {
        "back_to_back": 0.75,
        "backup_goalie": 1.0,
        "after_road_trip": 0.5,
        "late_season_stakes": 0.75,
    },
}


@dataclass
class BonusAnalysis:
    """Result of a bonus evaluation."""
    total: float
    flags: Dict[str, bool] = field(default_factory=dict)
    reasons: List[str] = field(default_factory=list)


def _context(prop: Leg) -> PropContext:
    return prop.context or PropContext()


# ============================================
# CHECKS (each reads only the record it needs)
# ============================================

def is_road_underdog(prop: Leg) -> bool:
    ctx = _context(prop)
    venue = getattr(prop, "venue_type", None) or ctx.venue_type
    is_road = prop.is_home is False or str(venue or "").upper() == "AWAY"

    is_underdog = (
        (prop.prop_type == PropType.SPREAD.value and prop.line_value is not None and prop.line_value > 0)
        or (prop.prop_type == PropType.MONEYLINE.value and prop.odds is not None and prop.odds > 100)
        or is_true(ctx.is_underdog)
    )
    return is_road and is_underdog


def has_adverse_weather(weather: Optional[WeatherContext]) -> bool:
    if weather is None:
        return False
    temp = weather.temperature_fahrenheit
    extreme_temp = temp is not None and (temp < FREEZING_F or temp > EXTREME_HEAT_F)
    high_wind = weather.wind_speed_mph is not None and weather.wind_speed_mph > HIGH_WIND_MPH
    precipitation = str(weather.precipitation_type or "").upper() in ADVERSE_PRECIPITATION
    return extreme_temp or high_wind or precipitation or is_true(weather.extreme_weather)


def has_key_injuries(injuries: Optional[InjuryContext]) -> bool:
    if injuries is None:
        return False
    return (
        is_true(injuries.has_key_injuries)
        or is_true(injuries.star_player_out)
        or len(injuries.injured_starters) > 1
        or is_true(injuries.quarterback_injured)
    )


def is_high_leverage(game: Optional[GameSituationContext]) -> bool:
    if game is None:
        return False
    close_game = (
        game.final_score_differential is not None
        and abs(game.final_score_differential) <= CLOSE_GAME_MARGIN
    )
    return (
        is_true(game.is_playoff) or is_true(game.is_tournament) or is_true(game.is_elimination)
        or is_true(game.is_rivalry)
        or is_true(game.is_nationally_televised)
        or close_game
        or is_true(game.is_late_game) or is_true(game.is_clutch_time)
    )


def is_counter_trend(trends: Optional[TrendContext]) -> bool:
    if trends is None:
        return False
    against_public = (
        trends.public_consensus_percentage is not None
        and trends.public_consensus_percentage >= PUBLIC_CONSENSUS_MIN_PCT
        and is_true(trends.against_public_consensus)
    )
    return (
        is_true(trends.against_team_trend)
        or is_true(trends.against_h2h_trend)
        or is_true(trends.against_situational_trend)
        or against_public
    )


# ============================================
# CONTEXTUAL BONUS
# ============================================

def analyze_contextual_bonus(prop: Leg, max_bonus: float = MAX_CONTEXTUAL_BONUS) -> BonusAnalysis:
    """Evaluate every contextual bonus check. Non-winning picks get 0."""
    if prop.is_win is not True:
        return BonusAnalysis(total=0.0, reasons=["Bonuses apply to winning picks only"])

    ctx = _context(prop)
    flags = {
        "road_underdog": check_flag("road_underdog", is_road_underdog, prop),
        "adverse_weather": check_flag("adverse_weather", has_adverse_weather, ctx.weather),
        "key_injuries": check_flag("key_injuries", has_key_injuries, ctx.injuries),
        "high_leverage": check_flag("high_leverage", is_high_leverage, ctx.game),
        "counter_trend": check_flag("counter_trend", is_counter_trend, ctx.trends),
    }

    total = 0.0
    reasons = []
    for name, hit in flags.items():
        if hit:
            weight = CONTEXTUAL_BONUS_WEIGHTS[name]
            total += weight
            reasons.append(f"{name}: +{weight:.2f}")

    if total > max_bonus:
        reasons.append(f"Capped {total:.2f} -> {max_bonus:.2f}")
        total = max_bonus

    return BonusAnalysis(total=total, flags=flags, reasons=reasons)


@guarded("contextual_bonus", default=0.0)
def contextual_bonus_result(prop: Leg, max_bonus: float = MAX_CONTEXTUAL_BONUS) -> ScoreResult:
    if prop.is_win is None:
        return defaulted(0.0, "outcome unknown")
    return ScoreResult(analyze_contextual_bonus(prop, max_bonus).total)


def calculate_contextual_bonus(prop: Leg, max_bonus: float = MAX_CONTEXTUAL_BONUS) -> float:
    return contextual_bonus_result(prop, max_bonus).value


# ============================================
# SPORT-SPECIFIC BONUS
# ============================================

def _sport_bonus_flags(prop: Leg, sport: Sport) -> Dict[str, bool]:
    ctx = _context(prop)
    game = ctx.game or GameSituationContext()
    schedule = ctx.schedule or ScheduleContext()
    injuries = ctx.injuries or InjuryContext()
    profile = ctx.team_profile or TeamProfileContext()

    def long_trip() -> bool:
        return schedule.road_trip_length is not None and schedule.road_trip_length >= LONG_ROAD_TRIP_GAMES

    if sport == Sport.NFL:
        return {
            "division_game": check_flag("division_game", lambda: is_true(game.is_division_game)),
            "short_week": check_flag("short_week", lambda: is_true(schedule.is_short_week)),
            "west_coast_early": check_flag(
                "west_coast_early", lambda: is_true(schedule.is_west_coast_team_early_east_game)
            ),
            "weather_total": check_flag(
                "weather_total",
                lambda: prop.prop_type == PropType.OVER_UNDER.value and has_adverse_weather(ctx.weather),
            ),
        }
    if sport == Sport.NBA:
        return {
            "back_to_back": check_flag("back_to_back", lambda: is_true(schedule.is_back_to_back)),
            "third_in_four_nights": check_flag(
                "third_in_four_nights", lambda: is_true(schedule.is_third_in_four_nights)
            ),
            "end_of_road_trip": check_flag(
                "end_of_road_trip", lambda: is_true(schedule.is_end_of_road_trip) and long_trip()
            ),
            "minutes_restricted_prop": check_flag(
                "minutes_restricted_prop",
                lambda: prop.prop_type == PropType.PROP_BET.value and is_true(injuries.player_minutes_restricted),
            ),
        }
    if sport == Sport.MLB:
        low, high = PARK_FACTOR_NEUTRAL_BAND
        return {
            "day_after_night": check_flag(
                "day_after_night", lambda: is_true(schedule.is_day_game_after_night_game)
            ),
            "bullpen_depleted": check_flag("bullpen_depleted", lambda: is_true(profile.is_bullpen_depleted)),
            "extreme_park": check_flag(
                "extreme_park",
                lambda: profile.park_factor is not None and not (low <= profile.park_factor <= high),
            ),
            "getaway_day": check_flag("getaway_day", lambda: is_true(schedule.is_getaway_day)),
        }
    if sport == Sport.NHL:
        return {
            "back_to_back": check_flag("back_to_back", lambda: is_true(schedule.is_back_to_back)),
            "backup_goalie": check_flag("backup_goalie", lambda: is_true(injuries.is_backup_goalie_starting)),
            "after_road_trip": check_flag(
                "after_road_trip", lambda: is_true(schedule.is_first_game_after_road_trip) and long_trip()
            ),
            "late_season_stakes": check_flag(
                "late_season_stakes",
                lambda: is_true(game.is_late_season) and is_true(game.has_playoff_implications),
            ),
        }
    return {}


def analyze_sport_specific_bonus(prop: Leg) -> BonusAnalysis:
    """Sport-specific situational bonuses. Winning picks in NFL/NBA/MLB/NHL only."""
    sport = normalize_sport(prop.sport)
    if sport is None:
        return BonusAnalysis(total=0.0, reasons=[f"No sport bonus rules for {prop.sport}"])
    if prop.is_win is not True:
        return BonusAnalysis(total=0.0, reasons=["Bonuses apply to winning picks only"])

    flags = _sport_bonus_flags(prop, sport)
    weights = SPORT_BONUS_WEIGHTS[sport]
    total = 0.0
    reasons = []
    for name, hit in flags.items():
        if hit:
            total += weights[name]
            reasons.append(f"{sport.value} {name}: +{weights[name]:.2f}")
    return BonusAnalysis(total=total, flags=flags, reasons=reasons)


@guarded("sport_specific_bonus", default=0.0)
def sport_specific_bonus_result(prop: Leg) -> ScoreResult:
    if prop.is_win is None and normalize_sport(prop.sport) is not None:
        return defaulted(0.0, "outcome unknown")
    return ScoreResult(analyze_sport_specific_bonus(prop).total)


def calculate_sport_specific_bonus(prop: Leg) -> float:
    return sport_specific_bonus_result(prop).value


__all__ = [
    'SPORT_BONUS_WEIGHTS',
    'BonusAnalysis',
    'is_road_underdog',
    'has_adverse_weather',
    'has_key_injuries',
    'is_high_leverage',
    'is_counter_trend',
    'analyze_contextual_bonus',
    'contextual_bonus_result',
    'calculate_contextual_bonus',
    'analyze_sport_specific_bonus',
    'sport_specific_bonus_result',
    'calculate_sport_specific_bonus',
]
