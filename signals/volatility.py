"""
Volatility Model - sport/market/ticket variance normalization
=============================================================

factor = base (1.0)
         x sport table              NFL 1.2, NBA 0.8, MLB 1.5, NHL 1.6, SOCCER 1.7, ...
         x market-type table        SPREAD 1.0, MONEYLINE 0.9, OVER_UNDER 1.1, PROP_BET 1.3
         x ticket bet-type table    SINGLE 1.0, PARLAY 1.5, TEASER 1.2, ROUNDROBIN 1.4, SGP 1.6
         x total-points factor      OVER_UNDER only; lower totals are more volatile
         x historical variance      explicit variance_factor, else CV bands
         x sport situational        backup QB, back-to-back, pitcher tier, goalie quality, ...

The adjustment is asymmetric: positive raw scores are divided by sqrt(factor)
(high volatility shrinks confidence), negative raw scores are multiplied by
it (high volatility makes a miss look more like noise).

Each stage can be switched off through VolatilityOptions.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Optional

from core.scoring_contract import (
    CV_VOLATILITY,
    HIGH_TOTAL_VOLATILITY,
    LOW_CV_VOLATILITY,
    MIN_VOLATILITY_FACTOR,
    TOTAL_POINTS_VOLATILITY,
)
from core.sports import Sport, normalize_sport
from models.pick_schema import (
    BetType,
    GameSituationContext,
    HistoricalVarianceContext,
    InjuryContext,
    Leg,
    PropContext,
    PropType,
    ScheduleContext,
    TeamProfileContext,
    WeatherContext,
)
from models.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from signals.base import ScoreResult, guarded, is_true

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VolatilityOptions:
    """Stage toggles. All stages on by default."""
    base_volatility: float = 1.0
    enable_sport_adjustments: bool = True
    enable_market_type_adjustments: bool = True
    enable_bet_type_adjustments: bool = True
    enable_total_based_adjustments: bool = True
    enable_historical_variance_adjustments: bool = True
    enable_situational_adjustments: bool = True


DEFAULT_VOLATILITY_OPTIONS = VolatilityOptions()


@dataclass
class VolatilityAnalysis:
    """Combined factor plus the multiplier contributed by each stage."""
    factor: float
    stages: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SportVolatilityStats:
    """Reference scoring profile for a sport."""
    base_volatility: float
    points_per_game: float
    standard_deviation: float
    coefficient_of_variation: float


# Reference game-total profiles
SPORT_SCORING_PROFILES = {
    "NFL": (45.0, 13.5, 0.3),
    "NBA": (220.0, 14.0, 0.064),
    "MLB": (8.5, 3.2, 0.376),
    "NHL": (6.0, 2.4, 0.4),
    "SOCCER": (2.7, 1.7, 0.63),
}


# ============================================
# STAGES
# ============================================

def _lookup(table: Dict[str, float], key: Optional[str]) -> float:
    if key and key.upper() in table:
        return table[key.upper()]
    return table.get("DEFAULT", 1.0)


def total_points_volatility(line_value: Optional[float]) -> float:
    """Lower game totals carry more variance."""
    if not line_value:
        return 1.0
    for ceiling, factor in TOTAL_POINTS_VOLATILITY:
        if line_value <= ceiling:
            return factor
    return HIGH_TOTAL_VOLATILITY


def historical_variance_volatility(history: Optional[HistoricalVarianceContext]) -> float:
    """Explicit variance_factor wins; otherwise bucket the coefficient of variation."""
    if history is None:
        return 1.0
    if history.variance_factor is not None and history.variance_factor > 0:
        return history.variance_factor
    if history.standard_deviation is not None and history.mean:
        cv = history.standard_deviation / abs(history.mean)
        for floor, factor in CV_VOLATILITY:
            if cv > floor:
                return factor
        return LOW_CV_VOLATILITY
    return 1.0


def _nfl_situational(ctx: PropContext) -> float:
    game = ctx.game or GameSituationContext()
    injuries = ctx.injuries or InjuryContext()
    weather = ctx.weather or WeatherContext()
    profile = ctx.team_profile or TeamProfileContext()

    factor = 1.0
    if is_true(game.is_division_game):
        factor *= 0.9
    if is_true(game.is_primetime):
        factor *= 1.1
    if is_true(injuries.has_backup_qb):
        factor *= 1.25
    if is_true(weather.is_adverse):
        factor *= 1.2
    if is_true(game.is_late_season) and game.has_playoff_implications is False:
        factor *= 1.3
    if is_true(profile.teams_turnover_prone):
        factor *= 1.15
    return factor


def _nba_situational(ctx: PropContext) -> float:
    game = ctx.game or GameSituationContext()
    schedule = ctx.schedule or ScheduleContext()
    profile = ctx.team_profile or TeamProfileContext()

    factor = 1.0
    if is_true(profile.is_three_point_heavy_team):
        factor *= 1.2
    if is_true(schedule.is_back_to_back):
        factor *= 1.15
    if is_true(profile.has_inconsistent_rotation):
        factor *= 1.1
    if is_true(game.is_late_season) and is_true(game.has_resting_players):
        factor *= 1.3
    if profile.pace_factor is not None:
        # More possessions, less variance
        if profile.pace_factor > 105:
            factor *= 0.9
        elif profile.pace_factor < 95:
            factor *= 1.1
    return factor


def _mlb_situational(ctx: PropContext) -> float:
    profile = ctx.team_profile or TeamProfileContext()
    weather = ctx.weather or WeatherContext()

    factor = 1.0
    pitcher = str(profile.starting_pitcher_tier or "").lower()
    if pitcher == "ace":
        factor *= 0.9
    elif pitcher == "poor":
        factor *= 1.2

    bullpen = str(profile.bullpen_strength or "").lower()
    if bullpen == "elite":
        factor *= 0.9
    elif bullpen == "weak":
        factor *= 1.15

    if profile.ballpark_factor is not None:
        if profile.ballpark_factor > 110:
            factor *= 1.1
        elif profile.ballpark_factor < 90:
            factor *= 0.95

    if is_true(weather.wind_blowing_out):
        factor *= 1.15
    elif is_true(weather.wind_blowing_in):
        factor *= 0.95
    return factor


def _nhl_situational(ctx: PropContext) -> float:
    game = ctx.game or GameSituationContext()
    schedule = ctx.schedule or ScheduleContext()
    profile = ctx.team_profile or TeamProfileContext()

    factor = 1.0
    goalie = str(profile.starting_goalie_quality or "").lower()
    if goalie == "elite":
        factor *= 0.85
    elif goalie == "poor":
        factor *= 1.25

    if str(profile.special_teams_efficiency or "").lower() == "high":
        factor *= 1.1
    if is_true(schedule.is_back_to_back):
        factor *= 1.15
    if is_true(game.is_late_season):
        factor *= 0.9 if is_true(game.has_playoff_implications) else 1.2
    return factor


_SITUATIONAL_MODELS = {
    Sport.NFL: _nfl_situational,
    Sport.NBA: _nba_situational,
    Sport.MLB: _mlb_situational,
    Sport.NHL: _nhl_situational,
}


def situational_volatility(prop: Leg) -> float:
    """Sport-specific situational multiplier; 1.0 for sports without a model."""
    model = _SITUATIONAL_MODELS.get(normalize_sport(prop.sport))
    if model is None:
        return 1.0
    try:
        return model(prop.context or PropContext())
    except Exception as e:
        logger.warning(f"{prop.sport} situational volatility failed, using 1.0: {type(e).__name__}: {e}")
        return 1.0


# ============================================
# FACTOR
# ============================================

def analyze_volatility(
    prop: Leg,
    config: Optional[ScoringConfig] = None,
    options: Optional[VolatilityOptions] = None,
) -> VolatilityAnalysis:
    """Compute the combined volatility factor, stage by stage."""
    config = config or DEFAULT_SCORING_CONFIG
    options = options or DEFAULT_VOLATILITY_OPTIONS
    stages: Dict[str, float] = {}

    if options.enable_sport_adjustments:
        stages["sport"] = _lookup(config.sport_volatility, prop.sport)

    if options.enable_market_type_adjustments:
        stages["market_type"] = _lookup(config.market_type_volatility, prop.prop_type)

    if options.enable_bet_type_adjustments:
        ticket_type = getattr(prop, "parent_bet_type", None) or getattr(prop, "bet_type", None)
        ticket_type = ticket_type or BetType.SINGLE.value
        stages["bet_type"] = _lookup(config.bet_type_volatility, ticket_type)

    if options.enable_total_based_adjustments and prop.prop_type == PropType.OVER_UNDER.value:
        stages["total_points"] = total_points_volatility(prop.line_value)

    if options.enable_historical_variance_adjustments:
        history = prop.context.historical_variance if prop.context else None
        stages["historical_variance"] = historical_variance_volatility(history)

    if options.enable_situational_adjustments:
        stages["situational"] = situational_volatility(prop)

    factor = options.base_volatility
    for multiplier in stages.values():
        factor *= multiplier

    if not factor > MIN_VOLATILITY_FACTOR:
        logger.warning(f"Volatility factor {factor} for prop {prop.id} clamped to {MIN_VOLATILITY_FACTOR}")
        factor = MIN_VOLATILITY_FACTOR

    return VolatilityAnalysis(factor=factor, stages=stages)


@guarded("volatility_factor", default=1.0)
def volatility_factor_result(
    prop: Leg,
    config: Optional[ScoringConfig] = None,
    options: Optional[VolatilityOptions] = None,
) -> ScoreResult:
    return ScoreResult(analyze_volatility(prop, config, options).factor)


def calculate_volatility_factor(
    prop: Leg,
    config: Optional[ScoringConfig] = None,
    options: Optional[VolatilityOptions] = None,
) -> float:
    return volatility_factor_result(prop, config, options).value


def apply_volatility_adjustment(raw_score: float, volatility_factor: float) -> float:
    """
    Asymmetric square-root compression.

    Raises:
        ValueError: if volatility_factor <= 0
    """
    if volatility_factor <= 0:
        raise ValueError(f"volatility_factor must be > 0, got {volatility_factor}")
    root = math.sqrt(volatility_factor)
    if raw_score >= 0:
        return raw_score / root
    return raw_score * root


def calculate_volatility_adjusted_score(
    prop: Leg,
    raw_score: float,
    config: Optional[ScoringConfig] = None,
    options: Optional[VolatilityOptions] = None,
) -> float:
    return apply_volatility_adjustment(raw_score, calculate_volatility_factor(prop, config, options))


def sport_volatility_stats(sport: str, config: Optional[ScoringConfig] = None) -> SportVolatilityStats:
    """Reference volatility statistics for a sport; zeros for sports without a profile."""
    config = config or DEFAULT_SCORING_CONFIG
    key = str(sport or "").upper()
    base = _lookup(config.sport_volatility, key)
    ppg, std, cv = SPORT_SCORING_PROFILES.get(key, (0.0, 0.0, 0.0))
    return SportVolatilityStats(
        base_volatility=base,
        points_per_game=ppg,
        standard_deviation=std,
        coefficient_of_variation=cv,
    )


__all__ = [
    'VolatilityOptions',
    'DEFAULT_VOLATILITY_OPTIONS',
    'VolatilityAnalysis',
    'SportVolatilityStats',
    'SPORT_SCORING_PROFILES',
    'total_points_volatility',
    'historical_variance_volatility',
    'situational_volatility',
    'analyze_volatility',
    'volatility_factor_result',
    'calculate_volatility_factor',
    'apply_volatility_adjustment',
    'calculate_volatility_adjusted_score',
    'sport_volatility_stats',
]
