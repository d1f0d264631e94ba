"""
Penalty Calculators - deductions for flawed methodology
=======================================================

Apply to ANY pick (win or loss), and only when an analysis record is present.

Quality penalties (floored at max_penalty, default -8.0):
    poor_reasoning      -2.5   missing/thin reasoning, fallacies, narrative over data, recency bias
    statistical_errors  -3.0   misused stats, sample size, correlation/causation, probability errors
    ignored_factors     -2.0   context key factors not considered, low completeness
    lucky_outcome       -1.5   (wins only) right for the wrong reasons
    inconsistency       -2.0   contradicts prior reasoning, selective stats

Sport-specific penalties (small, uncapped) and a time penalty for stale
early picks layer on top. Any exception or missing field means the flag
is absent.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.scoring_contract import (
    EARLY_PREDICTION_PENALTY,
    MAX_PENALTY,
    PENALTY_WEIGHTS,
    STALE_ANALYSIS_PENALTY,
    TIME_PENALTY_EARLY_HOURS,
    TIME_PENALTY_MIN_HOURS,
)
from core.sports import Sport, normalize_sport
from models.pick_schema import AnalysisQualityContext, Leg, PropContext
from signals.base import ScoreResult, check_flag, defaulted, guarded, is_true

# ============================================
# CONSTANTS
# ============================================

MIN_REASONING_CHARS = 20
LOW_REASONING_SCORE = 0.4
LOW_METHODOLOGY_SCORE = 0.5
LOW_COMPLETENESS_SCORE = 0.6
HIGH_LUCK_SCORE = 0.7
LOW_CONSISTENCY_SCORE = 0.5

SPORT_PENALTY_WEIGHTS = {
    Sport.NFL: {
        "ignored_turnover_variance": -1.0,
        "qb_without_oline": -0.75,
        "ignored_significant_weather": -1.0,
    },
    Sport.NBA: {
        "ignored_rest_disadvantage": -0.75,
        "ignored_pace_factors": -0.5,
        "ignored_3pt_variance": -0.75,
    },
    Sport.MLB: {
        "ignored_ballpark_factors": -0.75,
        "small_sample_bvp": -1.0,
        "ignored_bullpen_status": -0.75,
    },
    Sport.NHL: {
        "ignored_goalie_matchup": -1.0,
        "overemphasized_recent_scoring": -0.75,
        "ignored_special_teams": -0.5,
    },
}


@dataclass
class PenaltyAnalysis:
    """Result of a penalty evaluation. total is <= 0."""
    total: float
    flags: Dict[str, bool] = field(default_factory=dict)
    reasons: List[str] = field(default_factory=list)


def _below(score: Optional[float], floor: float) -> bool:
    return score is not None and score < floor


# ============================================
# QUALITY CHECKS
# ============================================

def has_poor_reasoning(analysis: AnalysisQualityContext) -> bool:
    reasoning = (analysis.reasoning or "").strip()
    return (
        len(reasoning) < MIN_REASONING_CHARS
        or is_true(analysis.has_logical_fallacies)
        or (is_true(analysis.is_narrative_driven) and analysis.data_backed is False)
        or is_true(analysis.has_recency_bias)
        or _below(analysis.reasoning_quality_score, LOW_REASONING_SCORE)
    )


def has_statistical_errors(analysis: AnalysisQualityContext) -> bool:
    return (
        is_true(analysis.has_statistical_errors)
        or is_true(analysis.has_sample_size_issues)
        or is_true(analysis.confuses_correlation_causation)
        or is_true(analysis.has_probability_errors)
        or is_true(analysis.ignores_regression_to_mean)
        or _below(analysis.statistical_methodology_score, LOW_METHODOLOGY_SCORE)
    )


def has_ignored_key_factors(analysis: AnalysisQualityContext, context: Optional[PropContext]) -> bool:
    key_factors = context.key_factors if context else []
    considered = set(analysis.considered_factors)
    return (
        any(factor not in considered for factor in key_factors)
        or is_true(analysis.ignored_key_factors)
        or _below(analysis.completeness_score, LOW_COMPLETENESS_SCORE)
    )


def is_lucky_outcome(analysis: AnalysisQualityContext, is_win: Optional[bool]) -> bool:
    if is_win is not True:
        return False
    return (
        analysis.mentioned_winning_factor is False
        or is_true(analysis.had_incorrect_assumptions)
        or is_true(analysis.right_for_wrong_reasons)
        or is_true(analysis.was_improbable_outcome)
        or (analysis.luck_factor_score is not None and analysis.luck_factor_score > HIGH_LUCK_SCORE)
    )


def has_inconsistent_reasoning(analysis: AnalysisQualityContext) -> bool:
    return (
        is_true(analysis.is_inconsistent_with_past)
        or is_true(analysis.has_contradictory_reasoning)
        or is_true(analysis.uses_stats_selectively)
        or _below(analysis.consistency_score, LOW_CONSISTENCY_SCORE)
    )


def analyze_penalties(prop: Leg, max_penalty: float = MAX_PENALTY) -> PenaltyAnalysis:
    """Evaluate every quality check against the prop's analysis record."""
    analysis = prop.analysis
    if analysis is None:
        return PenaltyAnalysis(total=0.0, reasons=["No analysis record"])

    flags = {
        "poor_reasoning": check_flag("poor_reasoning", has_poor_reasoning, analysis),
        "statistical_errors": check_flag("statistical_errors", has_statistical_errors, analysis),
        "ignored_factors": check_flag("ignored_factors", has_ignored_key_factors, analysis, prop.context),
        "lucky_outcome": check_flag("lucky_outcome", is_lucky_outcome, analysis, prop.is_win),
        "inconsistency": check_flag("inconsistency", has_inconsistent_reasoning, analysis),
    }

    total = 0.0
    reasons = []
    for name, hit in flags.items():
        if hit:
            weight = PENALTY_WEIGHTS[name]
            total += weight
            reasons.append(f"{name}: {weight:+.2f}")

    if total < max_penalty:
        reasons.append(f"Floored {total:.2f} -> {max_penalty:.2f}")
        total = max_penalty

    return PenaltyAnalysis(total=total, flags=flags, reasons=reasons)


@guarded("penalties", default=0.0)
def penalties_result(prop: Leg, max_penalty: float = MAX_PENALTY) -> ScoreResult:
    if prop.analysis is None:
        return defaulted(0.0, "no analysis record")
    return ScoreResult(analyze_penalties(prop, max_penalty).total)


def calculate_penalties(prop: Leg, max_penalty: float = MAX_PENALTY) -> float:
    return penalties_result(prop, max_penalty).value


# ============================================
# SPORT-SPECIFIC PENALTIES
# ============================================

def _sport_penalty_flags(prop: Leg, sport: Sport) -> Dict[str, bool]:
    a = prop.analysis

    if sport == Sport.NFL:
        def significant_weather() -> bool:
            weather = prop.context.weather if prop.context else None
            return is_true(a.ignored_weather) and weather is not None and is_true(weather.is_significant)

        return {
            "ignored_turnover_variance": is_true(a.ignored_turnover_variance),
            "qb_without_oline": is_true(a.overemphasized_qb) and a.considered_oline is False,
            "ignored_significant_weather": check_flag("ignored_significant_weather", significant_weather),
        }
    if sport == Sport.NBA:
        return {
            "ignored_rest_disadvantage": is_true(a.ignored_rest_disadvantage),
            "ignored_pace_factors": is_true(a.ignored_pace_factors),
            "ignored_3pt_variance": is_true(a.ignored_3pt_variance),
        }
    if sport == Sport.MLB:
        return {
            "ignored_ballpark_factors": is_true(a.ignored_ballpark_factors),
            "small_sample_bvp": is_true(a.overemphasized_batter_pitcher_matchups),
            "ignored_bullpen_status": is_true(a.ignored_bullpen_status),
        }
    if sport == Sport.NHL:
        return {
            "ignored_goalie_matchup": is_true(a.ignored_goalie_matchup),
            "overemphasized_recent_scoring": is_true(a.overemphasized_recent_scoring),
            "ignored_special_teams": is_true(a.ignored_special_teams),
        }
    return {}


def analyze_sport_specific_penalties(prop: Leg) -> PenaltyAnalysis:
    sport = normalize_sport(prop.sport)
    if sport is None or prop.analysis is None:
        return PenaltyAnalysis(total=0.0)

    flags = _sport_penalty_flags(prop, sport)
    weights = SPORT_PENALTY_WEIGHTS[sport]
    total = 0.0
    reasons = []
    for name, hit in flags.items():
        if hit:
            total += weights[name]
            reasons.append(f"{sport.value} {name}: {weights[name]:+.2f}")
    return PenaltyAnalysis(total=total, flags=flags, reasons=reasons)


@guarded("sport_specific_penalties", default=0.0)
def sport_specific_penalties_result(prop: Leg) -> ScoreResult:
    if prop.analysis is None:
        return defaulted(0.0, "no analysis record")
    return ScoreResult(analyze_sport_specific_penalties(prop).total)


def calculate_sport_specific_penalties(prop: Leg) -> float:
    return sport_specific_penalties_result(prop).value


# ============================================
# TIME PENALTY
# ============================================

def _as_utc(ts: datetime) -> datetime:
    """Naive timestamps are taken as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def hours_before_game(prop: Leg) -> Optional[float]:
    if prop.prediction_timestamp is None or prop.game_timestamp is None:
        return None
    delta = _as_utc(prop.game_timestamp) - _as_utc(prop.prediction_timestamp)
    return delta.total_seconds() / 3600.0


@guarded("time_penalties", default=0.0)
def time_penalties_result(prop: Leg) -> ScoreResult:
    """
    Early picks that aged poorly.

    More than 24h out and not updated with new info: -1.5.
    More than 72h out and late developments not accounted for: -1.0.
    """
    hours = hours_before_game(prop)
    if hours is None:
        return defaulted(0.0, "missing prediction or game timestamp")
    if hours <= TIME_PENALTY_MIN_HOURS or prop.analysis is None:
        return ScoreResult(0.0)

    penalty = 0.0
    if is_true(prop.analysis.failed_to_update_with_new_info):
        penalty += STALE_ANALYSIS_PENALTY
    if hours > TIME_PENALTY_EARLY_HOURS and prop.analysis.accounted_for_late_developments is False:
        penalty += EARLY_PREDICTION_PENALTY
    return ScoreResult(penalty)


def calculate_time_penalties(prop: Leg) -> float:
    return time_penalties_result(prop).value


__all__ = [
    'SPORT_PENALTY_WEIGHTS',
    'PenaltyAnalysis',
    'has_poor_reasoning',
    'has_statistical_errors',
    'has_ignored_key_factors',
    'is_lucky_outcome',
    'has_inconsistent_reasoning',
    'analyze_penalties',
    'penalties_result',
    'calculate_penalties',
    'analyze_sport_specific_penalties',
    'sport_specific_penalties_result',
    'calculate_sport_specific_penalties',
    'hours_before_game',
    'time_penalties_result',
    'calculate_time_penalties',
]
