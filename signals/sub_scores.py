"""
Sub-Score Calculators - base 1-5 scores for a prop
==================================================

trend        l10_hit_rate           >=.70 5 | >=.60 4 | >=.50 3 | >=.40 2 | else 1
matchup      dvp_rank (1 = softest) <=5 5   | <=10 4  | <=20 3  | <=25 2  | else 1
ev_percent   (p * payout - (1 - p)) * 100, rounded; p = win_probability or l10_hit_rate
confidence   0.4 * trend + 0.3 * matchup + 0.3 * ev / 10
line_value   predicted edge over the line, % of line: >=15 5 | >=10 4 | >=5 3 | >=2 2 | else 1
role         CV of minutes (3+ games): <=.05 5 | <=.10 4 | <=.15 3 | <=.25 2 | else 1

Missing inputs fall to the lowest bucket (EV: 0) with used_default=True.
"""

import statistics
from typing import Optional

from core.scoring_contract import (
    CONFIDENCE_WEIGHTS,
    LINE_VALUE_BREAKPOINTS,
    MATCHUP_BREAKPOINTS,
    ROLE_STABILITY_BREAKPOINTS,
    ROLE_STABILITY_MIN_GAMES,
    SUB_SCORE_MIN,
    TREND_BREAKPOINTS,
)
from models.pick_schema import Leg, PickDirection
from signals.base import ScoreResult, bucket_at_least, bucket_at_most, defaulted, guarded


# ============================================
# ODDS HELPERS
# ============================================

def resolve_odds(prop: Leg) -> Optional[float]:
    """First available American price: odds, then over_odds, then under_odds."""
    for price in (prop.odds, prop.over_odds, prop.under_odds):
        if price is not None:
            return price
    return None


def american_odds_payout(odds: Optional[float]) -> Optional[float]:
    """Profit per unit staked. +150 -> 1.5, -110 -> 0.909."""
    if odds is None or odds == 0:
        return None
    if odds > 0:
        return odds / 100.0
    return 100.0 / abs(odds)


# ============================================
# CALCULATORS
# ============================================

@guarded("trend_score", default=SUB_SCORE_MIN)
def trend_score_result(prop: Leg) -> ScoreResult:
    if prop.l10_hit_rate is None:
        return defaulted(SUB_SCORE_MIN, "missing l10_hit_rate")
    return ScoreResult(bucket_at_least(prop.l10_hit_rate, TREND_BREAKPOINTS, SUB_SCORE_MIN))


@guarded("matchup_score", default=SUB_SCORE_MIN)
def matchup_score_result(prop: Leg) -> ScoreResult:
    if prop.dvp_rank is None:
        return defaulted(SUB_SCORE_MIN, "missing dvp_rank")
    return ScoreResult(bucket_at_most(prop.dvp_rank, MATCHUP_BREAKPOINTS, SUB_SCORE_MIN))


@guarded("ev_percent", default=0)
def expected_value_result(prop: Leg) -> ScoreResult:
    p = prop.win_probability if prop.win_probability is not None else prop.l10_hit_rate
    payout = american_odds_payout(resolve_odds(prop))
    if p is None or payout is None:
        return defaulted(0, "missing win probability or odds")
    ev = p * payout - (1 - p)
    return ScoreResult(round(ev * 100))


def calculate_confidence_score(trend_score: float, matchup_score: float, ev_percent: float) -> float:
    """Fixed blend of trend, matchup and EV."""
    score = (
        CONFIDENCE_WEIGHTS["trend"] * trend_score
        + CONFIDENCE_WEIGHTS["matchup"] * matchup_score
        + CONFIDENCE_WEIGHTS["ev"] * (ev_percent / 10.0)
    )
    return round(score, 2)


@guarded("line_value_score", default=SUB_SCORE_MIN)
def line_value_score_result(prop: Leg) -> ScoreResult:
    """
    Edge of the model's predicted line over the posted line, as % of the line.

    For UNDER picks a predicted line below the posted line is the edge.
    """
    if prop.predicted_line is None or not prop.line_value:
        return defaulted(SUB_SCORE_MIN, "missing predicted_line or line_value")
    edge_pct = (prop.predicted_line - prop.line_value) / abs(prop.line_value) * 100.0
    if prop.pick_type == PickDirection.UNDER.value:
        edge_pct = -edge_pct
    return ScoreResult(bucket_at_least(edge_pct, LINE_VALUE_BREAKPOINTS, SUB_SCORE_MIN))


@guarded("role_stability", default=SUB_SCORE_MIN)
def role_stability_result(prop: Leg) -> ScoreResult:
    """Stable minutes (low coefficient of variation) mean a stable role."""
    minutes = [m for m in (prop.minutes_history or []) if m is not None]
    if len(minutes) < ROLE_STABILITY_MIN_GAMES:
        return defaulted(SUB_SCORE_MIN, f"fewer than {ROLE_STABILITY_MIN_GAMES} games of minutes")
    mean = statistics.fmean(minutes)
    if mean <= 0:
        return ScoreResult(SUB_SCORE_MIN)
    cv = statistics.pstdev(minutes) / mean
    return ScoreResult(bucket_at_most(cv, ROLE_STABILITY_BREAKPOINTS, SUB_SCORE_MIN))


# Plain-number forms

def calculate_trend_score(prop: Leg) -> int:
    return trend_score_result(prop).value


def calculate_matchup_score(prop: Leg) -> int:
    return matchup_score_result(prop).value


def calculate_expected_value(prop: Leg) -> int:
    return expected_value_result(prop).value


def calculate_line_value_score(prop: Leg) -> int:
    return line_value_score_result(prop).value


def calculate_role_stability(prop: Leg) -> int:
    return role_stability_result(prop).value


__all__ = [
    'resolve_odds',
    'american_odds_payout',
    'trend_score_result',
    'matchup_score_result',
    'expected_value_result',
    'line_value_score_result',
    'role_stability_result',
    'calculate_confidence_score',
    'calculate_trend_score',
    'calculate_matchup_score',
    'calculate_expected_value',
    'calculate_line_value_score',
    'calculate_role_stability',
]
