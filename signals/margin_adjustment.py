"""
Margin Adjustment - reward/penalize by outcome distance from the line
=====================================================================

Raw margin by market:
- OVER_UNDER / PROP_BET: actual - line (sign flipped for UNDER picks)
- SPREAD: actual - line
- MONEYLINE: +10 on a win, -10 on a loss
- anything else: 0

Curve (bounded to +/- max_adjustment):
- |margin| <= threshold: linear, up to 60% of max
- beyond threshold: 60% of max plus 40% of max scaled by
  sigmoid((|margin| - threshold) * scaling_factor), sigmoid(x) = 2/(1+e^-x) - 1

Missing actual_result or line_value yields 0.
"""

import math
from typing import Optional

from core.scoring_contract import MARGIN_LINEAR_SHARE, MONEYLINE_MARGIN
from models.pick_schema import Leg, PickDirection, PropType
from models.scoring_config import MarginSettings
from signals.base import ScoreResult, defaulted, guarded

DEFAULT_MARGIN_SETTINGS = MarginSettings()


def bounded_sigmoid(x: float) -> float:
    """2/(1+e^-x) - 1: 0 at x=0, approaches 1 as x grows."""
    return 2.0 / (1.0 + math.exp(-x)) - 1.0


def apply_diminishing_returns(
    raw_margin: float,
    max_adjustment: float,
    scaling_factor: float,
    threshold: float,
) -> float:
    """Map a raw margin onto [-max_adjustment, max_adjustment]."""
    linear_cap = max_adjustment * MARGIN_LINEAR_SHARE
    if abs(raw_margin) <= threshold:
        return raw_margin / threshold * linear_cap

    excess = (abs(raw_margin) - threshold) * scaling_factor
    additional = bounded_sigmoid(excess) * max_adjustment * (1.0 - MARGIN_LINEAR_SHARE)
    sign = 1.0 if raw_margin >= 0 else -1.0
    return sign * (linear_cap + additional)


def raw_margin(prop: Leg) -> Optional[float]:
    """
    Signed distance of the outcome from the line for the prop's market.

    Returns None when the market has a direction/outcome we can't read
    (missing pick_type on an over/under, missing is_win on a moneyline,
    unsupported prop_type).
    """
    actual = prop.actual_result
    line = prop.line_value

    if prop.prop_type in (PropType.OVER_UNDER.value, PropType.PROP_BET.value):
        if prop.pick_type == PickDirection.OVER.value:
            return actual - line
        if prop.pick_type == PickDirection.UNDER.value:
            return line - actual
        return None

    if prop.prop_type == PropType.SPREAD.value:
        return actual - line

    if prop.prop_type == PropType.MONEYLINE.value:
        if prop.is_win is None:
            return None
        return MONEYLINE_MARGIN if prop.is_win else -MONEYLINE_MARGIN

    return None


@guarded("margin_adjustment", default=0.0)
def margin_adjustment_result(prop: Leg, settings: Optional[MarginSettings] = None) -> ScoreResult:
    settings = settings or DEFAULT_MARGIN_SETTINGS
    if prop.actual_result is None or prop.line_value is None:
        return defaulted(0.0, "missing actual_result or line_value")

    margin = raw_margin(prop)
    if margin is None:
        return defaulted(0.0, f"no margin rule for prop_type={prop.prop_type} pick_type={prop.pick_type}")

    return ScoreResult(apply_diminishing_returns(
        margin,
        settings.max_adjustment,
        settings.scaling_factor,
        settings.threshold,
    ))


def calculate_margin_adjustment(prop: Leg, settings: Optional[MarginSettings] = None) -> float:
    return margin_adjustment_result(prop, settings).value


def volatility_adjusted_margin(
    prop: Leg,
    sport_volatility: float = 1.0,
    settings: Optional[MarginSettings] = None,
) -> float:
    """
    Margin adjustment divided by a sport volatility factor.

    Raises:
        ValueError: if sport_volatility <= 0
    """
    if sport_volatility <= 0:
        raise ValueError(f"sport_volatility must be > 0, got {sport_volatility}")
    return calculate_margin_adjustment(prop, settings) / sport_volatility


__all__ = [
    'DEFAULT_MARGIN_SETTINGS',
    'bounded_sigmoid',
    'apply_diminishing_returns',
    'raw_margin',
    'margin_adjustment_result',
    'calculate_margin_adjustment',
    'volatility_adjusted_margin',
]
