"""
SIGNALS MODULE - Component calculators for the scoring pipeline
===============================================================

Every calculator is computed exactly once per prop by
core.scoring_pipeline.compute_components.

Modules:
- sub_scores: trend, matchup, EV, confidence, line value, role stability (1-5)
- edge_score: coarse 0-5 edge count (odds band, core stat, DvP, synergy, context)
- margin_adjustment: bounded margin-of-victory adjustment
- contextual_bonus: general and sport-specific bonuses (wins only)
- penalties: analysis-quality, sport-specific and timing penalties
- volatility: sport/market/ticket/situational variance factor

ALL *_result CALCULATORS RETURN a ScoreResult:
- value: float
- used_default: bool (True when data was missing or the calculation failed)
- reason: str or None
"""

from .base import ScoreResult, guarded

# Base sub-scores
from .sub_scores import (
    calculate_trend_score,
    calculate_matchup_score,
    calculate_expected_value,
    calculate_confidence_score,
    calculate_line_value_score,
    calculate_role_stability,
)

# Edge score
from .edge_score import (
    EdgeScoreAnalysis,
    analyze_edge_score,
    calculate_edge_score,
)

# Adjustments
from .margin_adjustment import (
    calculate_margin_adjustment,
    volatility_adjusted_margin,
)
from .contextual_bonus import (
    calculate_contextual_bonus,
    calculate_sport_specific_bonus,
)
from .penalties import (
    calculate_penalties,
    calculate_sport_specific_penalties,
    calculate_time_penalties,
)

# Volatility
from .volatility import (
    VolatilityOptions,
    calculate_volatility_factor,
    apply_volatility_adjustment,
    sport_volatility_stats,
)

__all__ = [
    'ScoreResult',
    'guarded',

    # Sub-scores
    'calculate_trend_score',
    'calculate_matchup_score',
    'calculate_expected_value',
    'calculate_confidence_score',
    'calculate_line_value_score',
    'calculate_role_stability',

    # Edge score
    'EdgeScoreAnalysis',
    'analyze_edge_score',
    'calculate_edge_score',

    # Adjustments
    'calculate_margin_adjustment',
    'volatility_adjusted_margin',
    'calculate_contextual_bonus',
    'calculate_sport_specific_bonus',
    'calculate_penalties',
    'calculate_sport_specific_penalties',
    'calculate_time_penalties',

    # Volatility
    'VolatilityOptions',
    'calculate_volatility_factor',
    'apply_volatility_adjustment',
    'sport_volatility_stats',
]
