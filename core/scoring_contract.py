"""
Scoring Contract - Single Source of Truth
All scoring logic MUST reference these constants (no duplicated literals).

The runtime ScoringConfig snapshot (models/scoring_config.py) is seeded from
these defaults; a config store row may override tier thresholds, weights and
volatility tables.
"""

# =============================================================================
# SCORING VERSIONS (audit / reproducibility tags)
# =============================================================================
TWENTY_FIVE_POINT_VERSION = "25-point-model-v1.0"
TWENTY_FIVE_POINT_WEIGHTED_VERSION = "25-point-model-weighted-v1.0"
EDGE_SCORE_VERSION = "edge-score-v1"

# =============================================================================
# TIER THRESHOLDS (composite score, highest tier first)
# =============================================================================
TIER_ORDER = ["S", "A", "B", "C", "D"]
PROMOTABLE_TIERS = {"S", "A"}

DEFAULT_TIER_THRESHOLDS = {
    "S": 20.0,
    "A": 15.0,
    "B": 10.0,
    "C": 5.0,   # Floor for C; below it is D (record-keeping only)
}

# Edge score (0-5) tier map used by the lightweight promotion path
EDGE_TIER_THRESHOLDS = {
    "S": 5,
    "A": 4,
    "B": 3,
}
EDGE_SCORE_MAX = 5

# =============================================================================
# SUB-SCORE BREAKPOINTS (1-5 scale)
# =============================================================================
SUB_SCORE_MIN = 1
SUB_SCORE_MAX = 5

# l10_hit_rate -> trend score (checked top-down, first match wins)
TREND_BREAKPOINTS = [(0.70, 5), (0.60, 4), (0.50, 3), (0.40, 2)]

# dvp_rank (1 = softest defense vs position) -> matchup score
MATCHUP_BREAKPOINTS = [(5, 5), (10, 4), (20, 3), (25, 2)]

# predicted edge over the line, % of line -> line value score
LINE_VALUE_BREAKPOINTS = [(15.0, 5), (10.0, 4), (5.0, 3), (2.0, 2)]

# minutes coefficient of variation -> role stability score
ROLE_STABILITY_BREAKPOINTS = [(0.05, 5), (0.10, 4), (0.15, 3), (0.25, 2)]
ROLE_STABILITY_MIN_GAMES = 3

# Confidence blend
CONFIDENCE_WEIGHTS = {
    "trend": 0.4,
    "matchup": 0.3,
    "ev": 0.3,   # applied to EV / 10
}

# =============================================================================
# COMPONENT WEIGHTS (weighted pipeline variant)
# =============================================================================
DEFAULT_COMPONENT_WEIGHTS = {
    "trend_score": 1.0,
    "matchup_score": 1.0,
    "confidence_score": 1.0,
    "line_value_score": 1.0,
    "role_stability": 0.8,
    "margin_adjustment": 1.2,
    "contextual_bonus": 0.9,
    "sport_specific_bonus": 0.7,
    "penalties": 1.1,
    "sport_specific_penalties": 0.8,
    "time_penalties": 0.6,
}

# Order in which components enter the raw composite / breakdown
COMPOSITE_COMPONENTS = list(DEFAULT_COMPONENT_WEIGHTS.keys())

# =============================================================================
# MARGIN ADJUSTMENT
# =============================================================================
MARGIN_MAX_ADJUSTMENT = 5.0
MARGIN_SCALING_FACTOR = 0.5
MARGIN_DIMINISHING_THRESHOLD = 7.0
MARGIN_LINEAR_SHARE = 0.6   # Share of max awarded inside the threshold
MONEYLINE_MARGIN = 10.0

# =============================================================================
# CONTEXTUAL BONUS (wins only)
# =============================================================================
MAX_CONTEXTUAL_BONUS = 5.0
CONTEXTUAL_BONUS_WEIGHTS = {
    "road_underdog": 2.0,
    "adverse_weather": 1.5,
    "key_injuries": 2.0,
    "high_leverage": 2.5,
    "counter_trend": 1.5,
}

# =============================================================================
# PENALTIES (any outcome)
# =============================================================================
MAX_PENALTY = -8.0
PENALTY_WEIGHTS = {
    "poor_reasoning": -2.5,
    "statistical_errors": -3.0,
    "ignored_factors": -2.0,
    "lucky_outcome": -1.5,
    "inconsistency": -2.0,
}

# Time penalty windows (hours before the game)
TIME_PENALTY_MIN_HOURS = 24
TIME_PENALTY_EARLY_HOURS = 72
STALE_ANALYSIS_PENALTY = -1.5
EARLY_PREDICTION_PENALTY = -1.0

# =============================================================================
# VOLATILITY TABLES (higher = more volatile)
# =============================================================================
SPORT_VOLATILITY = {
    "NFL": 1.2,
    "NBA": 0.8,
    "MLB": 1.5,
    "NHL": 1.6,
    "SOCCER": 1.7,
    "TENNIS": 0.9,
    "GOLF": 1.3,
    "MMA": 1.4,
    "DEFAULT": 1.0,
}

MARKET_TYPE_VOLATILITY = {
    "SPREAD": 1.0,
    "MONEYLINE": 0.9,
    "OVER_UNDER": 1.1,
    "PROP_BET": 1.3,
    "DEFAULT": 1.0,
}

BET_TYPE_VOLATILITY = {
    "SINGLE": 1.0,
    "PARLAY": 1.5,
    "TEASER": 1.2,
    "ROUNDROBIN": 1.4,
    "SGP": 1.6,
    "DEFAULT": 1.0,
}

# Total line -> volatility (lower totals are more volatile)
TOTAL_POINTS_VOLATILITY = [(30, 1.5), (45, 1.3), (55, 1.1), (200, 1.0)]
HIGH_TOTAL_VOLATILITY = 0.9

# Coefficient of variation -> volatility (checked top-down, strict >)
CV_VOLATILITY = [(0.5, 1.5), (0.3, 1.3), (0.2, 1.1), (0.1, 1.0)]
LOW_CV_VOLATILITY = 0.9

MIN_VOLATILITY_FACTOR = 0.05
