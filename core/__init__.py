"""
Core module - Scoring contract, sport rules and the grading pipeline

Runtime modules (scoring_pipeline, batch, config_manager, grading_service)
are imported by path; only the dependency-free contract is re-exported here.
"""

from .scoring_contract import (
    # Versions
    TWENTY_FIVE_POINT_VERSION,
    TWENTY_FIVE_POINT_WEIGHTED_VERSION,
    EDGE_SCORE_VERSION,

    # Tiers
    TIER_ORDER,
    PROMOTABLE_TIERS,
    DEFAULT_TIER_THRESHOLDS,
    EDGE_TIER_THRESHOLDS,

    # Weights
    DEFAULT_COMPONENT_WEIGHTS,
    COMPOSITE_COMPONENTS,
)

from .sports import (
    Sport,
    SUPPORTED_SPORTS,
    normalize_sport,
    get_sport_rules,
)

__all__ = [
    # Scoring contract
    'TWENTY_FIVE_POINT_VERSION',
    'TWENTY_FIVE_POINT_WEIGHTED_VERSION',
    'EDGE_SCORE_VERSION',
    'TIER_ORDER',
    'PROMOTABLE_TIERS',
    'DEFAULT_TIER_THRESHOLDS',
    'EDGE_TIER_THRESHOLDS',
    'DEFAULT_COMPONENT_WEIGHTS',
    'COMPOSITE_COMPONENTS',

    # Sports
    'Sport',
    'SUPPORTED_SPORTS',
    'normalize_sport',
    'get_sport_rules',
]
