"""
TIERING.PY - SINGLE SOURCE OF TRUTH FOR PICK TIERS
==================================================
v1.0 - Threshold tiering for graded picks and tickets

This module is the ONLY place tier logic should be defined.
All other files should import from here via:
    from tiering import tier_from_score, is_promotable_tier, edge_tier_from_score

TIER HIERARCHY (highest to lowest, default thresholds):
1. S - composite_score >= 20
2. A - composite_score >= 15
3. B - composite_score >= 10
4. C - everything below B
5. D - below the C floor (5); record-keeping only, never promoted

PROMOTION: only S and A picks are promotable. A multi-leg ticket is
promotable only when EVERY leg is S or A.

Thresholds are configuration (ScoringConfig.tier_thresholds); the defaults
live in core.scoring_contract.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from core.scoring_contract import (
    DEFAULT_TIER_THRESHOLDS,
    EDGE_TIER_THRESHOLDS,
    PROMOTABLE_TIERS,
    TIER_ORDER,
)

# =============================================================================
# TIER CONFIGURATION
# =============================================================================
TIER_CONFIG = {
    "S": {
        "priority": 1,
        "promotable": True,
        "description": "Top conviction - promote",
    },
    "A": {
        "priority": 2,
        "promotable": True,
        "description": "Strong - promote",
    },
    "B": {
        "priority": 3,
        "promotable": False,
        "description": "Playable - track only",
    },
    "C": {
        "priority": 4,
        "promotable": False,
        "description": "Weak - no action",
    },
    "D": {
        "priority": 5,
        "promotable": False,
        "description": "Below floor - record keeping only",
    },
}


def get_tier_config(tier: str) -> Dict[str, Any]:
    """
    Get full configuration for a tier.

    Args:
        tier: Tier letter (S, A, B, C, D)

    Returns:
        Dict with priority, promotable, description. Unknown tiers get C's config.
    """
    return TIER_CONFIG.get(str(tier).upper(), TIER_CONFIG["C"])


# =============================================================================
# TIER CLASSIFICATION
# =============================================================================

def tier_from_score(
    score: float,
    thresholds: Optional[Mapping[str, float]] = None,
    record_keeping: bool = False,
) -> str:
    """
    Classify a composite score, evaluated highest tier first.

    Args:
        score: Final (volatility-adjusted) composite score
        thresholds: Tier -> minimum score (defaults to DEFAULT_TIER_THRESHOLDS)
        record_keeping: If True, scores below the C floor map to D

    Returns:
        "S", "A", "B", "C" (or "D" when record_keeping)
    """
    table = dict(DEFAULT_TIER_THRESHOLDS)
    if thresholds:
        table.update(thresholds)

    if score >= table["S"]:
        return "S"
    if score >= table["A"]:
        return "A"
    if score >= table["B"]:
        return "B"
    if record_keeping and score < table["C"]:
        return "D"
    return "C"


def edge_tier_from_score(edge_score: int) -> str:
    """Edge score (0-5) tier map: 5 -> S, 4 -> A, 3 -> B, else C."""
    for tier in ("S", "A", "B"):
        if edge_score >= EDGE_TIER_THRESHOLDS[tier]:
            return tier
    return "C"


def tier_rank(tier: str) -> int:
    """
    Ordinal strength of a tier; higher is better (S=4 ... D=0).

    Unknown tiers rank below D.
    """
    tier = str(tier).upper()
    if tier not in TIER_ORDER:
        return -1
    return len(TIER_ORDER) - 1 - TIER_ORDER.index(tier)


def is_promotable_tier(tier: Optional[str]) -> bool:
    """True for S and A."""
    return bool(tier) and str(tier).upper() in PROMOTABLE_TIERS


def is_ticket_promotable(leg_tiers: Iterable[str]) -> bool:
    """A ticket is promotable only if it has legs and every leg is S or A."""
    tiers = list(leg_tiers)
    return bool(tiers) and all(is_promotable_tier(t) for t in tiers)


__all__ = [
    'TIER_CONFIG',
    'get_tier_config',
    'tier_from_score',
    'edge_tier_from_score',
    'tier_rank',
    'is_promotable_tier',
    'is_ticket_promotable',
]
