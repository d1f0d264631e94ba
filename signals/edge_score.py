"""
Edge Score - coarse 0-5 signal for lightweight promotion
========================================================

One point each:
1. Odds inside the sport's sweet-spot band (odds, else over_odds, else under_odds)
2. Stat type in the sport's core-stat list
3. dvp_score >= 1
4. Position/stat synergy
5. No negative context flag

Edge tier: 5 -> S, 4 -> A, 3 -> B, else C.
"""

from dataclasses import dataclass, field
from typing import Dict

from core.sports import get_sport_rules
from models.pick_schema import Leg
from signals.base import ScoreResult, check_flag, guarded
from signals.sub_scores import resolve_odds
from tiering import edge_tier_from_score


EDGE_MIN_DVP_SCORE = 1


@dataclass
class EdgeScoreAnalysis:
    """Result of edge score analysis."""
    score: int                                  # 0-5
    tier: str                                   # S, A, B, C
    checks: Dict[str, bool] = field(default_factory=dict)
    sport: str = ""


def analyze_edge_score(prop: Leg) -> EdgeScoreAnalysis:
    """
    Run the five edge checks against the sport's rule tables.

    Sports without rule tables only earn the odds (default band), dvp and
    context points.
    """
    rules = get_sport_rules(prop.sport)
    low, high = rules.odds_band

    def odds_in_band() -> bool:
        odds = resolve_odds(prop)
        return odds is not None and low <= odds <= high

    checks = {
        "odds_sweet_spot": check_flag("odds_sweet_spot", odds_in_band),
        "core_stat": check_flag("core_stat", rules.is_core_stat, prop.stat_type),
        "dvp": check_flag("dvp", lambda: prop.dvp_score is not None and prop.dvp_score >= EDGE_MIN_DVP_SCORE),
        "synergy": check_flag("synergy", rules.has_synergy, prop.position, prop.stat_type),
        "clean_context": not prop.context_flag,
    }
    score = sum(1 for hit in checks.values() if hit)
    return EdgeScoreAnalysis(
        score=score,
        tier=edge_tier_from_score(score),
        checks=checks,
        sport=prop.sport or "",
    )


@guarded("edge_score", default=0)
def edge_score_result(prop: Leg) -> ScoreResult:
    return ScoreResult(analyze_edge_score(prop).score)


def calculate_edge_score(prop: Leg) -> int:
    return edge_score_result(prop).value


__all__ = [
    'EDGE_MIN_DVP_SCORE',
    'EdgeScoreAnalysis',
    'analyze_edge_score',
    'edge_score_result',
    'calculate_edge_score',
]
