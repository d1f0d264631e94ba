"""
SPORTS.PY - Single Source of Truth for Sport Rule Tables

This module provides:
1. Sport enum for type-safe sport references
2. Core stat categories per sport (edge scoring)
3. Position -> stat synergy maps per sport
4. Odds sweet-spot bands per sport

Usage:
    from core.sports import Sport, CORE_STATS, POSITION_SYNERGY, get_sport_rules

    rules = get_sport_rules("nba")
    "points" in rules.core_stats  # True
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple


class Sport(str, Enum):
    """
    Canonical sports enum for the sports that carry rule tables.

    Inherits from str for JSON serialization compatibility.
    Use Sport.NBA.value to get "NBA" string.
    """
    NBA = "NBA"
    NFL = "NFL"
    MLB = "MLB"
    NHL = "NHL"


# List of all sports with rule tables (for iteration)
SUPPORTED_SPORTS: List[str] = [s.value for s in Sport]

# Set version for O(1) membership testing
SUPPORTED_SPORTS_SET: Set[str] = {s.value for s in Sport}


# Core stat categories (lower-case) that earn the edge-score "core stat" point
CORE_STATS: Dict[Sport, List[str]] = {
    Sport.NBA: ["points", "rebounds", "assists", "3pm", "threes", "pra"],
    Sport.NFL: [
        "passing_yards", "rushing_yards", "receiving_yards",
        "receptions", "passing_tds", "anytime_td",
    ],
    Sport.MLB: ["hits", "total_bases", "rbis", "strikeouts", "runs"],
    Sport.NHL: ["goals", "shots_on_goal", "assists", "points", "saves"],
}


# Position -> stats that position naturally produces
POSITION_SYNERGY: Dict[Sport, Dict[str, List[str]]] = {
    Sport.NBA: {
        "PG": ["assists", "points", "3pm", "threes", "steals"],
        "SG": ["points", "3pm", "threes"],
        "SF": ["points", "rebounds", "3pm", "threes"],
        "PF": ["rebounds", "points", "blocks"],
        "C": ["rebounds", "blocks", "points"],
    },
    Sport.NFL: {
        "QB": ["passing_yards", "passing_tds", "rushing_yards"],
        "RB": ["rushing_yards", "receptions", "anytime_td"],
        "WR": ["receiving_yards", "receptions", "anytime_td"],
        "TE": ["receiving_yards", "receptions"],
    },
    Sport.MLB: {
        "1B": ["hits", "total_bases", "rbis"],
        "2B": ["hits", "runs"],
        "SS": ["hits", "runs"],
        "3B": ["hits", "total_bases", "rbis"],
        "OF": ["hits", "total_bases", "runs", "rbis"],
        "C": ["hits", "rbis"],
        "P": ["strikeouts"],
    },
    Sport.NHL: {
        "LW": ["goals", "shots_on_goal", "points"],
        "RW": ["goals", "shots_on_goal", "points"],
        "C": ["assists", "points", "shots_on_goal"],
        "D": ["assists", "shots_on_goal"],
        "G": ["saves"],
    },
}


# Inclusive American-odds band that earns the edge-score odds point
ODDS_SWEET_SPOT: Dict[Sport, Tuple[int, int]] = {
    Sport.NBA: (-125, 115),
    Sport.NFL: (-125, 115),
    Sport.MLB: (-130, 120),
    Sport.NHL: (-140, 130),
}
DEFAULT_ODDS_SWEET_SPOT: Tuple[int, int] = (-125, 115)


@dataclass(frozen=True)
class SportRules:
    """Rule tables for one sport. Unknown sports get empty tables."""
    sport: Optional[Sport]
    core_stats: Tuple[str, ...]
    synergy: Dict[str, Tuple[str, ...]]
    odds_band: Tuple[int, int]

    def is_core_stat(self, stat_type: Optional[str]) -> bool:
        return bool(stat_type) and stat_type.lower() in self.core_stats

    def has_synergy(self, position: Optional[str], stat_type: Optional[str]) -> bool:
        if not position or not stat_type:
            return False
        return stat_type.lower() in self.synergy.get(position.upper(), ())


def normalize_sport(sport: Optional[str]) -> Optional[Sport]:
    """
    Normalize a sport/league string to the Sport enum.

    Returns None (rather than raising) for sports without rule tables, so
    callers fall back to neutral behavior.

    Example:
        >>> normalize_sport("nba")
        <Sport.NBA: 'NBA'>
        >>> normalize_sport("soccer") is None
        True
    """
    if not sport:
        return None
    key = str(sport).strip().upper()
    if key in SUPPORTED_SPORTS_SET:
        return Sport(key)
    return None


def validate_sport(sport: str) -> Sport:
    """
    Validate and normalize sport string to enum.

    Raises:
        ValueError: If sport has no rule tables
    """
    normalized = normalize_sport(sport)
    if normalized is None:
        raise ValueError(f"Invalid sport: {sport}. Valid: {SUPPORTED_SPORTS}")
    return normalized


def get_sport_rules(sport: Optional[str]) -> SportRules:
    """Get the rule tables for a sport string (case-insensitive)."""
    normalized = normalize_sport(sport)
    if normalized is None:
        return SportRules(sport=None, core_stats=(), synergy={}, odds_band=DEFAULT_ODDS_SWEET_SPOT)
    return SportRules(
        sport=normalized,
        core_stats=tuple(CORE_STATS[normalized]),
        synergy={pos: tuple(stats) for pos, stats in POSITION_SYNERGY[normalized].items()},
        odds_band=ODDS_SWEET_SPOT.get(normalized, DEFAULT_ODDS_SWEET_SPOT),
    )


__all__ = [
    'Sport',
    'SUPPORTED_SPORTS',
    'SUPPORTED_SPORTS_SET',
    'CORE_STATS',
    'POSITION_SYNERGY',
    'ODDS_SWEET_SPOT',
    'DEFAULT_ODDS_SWEET_SPOT',
    'SportRules',
    'normalize_sport',
    'validate_sport',
    'get_sport_rules',
]
