"""
tests/conftest.py - Pytest configuration and fixtures

Shared prop/ticket records and config snapshots for the grading engine tests.
Fixtures return plain dicts (the shape callers send) so each test can tweak
fields before validation.
"""

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.structured_logging import clear_correlation_id
from models.scoring_config import ScoringConfig


@pytest.fixture(autouse=True)
def reset_correlation_id():
    """No correlation id leaks between tests."""
    clear_correlation_id()
    yield
    clear_correlation_id()


@pytest.fixture
def nba_prop():
    """
    NBA points prop: trend 5, matchup 5, EV 43, confidence 4.79.

    Base = 5 + 5 + 4.79 + 1 + 1 = 16.79; volatility 0.8 (NBA) x 1.3 (PROP_BET).
    """
    return {
        "id": "nba-001",
        "sport": "NBA",
        "prop_type": "PROP_BET",
        "pick_type": "OVER",
        "player_name": "Jalen Brunson",
        "team": "NYK",
        "opponent": "WAS",
        "position": "PG",
        "stat_type": "points",
        "line_value": 25.5,
        "odds": -110,
        "l10_hit_rate": 0.75,
        "dvp_rank": 3,
        "dvp_score": 1.5,
    }


@pytest.fixture
def nfl_spread_prop():
    """NFL road underdog spread pick that won in a rivalry game."""
    return {
        "id": "nfl-001",
        "sport": "NFL",
        "prop_type": "SPREAD",
        "team": "CHI",
        "opponent": "GB",
        "line_value": 3.5,
        "odds": -110,
        "l10_hit_rate": 0.6,
        "dvp_rank": 12,
        "is_home": False,
        "actual_result": 10.5,
        "is_win": True,
        "context": {
            "game": {"is_rivalry": True, "is_division_game": True},
        },
    }


@pytest.fixture
def analysis_record():
    """Analysis with thin reasoning and a statistical error flagged."""
    return {
        "reasoning": "Hot streak.",
        "has_statistical_errors": True,
    }


@pytest.fixture
def parlay_ticket(nba_prop):
    """Two-leg NBA parlay; legs inherit sport from the ticket."""
    leg_one = {k: v for k, v in nba_prop.items() if k not in ("id", "sport")}
    leg_two = {**leg_one, "player_name": "Josh Hart", "stat_type": "rebounds", "position": "SF"}
    return {
        "id": "ticket-001",
        "sport": "NBA",
        "bet_type": "parlay",
        "legs": [leg_one, leg_two],
    }


@pytest.fixture
def timestamps():
    """Game time and helpers for prediction lead times."""
    game_time = datetime(2025, 1, 15, 0, 30, tzinfo=timezone.utc)

    def hours_before(hours: float) -> datetime:
        return game_time - timedelta(hours=hours)

    return game_time, hours_before


@pytest.fixture
def custom_config():
    """Snapshot with raised thresholds and a named version."""
    return ScoringConfig.from_row({
        "version": "2025-01-01",
        "s_tier_threshold": 22,
        "a_tier_threshold": 17,
        "b_tier_threshold": 12,
        "c_tier_threshold": 6,
    })
