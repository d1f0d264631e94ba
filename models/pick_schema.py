"""
Pick Grading Schema - v1.0
Input and output records for the pick scoring engine.

Input:  Prop (single bet or multi-leg ticket) / Leg + optional PropContext
Output: GradedProp (single) or TicketGrade (multi-leg)

Context is split into capability records (weather, injuries, game situation,
schedule, trends, historical variance, team profile) so each checker reads
only the record it needs. Unknown keys are preserved on every record.
"""
import logging
from typing import Optional, Dict, List, Any
from datetime import datetime
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class BetType(str, Enum):
    """Ticket structure"""
    SINGLE = "single"
    PARLAY = "parlay"
    TEASER = "teaser"
    ROUNDROBIN = "roundrobin"
    SGP = "sgp"


MULTI_LEG_BET_TYPES = {BetType.PARLAY.value, BetType.TEASER.value, BetType.ROUNDROBIN.value, BetType.SGP.value}


class PropType(str, Enum):
    """Market type of a single bet"""
    OVER_UNDER = "OVER_UNDER"
    SPREAD = "SPREAD"
    MONEYLINE = "MONEYLINE"
    PROP_BET = "PROP_BET"


class PickDirection(str, Enum):
    OVER = "OVER"
    UNDER = "UNDER"


class Tier(str, Enum):
    """Pick tiers, highest first. D is record-keeping only."""
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


# =============================================================================
# CONTEXT CAPABILITY RECORDS
# =============================================================================

class _ContextRecord(BaseModel):
    """
    Context is best-effort input: a malformed value is dropped to the field
    default (logged) instead of rejecting the prop that carries it.
    """
    model_config = ConfigDict(extra="allow")

    @field_validator("*", mode="wrap")
    @classmethod
    def drop_invalid_value(cls, v: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        try:
            return handler(v)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid {cls.__name__}.{info.field_name}={v!r}: {e.errors()[0]['msg']}")
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class WeatherContext(_ContextRecord):
    temperature_fahrenheit: Optional[float] = None
    wind_speed_mph: Optional[float] = None
    precipitation_type: Optional[str] = Field(None, description="RAIN, SNOW, NONE")
    extreme_weather: Optional[bool] = None
    is_significant: Optional[bool] = None
    is_adverse: Optional[bool] = None
    wind_blowing_out: Optional[bool] = None
    wind_blowing_in: Optional[bool] = None


class InjuryContext(_ContextRecord):
    has_key_injuries: Optional[bool] = None
    star_player_out: Optional[bool] = None
    injured_starters: List[str] = Field(default_factory=list)
    quarterback_injured: Optional[bool] = None
    has_backup_qb: Optional[bool] = None
    is_backup_goalie_starting: Optional[bool] = None
    player_minutes_restricted: Optional[bool] = None


class GameSituationContext(_ContextRecord):
    is_playoff: Optional[bool] = None
    is_tournament: Optional[bool] = None
    is_elimination: Optional[bool] = None
    is_rivalry: Optional[bool] = None
    is_nationally_televised: Optional[bool] = None
    final_score_differential: Optional[float] = None
    is_late_game: Optional[bool] = None
    is_clutch_time: Optional[bool] = None
    is_division_game: Optional[bool] = None
    is_primetime: Optional[bool] = None
    is_late_season: Optional[bool] = None
    has_playoff_implications: Optional[bool] = None
    has_resting_players: Optional[bool] = None


class ScheduleContext(_ContextRecord):
    is_short_week: Optional[bool] = None
    is_west_coast_team_early_east_game: Optional[bool] = None
    is_back_to_back: Optional[bool] = None
    is_third_in_four_nights: Optional[bool] = None
    is_end_of_road_trip: Optional[bool] = None
    is_first_game_after_road_trip: Optional[bool] = None
    road_trip_length: Optional[int] = None
    is_day_game_after_night_game: Optional[bool] = None
    is_getaway_day: Optional[bool] = None
    rest_days: Optional[int] = None


class TrendContext(_ContextRecord):
    against_team_trend: Optional[bool] = None
    against_h2h_trend: Optional[bool] = None
    against_situational_trend: Optional[bool] = None
    public_consensus_percentage: Optional[float] = None
    against_public_consensus: Optional[bool] = None


class HistoricalVarianceContext(_ContextRecord):
    variance_factor: Optional[float] = Field(None, description="Explicit multiplier; wins over mean/std")
    mean: Optional[float] = None
    standard_deviation: Optional[float] = None


class TeamProfileContext(_ContextRecord):
    # NFL
    teams_turnover_prone: Optional[bool] = None
    # NBA
    is_three_point_heavy_team: Optional[bool] = None
    has_inconsistent_rotation: Optional[bool] = None
    pace_factor: Optional[float] = None
    # MLB
    starting_pitcher_tier: Optional[str] = Field(None, description="ace, average, poor")
    bullpen_strength: Optional[str] = Field(None, description="elite, average, weak")
    is_bullpen_depleted: Optional[bool] = None
    park_factor: Optional[float] = Field(None, description="Run environment ratio, 1.0 = neutral")
    ballpark_factor: Optional[float] = Field(None, description="Index, 100 = neutral")
    # NHL
    starting_goalie_quality: Optional[str] = Field(None, description="elite, average, poor")
    special_teams_efficiency: Optional[str] = Field(None, description="high, average, low")


class PropContext(_ContextRecord):
    """Situational context for a prop. Every capability record is optional."""
    venue_type: Optional[str] = Field(None, description="HOME, AWAY, NEUTRAL")
    is_underdog: Optional[bool] = None
    key_factors: List[str] = Field(default_factory=list)

    weather: Optional[WeatherContext] = None
    injuries: Optional[InjuryContext] = None
    game: Optional[GameSituationContext] = None
    schedule: Optional[ScheduleContext] = None
    trends: Optional[TrendContext] = None
    historical_variance: Optional[HistoricalVarianceContext] = None
    team_profile: Optional[TeamProfileContext] = None


class AnalysisQualityContext(_ContextRecord):
    """Reasoning-quality flags attached to a pick's write-up."""
    reasoning: Optional[str] = None

    # Reasoning
    has_logical_fallacies: Optional[bool] = None
    is_narrative_driven: Optional[bool] = None
    data_backed: Optional[bool] = None
    has_recency_bias: Optional[bool] = None
    reasoning_quality_score: Optional[float] = None

    # Statistics
    has_statistical_errors: Optional[bool] = None
    has_sample_size_issues: Optional[bool] = None
    confuses_correlation_causation: Optional[bool] = None
    has_probability_errors: Optional[bool] = None
    ignores_regression_to_mean: Optional[bool] = None
    statistical_methodology_score: Optional[float] = None

    # Completeness
    considered_factors: List[str] = Field(default_factory=list)
    ignored_key_factors: Optional[bool] = None
    completeness_score: Optional[float] = None

    # Luck
    mentioned_winning_factor: Optional[bool] = None
    had_incorrect_assumptions: Optional[bool] = None
    right_for_wrong_reasons: Optional[bool] = None
    was_improbable_outcome: Optional[bool] = None
    luck_factor_score: Optional[float] = None

    # Consistency
    is_inconsistent_with_past: Optional[bool] = None
    has_contradictory_reasoning: Optional[bool] = None
    uses_stats_selectively: Optional[bool] = None
    consistency_score: Optional[float] = None

    # Sport-specific
    ignored_turnover_variance: Optional[bool] = None
    overemphasized_qb: Optional[bool] = None
    considered_oline: Optional[bool] = None
    ignored_weather: Optional[bool] = None
    ignored_rest_disadvantage: Optional[bool] = None
    ignored_pace_factors: Optional[bool] = None
    ignored_3pt_variance: Optional[bool] = None
    ignored_ballpark_factors: Optional[bool] = None
    overemphasized_batter_pitcher_matchups: Optional[bool] = None
    ignored_bullpen_status: Optional[bool] = None
    ignored_goalie_matchup: Optional[bool] = None
    overemphasized_recent_scoring: Optional[bool] = None
    ignored_special_teams: Optional[bool] = None

    # Timing
    failed_to_update_with_new_info: Optional[bool] = None
    accounted_for_late_developments: Optional[bool] = None


# =============================================================================
# PROP / LEG
# =============================================================================

class Leg(BaseModel):
    """
    A single wagering proposition. Used directly as one leg of a ticket,
    and as the base of Prop.
    """
    model_config = ConfigDict(extra="allow")

    # ==========================================
    # IDENTITY
    # ==========================================
    id: Optional[str] = Field(None, description="Prop identifier")
    sport: Optional[str] = Field(None, description="NBA, NFL, MLB, NHL, ... (input alias: league)")

    # ==========================================
    # MARKET
    # ==========================================
    prop_type: Optional[str] = Field(None, description="OVER_UNDER, SPREAD, MONEYLINE, PROP_BET")
    pick_type: Optional[str] = Field(None, description="OVER or UNDER")
    player_name: Optional[str] = None
    team: Optional[str] = None
    opponent: Optional[str] = None
    position: Optional[str] = None
    stat_type: Optional[str] = Field(None, description="points, rebounds, passing_yards, ...")

    line_value: Optional[float] = None
    predicted_line: Optional[float] = None
    odds: Optional[float] = Field(None, description="American odds (-110, +150)")
    over_odds: Optional[float] = None
    under_odds: Optional[float] = None

    # ==========================================
    # SCORING INPUTS
    # ==========================================
    l10_hit_rate: Optional[float] = Field(None, description="Hit rate over the last 10 games, 0-1")
    win_probability: Optional[float] = Field(None, description="Model win probability, 0-1")
    dvp_rank: Optional[int] = Field(None, description="Defense-vs-position rank, 1 = softest")
    dvp_score: Optional[float] = None
    minutes_history: Optional[List[float]] = None
    context_flag: Optional[bool] = Field(None, description="Negative context (injury, news)")
    is_home: Optional[bool] = None

    # ==========================================
    # OUTCOME
    # ==========================================
    actual_result: Optional[float] = None
    is_win: Optional[bool] = None
    prediction_timestamp: Optional[datetime] = None
    game_timestamp: Optional[datetime] = None

    # ==========================================
    # CONTEXT
    # ==========================================
    analysis: Optional[AnalysisQualityContext] = None
    context: Optional[PropContext] = None

    # ==========================================
    # VALIDATORS (Pydantic v2)
    # ==========================================

    @model_validator(mode='before')
    @classmethod
    def accept_league_alias(cls, data: Any) -> Any:
        """Accept `league` as the sport field."""
        if isinstance(data, dict) and not data.get('sport') and data.get('league'):
            data = {**data, 'sport': data['league']}
        return data

    @field_validator('sport', 'prop_type', 'pick_type')
    @classmethod
    def normalize_upper(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = str(v).strip().upper()
        return v or None

    @field_validator('analysis', 'context', mode='wrap')
    @classmethod
    def drop_invalid_context(cls, v: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        """A context bag that is not a mapping is treated as absent."""
        try:
            return handler(v)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid {info.field_name} on prop: {e.errors()[0]['msg']}")
            return None


class Prop(Leg):
    """
    Unit of work for the scoring pipeline.

    Single bets never carry `legs`; a multi-leg ticket's `legs`, when present,
    has at least two entries.
    """
    bet_type: str = Field(BetType.SINGLE.value, description="single, parlay, teaser, roundrobin, sgp")
    legs: Optional[List[Leg]] = None
    parent_bet_type: Optional[str] = Field(
        None,
        description="Set when this record is a leg graded inside a multi-leg ticket"
    )

    @field_validator('bet_type')
    @classmethod
    def validate_bet_type(cls, v: Optional[str]) -> str:
        if v is None:
            return BetType.SINGLE.value
        v = str(v).strip().lower()
        valid = [b.value for b in BetType]
        if v not in valid:
            raise ValueError(f'Invalid bet_type: {v}. Must be one of: {valid}')
        return v

    @field_validator('parent_bet_type')
    @classmethod
    def normalize_parent_bet_type(cls, v: Optional[str]) -> Optional[str]:
        return str(v).strip().lower() if v else None

    @model_validator(mode='after')
    def check_legs(self):
        """Enforce the legs invariant."""
        if self.legs is not None:
            if self.bet_type == BetType.SINGLE.value:
                raise ValueError('single bets never carry legs')
            if len(self.legs) < 2:
                raise ValueError(f'{self.bet_type} ticket needs at least 2 legs, got {len(self.legs)}')
        return self

    @property
    def is_multi_leg(self) -> bool:
        return self.bet_type in MULTI_LEG_BET_TYPES


# =============================================================================
# OUTPUT RECORDS
# =============================================================================

class ComponentContribution(BaseModel):
    """One row of the breakdown variant's component table."""
    name: str
    value: float
    percentage: float


class GradedProp(Prop):
    """The Prop plus every computed field."""

    # Base sub-scores
    trend_score: float = 0.0
    matchup_score: float = 0.0
    ev_percent: float = 0.0
    confidence_score: float = 0.0
    line_value_score: float = 0.0
    role_stability: float = 0.0
    edge_score: int = 0
    edge_tier: Optional[str] = None

    # Adjustments
    margin_adjustment: float = 0.0
    contextual_bonus: float = 0.0
    sport_specific_bonus: float = 0.0
    penalties: float = 0.0
    sport_specific_penalties: float = 0.0
    time_penalties: float = 0.0

    # Aggregates
    total_bonus: float = 0.0
    total_penalties: float = 0.0
    raw_composite_score: float = 0.0
    volatility_factor: float = 1.0
    composite_score: float = 0.0
    tier: str = Tier.C.value

    # Audit
    scoring_version: str = ""
    config_version: Optional[str] = None
    defaulted_components: List[str] = Field(
        default_factory=list,
        description="Components whose value came from a default rather than data"
    )

    # Variants
    applied_weights: Optional[Dict[str, float]] = None
    component_breakdown: Optional[List[ComponentContribution]] = None
    volatility_adjustment_impact: Optional[float] = None


class TicketGrade(BaseModel):
    """Grade of a multi-leg ticket."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    bet_type: str
    sport: Optional[str] = None
    legs: List[GradedProp]
    ticket_score: float = Field(..., description="Arithmetic mean of leg composite scores")
    tier: str
    promotion_eligible: bool = Field(False, description="True only if every leg is S or A")
    scoring_version: str = ""
    config_version: Optional[str] = None


__all__ = [
    'BetType',
    'MULTI_LEG_BET_TYPES',
    'PropType',
    'PickDirection',
    'Tier',
    'WeatherContext',
    'InjuryContext',
    'GameSituationContext',
    'ScheduleContext',
    'TrendContext',
    'HistoricalVarianceContext',
    'TeamProfileContext',
    'PropContext',
    'AnalysisQualityContext',
    'Leg',
    'Prop',
    'ComponentContribution',
    'GradedProp',
    'TicketGrade',
]
