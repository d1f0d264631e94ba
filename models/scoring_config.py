"""
ScoringConfig - immutable runtime configuration snapshot.

Every scoring call receives one ScoringConfig and reads nothing else, so a
refresh (core/config_manager.py) can never be observed half-applied.

Usage:
    from models.scoring_config import ScoringConfig, DEFAULT_SCORING_CONFIG

    config = ScoringConfig.from_row({"s_tier_threshold": 22, "version": "2024-10-01"})
"""
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from core.scoring_contract import (
    BET_TYPE_VOLATILITY,
    DEFAULT_TIER_THRESHOLDS,
    EDGE_SCORE_VERSION,
    MARGIN_DIMINISHING_THRESHOLD,
    MARGIN_MAX_ADJUSTMENT,
    MARGIN_SCALING_FACTOR,
    MARKET_TYPE_VOLATILITY,
    MAX_CONTEXTUAL_BONUS,
    MAX_PENALTY,
    SPORT_VOLATILITY,
    TWENTY_FIVE_POINT_VERSION,
)

DEFAULT_CONFIG_VERSION = "default"
SCORING_STRATEGIES = {TWENTY_FIVE_POINT_VERSION, EDGE_SCORE_VERSION}

# Store row column -> tier key
_ROW_TIER_COLUMNS = {
    "s_tier_threshold": "S",
    "a_tier_threshold": "A",
    "b_tier_threshold": "B",
    "c_tier_threshold": "C",
}


class MarginSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_adjustment: float = Field(MARGIN_MAX_ADJUSTMENT, gt=0)
    threshold: float = Field(MARGIN_DIMINISHING_THRESHOLD, gt=0)
    scaling_factor: float = Field(MARGIN_SCALING_FACTOR, gt=0)


class ScoringConfig(BaseModel):
    """
    Tier thresholds, weight overrides and volatility tables for one scoring run.

    Table fields are read-only mappings so a published snapshot cannot be
    edited in place by any reader.
    """
    model_config = ConfigDict(frozen=True, validate_default=True)

    version: str = DEFAULT_CONFIG_VERSION
    strategy: str = TWENTY_FIVE_POINT_VERSION

    tier_thresholds: Mapping[str, float] = Field(default_factory=lambda: dict(DEFAULT_TIER_THRESHOLDS))
    weights: Mapping[str, float] = Field(
        default_factory=dict,
        description="Per-component weight overrides for the weighted variant"
    )

    sport_volatility: Mapping[str, float] = Field(default_factory=lambda: dict(SPORT_VOLATILITY))
    bet_type_volatility: Mapping[str, float] = Field(default_factory=lambda: dict(BET_TYPE_VOLATILITY))
    market_type_volatility: Mapping[str, float] = Field(default_factory=lambda: dict(MARKET_TYPE_VOLATILITY))

    margin: MarginSettings = Field(default_factory=MarginSettings)
    max_bonus: float = Field(MAX_CONTEXTUAL_BONUS, ge=0)
    max_penalty: float = Field(MAX_PENALTY, le=0)

    @field_validator('tier_thresholds')
    @classmethod
    def validate_tier_thresholds(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        """Fill missing tiers from defaults and require S > A > B > C."""
        merged = dict(DEFAULT_TIER_THRESHOLDS)
        merged.update({str(k).upper(): float(val) for k, val in v.items()})
        ordered = [merged[t] for t in ("S", "A", "B", "C")]
        if any(hi <= lo for hi, lo in zip(ordered, ordered[1:])):
            raise ValueError(f'tier thresholds must be strictly descending S > A > B > C, got {merged}')
        return MappingProxyType(merged)

    @field_validator('sport_volatility', 'bet_type_volatility', 'market_type_volatility')
    @classmethod
    def validate_volatility_table(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        table = {str(k).upper(): float(val) for k, val in v.items()}
        bad = {k: val for k, val in table.items() if val <= 0}
        if bad:
            raise ValueError(f'volatility factors must be > 0: {bad}')
        table.setdefault("DEFAULT", 1.0)
        return MappingProxyType(table)

    @field_validator('strategy')
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        if v not in SCORING_STRATEGIES:
            raise ValueError(f'unknown scoring strategy {v!r}, expected one of {sorted(SCORING_STRATEGIES)}')
        return v

    @field_validator('weights')
    @classmethod
    def freeze_weights(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType({str(k): float(val) for k, val in v.items()})

    @field_serializer('tier_thresholds', 'weights', 'sport_volatility', 'bet_type_volatility', 'market_type_volatility')
    def serialize_table(self, v: Mapping[str, float]) -> Dict[str, float]:
        return dict(v)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], base: Optional["ScoringConfig"] = None) -> "ScoringConfig":
        """
        Build a snapshot from a flat config-store row.

        Recognized columns: version, strategy, s_/a_/b_/c_tier_threshold,
        weights, sport_volatility, bet_type_volatility, market_type_volatility,
        max_margin_adjustment, margin_threshold, margin_scaling_factor,
        max_bonus, max_penalty. Missing columns fall back to `base` (or defaults).

        Raises:
            pydantic.ValidationError: if the row yields an invalid config
        """
        base = base or DEFAULT_SCORING_CONFIG
        data: Dict[str, Any] = base.model_dump()

        thresholds = dict(data["tier_thresholds"])
        for column, tier in _ROW_TIER_COLUMNS.items():
            if row.get(column) is not None:
                thresholds[tier] = row[column]
        if isinstance(row.get("tier_thresholds"), Mapping):
            thresholds.update(row["tier_thresholds"])
        data["tier_thresholds"] = thresholds

        for key in ("version", "strategy", "max_bonus", "max_penalty"):
            if row.get(key) is not None:
                data[key] = row[key]

        for key in ("weights", "sport_volatility", "bet_type_volatility", "market_type_volatility"):
            if isinstance(row.get(key), Mapping):
                data[key] = {**data[key], **row[key]}

        margin = dict(data["margin"])
        for column, field in (
            ("max_margin_adjustment", "max_adjustment"),
            ("margin_threshold", "threshold"),
            ("margin_scaling_factor", "scaling_factor"),
        ):
            if row.get(column) is not None:
                margin[field] = row[column]
        data["margin"] = margin

        if row.get("version") is None and row.get("updated_at") is not None:
            data["version"] = str(row["updated_at"])

        return cls.model_validate(data)


DEFAULT_SCORING_CONFIG = ScoringConfig()


__all__ = [
    'DEFAULT_CONFIG_VERSION',
    'SCORING_STRATEGIES',
    'MarginSettings',
    'ScoringConfig',
    'DEFAULT_SCORING_CONFIG',
]
