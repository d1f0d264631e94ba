"""
SCORING PIPELINE - Single Source of Truth for Pick Scoring

This module provides ONE place that turns a prop into a graded record:
    grade(prop, config) -> GradedProp | TicketGrade

NEVER duplicate scoring logic. All scoring MUST go through this pipeline.

25-point model (25-point-model-v1.0):
    BASE:        trend + matchup + confidence + line_value + role_stability   (1-5 each)
    ADJUSTMENTS: margin_adjustment                                            [-5, +5]
                 contextual_bonus + sport_specific_bonus                      (wins only)
                 penalties + sport_specific_penalties + time_penalties        (<= 0)

    RAW       = BASE + ADJUSTMENTS
    COMPOSITE = RAW / sqrt(volatility)  if RAW >= 0
                RAW * sqrt(volatility)  otherwise
    TIER      = tier_from_score(COMPOSITE, config.tier_thresholds)

Weighted variant (25-point-model-weighted-v1.0): every component is
multiplied by its weight (defaults <- config.weights <- call overrides)
before aggregation; confidence is computed from the unweighted trend/matchup.

Edge strategy (edge-score-v1): composite = edge score (0-5), no volatility,
tier from the edge tier map. Sub-scores are still computed for audit.

Multi-leg tickets are graded per leg; ticket_score is the mean of leg
composite scores and the ticket is promotable only if every leg is S or A.

CRITICAL: No wall-clock timestamps. A graded record is a pure function of
prop + context + config snapshot.
"""

from dataclasses import dataclass, field
from enum import Enum
from statistics import fmean
from typing import Any, Dict, List, Mapping, Optional, Union
import logging

from core.errors import InvalidPropError
from core.scoring_contract import (
    COMPOSITE_COMPONENTS,
    DEFAULT_COMPONENT_WEIGHTS,
    EDGE_SCORE_VERSION,
    TWENTY_FIVE_POINT_VERSION,
    TWENTY_FIVE_POINT_WEIGHTED_VERSION,
)
from models.pick_schema import (
    BetType,
    ComponentContribution,
    GradedProp,
    Leg,
    Prop,
    PropContext,
    TicketGrade,
)
from models.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig
from signals.base import ScoreResult
from signals.contextual_bonus import contextual_bonus_result, sport_specific_bonus_result
from signals.edge_score import edge_score_result
from signals.margin_adjustment import margin_adjustment_result
from signals.penalties import (
    penalties_result,
    sport_specific_penalties_result,
    time_penalties_result,
)
from signals.sub_scores import (
    calculate_confidence_score,
    expected_value_result,
    line_value_score_result,
    matchup_score_result,
    role_stability_result,
    trend_score_result,
)
from signals.volatility import apply_volatility_adjustment, volatility_factor_result
from tiering import edge_tier_from_score, is_ticket_promotable, tier_from_score

logger = logging.getLogger(__name__)

PropInput = Union[Prop, Leg, Mapping[str, Any]]
ContextInput = Union[PropContext, Mapping[str, Any], None]

ADJUSTMENT_COMPONENTS = [
    "margin_adjustment",
    "contextual_bonus",
    "sport_specific_bonus",
    "penalties",
    "sport_specific_penalties",
    "time_penalties",
]
BONUS_COMPONENTS = ["contextual_bonus", "sport_specific_bonus"]
PENALTY_COMPONENTS = ["penalties", "sport_specific_penalties", "time_penalties"]


class ScoringStrategy(str, Enum):
    """Versioned scoring strategies."""
    TWENTY_FIVE_POINT = TWENTY_FIVE_POINT_VERSION
    EDGE_SCORE = EDGE_SCORE_VERSION


# =============================================================================
# INPUT COERCION
# =============================================================================

def coerce_prop(prop: PropInput, context: ContextInput = None) -> Prop:
    """
    Validate input into a Prop, optionally replacing its context.

    Raises:
        pydantic.ValidationError: if the record fails schema validation
    """
    if isinstance(prop, Prop):
        result = prop
    elif isinstance(prop, Leg):
        result = Prop.model_validate(prop.model_dump())
    else:
        result = Prop.model_validate(dict(prop))

    if context is not None:
        ctx = context if isinstance(context, PropContext) else PropContext.model_validate(dict(context))
        result = result.model_copy(update={"context": ctx})
    return result


def resolve_strategy(
    strategy: Union[ScoringStrategy, str, None],
    config: ScoringConfig,
) -> ScoringStrategy:
    """Explicit strategy wins; otherwise the snapshot's."""
    value = strategy or config.strategy
    try:
        return ScoringStrategy(value)
    except ValueError:
        raise InvalidPropError(
            f"Unknown scoring strategy: {value}. Valid: {[s.value for s in ScoringStrategy]}",
            field="strategy",
        )


# =============================================================================
# COMPONENTS
# =============================================================================

@dataclass
class ComponentScores:
    """Unweighted component values plus which ones were defaulted."""
    values: Dict[str, float]
    defaulted: List[str] = field(default_factory=list)


def compute_components(prop: Prop, config: ScoringConfig, include_adjustments: bool = True) -> ComponentScores:
    """Run every calculator once. Never raises."""
    results: Dict[str, ScoreResult] = {
        "trend_score": trend_score_result(prop),
        "matchup_score": matchup_score_result(prop),
        "ev_percent": expected_value_result(prop),
        "line_value_score": line_value_score_result(prop),
        "role_stability": role_stability_result(prop),
        "edge_score": edge_score_result(prop),
    }
    if include_adjustments:
        results.update({
            "margin_adjustment": margin_adjustment_result(prop, config.margin),
            "contextual_bonus": contextual_bonus_result(prop, config.max_bonus),
            "sport_specific_bonus": sport_specific_bonus_result(prop),
            "penalties": penalties_result(prop, config.max_penalty),
            "sport_specific_penalties": sport_specific_penalties_result(prop),
            "time_penalties": time_penalties_result(prop),
        })

    values = {name: r.value for name, r in results.items()}
    for name in ADJUSTMENT_COMPONENTS:
        values.setdefault(name, 0.0)
    values["confidence_score"] = calculate_confidence_score(
        values["trend_score"], values["matchup_score"], values["ev_percent"]
    )
    defaulted = [name for name, r in results.items() if r.used_default]
    return ComponentScores(values=values, defaulted=defaulted)


def resolve_weights(
    config: ScoringConfig,
    overrides: Optional[Mapping[str, float]] = None,
) -> Dict[str, float]:
    """defaults <- config.weights <- call overrides (unknown keys ignored)."""
    weights = dict(DEFAULT_COMPONENT_WEIGHTS)
    for source in (config.weights, overrides or {}):
        for name, weight in source.items():
            if name in weights:
                weights[name] = float(weight)
            else:
                logger.warning(f"Ignoring weight for unknown component '{name}'")
    return weights


def _assemble(
    prop: Prop,
    components: ComponentScores,
    config: ScoringConfig,
    version: str,
    weights: Optional[Dict[str, float]] = None,
) -> GradedProp:
    """Aggregate weighted components, apply volatility, classify."""
    scored = {
        name: components.values[name] * (weights[name] if weights else 1.0)
        for name in COMPOSITE_COMPONENTS
    }
    total_bonus = sum(scored[name] for name in BONUS_COMPONENTS)
    total_penalties = sum(scored[name] for name in PENALTY_COMPONENTS)
    raw_composite = sum(scored.values())

    volatility = volatility_factor_result(prop, config)
    composite = apply_volatility_adjustment(raw_composite, volatility.value)
    tier = tier_from_score(composite, config.tier_thresholds)

    defaulted = list(components.defaulted)
    if volatility.used_default:
        defaulted.append("volatility_factor")

    edge = int(components.values["edge_score"])
    return GradedProp.model_validate({
        **prop.model_dump(),
        **scored,
        "ev_percent": components.values["ev_percent"],
        "edge_score": edge,
        "edge_tier": edge_tier_from_score(edge),
        "total_bonus": total_bonus,
        "total_penalties": total_penalties,
        "raw_composite_score": raw_composite,
        "volatility_factor": volatility.value,
        "composite_score": composite,
        "tier": tier,
        "scoring_version": version,
        "config_version": config.version,
        "defaulted_components": defaulted,
        "applied_weights": weights,
    })


# =============================================================================
# ENTRY POINTS (single props)
# =============================================================================

def apply_scoring_logic(
    prop: PropInput,
    config: Optional[ScoringConfig] = None,
    context: ContextInput = None,
) -> GradedProp:
    """
    Score one prop with the 25-point model.

    Args:
        prop: Prop model or dict
        config: Scoring snapshot (defaults to DEFAULT_SCORING_CONFIG)
        context: Optional context replacing prop.context

    Returns:
        Fully populated GradedProp
    """
    config = config or DEFAULT_SCORING_CONFIG
    prop = coerce_prop(prop, context)
    graded = _assemble(prop, compute_components(prop, config), config, TWENTY_FIVE_POINT_VERSION)
    logger.debug(f"Scored {graded.id}: raw={graded.raw_composite_score:.2f} composite={graded.composite_score:.2f} tier={graded.tier}")
    return graded


def apply_weighted_scoring_logic(
    prop: PropInput,
    weights: Optional[Mapping[str, float]] = None,
    config: Optional[ScoringConfig] = None,
    context: ContextInput = None,
) -> GradedProp:
    """
    Score one prop with per-component weights.

    Args:
        prop: Prop model or dict
        weights: Partial override map, merged over defaults and config.weights
        config: Scoring snapshot
        context: Optional context replacing prop.context

    Returns:
        GradedProp with applied_weights and weighted component values
    """
    config = config or DEFAULT_SCORING_CONFIG
    prop = coerce_prop(prop, context)
    final_weights = resolve_weights(config, weights)
    return _assemble(
        prop,
        compute_components(prop, config),
        config,
        TWENTY_FIVE_POINT_WEIGHTED_VERSION,
        weights=final_weights,
    )


def apply_scoring_logic_with_breakdown(
    prop: PropInput,
    config: Optional[ScoringConfig] = None,
    context: ContextInput = None,
) -> GradedProp:
    """
    25-point score plus each component's share of the absolute-value total.

    Used for audit/debugging. volatility_adjustment_impact = composite - raw.
    """
    graded = apply_scoring_logic(prop, config, context)
    values = [(name, float(getattr(graded, name))) for name in COMPOSITE_COMPONENTS]
    absolute_sum = sum(abs(v) for _, v in values)
    breakdown = [
        ComponentContribution(
            name=name,
            value=value,
            percentage=(abs(value) / absolute_sum * 100.0) if absolute_sum > 0 else 0.0,
        )
        for name, value in values
    ]
    return graded.model_copy(update={
        "component_breakdown": breakdown,
        "volatility_adjustment_impact": graded.composite_score - graded.raw_composite_score,
    })


def _score_edge(prop: Prop, config: ScoringConfig) -> GradedProp:
    """Edge strategy: composite is the 0-5 edge score; no adjustments, no volatility."""
    components = compute_components(prop, config, include_adjustments=False)
    edge = int(components.values["edge_score"])
    edge_tier = edge_tier_from_score(edge)
    base = {name: components.values[name] for name in COMPOSITE_COMPONENTS}
    return GradedProp.model_validate({
        **prop.model_dump(),
        **base,
        "ev_percent": components.values["ev_percent"],
        "edge_score": edge,
        "edge_tier": edge_tier,
        "raw_composite_score": float(edge),
        "volatility_factor": 1.0,
        "composite_score": float(edge),
        "tier": edge_tier,
        "scoring_version": EDGE_SCORE_VERSION,
        "config_version": config.version,
        "defaulted_components": components.defaulted,
    })


def score_prop(
    prop: PropInput,
    config: Optional[ScoringConfig] = None,
    strategy: Union[ScoringStrategy, str, None] = None,
    context: ContextInput = None,
) -> GradedProp:
    """Score one prop under the selected strategy (default: the snapshot's)."""
    config = config or DEFAULT_SCORING_CONFIG
    selected = resolve_strategy(strategy, config)
    if selected == ScoringStrategy.EDGE_SCORE:
        return _score_edge(coerce_prop(prop, context), config)
    return apply_scoring_logic(prop, config, context)


# =============================================================================
# TICKETS
# =============================================================================

def _leg_as_prop(ticket: Prop, leg: Leg, index: int) -> Prop:
    """A leg inherits sport and context from its ticket when it has none."""
    data = leg.model_dump()
    data["bet_type"] = BetType.SINGLE.value
    data["parent_bet_type"] = ticket.bet_type
    data.pop("legs", None)
    if not data.get("sport"):
        data["sport"] = ticket.sport
    if data.get("context") is None and ticket.context is not None:
        data["context"] = ticket.context.model_dump()
    if not data.get("id") and ticket.id:
        data["id"] = f"{ticket.id}:{index}"
    return Prop.model_validate(data)


def grade_ticket(
    prop: PropInput,
    config: Optional[ScoringConfig] = None,
    strategy: Union[ScoringStrategy, str, None] = None,
    context: ContextInput = None,
) -> TicketGrade:
    """
    Grade a multi-leg ticket leg by leg.

    Raises:
        InvalidPropError: if the record is not a multi-leg ticket with legs
    """
    config = config or DEFAULT_SCORING_CONFIG
    ticket = coerce_prop(prop, context)
    if not ticket.is_multi_leg or not ticket.legs:
        raise InvalidPropError(
            f"Ticket {ticket.id} ({ticket.bet_type}) has no legs to grade",
            field="legs",
        )

    selected = resolve_strategy(strategy, config)
    graded_legs = [
        score_prop(_leg_as_prop(ticket, leg, i), config, selected)
        for i, leg in enumerate(ticket.legs)
    ]
    ticket_score = round(fmean(leg.composite_score for leg in graded_legs), 2)

    if selected == ScoringStrategy.EDGE_SCORE:
        tier = edge_tier_from_score(ticket_score)
    else:
        tier = tier_from_score(ticket_score, config.tier_thresholds)

    promotable = is_ticket_promotable(leg.tier for leg in graded_legs)
    logger.debug(f"Ticket {ticket.id}: {len(graded_legs)} legs score={ticket_score} tier={tier} promotable={promotable}")

    return TicketGrade(
        id=ticket.id,
        bet_type=ticket.bet_type,
        sport=ticket.sport,
        legs=graded_legs,
        ticket_score=ticket_score,
        tier=tier,
        promotion_eligible=promotable,
        scoring_version=selected.value,
        config_version=config.version,
    )


def grade(
    prop: PropInput,
    config: Optional[ScoringConfig] = None,
    strategy: Union[ScoringStrategy, str, None] = None,
    context: ContextInput = None,
) -> Union[GradedProp, TicketGrade]:
    """Single bets (and tickets without legs) -> GradedProp; tickets with legs -> TicketGrade."""
    prop = coerce_prop(prop, context)
    if prop.is_multi_leg and prop.legs:
        return grade_ticket(prop, config, strategy)
    return score_prop(prop, config, strategy)


__all__ = [
    'ScoringStrategy',
    'ComponentScores',
    'coerce_prop',
    'resolve_strategy',
    'compute_components',
    'resolve_weights',
    'apply_scoring_logic',
    'apply_weighted_scoring_logic',
    'apply_scoring_logic_with_breakdown',
    'score_prop',
    'grade_ticket',
    'grade',
]
