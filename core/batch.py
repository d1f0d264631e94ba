"""
BATCH.PY - Batch grading with per-item failure isolation

process_batch(items, config) grades every item against ONE ScoringConfig
snapshot, preserving input order. A record that cannot be graded (schema
failure, ticket without legs, ...) becomes an ItemFailure; the rest of the
batch still completes.

Fan-out uses a ThreadPoolExecutor. The correlation id of the batch is copied
into each worker via contextvars so worker log lines carry the batch id.

Usage:
    from core.batch import process_batch

    result = process_batch(props, config=manager.snapshot())
    result.summary["tier_distribution"]   # {"S": 3, "A": 10, "B": 20, "C": 67}
"""

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from statistics import fmean
from typing import Any, Dict, List, Optional, Sequence, Union

from core.errors import error_detail_from_exception
from core.scoring_pipeline import ContextInput, PropInput, ScoringStrategy, grade
from core.structured_logging import correlation_scope, log_info
from env_config import Config
from models.pick_schema import GradedProp, TicketGrade
from models.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig

logger = logging.getLogger(__name__)

SUMMARY_TIERS = ["S", "A", "B", "C"]

GradeOutcome = Union[GradedProp, TicketGrade]


@dataclass
class ItemFailure:
    """One record that could not be graded."""
    index: int
    prop_id: Optional[str]
    code: str
    message: str


@dataclass
class BatchResult:
    """
    Outcome of a batch.

    results is aligned with the input: results[i] is None when item i failed
    (see failures for the reason).
    """
    results: List[Optional[GradeOutcome]]
    failures: List[ItemFailure] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def graded(self) -> List[GradeOutcome]:
        return [r for r in self.results if r is not None]


def _prop_id(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        value = item.get("id")
    else:
        value = getattr(item, "id", None)
    return str(value) if value is not None else None


def _score_of(outcome: GradeOutcome) -> float:
    if isinstance(outcome, TicketGrade):
        return outcome.ticket_score
    return outcome.composite_score


def summarize(results: Sequence[Optional[GradeOutcome]], failed: int = 0) -> Dict[str, Any]:
    """
    Batch summary: count, failures, mean composite and tier distribution.

    Tickets contribute their ticket_score and ticket tier.
    """
    graded = [r for r in results if r is not None]
    distribution = {tier: 0 for tier in SUMMARY_TIERS}
    for outcome in graded:
        distribution[outcome.tier] = distribution.get(outcome.tier, 0) + 1

    return {
        "count": len(graded),
        "failed": failed,
        "averages": {
            "composite": fmean(_score_of(r) for r in graded) if graded else 0.0,
        },
        "tier_distribution": distribution,
    }


def process_batch(
    items: Sequence[PropInput],
    config: Optional[ScoringConfig] = None,
    contexts: Optional[Sequence[ContextInput]] = None,
    max_workers: Optional[int] = None,
    strategy: Union[ScoringStrategy, str, None] = None,
) -> BatchResult:
    """
    Grade a batch of props against a single config snapshot.

    Args:
        items: Props/tickets (models or dicts)
        config: Snapshot used for every item (defaults to DEFAULT_SCORING_CONFIG)
        contexts: Optional per-item contexts aligned with items (None entries allowed)
        max_workers: Thread pool size (defaults to Config.BATCH_MAX_WORKERS)
        strategy: Scoring strategy override

    Returns:
        BatchResult with order-preserving results, failures and summary

    Raises:
        ValueError: if contexts is given and its length differs from items
    """
    config = config or DEFAULT_SCORING_CONFIG
    items = list(items)
    if contexts is not None and len(contexts) != len(items):
        raise ValueError(f"contexts has {len(contexts)} entries for {len(items)} items")
    contexts = list(contexts) if contexts is not None else [None] * len(items)

    with correlation_scope("batch") as batch_id:
        def _grade_one(index: int):
            try:
                return grade(items[index], config, strategy, contexts[index]), None
            except Exception as e:
                detail = error_detail_from_exception(e)
                logger.warning(f"Item {index} ({_prop_id(items[index])}) failed: {detail.code}: {detail.message}")
                return None, ItemFailure(
                    index=index,
                    prop_id=_prop_id(items[index]),
                    code=detail.code,
                    message=detail.message,
                )

        workers = max_workers or Config.BATCH_MAX_WORKERS
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(contextvars.copy_context().run, _grade_one, i)
                for i in range(len(items))
            ]
            outcomes = [f.result() for f in futures]

        results = [graded for graded, _ in outcomes]
        failures = [failure for _, failure in outcomes if failure is not None]
        summary = summarize(results, failed=len(failures))

        log_info(
            logger,
            f"Batch graded: {summary['count']} ok, {summary['failed']} failed",
            batch_id=batch_id,
            config_version=config.version,
            avg_composite=round(summary["averages"]["composite"], 2),
            tier_distribution=summary["tier_distribution"],
        )

    return BatchResult(results=results, failures=failures, summary=summary)


__all__ = [
    'ItemFailure',
    'BatchResult',
    'summarize',
    'process_batch',
]
