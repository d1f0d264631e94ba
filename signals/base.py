"""
Signal Base - Result type and catch-and-default helpers
=======================================================

Every calculator in this package is total: it never raises into the
pipeline. A failed or data-starved calculation returns a neutral value and
reports it through ScoreResult.used_default, so callers can tell
"legitimately zero" from "zero because data was missing".
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreResult:
    """Value of one scoring component."""
    value: float
    used_default: bool = False
    reason: Optional[str] = None


def defaulted(value: float, reason: str) -> ScoreResult:
    """Neutral value substituted for missing data."""
    return ScoreResult(value=value, used_default=True, reason=reason)


def guarded(component: str, default: float = 0.0) -> Callable:
    """
    Decorator: run a calculator, substituting `default` if it raises.

    The wrapped function may return a plain number or a ScoreResult; the
    wrapper always returns a ScoreResult.
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., ScoreResult]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> ScoreResult:
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"{component} failed, using default {default}: {type(e).__name__}: {e}")
                return defaulted(default, f"error: {type(e).__name__}")
            if isinstance(result, ScoreResult):
                return result
            return ScoreResult(value=result)
        return wrapper
    return decorator


def check_flag(name: str, check: Callable[..., Any], *args) -> bool:
    """Evaluate one boolean check; an exception means the flag is absent."""
    try:
        return bool(check(*args))
    except Exception as e:
        logger.warning(f"Flag check '{name}' failed, treating as absent: {type(e).__name__}: {e}")
        return False


def bucket_at_least(value: float, breakpoints: Sequence[Tuple[float, int]], floor: int) -> int:
    """First score whose threshold `value` meets (value >= threshold), else floor."""
    for threshold, score in breakpoints:
        if value >= threshold:
            return score
    return floor


def bucket_at_most(value: float, breakpoints: Sequence[Tuple[float, int]], floor: int) -> int:
    """First score whose threshold `value` stays under (value <= threshold), else floor."""
    for threshold, score in breakpoints:
        if value <= threshold:
            return score
    return floor


def is_true(value: Any) -> bool:
    """Strict flag test: only an explicit True counts."""
    return value is True


__all__ = [
    'ScoreResult',
    'defaulted',
    'guarded',
    'check_flag',
    'bucket_at_least',
    'bucket_at_most',
    'is_true',
]
