"""
Environment Configuration Helper - v1.0
=======================================
Centralized env var loading for the grading engine.

Scoring defaults (thresholds, weights, volatility tables) live in
core/scoring_contract.py; the runtime ScoringConfig snapshot is published by
core/config_manager.py. This module only carries process-level settings.
"""

import os
import logging
from typing import Optional, Any

logger = logging.getLogger(__name__)


def get_env(*names: str, default: Any = None) -> Optional[str]:
    """
    Get environment variable with fallback names.

    Tries each name in order, returns first non-empty value.

    Example:
        get_env("GRADING_LOG_LEVEL", "LOG_LEVEL", default="INFO")

    Args:
        *names: Variable names to try in order
        default: Default value if none found

    Returns:
        First non-empty value found, or default
    """
    for name in names:
        value = os.getenv(name)
        if value and str(value).strip():
            return value.strip()
    return default


def get_env_int(name: str, default: int) -> int:
    """Get integer env var; unparseable values fall back to default with a warning."""
    value = get_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid int for {name}={value!r}, using {default}")
        return default


# ============================================================================
# CENTRALIZED CONFIG (loaded once at import)
# ============================================================================

class Config:
    """Centralized configuration from env vars."""

    ENGINE_VERSION = "1.0"

    # Logging
    LOG_LEVEL = get_env("LOG_LEVEL", default="INFO").upper()
    LOG_FORMAT = get_env("LOG_FORMAT", default="json")  # "json" or "text"

    # Config refresh (seconds between scheduled ScoringConfig reloads)
    CONFIG_REFRESH_SECONDS = get_env_int("CONFIG_REFRESH_SECONDS", 300)
    CONFIG_CHANNEL = get_env("CONFIG_CHANNEL", default="config_changes")

    # Scoring
    SCORING_STRATEGY = get_env("SCORING_STRATEGY")  # None = use the snapshot's strategy

    # Batch fan-out (None = ThreadPoolExecutor default)
    BATCH_MAX_WORKERS = get_env_int("BATCH_MAX_WORKERS", 0) or None

    @classmethod
    def log_status(cls):
        """Log config status at boot."""
        status = {
            "log_level": cls.LOG_LEVEL,
            "log_format": cls.LOG_FORMAT,
            "refresh_s": cls.CONFIG_REFRESH_SECONDS,
            "channel": cls.CONFIG_CHANNEL,
            "strategy": cls.SCORING_STRATEGY or "snapshot",
            "workers": cls.BATCH_MAX_WORKERS or "auto",
        }

        status_str = " ".join(f"{k}={v}" for k, v in status.items())
        logger.info(f"ENV OK: {status_str}")

        return status


# Log status on import
Config.log_status()
