"""
GRADING_SERVICE.PY - Caller-facing entry point

Binds the scoring pipeline to the ConfigManager's published snapshot.
Every call reads ONE snapshot up front; a concurrent refresh affects only
later calls. Without a snapshot the service refuses to score.
"""

import logging
from typing import Optional, Sequence, Union

from core.batch import BatchResult, process_batch
from core.config_manager import ConfigManager
from core.errors import ConfigUnavailableError
from core.scoring_pipeline import ContextInput, PropInput, ScoringStrategy, grade
from env_config import Config
from models.pick_schema import GradedProp, TicketGrade

logger = logging.getLogger(__name__)


class GradingService:
    """Grades props against the current config snapshot."""

    def __init__(self, manager: ConfigManager, strategy: Union[ScoringStrategy, str, None] = None):
        self.manager = manager
        # None = the snapshot's own strategy
        self.strategy = strategy or Config.SCORING_STRATEGY

    def _require_snapshot(self):
        if not self.manager.has_snapshot:
            logger.error("Grading requested before a scoring config was loaded")
            raise ConfigUnavailableError("Scoring config unavailable; refusing to grade")
        return self.manager.snapshot()

    def grade(self, prop: PropInput, context: ContextInput = None) -> Union[GradedProp, TicketGrade]:
        """Grade one prop or ticket."""
        config = self._require_snapshot()
        return grade(prop, config, self.strategy, context)

    def grade_batch(
        self,
        items: Sequence[PropInput],
        contexts: Optional[Sequence[ContextInput]] = None,
        max_workers: Optional[int] = None,
    ) -> BatchResult:
        """Grade a batch; the whole batch sees the same snapshot."""
        config = self._require_snapshot()
        return process_batch(items, config, contexts, max_workers, self.strategy)


__all__ = ['GradingService']
