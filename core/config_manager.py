"""
CONFIG_MANAGER.PY - Publishes the current ScoringConfig snapshot

The manager owns the only mutable reference to the scoring configuration.
Readers call snapshot() and receive an immutable ScoringConfig; a refresh
builds a complete new snapshot and swaps the reference under a lock, so a
scoring call never sees a half-applied update.

Refresh triggers:
- APScheduler interval job (Config.CONFIG_REFRESH_SECONDS, default 5 minutes)
- Change notification from the store (subscribe callback)
- Manual refresh()

On refresh failure the error is logged and the last-known-good snapshot is kept.
If the INITIAL load fails, start() raises ConfigUnavailableError.

Usage:
    store = InMemoryConfigStore({"version": "2024-10-01", "s_tier_threshold": 22})
    manager = ConfigManager(store)
    manager.start()
    config = manager.snapshot()
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.errors import ConfigUnavailableError
from env_config import Config
from models.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "scoring_config_refresh"


class ConfigStore(Protocol):
    """Source of scoring configuration rows."""

    def fetch_config_row(self) -> Mapping[str, Any]:
        """Return the current config row. May raise."""
        ...

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a change callback; returns an unsubscribe callable."""
        ...


class InMemoryConfigStore:
    """Config store held in process memory. Notifies subscribers on update()."""

    def __init__(self, row: Optional[Mapping[str, Any]] = None, channel: Optional[str] = None):
        self.channel = channel or Config.CONFIG_CHANNEL
        self._row: Dict[str, Any] = dict(row or {})
        self._subscribers: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    def fetch_config_row(self) -> Mapping[str, Any]:
        with self._lock:
            return dict(self._row)

    def update(self, row: Mapping[str, Any]) -> None:
        """Replace the stored row and notify subscribers."""
        with self._lock:
            self._row = dict(row)
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback()
            except Exception as e:
                logger.error(f"[{self.channel}] subscriber failed: {type(e).__name__}: {e}")

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe


class ConfigManager:
    """
    Loads, publishes and refreshes the ScoringConfig snapshot.
    """

    def __init__(self, store: ConfigStore, refresh_seconds: Optional[int] = None):
        self.store = store
        self.refresh_seconds = refresh_seconds or Config.CONFIG_REFRESH_SECONDS
        self.scheduler: Optional[BackgroundScheduler] = None
        self.running = False

        self._lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self._snapshot: Optional[ScoringConfig] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

        self.last_update: Optional[datetime] = None
        self.refresh_count = 0
        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, schedule_refresh: bool = True) -> ScoringConfig:
        """
        Load the initial snapshot, subscribe to changes, schedule refresh.

        Raises:
            ConfigUnavailableError: if the initial snapshot cannot be loaded
        """
        if self.running:
            logger.warning("Config manager already running")
            return self.snapshot()

        if not self.refresh():
            raise ConfigUnavailableError(f"Initial scoring config load failed: {self.last_error}")

        self._unsubscribe = self.store.subscribe(self._on_change)

        if schedule_refresh:
            self.scheduler = BackgroundScheduler()
            self.scheduler.add_job(
                self.refresh,
                IntervalTrigger(seconds=self.refresh_seconds),
                id=REFRESH_JOB_ID,
                name="Scoring Config Refresh",
                max_instances=1,
                coalesce=True,
            )
            self.scheduler.start()

        self.running = True
        logger.info(f"Config manager started (version={self._snapshot.version}, refresh={self.refresh_seconds}s, scheduled={schedule_refresh})")
        return self._snapshot

    def stop(self) -> None:
        """Stop scheduled refresh and unsubscribe from the store."""
        self.running = False

        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

        if self.scheduler:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None

        logger.info("Config manager stopped")

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def refresh(self) -> bool:
        """
        Fetch the store row and publish a new snapshot.

        Returns:
            True if a new snapshot was published; False if the refresh failed
            and the previous snapshot (if any) was kept.
        """
        # Fetch-to-publish is serialized across scheduler ticks and change notifications.
        with self._refresh_lock:
            try:
                row = self.store.fetch_config_row()
                new_config = ScoringConfig.from_row(row)
            except Exception as e:
                self.last_error = f"{type(e).__name__}: {e}"
                kept = self._snapshot.version if self._snapshot else None
                logger.error(f"Scoring config refresh failed, keeping version {kept}: {self.last_error}")
                return False

            with self._lock:
                previous = self._snapshot
                self._snapshot = new_config
                self.last_update = datetime.now(timezone.utc)
                self.refresh_count += 1
                self.last_error = None

        if previous is None or previous.version != new_config.version:
            logger.info(f"Scoring config published: version={new_config.version} strategy={new_config.strategy}")
        else:
            logger.debug(f"Scoring config refreshed: version={new_config.version}")
        return True

    def snapshot(self) -> ScoringConfig:
        """
        Current immutable snapshot.

        Raises:
            ConfigUnavailableError: if no snapshot has been loaded
        """
        with self._lock:
            current = self._snapshot
        if current is None:
            raise ConfigUnavailableError("No scoring config snapshot loaded; call start() first")
        return current

    @property
    def has_snapshot(self) -> bool:
        return self._snapshot is not None

    def _on_change(self) -> None:
        logger.info("Config change notification received")
        self.refresh()

    def get_status(self) -> Dict[str, Any]:
        """Get manager status."""
        status = {
            "running": self.running,
            "version": self._snapshot.version if self._snapshot else None,
            "last_update": self.last_update.isoformat() if self.last_update else None,
            "refresh_count": self.refresh_count,
            "last_error": self.last_error,
            "scheduled": self.scheduler is not None,
            "refresh_seconds": self.refresh_seconds,
        }

        if self.scheduler:
            job = self.scheduler.get_job(REFRESH_JOB_ID)
            status["next_refresh"] = job.next_run_time.isoformat() if job and job.next_run_time else None

        return status


__all__ = [
    'REFRESH_JOB_ID',
    'ConfigStore',
    'InMemoryConfigStore',
    'ConfigManager',
]
