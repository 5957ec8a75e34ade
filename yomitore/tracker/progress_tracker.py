"""Progress tracker - persists the training aggregate and reconciles it on load."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from yomitore.exceptions import PersistenceError
from yomitore.models import TrainingStats
from yomitore.tracker import badges, buddy, record_log

logger = logging.getLogger(__name__)

STATS_FILENAME = "stats.json"


class ProgressTracker:
    """Load and save the training aggregate as a single JSON document."""

    def __init__(self, storage_path: Optional[Path] = None):
        """
        Initialize the progress tracker.

        Args:
            storage_path: Directory for the stats file. Defaults to
                ~/.config/yomitore.
        """
        self.storage_path = Path(storage_path) if storage_path else Path.home() / ".config" / "yomitore"

    @property
    def stats_file(self) -> Path:
        """Path of the persisted stats document."""
        return self.storage_path / STATS_FILENAME

    def load(self, now: Optional[datetime] = None) -> TrainingStats:
        """
        Load the aggregate and reconcile it before use.

        The stored streak is recomputed from the log, badges are rebuilt from
        history and the buddy inactivity decay is applied once. A missing or
        unreadable file yields a fresh aggregate instead of an error.

        Args:
            now: Reference instant for the decay check.

        Returns:
            The reconciled TrainingStats.
        """
        stats = self.load_raw()
        self.reconcile(stats, now=now)
        return stats

    def load_raw(self) -> TrainingStats:
        """Read the aggregate exactly as stored, without reconciliation."""
        filepath = self.stats_file
        if not filepath.exists():
            logger.info(f"No stats file at {filepath}; starting fresh")
            return TrainingStats()

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {filepath}, starting fresh: {e}")
            return TrainingStats()

        if not isinstance(data, dict):
            logger.warning(f"Unexpected stats document in {filepath}, starting fresh")
            return TrainingStats()

        return TrainingStats.from_dict(data)

    @staticmethod
    def reconcile(stats: TrainingStats, now: Optional[datetime] = None) -> None:
        """Repair derived state: streak, badges, then buddy decay."""
        record_log.recompute_streak(stats)
        badges.rebuild_from_history(stats)
        buddy.apply_decay(stats, now=now)

    def save(self, stats: TrainingStats) -> None:
        """
        Persist the aggregate.

        Writes to a temporary file beside the target and renames it into
        place, so an interrupted save never leaves a half-written document.

        Args:
            stats: The aggregate to save.

        Raises:
            PersistenceError: If the document could not be written.
        """
        filepath = self.stats_file
        tmp_name = None
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=".stats-", suffix=".json.tmp", dir=self.storage_path
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(stats.to_dict(), f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, filepath)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(
                f"Failed to save stats: {e}", path=str(filepath), cause=e
            ) from e

        logger.debug(f"Saved {len(stats.results)} attempts to {filepath}")
