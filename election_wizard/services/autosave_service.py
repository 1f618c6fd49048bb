"""Debounced draft snapshots in scratch storage.

The snapshot is a recovery aid. Writes are best-effort: storage failures are
logged and dropped, and the in-memory draft stays authoritative.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from pydantic import ValidationError

from election_wizard.config import Settings, settings
from election_wizard.jobs.scheduler import Scheduler
from election_wizard.schemas.autosave import AutosaveSnapshot, LoadedAutosave
from election_wizard.schemas.draft import Draft
from election_wizard.services.scratch_storage import ScratchStorage
from election_wizard.utils.errors import SchedulerError, StorageError
from election_wizard.utils.time import ensure_aware, now_utc

logger = logging.getLogger(__name__)


class AutosaveService:
    """Writes the latest draft to a single storage slot after a quiet period."""

    def __init__(
        self,
        storage: ScratchStorage,
        scheduler: Scheduler,
        clock: Callable[[], datetime] = now_utc,
        config: Settings | None = None,
    ) -> None:
        config = config or settings
        self.storage = storage
        self.scheduler = scheduler
        self.clock = clock
        self.slot_key = config.autosave_slot_key
        self.version = config.autosave_schema_version
        self.delay = timedelta(seconds=config.autosave_delay_seconds)
        self.max_age = timedelta(hours=config.autosave_max_age_hours)
        self.recent_age = timedelta(hours=config.autosave_recent_hours)
        self._enabled = config.autosave_enabled
        self.last_saved: datetime | None = None

    @property
    def job_id(self) -> str:
        return f"autosave:{self.slot_key}"

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)
        if not self._enabled:
            self.cancel_pending()

    def schedule(self, draft: Draft) -> None:
        """Restart the debounce timer so only the final draft of a burst is written."""
        if not self._enabled:
            return
        try:
            self.scheduler.schedule(self.job_id, self.delay, lambda: self.write(draft))
        except SchedulerError as exc:
            logger.warning("Autosave not scheduled: %s", exc.message)

    def write(self, draft: Draft) -> bool:
        """Persist ``draft`` now; returns whether a snapshot was stored."""
        if not self._enabled or not draft.title:
            return False

        timestamp = self.clock()
        snapshot = AutosaveSnapshot(data=draft, timestamp=timestamp, version=self.version)
        try:
            self.storage.set(self.slot_key, snapshot.model_dump_json(by_alias=True))
        except StorageError as exc:
            logger.warning("Autosave failed: %s", exc.message)
            return False

        self.last_saved = timestamp
        logger.debug("Autosaved draft %r to %s", draft.title, self.slot_key)
        return True

    def load(self) -> LoadedAutosave | None:
        """Return the stored snapshot unless it is missing, unreadable, or stale."""
        try:
            raw = self.storage.get(self.slot_key)
        except StorageError as exc:
            logger.warning("Failed to load autosave: %s", exc.message)
            return None
        if raw is None:
            return None

        try:
            snapshot = AutosaveSnapshot.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable autosave in %s", self.slot_key)
            return None
        if snapshot.version != self.version:
            logger.info(
                "Discarding autosave with version %s (expected %s)",
                snapshot.version,
                self.version,
            )
            return None

        timestamp = ensure_aware(snapshot.timestamp)
        age = self.clock() - timestamp
        if age > self.max_age:
            return None
        return LoadedAutosave(data=snapshot.data, timestamp=timestamp, is_recent=age < self.recent_age)

    def clear(self) -> None:
        """Erase the slot."""
        try:
            self.storage.delete(self.slot_key)
        except StorageError as exc:
            logger.warning("Failed to clear autosave: %s", exc.message)
        self.last_saved = None

    def cancel_pending(self) -> None:
        """Drop a scheduled write that has not fired yet."""
        if self.scheduler.cancel(self.job_id):
            logger.debug("Cancelled pending autosave for %s", self.slot_key)
