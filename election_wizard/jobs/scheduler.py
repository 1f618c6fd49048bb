"""Debounce scheduling on top of APScheduler."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from election_wizard.config import settings
from election_wizard.utils.errors import SchedulerError
from election_wizard.utils.time import now_utc

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """One-shot delayed callbacks, at most one pending per job id."""

    def schedule(self, job_id: str, delay: timedelta, callback: Callable[[], None]) -> None:
        """Arm ``callback`` after ``delay``, replacing any pending job with the same id.

        Raises:
            SchedulerError: when the job cannot be armed.
        """

    def cancel(self, job_id: str) -> bool:
        """Drop a pending job; return True when one was removed."""

    def shutdown(self) -> None:
        """Release scheduler resources."""


def _as_coroutine(callback: Callable[[], None]) -> Callable[[], object]:
    async def run() -> None:
        callback()

    return run


class AsyncIODebounceScheduler:
    """Scheduler backed by an ``AsyncIOScheduler`` on the caller's event loop.

    Jobs run as coroutines, so callbacks execute on the loop thread rather than
    in an executor pool. An owned scheduler is created on first use, which
    lets hosts build the wizard before their loop is running.
    """

    def __init__(self, scheduler: AsyncIOScheduler | None = None) -> None:
        self.owns_scheduler = scheduler is None
        self._scheduler = scheduler

    @property
    def scheduler(self) -> AsyncIOScheduler:
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)
        return self._scheduler

    def schedule(self, job_id: str, delay: timedelta, callback: Callable[[], None]) -> None:
        """Arm ``callback``; raises ``SchedulerError`` when no event loop is running."""
        try:
            if not self.scheduler.running:
                self.scheduler.start()
                logger.info("Autosave scheduler started")
        except RuntimeError as exc:
            raise SchedulerError(f"Cannot start autosave scheduler: {exc}") from exc
        self.scheduler.add_job(
            _as_coroutine(callback),
            DateTrigger(run_date=now_utc() + delay),
            id=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,
        )

    def cancel(self, job_id: str) -> bool:
        if self._scheduler is None:
            return False
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            return False
        return True

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self.owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Autosave scheduler stopped")
