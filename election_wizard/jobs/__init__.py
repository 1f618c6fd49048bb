"""Delayed job scheduling for draft autosave."""

from election_wizard.jobs.scheduler import AsyncIODebounceScheduler, Scheduler

__all__ = [
    "AsyncIODebounceScheduler",
    "Scheduler",
]
