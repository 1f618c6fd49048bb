"""Pytest fixtures for engine tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime, timedelta

import pytest

from election_wizard.config import Settings
from election_wizard.schemas.draft import Draft
from election_wizard.services.draft_store import initialize_draft
from election_wizard.services.scratch_storage import InMemoryScratchStorage
from election_wizard.services.validation_service import ValidationEngine
from election_wizard.services.wizard_service import ElectionWizard

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
TODAY = NOW.date()
TOMORROW = TODAY + timedelta(days=1)
YESTERDAY = TODAY - timedelta(days=1)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now


class FakeScheduler:
    """Scheduler driven by a FakeClock; jobs run only on ``advance``."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.jobs: dict[str, tuple[datetime, Callable[[], None]]] = {}
        self.scheduled_count = 0
        self.shutdown_called = False

    def schedule(self, job_id: str, delay: timedelta, callback: Callable[[], None]) -> None:
        self.jobs[job_id] = (self.clock() + delay, callback)
        self.scheduled_count += 1

    def cancel(self, job_id: str) -> bool:
        return self.jobs.pop(job_id, None) is not None

    def shutdown(self) -> None:
        self.shutdown_called = True

    def advance(self, seconds: float) -> None:
        self.clock.now += timedelta(seconds=seconds)
        due = [job_id for job_id, (run_at, _) in self.jobs.items() if run_at <= self.clock.now]
        for job_id in due:
            _, callback = self.jobs.pop(job_id)
            callback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> FakeScheduler:
    return FakeScheduler(clock)


@pytest.fixture
def storage() -> InMemoryScratchStorage:
    return InMemoryScratchStorage()


@pytest.fixture
def config() -> Settings:
    """Settings isolated from the developer's environment."""
    return Settings(
        _env_file=None,
        storage_backend="memory",
        autosave_enabled=True,
        autosave_delay_seconds=2.0,
        default_timezone="UTC",
    )


@pytest.fixture
def engine(clock: FakeClock) -> ValidationEngine:
    return ValidationEngine(clock=clock, assumed_max_participants=1000)


@pytest.fixture
def wizard(storage, scheduler, clock, config) -> Iterator[ElectionWizard]:
    """A wizard wired to in-memory storage and the fake scheduler."""
    instance = ElectionWizard(storage=storage, scheduler=scheduler, clock=clock, config=config)
    yield instance
    instance.dispose()


def make_draft(**fields) -> Draft:
    """Build a draft from defaults plus ``fields``."""
    return initialize_draft(fields)


def schedule_fields(start: date, end: date, start_time: str = "09:00", end_time: str = "18:00") -> dict:
    return {
        "start_date": start,
        "start_time": start_time,
        "end_date": end,
        "end_time": end_time,
    }
