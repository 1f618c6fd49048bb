"""Election wizard engine owned by the presentation layer.

One instance per wizard session: create it on wizard entry, call
``dispose()`` on exit so no autosave fires after the owner is gone.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from election_wizard.config import Settings, settings
from election_wizard.jobs.scheduler import AsyncIODebounceScheduler, Scheduler
from election_wizard.schemas.autosave import LoadedAutosave
from election_wizard.schemas.draft import Draft
from election_wizard.schemas.summary import FormSummary
from election_wizard.schemas.validation import StepTransition, ValidationResult
from election_wizard.services.autosave_service import AutosaveService
from election_wizard.services.completion_service import (
    CompletionScorer,
    PublishBlocker,
    PublishGate,
)
from election_wizard.services.draft_store import DraftSeed, DraftStore
from election_wizard.services.scratch_storage import ScratchStorage, build_scratch_storage
from election_wizard.services.step_gate import FIRST_STEP, STEP_TITLES, StepGate
from election_wizard.services.summary_service import build_summary, suggest_custom_urls
from election_wizard.services.validation_service import ValidationEngine
from election_wizard.utils.errors import EngineDisposedError
from election_wizard.utils.time import now_utc

logger = logging.getLogger(__name__)


class ElectionWizard:
    """Caller-facing API of the election configuration wizard."""

    def __init__(
        self,
        storage: ScratchStorage,
        scheduler: Scheduler,
        seed: DraftSeed = None,
        clock: Callable[[], datetime] = now_utc,
        config: Settings | None = None,
    ) -> None:
        config = config or settings
        self.clock = clock
        self.validator = ValidationEngine(
            clock=clock,
            assumed_max_participants=config.lottery_assumed_max_participants,
        )
        self.autosave = AutosaveService(storage, scheduler, clock=clock, config=config)
        self.store = DraftStore(
            self.validator,
            seed=seed,
            on_change=self.autosave.schedule,
            on_reset=self.autosave.cancel_pending,
        )
        self.step_gate = StepGate(self.validator)
        self.scorer = CompletionScorer()
        self.publish_gate = PublishGate(clock=clock)
        self.scheduler = scheduler
        self.current_step = FIRST_STEP
        self.disposed = False

    def __enter__(self) -> ElectionWizard:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    # Read access

    @property
    def draft(self) -> Draft:
        return self.store.draft

    @property
    def errors(self) -> dict[str, str]:
        return self.store.errors

    @property
    def warnings(self) -> dict[str, str]:
        return self.store.warnings

    @property
    def is_dirty(self) -> bool:
        return self.store.is_dirty

    @property
    def last_saved(self) -> datetime | None:
        return self.autosave.last_saved

    @property
    def completion_score(self) -> int:
        return self.scorer.score(self.store.draft)

    @property
    def publish_ready(self) -> bool:
        return self.publish_gate.evaluate(self.store.draft, self.store.errors)

    @property
    def publish_blockers(self) -> list[PublishBlocker]:
        return self.publish_gate.blocking_reasons(self.store.draft, self.store.errors)

    # Mutations

    def apply(self, updates: Mapping[str, Any], skip_validation: bool = False) -> Draft:
        self._ensure_active()
        return self.store.apply(updates, skip_validation=skip_validation)

    def apply_batch(self, updates_list: Iterable[Mapping[str, Any]]) -> Draft:
        self._ensure_active()
        return self.store.apply_batch(updates_list)

    def reset(self, new_seed: DraftSeed = None) -> Draft:
        """Discard edits, return to step 1 and cancel any pending autosave."""
        self._ensure_active()
        self.current_step = FIRST_STEP
        return self.store.reset(new_seed)

    def validate_all(self) -> ValidationResult:
        self._ensure_active()
        return self.store.validate_all()

    # Navigation

    def advance(self) -> StepTransition:
        self._ensure_active()
        transition = self.step_gate.advance(
            self.current_step,
            self.store.draft,
            self.store.errors,
            self.store.warnings,
        )
        self.store.store_result(transition.validation)
        if transition.blocked:
            logger.info(
                "Cannot leave step %s (%s): %s",
                self.current_step,
                STEP_TITLES[self.current_step],
                transition.message,
            )
        self.current_step = transition.step
        return transition

    def retreat(self) -> int:
        self._ensure_active()
        self.current_step = self.step_gate.retreat(self.current_step)
        return self.current_step

    # Autosave

    def load_autosave(self) -> LoadedAutosave | None:
        return self.autosave.load()

    def clear_autosave(self) -> None:
        self.autosave.clear()

    def set_autosave_enabled(self, enabled: bool) -> None:
        self.autosave.enabled = enabled

    # Preview helpers

    def summary(self) -> FormSummary:
        return build_summary(
            self.store.draft,
            self.store.errors,
            self.store.warnings,
            completion=self.completion_score,
            publish_ready=self.publish_ready,
            last_saved=self.autosave.last_saved,
            now=self.clock(),
        )

    def suggest_custom_urls(self) -> list[str]:
        return suggest_custom_urls(self.store.draft.title, self.clock().date())

    # Lifecycle

    def dispose(self) -> None:
        """Cancel pending persistence and release the scheduler."""
        if self.disposed:
            return
        self.autosave.cancel_pending()
        self.scheduler.shutdown()
        self.disposed = True
        logger.debug("Wizard disposed")

    def _ensure_active(self) -> None:
        if self.disposed:
            raise EngineDisposedError()


def create_wizard(
    seed: DraftSeed = None,
    config: Settings | None = None,
    clock: Callable[[], datetime] = now_utc,
) -> ElectionWizard:
    """Build a wizard with storage and scheduler taken from settings."""
    config = config or settings
    return ElectionWizard(
        storage=build_scratch_storage(config),
        scheduler=AsyncIODebounceScheduler(),
        seed=seed,
        clock=clock,
        config=config,
    )
