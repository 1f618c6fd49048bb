"""Wizard step table and navigation rules."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from election_wizard.schemas.draft import Draft
from election_wizard.schemas.validation import StepTransition, ValidationResult
from election_wizard.services.validation_service import FieldKey, ValidationEngine
from election_wizard.utils.errors import UnknownStepError

logger = logging.getLogger(__name__)

FIRST_STEP = 1
LAST_STEP = 6

STEP_FIELDS: dict[int, tuple[FieldKey, ...]] = {
    1: (FieldKey.TITLE, FieldKey.DESCRIPTION, FieldKey.START_DATE, FieldKey.END_DATE),
    2: (FieldKey.VOTING_TYPE, FieldKey.PERMISSION_TO_VOTE, FieldKey.PARTICIPATION_FEE),
    3: (FieldKey.COUNTRIES,),
    4: (FieldKey.AUTH_METHOD, FieldKey.BIOMETRIC_REQUIRED),
    5: (FieldKey.CUSTOM_VOTING_URL, FieldKey.REWARD_AMOUNT, FieldKey.WINNER_COUNT),
    6: (FieldKey.QUESTIONS,),
}

STEP_TITLES: dict[int, str] = {
    1: "Basic setup",
    2: "Voting configuration",
    3: "Country selection",
    4: "Access control",
    5: "Monetization, lottery and branding",
    6: "Questions",
}

BLOCKED_MESSAGE = "Please fix the errors in this step before continuing"


def step_fields(step: int) -> tuple[FieldKey, ...]:
    """Return the fields gated by ``step``."""
    if step not in STEP_FIELDS:
        raise UnknownStepError(step)
    return STEP_FIELDS[step]


def step_errors(step: int, errors: Mapping[str, str]) -> dict[str, str]:
    """Errors that belong to the fields of ``step``, composite keys included."""
    fields = [field.value for field in step_fields(step)]
    return {
        key: message
        for key, message in errors.items()
        if any(key == field or key.startswith(f"{field}_") for field in fields)
    }


class StepGate:
    """Decides whether the wizard may leave a step."""

    def __init__(self, validator: ValidationEngine) -> None:
        self.validator = validator

    def check(
        self,
        step: int,
        draft: Draft,
        errors: Mapping[str, str] | None = None,
        warnings: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """Revalidate the step's fields on top of the existing maps."""
        return self.validator.validate_many(step_fields(step), draft, errors, warnings)

    def can_leave_step(self, step: int, draft: Draft) -> bool:
        """True when none of the step's fields carries an error; warnings never block."""
        return not step_errors(step, self.check(step, draft).errors)

    def advance(
        self,
        step: int,
        draft: Draft,
        errors: Mapping[str, str] | None = None,
        warnings: Mapping[str, str] | None = None,
    ) -> StepTransition:
        """Move to the next step, or stay put when the current one has errors."""
        validation = self.check(step, draft, errors, warnings)
        blocking = step_errors(step, validation.errors)
        if blocking:
            logger.debug("Step %s blocked by %s", step, sorted(blocking))
            return StepTransition(
                step=step,
                blocked=True,
                message=BLOCKED_MESSAGE,
                validation=validation,
            )
        next_step = step + 1 if step < LAST_STEP else step
        return StepTransition(step=next_step, validation=validation)

    @staticmethod
    def retreat(step: int) -> int:
        """Go back one step; never validated."""
        step_fields(step)
        return max(FIRST_STEP, step - 1)
