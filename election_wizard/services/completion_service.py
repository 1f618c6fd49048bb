"""Completion scoring and publish readiness for election drafts."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum, StrEnum
from typing import Any

from election_wizard.schemas.draft import Draft, PermissionScope
from election_wizard.services.validation_service import schedule_window
from election_wizard.utils.time import now_utc

REQUIRED_FIELDS = ("title", "start_date", "end_date")
IMPORTANT_FIELDS = ("description", "voting_type", "permission_to_vote")
OPTIONAL_FIELDS = ("topic_image_url", "custom_voting_url", "questions")

# (fields, weight); weights sum to 1.
Tier = tuple[tuple[str, ...], float]
TIERS: tuple[Tier, ...] = (
    (REQUIRED_FIELDS, 0.6),
    (IMPORTANT_FIELDS, 0.3),
    (OPTIONAL_FIELDS, 0.1),
)


def is_filled(value: Any) -> bool:
    """Whether a draft value counts as provided."""
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return True


class CompletionScorer:
    """Weighted completion percentage over three field tiers."""

    def __init__(self, tiers: tuple[Tier, ...] = TIERS) -> None:
        self.tiers = tiers

    def score(self, draft: Draft) -> int:
        total = 0.0
        for fields, weight in self.tiers:
            filled = sum(1 for field in fields if is_filled(getattr(draft, field)))
            total += filled / len(fields) * weight
        return math.floor(total * 100 + 0.5)


class PublishBlocker(StrEnum):
    MISSING_REQUIRED_FIELDS = "missing_required_fields"
    INVALID_SCHEDULE = "invalid_schedule"
    HAS_ERRORS = "has_errors"
    COUNTRIES_REQUIRED = "countries_required"
    PARTICIPATION_FEE_REQUIRED = "participation_fee_required"
    REWARD_AMOUNT_REQUIRED = "reward_amount_required"


class PublishGate:
    """Final verdict on whether a draft may be submitted as a live election."""

    def __init__(self, clock: Callable[[], datetime] = now_utc) -> None:
        self.clock = clock

    def blocking_reasons(self, draft: Draft, errors: Mapping[str, str]) -> list[PublishBlocker]:
        reasons: list[PublishBlocker] = []
        if not all(is_filled(getattr(draft, field)) for field in REQUIRED_FIELDS):
            reasons.append(PublishBlocker.MISSING_REQUIRED_FIELDS)

        window = schedule_window(draft)
        if window is None or not window.starts_after(self.clock()) or not window.is_ordered:
            reasons.append(PublishBlocker.INVALID_SCHEDULE)

        if errors:
            reasons.append(PublishBlocker.HAS_ERRORS)
        if draft.permission_to_vote == PermissionScope.COUNTRY_SPECIFIC and not draft.countries:
            reasons.append(PublishBlocker.COUNTRIES_REQUIRED)
        if draft.is_paid and not (draft.participation_fee and draft.participation_fee > 0):
            reasons.append(PublishBlocker.PARTICIPATION_FEE_REQUIRED)
        if draft.is_lotterized and not (draft.reward_amount and draft.reward_amount > 0):
            reasons.append(PublishBlocker.REWARD_AMOUNT_REQUIRED)
        return reasons

    def evaluate(self, draft: Draft, errors: Mapping[str, str]) -> bool:
        return not self.blocking_reasons(draft, errors)
