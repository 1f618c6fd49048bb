"""Field and cross-field validation rules for election drafts.

Rules are registered per field in ``FIELD_RULES``. Each registration names the
draft attributes the rule reads, so a change to ``start_time`` re-runs the
``start_date`` and ``end_date`` rules without the caller knowing about it.
Rules never raise for policy violations; they return messages as data.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from election_wizard.config import settings
from election_wizard.schemas.draft import (
    ANSWER_LIMITS,
    Draft,
    PermissionScope,
    Question,
    QuestionType,
    resolve_field_name,
)
from election_wizard.schemas.validation import ValidationResult
from election_wizard.utils.time import ScheduleWindow, combine_local, now_utc, resolve_timezone


class FieldKey(StrEnum):
    TITLE = "title"
    DESCRIPTION = "description"
    TOPIC_IMAGE_URL = "topic_image_url"
    START_DATE = "start_date"
    END_DATE = "end_date"
    TIMEZONE = "timezone"
    VOTING_TYPE = "voting_type"
    PERMISSION_TO_VOTE = "permission_to_vote"
    PARTICIPATION_FEE = "participation_fee"
    COUNTRIES = "countries"
    AUTH_METHOD = "auth_method"
    BIOMETRIC_REQUIRED = "biometric_required"
    CUSTOM_VOTING_URL = "custom_voting_url"
    REWARD_AMOUNT = "reward_amount"
    WINNER_COUNT = "winner_count"
    QUESTIONS = "questions"


SCHEDULE_CONSISTENCY_KEY = "date_consistency"
LOTTERY_ECONOMICS_KEY = "lottery_economics"
CROSS_FIELD_KEYS = (SCHEDULE_CONSISTENCY_KEY, LOTTERY_ECONOMICS_KEY)

# Draft attributes each cross-field check reads.
CROSS_FIELD_READS: dict[str, frozenset[str]] = {
    SCHEDULE_CONSISTENCY_KEY: frozenset(
        {"start_date", "start_time", "end_date", "end_time", "timezone"}
    ),
    LOTTERY_ECONOMICS_KEY: frozenset(
        {"is_paid", "is_lotterized", "participation_fee", "reward_amount", "winner_count"}
    ),
}

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 500
TITLE_SHORT_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 5000
DESCRIPTION_SHORT_LENGTH = 20
START_SOON = timedelta(hours=1)
MIN_DURATION = timedelta(hours=1)
MAX_DURATION = timedelta(hours=8760)
SHORT_DURATION = timedelta(hours=24)
HIGH_FEE = 1000
MAX_REWARD = 1_000_000
MIN_WINNERS = 1
MAX_WINNERS = 100
MANY_WINNERS = 50
MANY_COUNTRIES = 50
URL_MIN_LENGTH = 3
URL_MAX_LENGTH = 200
URL_CHARSET = re.compile(r"^[A-Za-z0-9_-]+$")

RuleCheck = Callable[[Any, Draft, datetime], ValidationResult]


@dataclass(frozen=True)
class FieldRule:
    key: FieldKey
    check: RuleCheck
    reads: frozenset[str]


class RuleRegistry:
    """Maps a field key to its validator."""

    def __init__(self) -> None:
        self._rules: dict[FieldKey, FieldRule] = {}

    def register(self, key: FieldKey, *, reads: Iterable[str] = ()) -> Callable[[RuleCheck], RuleCheck]:
        """Register ``check`` for ``key``; ``reads`` lists other attributes it depends on."""

        def decorator(check: RuleCheck) -> RuleCheck:
            self._rules[key] = FieldRule(key=key, check=check, reads=frozenset({key.value, *reads}))
            return check

        return decorator

    def get(self, key: str) -> FieldRule | None:
        try:
            return self._rules.get(FieldKey(key))
        except ValueError:
            return None

    def keys(self) -> list[FieldKey]:
        return list(self._rules)

    def affected_by(self, changed: Iterable[str]) -> list[str]:
        """Return rule keys to re-run after ``changed`` attributes were merged."""
        names = [resolve_field_name(key) or str(key) for key in changed]
        affected = list(names)
        affected.extend(
            rule.key.value for rule in self._rules.values() if rule.reads.intersection(names)
        )
        return list(dict.fromkeys(affected))


FIELD_RULES = RuleRegistry()


def _ok() -> ValidationResult:
    return ValidationResult()


def _error(key: str, message: str) -> ValidationResult:
    return ValidationResult(errors={key: message})


def _warning(key: str, message: str) -> ValidationResult:
    return ValidationResult(warnings={key: message})


def _is_missing_amount(value: float | None) -> bool:
    return value is None or value <= 0


def schedule_window(draft: Draft) -> ScheduleWindow | None:
    """Return the full date+time voting window, or None when a date is missing."""
    if draft.start_date is None or draft.end_date is None:
        return None
    return ScheduleWindow(
        start=combine_local(draft.start_date, draft.start_time, draft.timezone),
        end=combine_local(draft.end_date, draft.end_time, draft.timezone),
    )


@FIELD_RULES.register(FieldKey.TITLE)
def _check_title(value: str | None, draft: Draft, now: datetime) -> ValidationResult:
    if not value or not value.strip():
        return _error("title", "Title is required")
    if len(value) < TITLE_MIN_LENGTH:
        return _error("title", f"Title must be at least {TITLE_MIN_LENGTH} characters")
    if len(value) > TITLE_MAX_LENGTH:
        return _error("title", f"Title cannot exceed {TITLE_MAX_LENGTH} characters")
    if len(value) < TITLE_SHORT_LENGTH:
        return _warning("title", "Consider adding more detail to your title")
    return _ok()


@FIELD_RULES.register(FieldKey.DESCRIPTION)
def _check_description(value: str | None, draft: Draft, now: datetime) -> ValidationResult:
    if value and len(value) > DESCRIPTION_MAX_LENGTH:
        return _error(
            "description", f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"
        )
    if value and len(value) < DESCRIPTION_SHORT_LENGTH:
        return _warning(
            "description",
            "Consider adding more detail to help voters understand the election",
        )
    return _ok()


@FIELD_RULES.register(FieldKey.START_DATE, reads=("start_time", "timezone"))
def _check_start_date(value: Any, draft: Draft, now: datetime) -> ValidationResult:
    if value is None:
        return _error("start_date", "Start date is required")
    start = combine_local(value, draft.start_time, draft.timezone)
    if start <= now:
        return _error("start_date", "Start date/time must be in the future")
    if start < now + START_SOON:
        return _warning(
            "start_date", "Starting very soon - ensure you have enough time to set up"
        )
    return _ok()


@FIELD_RULES.register(
    FieldKey.END_DATE, reads=("start_date", "start_time", "end_time", "timezone")
)
def _check_end_date(value: Any, draft: Draft, now: datetime) -> ValidationResult:
    if value is None:
        return _error("end_date", "End date is required")
    if draft.start_date is None:
        return _ok()

    window = ScheduleWindow(
        start=combine_local(draft.start_date, draft.start_time, draft.timezone),
        end=combine_local(value, draft.end_time, draft.timezone),
    )
    if not window.is_ordered:
        return _error("end_date", "End date/time must be after start date/time")
    if window.duration < MIN_DURATION:
        return _error("end_date", "Election must run for at least 1 hour")
    if window.duration > MAX_DURATION:
        return _error("end_date", "Election cannot run longer than 1 year")
    if window.duration < SHORT_DURATION:
        return _warning(
            "end_date",
            "Short election duration - consider extending for better participation",
        )
    return _ok()


@FIELD_RULES.register(FieldKey.TIMEZONE)
def _check_timezone(value: str | None, draft: Draft, now: datetime) -> ValidationResult:
    try:
        resolve_timezone(value)
    except ValueError:
        return _error("timezone", f"Unknown timezone: {value}")
    return _ok()


@FIELD_RULES.register(FieldKey.PARTICIPATION_FEE, reads=("is_paid",))
def _check_participation_fee(value: float | None, draft: Draft, now: datetime) -> ValidationResult:
    if not draft.is_paid:
        return _ok()
    if _is_missing_amount(value):
        return _error(
            "participation_fee",
            "Participation fee must be greater than 0 for paid elections",
        )
    if value > HIGH_FEE:
        return _warning("participation_fee", "High participation fee may reduce voter turnout")
    return _ok()


@FIELD_RULES.register(FieldKey.REWARD_AMOUNT, reads=("is_lotterized",))
def _check_reward_amount(value: float | None, draft: Draft, now: datetime) -> ValidationResult:
    if not draft.is_lotterized:
        return _ok()
    if _is_missing_amount(value):
        return _error(
            "reward_amount",
            "Reward amount must be greater than 0 for lottery elections",
        )
    if value > MAX_REWARD:
        return _error("reward_amount", "Reward amount cannot exceed $1,000,000")
    return _ok()


@FIELD_RULES.register(FieldKey.WINNER_COUNT, reads=("is_lotterized",))
def _check_winner_count(value: int | None, draft: Draft, now: datetime) -> ValidationResult:
    if not draft.is_lotterized:
        return _ok()
    if value is None or value < MIN_WINNERS or value > MAX_WINNERS:
        return _error(
            "winner_count", f"Winner count must be between {MIN_WINNERS} and {MAX_WINNERS}"
        )
    if value > MANY_WINNERS:
        return _warning("winner_count", "Many winners may dilute individual prizes")
    return _ok()


@FIELD_RULES.register(FieldKey.COUNTRIES, reads=("permission_to_vote",))
def _check_countries(
    value: tuple[str, ...] | None, draft: Draft, now: datetime
) -> ValidationResult:
    if draft.permission_to_vote != PermissionScope.COUNTRY_SPECIFIC:
        return _ok()
    if not value:
        return _error(
            "countries",
            "At least one country must be selected for country-specific elections",
        )
    if len(value) > MANY_COUNTRIES:
        return _warning(
            "countries",
            "Many countries selected - consider using regional restrictions instead",
        )
    return _ok()


@FIELD_RULES.register(FieldKey.CUSTOM_VOTING_URL)
def _check_custom_voting_url(value: str | None, draft: Draft, now: datetime) -> ValidationResult:
    if not value:
        return _ok()
    if len(value) < URL_MIN_LENGTH:
        return _error(
            "custom_voting_url", f"Custom URL must be at least {URL_MIN_LENGTH} characters"
        )
    if len(value) > URL_MAX_LENGTH:
        return _error(
            "custom_voting_url", f"Custom URL cannot exceed {URL_MAX_LENGTH} characters"
        )
    if not URL_CHARSET.match(value):
        return _error(
            "custom_voting_url",
            "Custom URL can only contain letters, numbers, hyphens, and underscores",
        )
    if value[0] in "-_" or value[-1] in "-_":
        return _error(
            "custom_voting_url",
            "Custom URL cannot start or end with hyphens or underscores",
        )
    return _ok()


def _question_issues(index: int, question: Question) -> dict[str, str]:
    prefix = f"questions_{index}"
    number = index + 1
    errors: dict[str, str] = {}
    if not question.question_text.strip():
        errors[f"{prefix}_text"] = f"Question {number} text is required"
    if not question.is_choice:
        return errors

    minimum, maximum = ANSWER_LIMITS[question.question_type]
    if len(question.answers) < minimum:
        errors[f"{prefix}_answers"] = f"Question {number} needs at least {minimum} answer choices"
    elif len(question.answers) > maximum:
        errors[f"{prefix}_answers"] = f"Question {number} allows at most {maximum} answer choices"

    for position, answer in enumerate(question.answers):
        key = f"{prefix}_answers_{position}"
        if not answer.text.strip():
            errors[key] = f"Question {number} answer {position + 1} needs text"
        elif question.question_type == QuestionType.IMAGE_BASED and not answer.image_url:
            errors[key] = f"Question {number} answer {position + 1} needs an image"
    return errors


@FIELD_RULES.register(FieldKey.QUESTIONS)
def _check_questions(
    value: tuple[Question, ...] | None, draft: Draft, now: datetime
) -> ValidationResult:
    if not value:
        return _warning(
            "questions",
            "Consider adding questions to make your election more comprehensive",
        )
    errors: dict[str, str] = {}
    for index, question in enumerate(value):
        errors.update(_question_issues(index, question))
    return ValidationResult(errors=errors)


def _drop_key(issues: dict[str, str], key: str) -> None:
    prefix = f"{key}_"
    for existing in [k for k in issues if k == key or k.startswith(prefix)]:
        del issues[existing]


class ValidationEngine:
    """Pure validation over immutable drafts."""

    def __init__(
        self,
        clock: Callable[[], datetime] = now_utc,
        assumed_max_participants: int | None = None,
        registry: RuleRegistry = FIELD_RULES,
    ) -> None:
        self.clock = clock
        self.assumed_max_participants = (
            assumed_max_participants
            if assumed_max_participants is not None
            else settings.lottery_assumed_max_participants
        )
        self.registry = registry

    def validate_field(
        self,
        key: str,
        value: Any,
        draft: Draft,
        now: datetime | None = None,
    ) -> ValidationResult:
        """Run the rule registered for ``key``; unregistered keys have no issues."""
        name = resolve_field_name(key) or str(key)
        rule = self.registry.get(name)
        if rule is None:
            return _ok()
        return rule.check(value, draft, now or self.clock())

    def validate_many(
        self,
        keys: Iterable[str],
        draft: Draft,
        errors: Mapping[str, str] | None = None,
        warnings: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """Replace the entries of ``keys`` (and their composite keys) with fresh results."""
        merged_errors = dict(errors or {})
        merged_warnings = dict(warnings or {})
        now = self.clock()
        for key in dict.fromkeys(resolve_field_name(k) or str(k) for k in keys):
            if key in CROSS_FIELD_READS:
                result = self._cross_checks[key](draft)
            else:
                result = self.validate_field(key, getattr(draft, key, None), draft, now=now)
            _drop_key(merged_errors, key)
            _drop_key(merged_warnings, key)
            merged_errors.update(result.errors)
            merged_warnings.update(result.warnings)
        return ValidationResult(errors=merged_errors, warnings=merged_warnings)

    def validate_all(
        self,
        draft: Draft,
        errors: Mapping[str, str] | None = None,
        warnings: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """Validate every registered field, then the cross-field checks."""
        return self.validate_many([*self.registry.keys(), *CROSS_FIELD_KEYS], draft, errors, warnings)

    def cross_field(self, draft: Draft) -> ValidationResult:
        """Checks that span several inputs, reported under synthetic keys."""
        result = ValidationResult()
        for check in self._cross_checks.values():
            issues = check(draft)
            result.errors.update(issues.errors)
            result.warnings.update(issues.warnings)
        return result

    @property
    def _cross_checks(self) -> dict[str, Callable[[Draft], ValidationResult]]:
        return {
            SCHEDULE_CONSISTENCY_KEY: self._check_schedule_consistency,
            LOTTERY_ECONOMICS_KEY: self._check_lottery_economics,
        }

    def _check_schedule_consistency(self, draft: Draft) -> ValidationResult:
        window = schedule_window(draft)
        if window is not None and not window.is_ordered:
            return _error(SCHEDULE_CONSISTENCY_KEY, "End date/time must be after start date/time")
        return _ok()

    def _check_lottery_economics(self, draft: Draft) -> ValidationResult:
        if not (draft.is_lotterized and draft.is_paid):
            return _ok()
        total_reward = (draft.reward_amount or 0) * (draft.winner_count or 0)
        revenue_ceiling = (draft.participation_fee or 0) * self.assumed_max_participants
        if total_reward > revenue_ceiling:
            return _warning(LOTTERY_ECONOMICS_KEY, "Lottery rewards may exceed potential revenue")
        return _ok()

    def affected_keys(self, changed: Iterable[str]) -> list[str]:
        """Field rules and cross-field checks to re-run after ``changed`` were merged."""
        affected = self.registry.affected_by(changed)
        affected.extend(
            key for key, reads in CROSS_FIELD_READS.items() if reads.intersection(affected)
        )
        return list(dict.fromkeys(affected))
