"""Preview summary and custom URL suggestions."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime

from election_wizard.schemas.draft import Draft
from election_wizard.schemas.summary import (
    BasicInfoSummary,
    ConfigurationSummary,
    ContentSummary,
    FormSummary,
    StatusSummary,
)
from election_wizard.services.validation_service import schedule_window
from election_wizard.utils.time import humanize_relative_time

SLUG_MAX_LENGTH = 40


def build_summary(
    draft: Draft,
    errors: Mapping[str, str],
    warnings: Mapping[str, str],
    completion: int,
    publish_ready: bool,
    last_saved: datetime | None,
    now: datetime,
) -> FormSummary:
    """Collect what the preview step shows about ``draft``."""
    window = schedule_window(draft)
    return FormSummary(
        basic_info=BasicInfoSummary(
            title=draft.title,
            description=draft.description,
            has_media=bool(
                draft.topic_image_url or draft.topic_video_url or draft.logo_branding_url
            ),
            duration_days=window.whole_days() if window is not None else None,
        ),
        configuration=ConfigurationSummary(
            voting_type=draft.voting_type,
            permission_type=draft.permission_to_vote,
            country_count=len(draft.countries),
            is_paid=draft.is_paid,
            participation_fee=draft.participation_fee,
            is_lotterized=draft.is_lotterized,
            reward_amount=draft.reward_amount,
            winner_count=draft.winner_count,
            biometric_required=draft.biometric_required,
            auth_method=draft.auth_method,
        ),
        content=ContentSummary(
            question_count=len(draft.questions),
            has_custom_branding=bool(draft.custom_css or draft.custom_voting_url),
            supports_multilang=draft.supports_multilang,
        ),
        status=StatusSummary(
            completion_percentage=completion,
            is_ready_for_publish=publish_ready,
            has_errors=bool(errors),
            has_warnings=bool(warnings),
            last_saved=last_saved,
            last_saved_label=humanize_relative_time(last_saved, now=now),
        ),
    )


def slugify(title: str) -> str:
    slug = title.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")[:SLUG_MAX_LENGTH].rstrip("-")


def suggest_custom_urls(title: str, today: date) -> list[str]:
    """Offer custom voting URL candidates derived from the election title."""
    base = slugify(title or "")
    if not base:
        return []
    month = f"{today.month:02d}"
    return [
        base,
        f"{base}-{today.year}",
        f"{base}-{today.year}-{month}",
        f"{base}-election",
        f"{base}-vote",
        f"vote-{base}",
    ]
