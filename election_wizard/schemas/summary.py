"""Wizard preview summary schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from election_wizard.schemas.draft import AuthMethod, PermissionScope, VotingType


class BasicInfoSummary(BaseModel):
    title: str
    description: str
    has_media: bool
    duration_days: int | None = None


class ConfigurationSummary(BaseModel):
    voting_type: VotingType | None = None
    permission_type: PermissionScope | None = None
    country_count: int = 0
    is_paid: bool = False
    participation_fee: float | None = None
    is_lotterized: bool = False
    reward_amount: float | None = None
    winner_count: int | None = None
    biometric_required: bool = False
    auth_method: AuthMethod


class ContentSummary(BaseModel):
    question_count: int = 0
    has_custom_branding: bool = False
    supports_multilang: bool = False


class StatusSummary(BaseModel):
    completion_percentage: int
    is_ready_for_publish: bool
    has_errors: bool
    has_warnings: bool
    last_saved: datetime | None = None
    last_saved_label: str


class FormSummary(BaseModel):
    """Everything the preview step shows about the draft."""

    basic_info: BasicInfoSummary
    configuration: ConfigurationSummary
    content: ContentSummary
    status: StatusSummary
