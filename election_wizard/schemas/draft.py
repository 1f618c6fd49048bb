"""Election draft schemas."""

from __future__ import annotations

from datetime import date, time
from enum import StrEnum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from election_wizard.config import settings


class VotingType(StrEnum):
    PLURALITY = "plurality"
    RANKED_CHOICE = "ranked_choice"
    APPROVAL = "approval"


class PermissionScope(StrEnum):
    WORLD_CITIZENS = "world_citizens"
    REGISTERED_MEMBERS = "registered_members"
    COUNTRY_SPECIFIC = "country_specific"


class AuthMethod(StrEnum):
    PASSKEY = "passkey"
    OAUTH = "oauth"
    MAGIC_LINK = "magic_link"
    EMAIL_PASSWORD = "email_password"


class QuestionType(StrEnum):
    MULTIPLE_CHOICE = "multiple_choice"
    IMAGE_BASED = "image_based"
    COMPARISON = "comparison"
    OPEN_ANSWER = "open_answer"


# (minimum, maximum) answer counts per choice-type question.
ANSWER_LIMITS: dict[QuestionType, tuple[int, int]] = {
    QuestionType.MULTIPLE_CHOICE: (2, 100),
    QuestionType.IMAGE_BASED: (2, 50),
    QuestionType.COMPARISON: (2, 20),
}

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


def _new_id() -> str:
    return uuid4().hex


class Answer(BaseModel):
    """One answer option of a question."""

    model_config = _MODEL_CONFIG

    id: str = Field(default_factory=_new_id)
    text: str = ""
    image_url: str | None = None


class Question(BaseModel):
    """A ballot question with its answer options."""

    model_config = _MODEL_CONFIG

    id: str = Field(default_factory=_new_id)
    question_text: str = ""
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    is_required: bool = True
    question_image_url: str | None = None
    answers: tuple[Answer, ...] = ()

    @property
    def is_choice(self) -> bool:
        return self.question_type in ANSWER_LIMITS


class BrandColors(BaseModel):
    """Voting page colour palette."""

    model_config = _MODEL_CONFIG

    primary: str = "#3B82F6"
    secondary: str = "#64748B"
    accent: str = "#10B981"
    background: str = "#FFFFFF"
    text: str = "#1F2937"


class Draft(BaseModel):
    """Election configuration under construction.

    Carries no policy constraints; the validation service decides what is
    acceptable. Instances are immutable and replaced on every merge.
    """

    model_config = _MODEL_CONFIG

    # Basic information
    title: str = ""
    description: str = ""
    topic_image_url: str = ""
    topic_video_url: str = ""
    logo_branding_url: str = ""

    # Scheduling
    start_date: date | None = None
    start_time: time = time(9, 0)
    end_date: date | None = None
    end_time: time = time(18, 0)
    timezone: str = Field(default_factory=lambda: settings.default_timezone)

    # Voting configuration
    voting_type: VotingType | None = VotingType.PLURALITY
    permission_to_vote: PermissionScope | None = PermissionScope.WORLD_CITIZENS
    is_paid: bool = False
    participation_fee: float | None = 0.0

    # Country selection
    is_country_specific: bool = False
    countries: tuple[str, ...] = ()

    # Access control
    biometric_required: bool = False
    auth_method: AuthMethod = AuthMethod.PASSKEY
    allow_oauth: bool = True
    allow_magic_link: bool = True
    allow_email_password: bool = True

    # Lottery
    is_lotterized: bool = False
    reward_amount: float | None = 0.0
    winner_count: int | None = 1

    # Results control
    show_live_results: bool = False
    allow_vote_editing: bool = False

    # Branding
    custom_voting_url: str = ""
    custom_css: str = ""
    brand_colors: BrandColors = Field(default_factory=BrandColors)

    # Multi-language
    primary_language: str = "en"
    supports_multilang: bool = False

    questions: tuple[Question, ...] = ()


_FIELD_NAMES: dict[str, str] = {}
for _name, _info in Draft.model_fields.items():
    _FIELD_NAMES[_name] = _name
    if _info.alias:
        _FIELD_NAMES[_info.alias] = _name


def resolve_field_name(key: str) -> str | None:
    """Map a snake_case or camelCase key to the Draft attribute name."""
    return _FIELD_NAMES.get(str(key))
