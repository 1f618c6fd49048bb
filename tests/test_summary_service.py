"""Preview summary and URL suggestion tests."""

from __future__ import annotations

from datetime import date, timedelta

from conftest import NOW, TOMORROW, make_draft, schedule_fields

from election_wizard.schemas.draft import Question
from election_wizard.services.summary_service import build_summary, slugify, suggest_custom_urls


def test_summary_reflects_draft() -> None:
    """Summary sections mirror the draft and status inputs."""
    draft = make_draft(
        title="Annual board election",
        topic_image_url="https://cdn.example.com/board.png",
        permission_to_vote="country_specific",
        countries=["FR", "DE"],
        custom_voting_url="board-2026",
        questions=[Question(question_text="Who?"), Question(question_text="When?")],
        **schedule_fields(TOMORROW, TOMORROW + timedelta(days=6), start_time="09:00", end_time="10:00"),
    )
    summary = build_summary(
        draft,
        errors={},
        warnings={"title": "Consider adding more detail to your title"},
        completion=93,
        publish_ready=True,
        last_saved=NOW - timedelta(minutes=3),
        now=NOW,
    )

    assert summary.basic_info.title == "Annual board election"
    assert summary.basic_info.has_media is True
    assert summary.basic_info.duration_days == 7
    assert summary.configuration.country_count == 2
    assert summary.configuration.permission_type == "country_specific"
    assert summary.content.question_count == 2
    assert summary.content.has_custom_branding is True
    assert summary.status.completion_percentage == 93
    assert summary.status.has_errors is False
    assert summary.status.has_warnings is True
    assert summary.status.last_saved_label == "3m"


def test_summary_without_dates_or_save() -> None:
    """Missing dates leave the duration unset; no save reads as never."""
    summary = build_summary(
        make_draft(),
        errors={"title": "Title is required"},
        warnings={},
        completion=20,
        publish_ready=False,
        last_saved=None,
        now=NOW,
    )
    assert summary.basic_info.duration_days is None
    assert summary.basic_info.has_media is False
    assert summary.status.has_errors is True
    assert summary.status.last_saved_label == "never"


def test_slugify() -> None:
    """Titles become lowercase hyphenated slugs without punctuation."""
    assert slugify("  Annual Board Election: 2026! ") == "annual-board-election-2026"
    assert slugify("a -- b") == "a-b"
    assert len(slugify("word " * 30)) <= 40
    assert not slugify("word " * 30).endswith("-")


def test_suggest_custom_urls() -> None:
    """Suggestions combine the slug with the current year and month."""
    assert suggest_custom_urls("Board Vote", date(2026, 3, 1)) == [
        "board-vote",
        "board-vote-2026",
        "board-vote-2026-03",
        "board-vote-election",
        "board-vote-vote",
        "vote-board-vote",
    ]


def test_suggest_custom_urls_empty_title() -> None:
    """No usable title means no suggestions."""
    assert suggest_custom_urls("", date(2026, 3, 1)) == []
    assert suggest_custom_urls("!!!", date(2026, 3, 1)) == []
