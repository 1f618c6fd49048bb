"""Draft store merge and reset tests."""

from __future__ import annotations

from datetime import date

import pytest
from conftest import TOMORROW

from election_wizard.schemas.draft import Draft, PermissionScope
from election_wizard.services.draft_store import DraftStore, initialize_draft
from election_wizard.services.validation_service import ValidationEngine
from election_wizard.utils.errors import InvalidInputError


@pytest.fixture
def changes() -> list[Draft]:
    return []


@pytest.fixture
def resets() -> list[bool]:
    return []


@pytest.fixture
def store(engine: ValidationEngine, changes: list[Draft], resets: list[bool]) -> DraftStore:
    return DraftStore(engine, on_change=changes.append, on_reset=lambda: resets.append(True))


def test_initialize_applies_defaults_and_seed() -> None:
    """Seeds override defaults and accept camelCase keys."""
    draft = initialize_draft({"title": "Board vote", "permissionToVote": "country_specific"})
    assert draft.title == "Board vote"
    assert draft.permission_to_vote == PermissionScope.COUNTRY_SPECIFIC
    assert draft.start_time.hour == 9
    assert draft.questions == ()


def test_apply_returns_new_draft_without_touching_previous(store: DraftStore) -> None:
    """Merges never mutate the prior draft object."""
    before = store.draft
    after = store.apply({"title": "Annual board election"})
    assert after is not before
    assert before.title == ""
    assert after.title == "Annual board election"
    assert store.draft is after


def test_apply_marks_dirty_validates_and_notifies(store: DraftStore, changes: list[Draft]) -> None:
    """A merge sets the dirty flag, validates changed keys, and notifies observers."""
    assert store.is_dirty is False
    draft = store.apply({"title": "ab"})
    assert store.is_dirty is True
    assert "title" in store.errors
    assert changes == [draft]


def test_apply_skip_validation_leaves_maps_alone(store: DraftStore, changes: list[Draft]) -> None:
    """Skipping validation still merges and schedules persistence."""
    store.apply({"title": "ab"}, skip_validation=True)
    assert store.errors == {}
    assert len(changes) == 1


def test_apply_revalidates_dependent_fields(store: DraftStore) -> None:
    """Toggling a flag re-runs the rules that depend on it."""
    store.apply({"participation_fee": 0})
    assert "participation_fee" not in store.errors

    store.apply({"is_paid": True})
    assert "participation_fee" in store.errors


def test_apply_rejects_unknown_fields(store: DraftStore, changes: list[Draft]) -> None:
    """Unknown keys raise and leave state untouched."""
    before = store.draft
    with pytest.raises(InvalidInputError):
        store.apply({"not_a_field": 1})
    assert store.draft is before
    assert store.is_dirty is False
    assert changes == []


def test_apply_rejects_malformed_values(store: DraftStore) -> None:
    """Values that cannot be coerced to the field type are input errors."""
    with pytest.raises(InvalidInputError):
        store.apply({"start_date": "not a date"})


def test_apply_coerces_iso_strings(store: DraftStore) -> None:
    """ISO strings from the presentation layer become dates."""
    draft = store.apply({"startDate": TOMORROW.isoformat()})
    assert draft.start_date == TOMORROW


def test_apply_batch_validates_once_and_notifies_once(
    store: DraftStore, engine: ValidationEngine, changes: list[Draft], monkeypatch
) -> None:
    """Batches fold all updates into one draft with one validation pass."""
    calls: list[list[str]] = []
    original = engine.validate_many

    def counting(keys, draft, errors=None, warnings=None):
        keys = list(keys)
        calls.append(keys)
        return original(keys, draft, errors, warnings)

    monkeypatch.setattr(engine, "validate_many", counting)

    draft = store.apply_batch(
        [
            {"permission_to_vote": "country_specific"},
            {"countries": []},
            {"title": "Annual board election"},
        ]
    )
    assert len(calls) == 1
    assert {"permission_to_vote", "countries", "title"} <= set(calls[0])
    assert "countries" in store.errors
    assert changes == [draft]
    assert draft.title == "Annual board election"


def test_apply_batch_later_updates_win(store: DraftStore) -> None:
    """When updates overlap the last one takes effect."""
    draft = store.apply_batch([{"title": "First title"}, {"title": "Second title"}])
    assert draft.title == "Second title"


def test_apply_batch_empty_is_noop(store: DraftStore, changes: list[Draft]) -> None:
    """An empty batch changes nothing."""
    before = store.draft
    assert store.apply_batch([]) is before
    assert store.is_dirty is False
    assert changes == []


def test_reset_restores_seed_and_clears_state(engine: ValidationEngine, resets: list[bool]) -> None:
    """Reset returns to defaults plus the original seed and clears maps."""
    store = DraftStore(
        engine,
        seed={"title": "Seeded election"},
        on_reset=lambda: resets.append(True),
    )
    store.apply({"title": "ab", "end_date": date(2026, 1, 1)})
    assert store.errors

    draft = store.reset()
    assert draft.title == "Seeded election"
    assert draft.end_date is None
    assert store.errors == {}
    assert store.warnings == {}
    assert store.is_dirty is False
    assert resets == [True]


def test_reset_with_new_seed(store: DraftStore) -> None:
    """A new seed is layered over defaults."""
    draft = store.reset({"description": "Replacement description for the draft"})
    assert draft.description == "Replacement description for the draft"
    assert draft.title == ""


def test_initialize_replaces_seed(store: DraftStore) -> None:
    """Initialize starts over from a different record, e.g. for edit mode."""
    store.apply({"title": "Draft one"})
    draft = store.initialize({"title": "Existing election"})
    assert draft.title == "Existing election"
    assert store.is_dirty is False
    assert store.reset().title == "Existing election"


def test_collections_cannot_be_changed_in_place(store: DraftStore) -> None:
    """List inputs are stored as tuples, so edits must go through apply."""
    draft = store.apply(
        {
            "permission_to_vote": "country_specific",
            "countries": [],
            "questions": [{"questionText": "Who?", "answers": [{"text": "Ann"}]}],
        }
    )
    assert draft.countries == ()
    assert isinstance(draft.questions[0].answers, tuple)
    with pytest.raises(AttributeError):
        draft.countries.append("US")
    with pytest.raises(AttributeError):
        draft.questions[0].answers.append({"text": "Bob"})

    updated = store.apply({"countries": ["US"]})
    assert updated.countries == ("US",)
    assert draft.countries == ()
    assert "countries" not in store.errors
