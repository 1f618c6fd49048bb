"""Canonical in-memory draft state and its merge operations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from election_wizard.schemas.draft import Draft, resolve_field_name
from election_wizard.schemas.validation import ValidationResult
from election_wizard.services.validation_service import ValidationEngine
from election_wizard.utils.errors import InvalidInputError

logger = logging.getLogger(__name__)

DraftSeed = Draft | Mapping[str, Any] | None


def _normalize(updates: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in updates.items():
        name = resolve_field_name(key)
        if name is None:
            raise InvalidInputError(f"Unknown draft field: {key}")
        normalized[name] = value
    return normalized


def _seed_payload(seed: DraftSeed) -> dict[str, Any]:
    if seed is None:
        return {}
    if isinstance(seed, Draft):
        return seed.model_dump()
    return _normalize(seed)


def _build(payload: Mapping[str, Any]) -> Draft:
    try:
        return Draft.model_validate(dict(payload))
    except ValidationError as exc:
        detail = exc.errors()
        message = detail[0].get("msg", "Invalid draft value") if detail else "Invalid draft value"
        location = ".".join(str(part) for part in detail[0].get("loc", ())) if detail else ""
        raise InvalidInputError(f"{location}: {message}" if location else message) from exc


def initialize_draft(seed: DraftSeed = None) -> Draft:
    """Return defaults merged with an optional seed (edit mode)."""
    return _build(_seed_payload(seed))


class DraftStore:
    """Owns the current draft plus its error and warning maps.

    Every merge produces a new ``Draft``; the previous object is never touched,
    so a snapshot scheduled against it stays consistent.
    """

    def __init__(
        self,
        validator: ValidationEngine,
        seed: DraftSeed = None,
        on_change: Callable[[Draft], None] | None = None,
        on_reset: Callable[[], None] | None = None,
    ) -> None:
        self.validator = validator
        self.on_change = on_change
        self.on_reset = on_reset
        self._seed = _seed_payload(seed)
        self.draft = initialize_draft(self._seed)
        self.errors: dict[str, str] = {}
        self.warnings: dict[str, str] = {}
        self.is_dirty = False

    def initialize(self, seed: DraftSeed = None) -> Draft:
        """Replace state with defaults merged with ``seed``."""
        self._seed = _seed_payload(seed)
        self.draft = initialize_draft(self._seed)
        self._clear()
        return self.draft

    def apply(self, updates: Mapping[str, Any], skip_validation: bool = False) -> Draft:
        """Merge a partial update, revalidate the touched fields, and notify."""
        normalized = _normalize(updates)
        draft = _build({**self.draft.model_dump(), **normalized})
        self._commit(draft, normalized.keys(), skip_validation)
        return draft

    def apply_batch(self, updates_list: Iterable[Mapping[str, Any]]) -> Draft:
        """Merge several partial updates at once with a single validation pass."""
        merged: dict[str, Any] = {}
        for updates in updates_list:
            merged.update(_normalize(updates))
        if not merged:
            return self.draft

        draft = _build({**self.draft.model_dump(), **merged})
        self._commit(draft, merged.keys(), skip_validation=False)
        return draft

    def reset(self, new_seed: DraftSeed = None) -> Draft:
        """Return to defaults plus the original seed, overlaid with ``new_seed``."""
        self.draft = initialize_draft({**self._seed, **_seed_payload(new_seed)})
        self._clear()
        if self.on_reset is not None:
            self.on_reset()
        logger.debug("Draft reset")
        return self.draft

    def revalidate(self, keys: Iterable[str]) -> ValidationResult:
        """Refresh the stored maps for ``keys``."""
        result = self.validator.validate_many(keys, self.draft, self.errors, self.warnings)
        self.store_result(result)
        return result

    def validate_all(self) -> ValidationResult:
        result = self.validator.validate_all(self.draft, self.errors, self.warnings)
        self.store_result(result)
        return result

    def store_result(self, result: ValidationResult) -> None:
        self.errors = dict(result.errors)
        self.warnings = dict(result.warnings)

    def _commit(self, draft: Draft, changed: Iterable[str], skip_validation: bool) -> None:
        self.draft = draft
        self.is_dirty = True
        if not skip_validation:
            self.revalidate(self.validator.affected_keys(changed))
        if self.on_change is not None:
            self.on_change(draft)

    def _clear(self) -> None:
        self.errors = {}
        self.warnings = {}
        self.is_dirty = False
