"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "AutosaveService": "election_wizard.services.autosave_service",
    "CompletionScorer": "election_wizard.services.completion_service",
    "DraftStore": "election_wizard.services.draft_store",
    "ElectionWizard": "election_wizard.services.wizard_service",
    "FileScratchStorage": "election_wizard.services.scratch_storage",
    "InMemoryScratchStorage": "election_wizard.services.scratch_storage",
    "PublishGate": "election_wizard.services.completion_service",
    "StepGate": "election_wizard.services.step_gate",
    "SupabaseScratchStorage": "election_wizard.services.scratch_storage",
    "ValidationEngine": "election_wizard.services.validation_service",
    "create_wizard": "election_wizard.services.wizard_service",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
