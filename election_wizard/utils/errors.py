"""Exception hierarchy for the wizard engine.

Policy violations in a draft are never raised; they are returned as data in
error/warning maps. These exceptions cover misuse of the engine and storage
failures.
"""

from __future__ import annotations


class WizardError(Exception):
    """Base engine error with a stable machine-readable code."""

    def __init__(self, message: str, code: str) -> None:
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error for the presentation layer."""
        return {"error": self.message, "code": self.code}


class InvalidInputError(WizardError):
    """Raised when an update names an unknown field or carries a malformed value."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT")


class UnknownStepError(WizardError):
    """Raised for a wizard step outside the known range."""

    def __init__(self, step: int) -> None:
        self.step = step
        super().__init__(message=f"Unknown wizard step: {step}", code="UNKNOWN_STEP")


class EngineDisposedError(WizardError):
    """Raised when a disposed wizard is used again."""

    def __init__(self) -> None:
        super().__init__(message="Wizard has been disposed", code="DISPOSED")


class StorageError(WizardError):
    """Raised by scratch storage backends when a read or write fails."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="STORAGE_ERROR")


class ConfigurationError(WizardError):
    """Raised when settings do not describe a usable backend."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="CONFIGURATION_ERROR")


class SchedulerError(WizardError):
    """Raised when a delayed job cannot be armed."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="SCHEDULER_ERROR")
