"""Validation and navigation result schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """Error and warning maps keyed by field or composite key."""

    errors: dict[str, str] = Field(default_factory=dict)
    warnings: dict[str, str] = Field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


class StepTransition(BaseModel):
    """Outcome of a request to move forward in the wizard."""

    step: int
    blocked: bool = False
    message: str | None = None
    validation: ValidationResult = Field(default_factory=ValidationResult)
