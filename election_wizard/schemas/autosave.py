"""Autosave snapshot schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from election_wizard.schemas.draft import Draft


class AutosaveSnapshot(BaseModel):
    """Serialized record stored in the scratch slot."""

    data: Draft
    timestamp: datetime
    version: str


class LoadedAutosave(BaseModel):
    """A snapshot recovered from scratch storage."""

    data: Draft
    timestamp: datetime
    is_recent: bool = False
