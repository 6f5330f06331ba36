"""
Shared data models for the Mood Meter service.

This module defines the core domain models used across multiple layers
of the application (store, aggregation, CLI, API).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MoodEntry(BaseModel):
    """A single stored mood record for one session."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(..., description="Opaque identifier assigned by the store")
    session_id: str = Field(
        ..., alias="sessionID", description="Session the entry belongs to"
    )
    mood: str = Field(..., description="Emotion label picked by the user")
    timestamp: float | None = Field(
        None, description="Unix timestamp when the entry was stored"
    )


class MoodSubmission(BaseModel):
    """Payload for submitting a mood entry."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionID", min_length=1)
    mood: str = Field(..., min_length=1)

    @field_validator("session_id", "mood")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value
