"""Persisted quiz settings."""

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ridquiz.domain.constants import (
    DEFAULT_SESSION_LENGTH,
    SPEECH_RATE_DEFAULT,
    SPEECH_RATE_MAX,
    SPEECH_RATE_MIN,
)


class QuizSettings(BaseModel):
    """
    The settings blob owned by a SettingsStore.

    The engine reads it at rebuild points; speech fields are passed through
    to the notification sink untouched.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    shuffle: bool = True
    session_length: int = Field(default=DEFAULT_SESSION_LENGTH, ge=0)  # 0 = all
    active_categories: set[str] = Field(default_factory=set)

    speech_enabled: bool = True
    speech_rate: float = Field(
        default=SPEECH_RATE_DEFAULT, ge=SPEECH_RATE_MIN, le=SPEECH_RATE_MAX
    )
    answer_sounds_enabled: bool = True
    show_instructions: bool = True

    @field_validator("active_categories", mode="before")
    @classmethod
    def strip_categories(cls, v):
        if v is None:
            return set()
        if isinstance(v, str):
            v = [v]
        return {str(c).strip() for c in v if str(c).strip()}

    @field_serializer("active_categories")
    def serialize_categories(self, v: set[str]) -> list[str]:
        return sorted(v)
