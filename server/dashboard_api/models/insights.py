"""Mood entry and pattern insight models."""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from mood_analytics.models import MoodEmotion, MoodEntry, Pattern, PatternType, PrivacyLevel


class MoodEntryIn(BaseModel):
    """Mood entry as supplied by the mood store."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    emotion: MoodEmotion
    intensity: int = Field(ge=1, le=10)
    note: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    privacy: PrivacyLevel = PrivacyLevel.PRIVATE
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    def to_entry(self) -> MoodEntry:
        kwargs = {}
        if self.id:
            kwargs["id"] = self.id
        return MoodEntry(
            emotion=self.emotion,
            intensity=self.intensity,
            note=self.note,
            tags=tuple(self.tags),
            privacy=self.privacy,
            created_at=self.created_at,
            updated_at=self.updated_at,
            **kwargs,
        )


class MoodSnapshot(BaseModel):
    """Ordered snapshot of mood entries, newest first."""

    entries: list[MoodEntryIn] = Field(default_factory=list)

    def to_entries(self) -> list[MoodEntry]:
        return [e.to_entry() for e in self.entries]


class PatternOut(BaseModel):
    """Analytic finding returned to the insights view."""

    type: PatternType
    title: str
    description: str
    confidence: float = Field(ge=0, le=1)
    evidence: list[str]
    suggestions: list[str]

    @classmethod
    def from_pattern(cls, pattern: Pattern) -> "PatternOut":
        return cls(**pattern.to_dict())
