"""
Mood Journal Data Models.

Read-only view of the mood store's entries plus the Pattern results
produced by the analyzers. Entries are owned by the external mood store;
this package only ever reads ordered snapshots of them.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, List, Tuple, Any


class MoodEmotion(str, Enum):
    """Closed set of emotions a user can log."""

    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    ANXIOUS = "anxious"
    CALM = "calm"
    EXCITED = "excited"
    TIRED = "tired"
    GRATEFUL = "grateful"
    STRESSED = "stressed"
    PEACEFUL = "peaceful"
    FRUSTRATED = "frustrated"
    HOPEFUL = "hopeful"
    LONELY = "lonely"
    CONFIDENT = "confident"
    OVERWHELMED = "overwhelmed"

    @property
    def label(self) -> str:
        return EMOTION_INFO[self].label

    @property
    def emoji(self) -> str:
        return EMOTION_INFO[self].emoji


class EmotionCategory(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


@dataclass(frozen=True)
class EmotionInfo:
    """Display metadata for an emotion."""

    label: str
    emoji: str
    color: str
    category: EmotionCategory


EMOTION_INFO: Dict[MoodEmotion, EmotionInfo] = {
    MoodEmotion.HAPPY: EmotionInfo("Happy", "😊", "#FFD93D", EmotionCategory.POSITIVE),
    MoodEmotion.SAD: EmotionInfo("Sad", "😢", "#6B7FD7", EmotionCategory.NEGATIVE),
    MoodEmotion.ANGRY: EmotionInfo("Angry", "😠", "#FF6B6B", EmotionCategory.NEGATIVE),
    MoodEmotion.ANXIOUS: EmotionInfo("Anxious", "😰", "#A8D8EA", EmotionCategory.NEGATIVE),
    MoodEmotion.CALM: EmotionInfo("Calm", "😌", "#98D8C8", EmotionCategory.POSITIVE),
    MoodEmotion.EXCITED: EmotionInfo("Excited", "🤩", "#FF9F43", EmotionCategory.POSITIVE),
    MoodEmotion.TIRED: EmotionInfo("Tired", "😴", "#B8B8B8", EmotionCategory.NEUTRAL),
    MoodEmotion.GRATEFUL: EmotionInfo("Grateful", "🙏", "#26DE81", EmotionCategory.POSITIVE),
    MoodEmotion.STRESSED: EmotionInfo("Stressed", "😣", "#EB4D4B", EmotionCategory.NEGATIVE),
    MoodEmotion.PEACEFUL: EmotionInfo("Peaceful", "😇", "#7ED6DF", EmotionCategory.POSITIVE),
    MoodEmotion.FRUSTRATED: EmotionInfo("Frustrated", "😤", "#F0932B", EmotionCategory.NEGATIVE),
    MoodEmotion.HOPEFUL: EmotionInfo("Hopeful", "✨", "#FECA57", EmotionCategory.POSITIVE),
    MoodEmotion.LONELY: EmotionInfo("Lonely", "🥺", "#833471", EmotionCategory.NEGATIVE),
    MoodEmotion.CONFIDENT: EmotionInfo("Confident", "💪", "#22A6B3", EmotionCategory.POSITIVE),
    MoodEmotion.OVERWHELMED: EmotionInfo("Overwhelmed", "😵‍💫", "#BE2EDD", EmotionCategory.NEGATIVE),
}


class PrivacyLevel(str, Enum):
    GLOBAL = "global"
    FRIENDS = "friends"
    PRIVATE = "private"


MIN_INTENSITY = 1
MAX_INTENSITY = 10


@dataclass(frozen=True)
class MoodEntry:
    """A logged emotional state."""

    emotion: MoodEmotion
    intensity: int
    created_at: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    note: Optional[str] = None
    tags: Tuple[str, ...] = ()
    privacy: PrivacyLevel = PrivacyLevel.PRIVATE
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        # Coerce raw values so callers can build entries from plain strings
        object.__setattr__(self, "emotion", MoodEmotion(self.emotion))
        object.__setattr__(self, "privacy", PrivacyLevel(self.privacy))
        object.__setattr__(self, "tags", tuple(self.tags))

        if isinstance(self.intensity, bool) or not isinstance(self.intensity, int):
            raise ValueError(f"intensity must be an integer, got {self.intensity!r}")
        if not MIN_INTENSITY <= self.intensity <= MAX_INTENSITY:
            raise ValueError(
                f"intensity must be between {MIN_INTENSITY} and {MAX_INTENSITY}, "
                f"got {self.intensity}"
            )

        if self.updated_at is None:
            object.__setattr__(self, "updated_at", self.created_at)

    def with_updates(self, **changes: Any) -> "MoodEntry":
        """Return an updated copy with a refreshed update timestamp."""
        changes.pop("id", None)
        changes.pop("created_at", None)
        changes.setdefault("updated_at", datetime.now(timezone.utc))
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "emotion": self.emotion.value,
            "intensity": self.intensity,
            "note": self.note,
            "tags": list(self.tags),
            "privacy": self.privacy.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoodEntry":
        created_at = datetime.fromisoformat(data["created_at"])
        updated_raw = data.get("updated_at")
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            emotion=MoodEmotion(data["emotion"]),
            intensity=int(data["intensity"]),
            note=data.get("note"),
            tags=tuple(data.get("tags") or ()),
            privacy=PrivacyLevel(data.get("privacy", PrivacyLevel.PRIVATE.value)),
            created_at=created_at,
            updated_at=datetime.fromisoformat(updated_raw) if updated_raw else None,
        )


class PatternType(str, Enum):
    """Kinds of findings the analyzers can emit."""

    CIRCADIAN = "circadian"
    WEEKLY = "weekly"
    SEASONAL = "seasonal"
    TRIGGER = "trigger"
    CORRELATION = "correlation"
    TREND = "trend"
    OUTLIER = "outlier"


@dataclass
class Pattern:
    """An analytic finding over a mood-entry snapshot."""

    type: PatternType
    title: str
    description: str
    confidence: float  # heuristic score in [0, 1]
    evidence: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
            "suggestions": list(self.suggestions),
        }
