"""Layout configuration and content preference models."""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List


class LayoutMode(str, Enum):
    DASHBOARD = "dashboard"
    FOCUS = "focus"
    COMPACT = "compact"


class ContentDensity(str, Enum):
    COMPACT = "compact"
    STANDARD = "standard"
    EXPANDED = "expanded"


class PersonalizationLevel(str, Enum):
    NONE = "none"
    MINIMAL = "minimal"
    FULL = "full"


@dataclass
class LayoutConfig:
    """Dashboard layout switches driven by the behavior profile."""

    mode: LayoutMode = LayoutMode.DASHBOARD
    column_count: int = 3
    show_gamification: bool = True
    show_social: bool = True
    show_weather: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "mode": self.mode.value,
            "column_count": self.column_count,
            "show_gamification": self.show_gamification,
            "show_social": self.show_social,
            "show_weather": self.show_weather,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayoutConfig":
        return cls(
            mode=LayoutMode(data["mode"]),
            column_count=int(data["column_count"]),
            show_gamification=bool(data["show_gamification"]),
            show_social=bool(data["show_social"]),
            show_weather=bool(data["show_weather"]),
        )


@dataclass
class ContentPreferences:
    """User-controlled content personalization settings."""

    preferred_categories: List[str] = field(default_factory=list)
    disliked_categories: List[str] = field(default_factory=list)
    content_density: ContentDensity = ContentDensity.STANDARD
    show_recommendations: bool = True
    personalization_level: PersonalizationLevel = PersonalizationLevel.FULL

    def merged(self, **changes: Any) -> "ContentPreferences":
        """Return a copy with the given fields replaced; unknown keys raise ValueError."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown content preference(s): {sorted(unknown)}")
        if "content_density" in changes:
            changes["content_density"] = ContentDensity(changes["content_density"])
        if "personalization_level" in changes:
            changes["personalization_level"] = PersonalizationLevel(
                changes["personalization_level"]
            )
        for key in ("preferred_categories", "disliked_categories"):
            if key in changes:
                changes[key] = list(changes[key])
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "preferred_categories": list(self.preferred_categories),
            "disliked_categories": list(self.disliked_categories),
            "content_density": self.content_density.value,
            "show_recommendations": self.show_recommendations,
            "personalization_level": self.personalization_level.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentPreferences":
        return cls(
            preferred_categories=[str(c) for c in data["preferred_categories"]],
            disliked_categories=[str(c) for c in data["disliked_categories"]],
            content_density=ContentDensity(data["content_density"]),
            show_recommendations=bool(data["show_recommendations"]),
            personalization_level=PersonalizationLevel(data["personalization_level"]),
        )
