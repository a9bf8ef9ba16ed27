"""Circadian color theme derived purely from the wall-clock hour."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


class ThemeMode(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class ContrastLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class CircadianTheme:
    mode: ThemeMode
    primary_color: str
    background_color: str
    accent_color: str
    contrast_level: ContrastLevel

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "mode": self.mode.value,
            "primary_color": self.primary_color,
            "background_color": self.background_color,
            "accent_color": self.accent_color,
            "contrast_level": self.contrast_level.value,
        }


CIRCADIAN_THEMES: Dict[ThemeMode, CircadianTheme] = {
    ThemeMode.MORNING: CircadianTheme(
        ThemeMode.MORNING, "#0ea5e9", "#f0f9ff", "#38bdf8", ContrastLevel.HIGH
    ),
    ThemeMode.AFTERNOON: CircadianTheme(
        ThemeMode.AFTERNOON, "#6366f1", "#0f172a", "#8b5cf6", ContrastLevel.HIGH
    ),
    ThemeMode.EVENING: CircadianTheme(
        ThemeMode.EVENING, "#f59e0b", "#1c1917", "#fbbf24", ContrastLevel.MEDIUM
    ),
    ThemeMode.NIGHT: CircadianTheme(
        ThemeMode.NIGHT, "#cf6679", "#121212", "#ff7961", ContrastLevel.LOW
    ),
}

DEFAULT_THEME = CIRCADIAN_THEMES[ThemeMode.AFTERNOON]


def theme_mode_for_hour(hour: int) -> ThemeMode:
    if 5 <= hour < 9:
        return ThemeMode.MORNING
    if 9 <= hour < 17:
        return ThemeMode.AFTERNOON
    if 17 <= hour < 21:
        return ThemeMode.EVENING
    return ThemeMode.NIGHT


def get_circadian_theme(now: Optional[datetime] = None) -> CircadianTheme:
    """Theme for the given (or current local) time."""
    if now is None:
        now = datetime.now().astimezone()
    return CIRCADIAN_THEMES[theme_mode_for_hour(now.hour)]
