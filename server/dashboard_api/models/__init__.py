"""Pydantic models for the dashboard API."""
from .insights import MoodEntryIn, MoodSnapshot, PatternOut
from .adaptive import (
    InteractionIn,
    DwellIn,
    DwellResult,
    ComponentStatsOut,
    ComponentState,
    AdaptiveLayoutOut,
    LayoutConfigOut,
    LayoutModeIn,
    ThemeOut,
    ProfileOut,
    PreferencesOut,
    PreferencesUpdate,
)

__all__ = [
    "MoodEntryIn",
    "MoodSnapshot",
    "PatternOut",
    "InteractionIn",
    "DwellIn",
    "DwellResult",
    "ComponentStatsOut",
    "ComponentState",
    "AdaptiveLayoutOut",
    "LayoutConfigOut",
    "LayoutModeIn",
    "ThemeOut",
    "ProfileOut",
    "PreferencesOut",
    "PreferencesUpdate",
]
