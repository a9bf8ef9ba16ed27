"""
MoodMash Behavioral Analytics Module.

Mines mood-entry history for recurring patterns and learns UI usage to drive
adaptive layout, content personalization and a circadian theme.
"""

from .models import MoodEmotion, MoodEntry, Pattern, PatternType, PrivacyLevel
from .pattern_analyzer import analyze_patterns
from .usage_tracker import (
    ComponentKind,
    ComponentUsageStats,
    InteractionAction,
    InteractionEvent,
    UsageTracker,
    WidgetState,
    calculate_priority,
)
from .behavior_profiler import UserBehaviorProfile, analyze_engagement_pattern
from .circadian import CircadianTheme, get_circadian_theme
from .layout import ContentPreferences, LayoutConfig, LayoutMode
from .persistence import MemoryStore, SqliteStore
from .engine import AdaptiveEngine
from .export import export_to_csv, export_to_json

__all__ = [
    "MoodEmotion",
    "MoodEntry",
    "Pattern",
    "PatternType",
    "PrivacyLevel",
    "analyze_patterns",
    "ComponentKind",
    "ComponentUsageStats",
    "InteractionAction",
    "InteractionEvent",
    "UsageTracker",
    "WidgetState",
    "calculate_priority",
    "UserBehaviorProfile",
    "analyze_engagement_pattern",
    "CircadianTheme",
    "get_circadian_theme",
    "ContentPreferences",
    "LayoutConfig",
    "LayoutMode",
    "MemoryStore",
    "SqliteStore",
    "AdaptiveEngine",
    "export_to_csv",
    "export_to_json",
]
