"""Adaptive layout and personalization models."""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Optional

from mood_analytics.behavior_profiler import (
    EngagementPattern,
    PrimaryGoal,
    TimeOfDay,
    UserBehaviorProfile,
)
from mood_analytics.circadian import CircadianTheme, ContrastLevel, ThemeMode
from mood_analytics.layout import (
    ContentDensity,
    ContentPreferences,
    LayoutConfig,
    LayoutMode,
    PersonalizationLevel,
)
from mood_analytics.usage_tracker import (
    ComponentKind,
    ComponentUsageStats,
    InteractionAction,
    WidgetState,
)


class InteractionIn(BaseModel):
    """A UI interaction; the server stamps the time."""

    component_id: str = Field(min_length=1)
    component_kind: ComponentKind
    action: InteractionAction
    duration_ms: Optional[int] = Field(default=None, ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class DwellIn(BaseModel):
    """Dwell time to add to an already-tracked component."""

    component_id: str = Field(min_length=1)
    duration_ms: int = Field(ge=0)


class DwellResult(BaseModel):
    tracked: bool
    priority: int


class ComponentStatsOut(BaseModel):
    """Usage statistics for one component."""

    model_config = ConfigDict(from_attributes=True)

    component_id: str
    component_kind: ComponentKind
    interactions: int
    total_dwell_ms: int
    last_interaction: datetime
    priority: int = Field(ge=0, le=100)
    pinned: bool
    hidden: bool

    @classmethod
    def from_stats(cls, stats: ComponentUsageStats) -> "ComponentStatsOut":
        return cls.model_validate(stats)


class ComponentState(BaseModel):
    """Priority and widget rendering state for one component."""

    component_id: str
    priority: int = Field(ge=0, le=100)
    widget_state: WidgetState
    changed: Optional[bool] = None


class LayoutConfigOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    mode: LayoutMode
    column_count: int
    show_gamification: bool
    show_social: bool
    show_weather: bool

    @classmethod
    def from_config(cls, config: LayoutConfig) -> "LayoutConfigOut":
        return cls.model_validate(config)


class AdaptiveLayoutOut(BaseModel):
    """Layout config plus visible components ordered by priority."""

    config: LayoutConfigOut
    components: list[ComponentStatsOut]


class LayoutModeIn(BaseModel):
    mode: LayoutMode


class ThemeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    mode: ThemeMode
    primary_color: str
    background_color: str
    accent_color: str
    contrast_level: ContrastLevel

    @classmethod
    def from_theme(cls, theme: CircadianTheme) -> "ThemeOut":
        return cls.model_validate(theme)


class ProfileOut(BaseModel):
    preferred_time_of_day: TimeOfDay
    engagement_pattern: EngagementPattern
    primary_goal: PrimaryGoal
    interaction_velocity: float
    preferred_content_types: list[str]
    mood_correlation: dict[str, list[str]]

    @classmethod
    def from_profile(cls, profile: UserBehaviorProfile) -> "ProfileOut":
        return cls(**profile.to_dict())


class PreferencesOut(BaseModel):
    preferred_categories: list[str]
    disliked_categories: list[str]
    content_density: ContentDensity
    show_recommendations: bool
    personalization_level: PersonalizationLevel

    @classmethod
    def from_preferences(cls, prefs: ContentPreferences) -> "PreferencesOut":
        return cls(**prefs.to_dict())


class PreferencesUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    preferred_categories: Optional[list[str]] = None
    disliked_categories: Optional[list[str]] = None
    content_density: Optional[ContentDensity] = None
    show_recommendations: Optional[bool] = None
    personalization_level: Optional[PersonalizationLevel] = None
