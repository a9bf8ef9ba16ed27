"""
Behavior Profiling Module.

Derives a coarse behavioral profile from the interaction log:

- Interaction velocity over the trailing 24 hours
- Preferred time of day (or "mixed" when no slot dominates)
- Engagement pattern: explorer, routine or casual
- Primary goal inferred from the most-used module/feature

The profile feeds back into the layout: routine users get the focus
layout, and gamification is hidden for monitoring-focused users.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

from .layout import LayoutConfig, LayoutMode
from .models import MoodEmotion
from .pattern_analyzer import TIME_SLOTS, time_slot_for_hour
from .usage_tracker import ComponentKind, InteractionEvent

logger = logging.getLogger(__name__)

MIN_INTERACTIONS_TO_LEARN = 5
VELOCITY_WINDOW = timedelta(hours=24)
VELOCITY_WINDOW_MINUTES = 24 * 60
PREFERRED_TIME_SHARE = 0.3

EXPLORER_MIN_VELOCITY = 0.5
EXPLORER_MIN_COMPONENTS = 10
ROUTINE_MAX_VELOCITY = 0.1
ROUTINE_MAX_COMPONENTS = 5

PREFERRED_CONTENT_LIMIT = 5


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"
    MIXED = "mixed"


class EngagementPattern(str, Enum):
    EXPLORER = "explorer"
    ROUTINE = "routine"
    CASUAL = "casual"


class PrimaryGoal(str, Enum):
    SELF_IMPROVEMENT = "self_improvement"
    STRESS_RELIEF = "stress_relief"
    MONITORING = "monitoring"
    SOCIAL = "social"
    CONTENT = "content"


# Checked in order; first matching group wins
GOAL_KEYWORDS: Tuple[Tuple[PrimaryGoal, Tuple[str, ...]], ...] = (
    (PrimaryGoal.SOCIAL, ("social", "friend")),
    (PrimaryGoal.STRESS_RELIEF, ("meditat", "yoga", "music")),
    (PrimaryGoal.MONITORING, ("mood", "track")),
)

GOAL_COMPONENT_KINDS = (ComponentKind.MODULE, ComponentKind.FEATURE)


@dataclass
class UserBehaviorProfile:
    """Coarse behavioral summary, replaced wholesale on each recomputation."""

    preferred_time_of_day: TimeOfDay = TimeOfDay.MIXED
    engagement_pattern: EngagementPattern = EngagementPattern.CASUAL
    primary_goal: PrimaryGoal = PrimaryGoal.SELF_IMPROVEMENT
    interaction_velocity: float = 0.0
    preferred_content_types: List[str] = field(default_factory=list)
    # Not populated yet; reserved for emotion -> feature correlations
    mood_correlation: Dict[MoodEmotion, List[str]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "preferred_time_of_day": self.preferred_time_of_day.value,
            "engagement_pattern": self.engagement_pattern.value,
            "primary_goal": self.primary_goal.value,
            "interaction_velocity": self.interaction_velocity,
            "preferred_content_types": list(self.preferred_content_types),
            "mood_correlation": {
                emotion.value: list(features)
                for emotion, features in self.mood_correlation.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserBehaviorProfile":
        return cls(
            preferred_time_of_day=TimeOfDay(data["preferred_time_of_day"]),
            engagement_pattern=EngagementPattern(data["engagement_pattern"]),
            primary_goal=PrimaryGoal(data["primary_goal"]),
            interaction_velocity=float(data["interaction_velocity"]),
            preferred_content_types=[str(c) for c in data["preferred_content_types"]],
            mood_correlation={
                MoodEmotion(emotion): [str(f) for f in features]
                for emotion, features in (data.get("mood_correlation") or {}).items()
            },
        )


def _preferred_time(interactions: Sequence[InteractionEvent]) -> TimeOfDay:
    counts = Counter({slot: 0 for slot in TIME_SLOTS})
    for event in interactions:
        counts[time_slot_for_hour(event.timestamp.hour)] += 1

    top_slot = max(TIME_SLOTS, key=lambda slot: counts[slot])
    if counts[top_slot] > len(interactions) * PREFERRED_TIME_SHARE:
        return TimeOfDay(top_slot)
    return TimeOfDay.MIXED


def _engagement(velocity: float, distinct_components: int) -> EngagementPattern:
    if velocity > EXPLORER_MIN_VELOCITY and distinct_components > EXPLORER_MIN_COMPONENTS:
        return EngagementPattern.EXPLORER
    if velocity < ROUTINE_MAX_VELOCITY and distinct_components < ROUTINE_MAX_COMPONENTS:
        return EngagementPattern.ROUTINE
    return EngagementPattern.CASUAL


def goal_for_component(component_id: str) -> PrimaryGoal:
    """Match a component identifier against the goal keyword groups."""
    lowered = component_id.lower()
    for goal, keywords in GOAL_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return goal
    return PrimaryGoal.SELF_IMPROVEMENT


def analyze_engagement_pattern(
    interactions: Sequence[InteractionEvent],
    now: datetime,
) -> UserBehaviorProfile:
    """
    Build a behavior profile from the interaction log.

    Args:
        interactions: Logged interaction events, oldest first
        now: Current time, used for the trailing 24h velocity window

    Returns:
        A fresh UserBehaviorProfile (the default profile if there are
        fewer than five interactions)
    """
    if len(interactions) < MIN_INTERACTIONS_TO_LEARN:
        return UserBehaviorProfile()

    cutoff = now - VELOCITY_WINDOW
    recent = [e for e in interactions if e.timestamp > cutoff]
    velocity = len(recent) / VELOCITY_WINDOW_MINUTES

    distinct_components = len({e.component_id for e in interactions})

    feature_counts: Dict[str, int] = {}
    for event in interactions:
        if event.component_kind in GOAL_COMPONENT_KINDS:
            feature_counts[event.component_id] = feature_counts.get(event.component_id, 0) + 1

    primary_goal = PrimaryGoal.SELF_IMPROVEMENT
    if feature_counts:
        top_feature = max(feature_counts, key=feature_counts.get)
        primary_goal = goal_for_component(top_feature)

    profile = UserBehaviorProfile(
        preferred_time_of_day=_preferred_time(interactions),
        engagement_pattern=_engagement(velocity, distinct_components),
        primary_goal=primary_goal,
        interaction_velocity=velocity,
        preferred_content_types=list(feature_counts)[:PREFERRED_CONTENT_LIMIT],
    )

    logger.info(
        f"[PROFILER] time={profile.preferred_time_of_day.value}, "
        f"engagement={profile.engagement_pattern.value}, "
        f"goal={profile.primary_goal.value}, velocity={velocity:.3f}/min"
    )
    return profile


def apply_profile_to_layout(
    profile: UserBehaviorProfile, layout: LayoutConfig
) -> LayoutConfig:
    """Return the layout adjusted for a behavior profile."""
    mode = (
        LayoutMode.FOCUS
        if profile.engagement_pattern == EngagementPattern.ROUTINE
        else LayoutMode.DASHBOARD
    )
    return LayoutConfig(
        mode=mode,
        column_count=layout.column_count,
        show_gamification=profile.primary_goal != PrimaryGoal.MONITORING,
        show_social=layout.show_social,
        show_weather=layout.show_weather,
    )
