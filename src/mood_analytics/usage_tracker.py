"""
Component Usage Tracking Module.

Ingests UI interaction and dwell events and maintains per-component usage
statistics. Each component gets a decayed priority score (0-100) built from
interaction frequency, cumulative dwell time and recency:

    recency   = max(0, 1 - age / 7 days)            weight 0.2
    frequency = min(interactions / 50, 1)           weight 0.4
    dwell     = min(total_dwell / 10 hours, 1)      weight 0.4

Pinned components never drop below 80; hidden components are always 0.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

DECAY_WINDOW = timedelta(days=7)
INTERACTION_SATURATION = 50
DWELL_SATURATION_MS = 10 * 60 * 60 * 1000  # 10 hours

INTERACTION_WEIGHT = 0.4
DWELL_WEIGHT = 0.4
RECENCY_WEIGHT = 0.2

PRIORITY_THRESHOLD_PIN = 80
PRIORITY_THRESHOLD_HERO = 60
PRIORITY_THRESHOLD_STANDARD = 30

DEFAULT_LOG_CAPACITY = 1000


class ComponentKind(str, Enum):
    MODULE = "module"
    BUTTON = "button"
    CARD = "card"
    NAV = "nav"
    FEATURE = "feature"


class InteractionAction(str, Enum):
    CLICK = "click"
    VIEW = "view"
    HOVER = "hover"
    DWELL = "dwell"
    DISMISS = "dismiss"
    PIN = "pin"
    UNPIN = "unpin"


class WidgetState(str, Enum):
    COMPACT = "compact"
    STANDARD = "standard"
    HERO = "hero"


def _parse_aware(raw: str) -> datetime:
    # Naive times cannot be compared with the engine clock
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        raise ValueError(f"timestamp must be timezone-aware: {raw}")
    return value


@dataclass(frozen=True)
class InteractionEvent:
    """One UI interaction, immutable once logged."""

    component_id: str
    component_kind: ComponentKind
    action: InteractionAction
    timestamp: datetime
    duration_ms: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "component_id": self.component_id,
            "component_kind": self.component_kind.value,
            "action": self.action.value,
            "timestamp": self.timestamp.isoformat(),
            "duration_ms": self.duration_ms,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InteractionEvent":
        return cls(
            component_id=str(data["component_id"]),
            component_kind=ComponentKind(data["component_kind"]),
            action=InteractionAction(data["action"]),
            timestamp=_parse_aware(data["timestamp"]),
            duration_ms=data.get("duration_ms"),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class ComponentUsageStats:
    """Aggregated usage for one component identifier."""

    component_id: str
    component_kind: ComponentKind
    last_interaction: datetime
    interactions: int = 0
    total_dwell_ms: int = 0
    priority: int = 0
    pinned: bool = False
    hidden: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "component_id": self.component_id,
            "component_kind": self.component_kind.value,
            "interactions": self.interactions,
            "total_dwell_ms": self.total_dwell_ms,
            "last_interaction": self.last_interaction.isoformat(),
            "priority": self.priority,
            "pinned": self.pinned,
            "hidden": self.hidden,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentUsageStats":
        return cls(
            component_id=str(data["component_id"]),
            component_kind=ComponentKind(data["component_kind"]),
            interactions=int(data["interactions"]),
            total_dwell_ms=int(data["total_dwell_ms"]),
            last_interaction=_parse_aware(data["last_interaction"]),
            priority=int(data.get("priority", 0)),
            pinned=bool(data.get("pinned", False)),
            hidden=bool(data.get("hidden", False)),
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_priority(stats: ComponentUsageStats, now: datetime) -> int:
    """
    Compute the decayed priority for a component.

    Pure function of the stats and the current time.

    Returns:
        Integer priority in [0, 100]
    """
    age = now - stats.last_interaction
    recency_weight = max(0.0, 1 - age / DECAY_WINDOW)

    interaction_score = min(stats.interactions / INTERACTION_SATURATION, 1) * INTERACTION_WEIGHT
    dwell_score = min(stats.total_dwell_ms / DWELL_SATURATION_MS, 1) * DWELL_WEIGHT
    recency_score = min(recency_weight, 1.0) * RECENCY_WEIGHT

    priority = _round_half_up((interaction_score + dwell_score + recency_score) * 100)

    if stats.pinned:
        priority = max(priority, PRIORITY_THRESHOLD_PIN)
    if stats.hidden:
        priority = 0

    return priority


def widget_state_for_priority(priority: int) -> WidgetState:
    if priority >= PRIORITY_THRESHOLD_HERO:
        return WidgetState.HERO
    if priority >= PRIORITY_THRESHOLD_STANDARD:
        return WidgetState.STANDARD
    return WidgetState.COMPACT


class UsageTracker:
    """
    Tracks component interactions and derives usage priorities.

    Maintains a capped interaction log (oldest evicted first) and a map of
    per-component statistics created lazily on first interaction.

    Configuration:
        clock: Callable returning the current timezone-aware datetime
        capacity: Maximum number of events kept in the interaction log
    """

    def __init__(
        self,
        clock: Callable[[], datetime],
        capacity: int = DEFAULT_LOG_CAPACITY,
    ):
        self.clock = clock
        self.capacity = capacity
        self._stats: Dict[str, ComponentUsageStats] = {}
        self._events: Deque[InteractionEvent] = deque(maxlen=capacity)

    @property
    def events(self) -> List[InteractionEvent]:
        """Interaction log, oldest first."""
        return list(self._events)

    @property
    def stats(self) -> Dict[str, ComponentUsageStats]:
        return dict(self._stats)

    def track_interaction(
        self,
        component_id: str,
        component_kind: ComponentKind,
        action: InteractionAction,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ComponentUsageStats:
        """
        Record an interaction stamped with the current time.

        Returns:
            The updated stats for the component
        """
        now = self.clock()
        event = InteractionEvent(
            component_id=component_id,
            component_kind=ComponentKind(component_kind),
            action=InteractionAction(action),
            timestamp=now,
            duration_ms=duration_ms,
            metadata=dict(metadata or {}),
        )
        self._events.append(event)

        stats = self._stats.get(component_id)
        if stats is None:
            stats = ComponentUsageStats(
                component_id=component_id,
                component_kind=event.component_kind,
                last_interaction=now,
            )
            self._stats[component_id] = stats

        stats.interactions += 1
        stats.last_interaction = now
        stats.priority = calculate_priority(stats, now)

        logger.debug(
            f"[TRACKER] {event.action.value} on {component_id}: "
            f"n={stats.interactions}, priority={stats.priority}"
        )
        return stats

    def track_dwell(self, component_id: str, duration_ms: int) -> bool:
        """
        Add dwell time to a tracked component.

        Returns:
            False if the component has never been interacted with (no-op)
        """
        stats = self._stats.get(component_id)
        if stats is None:
            logger.debug(f"[TRACKER] Ignoring dwell for untracked {component_id}")
            return False

        stats.total_dwell_ms += duration_ms
        stats.priority = calculate_priority(stats, self.clock())
        return True

    def _get_or_create(self, component_id: str) -> ComponentUsageStats:
        stats = self._stats.get(component_id)
        if stats is None:
            stats = ComponentUsageStats(
                component_id=component_id,
                component_kind=ComponentKind.MODULE,
                last_interaction=self.clock(),
            )
            self._stats[component_id] = stats
        return stats

    def _set_flag(self, component_id: str, flag: str, value: bool, create: bool) -> bool:
        if create:
            stats = self._get_or_create(component_id)
        else:
            stats = self._stats.get(component_id)
            if stats is None:
                return False

        setattr(stats, flag, value)
        stats.priority = calculate_priority(stats, self.clock())
        logger.info(f"[TRACKER] {component_id} {flag}={value}, priority={stats.priority}")
        return True

    def pin(self, component_id: str) -> bool:
        return self._set_flag(component_id, "pinned", True, create=True)

    def unpin(self, component_id: str) -> bool:
        return self._set_flag(component_id, "pinned", False, create=False)

    def hide(self, component_id: str) -> bool:
        return self._set_flag(component_id, "hidden", True, create=True)

    def show(self, component_id: str) -> bool:
        return self._set_flag(component_id, "hidden", False, create=False)

    def recompute_priorities(self) -> None:
        """Refresh every component's priority against the current time."""
        now = self.clock()
        for stats in self._stats.values():
            stats.priority = calculate_priority(stats, now)

    def get_component_priority(self, component_id: str) -> int:
        stats = self._stats.get(component_id)
        return stats.priority if stats else 0

    def get_adaptive_layout(self) -> List[ComponentUsageStats]:
        """Visible components sorted by priority, highest first."""
        visible = [s for s in self._stats.values() if not s.hidden]
        return sorted(visible, key=lambda s: s.priority, reverse=True)

    def get_widget_state(self, component_id: str) -> WidgetState:
        return widget_state_for_priority(self.get_component_priority(component_id))

    def load(
        self,
        stats: Iterable[ComponentUsageStats],
        events: Iterable[InteractionEvent],
    ) -> None:
        """Replace tracker contents with previously persisted state."""
        self._stats = {s.component_id: s for s in stats}
        self._events = deque(events, maxlen=self.capacity)

    def reset(self) -> None:
        """Clear all usage statistics and the interaction log."""
        self._stats.clear()
        self._events.clear()
        logger.info("[TRACKER] Reset all usage statistics")

    def get_stats(self) -> Dict[str, Any]:
        """Get overall tracker statistics."""
        return {
            "components_tracked": len(self._stats),
            "logged_interactions": len(self._events),
            "log_capacity": self.capacity,
            "pinned": [s.component_id for s in self._stats.values() if s.pinned],
            "hidden": [s.component_id for s in self._stats.values() if s.hidden],
        }
