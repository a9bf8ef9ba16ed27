"""
Adaptive Engine.

Single state container for usage tracking, behavior profiling, layout,
content preferences and the circadian theme. It is the only mutator of that
state and wires three kinds of timers through an injected scheduler:

- theme refresh: periodic, every `theme_refresh_seconds`
- profile analysis: debounced, `profile_debounce_seconds` after the last
  interaction (re-armed, not accumulated)
- persistence flush: debounced, `persist_debounce_seconds` after the last
  state change

Persistence contract: state is *eventually persisted*. Every mutation marks
the engine dirty and arms the flush timer; writes are fire-and-forget with
last-write-wins semantics. A crash before the flush loses at most the changes
made since the previous flush, never the stored state itself.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol

from .behavior_profiler import (
    MIN_INTERACTIONS_TO_LEARN,
    UserBehaviorProfile,
    analyze_engagement_pattern,
    apply_profile_to_layout,
)
from .circadian import CircadianTheme, get_circadian_theme
from .layout import ContentPreferences, LayoutConfig, LayoutMode
from .persistence import (
    DEFAULT_PERSISTED_INTERACTIONS,
    AdaptiveSnapshot,
    KeyValueStore,
    MemoryStore,
    clear_learned_state,
    load_state,
    save_preferences,
    save_state,
)
from .usage_tracker import (
    DEFAULT_LOG_CAPACITY,
    ComponentKind,
    ComponentUsageStats,
    InteractionAction,
    UsageTracker,
    WidgetState,
)

logger = logging.getLogger(__name__)

THEME_TIMER = "theme_refresh"
PROFILE_TIMER = "profile_analysis"
PERSIST_TIMER = "persist_flush"


class Scheduler(Protocol):
    """Timer facility the engine depends on (see automation.scheduler)."""

    def debounce(self, name: str, delay_seconds: float, callback: Callable[[], Any]) -> None: ...

    def every(
        self,
        name: str,
        interval_seconds: float,
        callback: Callable[[], Any],
        run_immediately: bool = False,
    ) -> None: ...

    def cancel(self, name: str) -> bool: ...

    def shutdown(self) -> None: ...


def _local_now() -> datetime:
    return datetime.now().astimezone()


class AdaptiveEngine:
    """
    Owns all adaptive personalization state for one user context.

    Configuration:
        store: Durable key-value store (defaults to an in-memory store)
        scheduler: Timer facility; None disables all timers
        clock: Returns the current timezone-aware local time
        learning_enabled: Whether the behavior profile is recomputed
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], datetime] = _local_now,
        learning_enabled: bool = True,
        profile_debounce_seconds: float = 10.0,
        persist_debounce_seconds: float = 5.0,
        theme_refresh_seconds: float = 60.0,
        log_capacity: int = DEFAULT_LOG_CAPACITY,
        persisted_interactions: int = DEFAULT_PERSISTED_INTERACTIONS,
    ):
        self.store = store if store is not None else MemoryStore()
        self.scheduler = scheduler
        self.clock = clock
        self.profile_debounce_seconds = profile_debounce_seconds
        self.persist_debounce_seconds = persist_debounce_seconds
        self.theme_refresh_seconds = theme_refresh_seconds
        self.persisted_interactions = persisted_interactions

        self._lock = threading.RLock()
        self._dirty = False
        self._started = False
        self.last_updated = clock()

        snapshot = load_state(self.store)
        self.tracker = UsageTracker(clock=clock, capacity=log_capacity)
        self.tracker.load(snapshot.component_stats, snapshot.interactions)
        self.layout_config: LayoutConfig = snapshot.layout_config
        self.profile: UserBehaviorProfile = snapshot.profile
        self.preferences: ContentPreferences = snapshot.preferences
        self.learning_enabled = learning_enabled
        self.theme: CircadianTheme = get_circadian_theme(clock())

        logger.info(
            f"[ENGINE] Loaded {len(snapshot.component_stats)} components, "
            f"{len(snapshot.interactions)} interactions"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the periodic theme refresh."""
        if self._started:
            return
        self._started = True
        if self.scheduler:
            self.scheduler.every(
                THEME_TIMER, self.theme_refresh_seconds, self.refresh_theme,
                run_immediately=True,
            )
        else:
            self.refresh_theme()
        logger.info("[ENGINE] Started")

    def shutdown(self, flush: bool = True) -> None:
        """Cancel every timer and optionally write pending state."""
        if self.scheduler:
            self.scheduler.shutdown()
        if flush:
            self.flush()
        self._started = False
        logger.info("[ENGINE] Shut down")

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _mark_dirty(self) -> None:
        self._dirty = True
        self.last_updated = self.clock()
        if self.scheduler:
            self.scheduler.debounce(
                PERSIST_TIMER, self.persist_debounce_seconds, self.flush
            )

    def _schedule_profile_analysis(self) -> None:
        if not self.learning_enabled:
            return
        if len(self.tracker.events) < MIN_INTERACTIONS_TO_LEARN:
            return
        if self.scheduler:
            self.scheduler.debounce(
                PROFILE_TIMER, self.profile_debounce_seconds, self.run_profile_analysis
            )

    def refresh_theme(self) -> CircadianTheme:
        with self._lock:
            theme = get_circadian_theme(self.clock())
            if theme.mode != self.theme.mode:
                logger.info(f"[ENGINE] Theme changed to {theme.mode.value}")
            self.theme = theme
            return theme

    def run_profile_analysis(self) -> Optional[UserBehaviorProfile]:
        """
        Recompute the behavior profile and apply its layout side effects.

        Returns:
            The new profile, or None if learning is off or data is insufficient
        """
        with self._lock:
            events = self.tracker.events
            if not self.learning_enabled or len(events) < MIN_INTERACTIONS_TO_LEARN:
                return None

            profile = analyze_engagement_pattern(events, self.clock())
            self.tracker.recompute_priorities()
            self.profile = profile
            self.layout_config = apply_profile_to_layout(profile, self.layout_config)
            self._mark_dirty()
            return profile

    def flush(self) -> bool:
        """
        Write the current state to the store if anything changed.

        The lock is held across the write so a reset cannot interleave with
        it; a change made during the write (dirty again) is written next.
        """
        with self._lock:
            while self._dirty:
                snapshot = self.snapshot()
                self._dirty = False
                if not save_state(self.store, snapshot, self.persisted_interactions):
                    self._dirty = True
                    return False
            return True

    def snapshot(self) -> AdaptiveSnapshot:
        with self._lock:
            return AdaptiveSnapshot(
                layout_config=LayoutConfig(**vars(self.layout_config)),
                component_stats=[
                    ComponentUsageStats(**vars(s)) for s in self.tracker.stats.values()
                ],
                interactions=self.tracker.events,
                profile=UserBehaviorProfile.from_dict(self.profile.to_dict()),
                preferences=ContentPreferences.from_dict(self.preferences.to_dict()),
            )

    # ------------------------------------------------------------------
    # Interaction tracking
    # ------------------------------------------------------------------

    def track_interaction(
        self,
        component_id: str,
        component_kind: ComponentKind,
        action: InteractionAction,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ComponentUsageStats:
        with self._lock:
            stats = self.tracker.track_interaction(
                component_id, component_kind, action, duration_ms, metadata
            )
            self._mark_dirty()
            self._schedule_profile_analysis()
            return stats

    def track_dwell(self, component_id: str, duration_ms: int) -> bool:
        with self._lock:
            tracked = self.tracker.track_dwell(component_id, duration_ms)
            if tracked:
                self._mark_dirty()
            return tracked

    def _flag(self, change: Callable[[str], bool], component_id: str) -> bool:
        with self._lock:
            changed = change(component_id)
            if changed:
                self._mark_dirty()
            return changed

    def pin_component(self, component_id: str) -> bool:
        return self._flag(self.tracker.pin, component_id)

    def unpin_component(self, component_id: str) -> bool:
        return self._flag(self.tracker.unpin, component_id)

    def hide_component(self, component_id: str) -> bool:
        return self._flag(self.tracker.hide, component_id)

    def show_component(self, component_id: str) -> bool:
        return self._flag(self.tracker.show, component_id)

    # ------------------------------------------------------------------
    # Layout and preferences
    # ------------------------------------------------------------------

    def set_layout_mode(self, mode: LayoutMode) -> LayoutConfig:
        with self._lock:
            self.layout_config.mode = LayoutMode(mode)
            self._mark_dirty()
            return self.layout_config

    def toggle_gamification(self) -> LayoutConfig:
        with self._lock:
            self.layout_config.show_gamification = not self.layout_config.show_gamification
            self._mark_dirty()
            return self.layout_config

    def toggle_social(self) -> LayoutConfig:
        with self._lock:
            self.layout_config.show_social = not self.layout_config.show_social
            self._mark_dirty()
            return self.layout_config

    def update_content_preferences(self, **changes: Any) -> ContentPreferences:
        with self._lock:
            self.preferences = self.preferences.merged(**changes)
            self._mark_dirty()
            return self.preferences

    def set_preferred_categories(self, categories: List[str]) -> ContentPreferences:
        return self.update_content_preferences(preferred_categories=categories)

    def set_disliked_categories(self, categories: List[str]) -> ContentPreferences:
        return self.update_content_preferences(disliked_categories=categories)

    def toggle_learning(self) -> bool:
        with self._lock:
            self.learning_enabled = not self.learning_enabled
            if not self.learning_enabled and self.scheduler:
                self.scheduler.cancel(PROFILE_TIMER)
            logger.info(f"[ENGINE] Learning {'enabled' if self.learning_enabled else 'disabled'}")
            return self.learning_enabled

    def _reset(self, restore_layout: bool) -> None:
        with self._lock:
            if self.scheduler:
                self.scheduler.cancel(PROFILE_TIMER)
            self.tracker.reset()
            self.profile = UserBehaviorProfile()
            if restore_layout:
                self.layout_config = LayoutConfig()
            if self._dirty:
                save_preferences(self.store, self.preferences)
            clear_learned_state(self.store)
            # Re-persist the kept layout with empty stats and the default profile
            self._mark_dirty()

    def reset_layout(self) -> None:
        """Clear usage, interactions and profile, and restore the default layout."""
        self._reset(restore_layout=True)
        logger.info("[ENGINE] Layout reset")

    def reset_learning(self) -> None:
        """Clear usage, interactions and profile; keep the layout config."""
        self._reset(restore_layout=False)
        logger.info("[ENGINE] Learning reset")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_component_priority(self, component_id: str) -> int:
        with self._lock:
            return self.tracker.get_component_priority(component_id)

    def get_adaptive_layout(self) -> List[ComponentUsageStats]:
        with self._lock:
            return self.tracker.get_adaptive_layout()

    def get_widget_state(self, component_id: str) -> WidgetState:
        with self._lock:
            return self.tracker.get_widget_state(component_id)

    def get_recommended_features(self) -> List[str]:
        with self._lock:
            return list(self.profile.preferred_content_types)

    def get_circadian_config(self) -> CircadianTheme:
        return self.theme

    def get_status(self) -> Dict[str, Any]:
        """Get combined engine status for monitoring and debugging."""
        with self._lock:
            return {
                "started": self._started,
                "learning_enabled": self.learning_enabled,
                "dirty": self._dirty,
                "last_updated": self.last_updated.isoformat(),
                "tracker": self.tracker.get_stats(),
                "profile": self.profile.to_dict(),
                "layout": self.layout_config.to_dict(),
                "theme": self.theme.to_dict(),
            }
