"""
Unit tests for the adaptive engine.

These tests drive timers by hand through the ManualScheduler fixture, so
debounced profile analysis and persistence flushes fire only when a test
fires them.

Usage:
    pytest tests/test_engine.py -v
"""
import pytest

from mood_analytics.behavior_profiler import EngagementPattern, PrimaryGoal, UserBehaviorProfile
from mood_analytics.circadian import ThemeMode
from mood_analytics.engine import PERSIST_TIMER, PROFILE_TIMER, THEME_TIMER, AdaptiveEngine
from mood_analytics.layout import ContentDensity, LayoutConfig, LayoutMode
from mood_analytics.persistence import (
    LAYOUT_STORAGE_KEY,
    PREFERENCES_STORAGE_KEY,
    MemoryStore,
    load_state,
)
from mood_analytics.usage_tracker import ComponentKind, InteractionAction, WidgetState


def click(engine, component_id="mood-tracker", kind=ComponentKind.MODULE, times=1):
    for _ in range(times):
        engine.track_interaction(component_id, kind, InteractionAction.CLICK)


class ResettingStore(MemoryStore):
    """Store that resets the engine's learning in the middle of its first write."""

    def __init__(self):
        super().__init__()
        self.engine = None
        self.resets = 0

    def set(self, key, value):
        if self.engine is not None and self.resets == 0:
            self.resets += 1
            self.engine.reset_learning()
        super().set(key, value)


class TestTimers:
    """Test debounced and periodic timer wiring."""

    def test_interaction_arms_persist_timer(self, engine, scheduler):
        click(engine)

        assert set(scheduler.debounced) == {PERSIST_TIMER}
        assert scheduler.debounced[PERSIST_TIMER][0] == 5.0

    def test_profile_timer_armed_from_fifth_interaction(self, engine, scheduler):
        click(engine, times=4)
        assert PROFILE_TIMER not in scheduler.debounced

        click(engine)
        assert scheduler.debounced[PROFILE_TIMER][0] == 10.0

    def test_profile_analysis_updates_layout(self, engine, scheduler):
        click(engine, times=5)

        profile = scheduler.fire(PROFILE_TIMER)

        assert profile.engagement_pattern == EngagementPattern.ROUTINE
        assert profile.primary_goal == PrimaryGoal.MONITORING
        assert engine.profile is profile
        assert engine.layout_config.mode == LayoutMode.FOCUS
        assert engine.layout_config.show_gamification is False
        assert engine.get_recommended_features() == ["mood-tracker"]

    def test_profile_analysis_needs_five_events(self, engine):
        click(engine, times=4)

        assert engine.run_profile_analysis() is None
        assert engine.profile == UserBehaviorProfile()

    def test_profile_analysis_recomputes_priorities(self, engine, clock):
        click(engine, times=5)
        clock.advance(days=7)

        engine.run_profile_analysis()

        # 5 interactions, no dwell, fully decayed recency: 5/50 * 0.4 * 100
        assert engine.get_component_priority("mood-tracker") == 4

    def test_start_runs_theme_refresh_periodically(self, engine, scheduler, clock):
        engine.start()

        assert scheduler.periodic[THEME_TIMER][0] == 60.0
        assert engine.get_circadian_config().mode == ThemeMode.AFTERNOON

        clock.advance(hours=10)
        scheduler.tick(THEME_TIMER)
        assert engine.get_circadian_config().mode == ThemeMode.NIGHT

    def test_shutdown_cancels_timers_and_flushes(self, engine, scheduler, store):
        engine.start()
        click(engine)

        engine.shutdown()

        assert scheduler.stopped is True
        assert store.get(LAYOUT_STORAGE_KEY) is not None
        assert engine.get_status()["dirty"] is False


class TestPersistence:
    """Test flushing and reloading engine state."""

    def test_flush_writes_state(self, engine, scheduler, store):
        click(engine)

        assert scheduler.fire(PERSIST_TIMER) is True

        assert store.get(LAYOUT_STORAGE_KEY) is not None
        assert engine.get_status()["dirty"] is False

    def test_state_survives_restart(self, engine, scheduler, store, clock):
        click(engine, "journal", ComponentKind.FEATURE, times=2)
        engine.pin_component("streak")
        engine.set_layout_mode(LayoutMode.COMPACT)
        engine.update_content_preferences(content_density="expanded")
        engine.flush()

        restored = AdaptiveEngine(store=store, scheduler=scheduler, clock=clock)

        assert restored.get_component_priority("journal") == engine.get_component_priority("journal")
        assert restored.get_component_priority("streak") == 80
        assert restored.layout_config.mode == LayoutMode.COMPACT
        assert restored.preferences.content_density == ContentDensity.EXPANDED
        assert len(restored.tracker.events) == 2

    def test_without_scheduler_flush_is_manual(self, store, clock):
        engine = AdaptiveEngine(store=store, clock=clock)
        click(engine)

        assert store.get(LAYOUT_STORAGE_KEY) is None
        assert engine.flush() is True
        assert store.get(LAYOUT_STORAGE_KEY) is not None

    def test_flush_noop_when_clean(self, engine, store):
        assert engine.flush() is True
        assert store.keys() == []

    def test_persisted_interactions_capped(self, store, clock):
        engine = AdaptiveEngine(store=store, clock=clock, persisted_interactions=3)
        for i in range(6):
            click(engine, f"card-{i}", ComponentKind.CARD)
        engine.flush()

        restored = AdaptiveEngine(store=store, clock=clock)

        assert [e.component_id for e in restored.tracker.events] == ["card-3", "card-4", "card-5"]


class TestComponentControls:
    """Test dwell, pin and hide through the engine."""

    def test_dwell_on_unknown_component_is_ignored(self, engine, scheduler):
        assert engine.track_dwell("ghost", 1000) is False
        assert engine.get_status()["dirty"] is False
        assert scheduler.debounced == {}

    def test_pin_and_hide(self, engine):
        click(engine, "a")
        click(engine, "b")

        assert engine.pin_component("a") is True
        assert engine.hide_component("b") is True

        assert engine.get_widget_state("a") == WidgetState.HERO
        assert [s.component_id for s in engine.get_adaptive_layout()] == ["a"]

        engine.show_component("b")
        engine.unpin_component("a")
        assert engine.get_component_priority("a") == 21
        assert len(engine.get_adaptive_layout()) == 2

    def test_unpin_unknown_is_noop(self, engine, scheduler):
        assert engine.unpin_component("ghost") is False
        assert scheduler.debounced == {}


class TestLayoutAndPreferences:
    """Test user-facing layout and preference controls."""

    def test_toggles(self, engine):
        assert engine.toggle_gamification().show_gamification is False
        assert engine.toggle_social().show_social is False
        assert engine.toggle_gamification().show_gamification is True

    def test_set_categories(self, engine):
        engine.set_preferred_categories(["music", "nature"])
        engine.set_disliked_categories(["news"])

        assert engine.preferences.preferred_categories == ["music", "nature"]
        assert engine.preferences.disliked_categories == ["news"]

    def test_unknown_preference_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.update_content_preferences(font_size=14)
        assert engine.get_status()["dirty"] is False

    def test_toggle_learning_cancels_profile_analysis(self, engine, scheduler):
        click(engine, times=5)

        assert engine.toggle_learning() is False

        assert PROFILE_TIMER in scheduler.cancelled
        assert PROFILE_TIMER not in scheduler.debounced
        assert engine.run_profile_analysis() is None

        click(engine)
        assert PROFILE_TIMER not in scheduler.debounced

        assert engine.toggle_learning() is True


class TestReset:
    """Test layout and learning resets."""

    def _prepare(self, engine):
        click(engine, times=5)
        engine.run_profile_analysis()
        engine.set_layout_mode(LayoutMode.COMPACT)
        engine.flush()
        # Pending, not yet flushed
        engine.update_content_preferences(content_density="compact")

    def test_reset_layout(self, engine, store, scheduler):
        self._prepare(engine)

        engine.reset_layout()

        assert engine.layout_config == LayoutConfig()
        assert engine.tracker.events == []
        assert engine.get_adaptive_layout() == []
        assert engine.profile == UserBehaviorProfile()
        # Learned keys go at once; the next flush writes the cleared state back
        assert store.keys() == [PREFERENCES_STORAGE_KEY]
        assert PERSIST_TIMER in scheduler.debounced

        scheduler.fire(PERSIST_TIMER)
        snapshot = load_state(store)
        assert snapshot.layout_config == LayoutConfig()
        assert snapshot.component_stats == []
        assert snapshot.interactions == []

    def test_reset_learning_keeps_layout(self, engine):
        self._prepare(engine)

        engine.reset_learning()

        assert engine.layout_config.mode == LayoutMode.COMPACT
        assert engine.tracker.stats == {}
        assert engine.profile == UserBehaviorProfile()

    def test_kept_layout_survives_restart(self, engine, store, scheduler, clock):
        """The layout kept by reset_learning is written back after the keys are cleared."""
        engine.set_layout_mode(LayoutMode.COMPACT)
        engine.flush()

        engine.reset_learning()
        engine.shutdown()

        restored = AdaptiveEngine(store=store, scheduler=scheduler, clock=clock)
        assert restored.layout_config.mode == LayoutMode.COMPACT
        assert restored.tracker.stats == {}
        assert restored.tracker.events == []
        assert restored.profile == UserBehaviorProfile()

    def test_reset_layout_restart_gives_default_layout(self, engine, store, scheduler, clock):
        self._prepare(engine)

        engine.reset_layout()
        engine.shutdown()

        restored = AdaptiveEngine(store=store, scheduler=scheduler, clock=clock)
        assert restored.layout_config == LayoutConfig()
        assert restored.tracker.stats == {}

    def test_preferences_survive_reset(self, engine, store, scheduler, clock):
        self._prepare(engine)

        engine.reset_layout()

        restored = AdaptiveEngine(store=store, scheduler=scheduler, clock=clock)
        assert restored.preferences.content_density == ContentDensity.COMPACT
        assert restored.tracker.stats == {}

    def test_reset_during_flush_is_not_undone(self, scheduler, clock):
        """A reset that lands while a flush is writing leaves the cleared state stored."""
        store = ResettingStore()
        engine = AdaptiveEngine(store=store, scheduler=scheduler, clock=clock)
        click(engine, times=3)
        store.engine = engine

        assert engine.flush() is True

        assert store.resets == 1
        assert engine.tracker.events == []
        snapshot = load_state(store)
        assert snapshot.interactions == []
        assert snapshot.component_stats == []
        assert engine.get_status()["dirty"] is False


class TestStatus:
    def test_get_status(self, engine):
        click(engine)

        status = engine.get_status()

        assert status["learning_enabled"] is True
        assert status["dirty"] is True
        assert status["tracker"]["components_tracked"] == 1
        assert status["layout"]["mode"] == "dashboard"
        assert status["theme"]["mode"] == "afternoon"
