"""Adaptive engine lifecycle backed by the SQLite state store."""
import logging
from pathlib import Path
from typing import Optional

from automation.scheduler import TimerScheduler
from mood_analytics.engine import AdaptiveEngine
from mood_analytics.persistence import SqliteStore

from .config import Settings, get_settings

log = logging.getLogger(__name__)


class EngineManager:
    """
    Owns the process-wide AdaptiveEngine.

    The engine is created on application startup and shut down (timers
    cancelled, pending state flushed) on application exit.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._engine: Optional[AdaptiveEngine] = None

    def start(self, engine: Optional[AdaptiveEngine] = None) -> AdaptiveEngine:
        """Create (or adopt) and start the engine."""
        if self._engine is not None:
            return self._engine

        if engine is None:
            Path(self.settings.data_path).mkdir(parents=True, exist_ok=True)
            engine = AdaptiveEngine(
                store=SqliteStore(self.settings.state_db_path),
                scheduler=TimerScheduler(),
                learning_enabled=self.settings.learning_enabled,
                profile_debounce_seconds=self.settings.profile_debounce_seconds,
                persist_debounce_seconds=self.settings.persist_debounce_seconds,
                theme_refresh_seconds=self.settings.theme_refresh_seconds,
                log_capacity=self.settings.interaction_log_capacity,
                persisted_interactions=self.settings.persisted_interactions,
            )
            log.info(f"Adaptive state stored at {self.settings.state_db_path}")

        engine.start()
        self._engine = engine
        return engine

    def stop(self) -> None:
        if self._engine is not None:
            self._engine.shutdown()
            self._engine = None

    def get_engine(self) -> AdaptiveEngine:
        """Return the running engine, starting one lazily if needed."""
        if self._engine is None:
            return self.start()
        return self._engine


# Singleton instance
engine_manager = EngineManager()


def get_engine() -> AdaptiveEngine:
    """FastAPI dependency returning the running engine."""
    return engine_manager.get_engine()
