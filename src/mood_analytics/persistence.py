"""
Adaptive State Persistence.

Pure serialize/deserialize functions for the adaptive engine state plus the
key-value stores it is written to. Each concern lives under its own key:

- moodmash_adaptive_layout: {layout_config, component_stats}
- moodmash_interactions: most recent interaction events
- moodmash_user_profile: behavior profile
- moodmash_content_prefs: content preferences

Reads never fail: a missing or unparsable key falls back to its default.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Generator, List, Optional, Protocol, TypeVar

from .behavior_profiler import UserBehaviorProfile
from .layout import ContentPreferences, LayoutConfig
from .usage_tracker import ComponentUsageStats, InteractionEvent

logger = logging.getLogger(__name__)

LAYOUT_STORAGE_KEY = "moodmash_adaptive_layout"
INTERACTIONS_STORAGE_KEY = "moodmash_interactions"
PROFILE_STORAGE_KEY = "moodmash_user_profile"
PREFERENCES_STORAGE_KEY = "moodmash_content_prefs"

# Cleared by the layout/learning resets; preferences survive them
LEARNED_STATE_KEYS = (LAYOUT_STORAGE_KEY, INTERACTIONS_STORAGE_KEY, PROFILE_STORAGE_KEY)

DEFAULT_PERSISTED_INTERACTIONS = 500

T = TypeVar("T")


class KeyValueStore(Protocol):
    """Durable string key-value store."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, used by tests and when no database is configured."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)


class SqliteStore:
    """
    SQLite-backed key-value store.

    Opens a short-lived connection per operation so it can be used from
    timer threads.
    """

    TABLE = "kv_state"

    def __init__(self, db_path: str):
        self.db_path = db_path
        with self._connect() as conn:
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {self.TABLE} "
                "(key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT value FROM {self.TABLE} WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO {self.TABLE} (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute(f"DELETE FROM {self.TABLE} WHERE key = ?", (key,))


@dataclass
class AdaptiveSnapshot:
    """Everything the adaptive engine persists."""

    layout_config: LayoutConfig = field(default_factory=LayoutConfig)
    component_stats: List[ComponentUsageStats] = field(default_factory=list)
    interactions: List[InteractionEvent] = field(default_factory=list)
    profile: UserBehaviorProfile = field(default_factory=UserBehaviorProfile)
    preferences: ContentPreferences = field(default_factory=ContentPreferences)


def serialize_state(
    snapshot: AdaptiveSnapshot,
    max_interactions: int = DEFAULT_PERSISTED_INTERACTIONS,
) -> Dict[str, str]:
    """Encode a snapshot as one JSON string per storage key."""
    recent = snapshot.interactions[-max_interactions:] if max_interactions > 0 else []
    layout = {
        "layout_config": snapshot.layout_config.to_dict(),
        "component_stats": {s.component_id: s.to_dict() for s in snapshot.component_stats},
    }
    return {
        LAYOUT_STORAGE_KEY: json.dumps(layout),
        INTERACTIONS_STORAGE_KEY: json.dumps([e.to_dict() for e in recent]),
        PROFILE_STORAGE_KEY: json.dumps(snapshot.profile.to_dict()),
        PREFERENCES_STORAGE_KEY: json.dumps(snapshot.preferences.to_dict()),
    }


def _decode(raw: Optional[str], key: str, parse: Callable[[object], T], default: Callable[[], T]) -> T:
    if raw is None:
        return default()
    try:
        return parse(json.loads(raw))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning(f"[PERSIST] Discarding unreadable {key}: {e}")
        return default()


def _parse_layout(data) -> tuple:
    config = LayoutConfig.from_dict(data["layout_config"])
    stats = [ComponentUsageStats.from_dict(s) for s in data["component_stats"].values()]
    return config, stats


def _parse_interactions(data) -> List[InteractionEvent]:
    if not isinstance(data, list):
        raise TypeError(f"expected a list, got {type(data).__name__}")
    return [InteractionEvent.from_dict(e) for e in data]


def deserialize_state(values: Dict[str, Optional[str]]) -> AdaptiveSnapshot:
    """Decode stored JSON strings, substituting defaults key by key."""
    layout_config, component_stats = _decode(
        values.get(LAYOUT_STORAGE_KEY), LAYOUT_STORAGE_KEY, _parse_layout,
        lambda: (LayoutConfig(), []),
    )
    return AdaptiveSnapshot(
        layout_config=layout_config,
        component_stats=component_stats,
        interactions=_decode(
            values.get(INTERACTIONS_STORAGE_KEY), INTERACTIONS_STORAGE_KEY,
            _parse_interactions, list,
        ),
        profile=_decode(
            values.get(PROFILE_STORAGE_KEY), PROFILE_STORAGE_KEY,
            UserBehaviorProfile.from_dict, UserBehaviorProfile,
        ),
        preferences=_decode(
            values.get(PREFERENCES_STORAGE_KEY), PREFERENCES_STORAGE_KEY,
            ContentPreferences.from_dict, ContentPreferences,
        ),
    )


ALL_STORAGE_KEYS = (
    LAYOUT_STORAGE_KEY,
    INTERACTIONS_STORAGE_KEY,
    PROFILE_STORAGE_KEY,
    PREFERENCES_STORAGE_KEY,
)


def load_state(store: KeyValueStore) -> AdaptiveSnapshot:
    """Read every key from the store; store read errors also fall back to defaults."""
    values: Dict[str, Optional[str]] = {}
    for key in ALL_STORAGE_KEYS:
        try:
            values[key] = store.get(key)
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"[PERSIST] Could not read {key}: {e}")
            values[key] = None
    return deserialize_state(values)


def save_state(
    store: KeyValueStore,
    snapshot: AdaptiveSnapshot,
    max_interactions: int = DEFAULT_PERSISTED_INTERACTIONS,
) -> bool:
    """
    Write a snapshot to the store. Last write wins; no transaction.

    Returns:
        True if every key was written
    """
    try:
        for key, value in serialize_state(snapshot, max_interactions).items():
            store.set(key, value)
    except (sqlite3.Error, OSError) as e:
        logger.error(f"[PERSIST] Failed to save adaptive state: {e}")
        return False
    logger.debug(f"[PERSIST] Saved {len(snapshot.component_stats)} component stats")
    return True


def clear_learned_state(store: KeyValueStore) -> None:
    for key in LEARNED_STATE_KEYS:
        try:
            store.delete(key)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"[PERSIST] Failed to delete {key}: {e}")


def save_preferences(store: KeyValueStore, preferences: ContentPreferences) -> bool:
    """Write only the content preferences key."""
    try:
        store.set(PREFERENCES_STORAGE_KEY, json.dumps(preferences.to_dict()))
    except (sqlite3.Error, OSError) as e:
        logger.error(f"[PERSIST] Failed to save content preferences: {e}")
        return False
    return True
