"""
Timer Scheduler.

Named, cancellable timers for the adaptive engine:

- Debounced timers fire once after a quiet period; re-arming a pending
  debounce cancels it, so only the most recent arming survives.
- Periodic timers fire on a fixed interval until cancelled.

Timers run on daemon threads. Callbacks must not raise; any exception is
logged and swallowed so a failing tick never kills the schedule.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class TimerScheduler:
    """
    Owns every timer of one context and cancels them together on shutdown.

    Features:
    - debounce(): coalescing one-shot timers
    - every(): fixed-interval repeating timers
    - cancel()/shutdown(): teardown of one or all timers
    """

    def __init__(self):
        self._timers: Dict[str, threading.Timer] = {}
        self._periodic: Dict[str, float] = {}
        self._generations: Dict[str, object] = {}
        self._lock = threading.Lock()
        self._running = True
        self._fired: Dict[str, datetime] = {}

        logger.info("[SCHEDULER] Initialized")

    @property
    def running(self) -> bool:
        return self._running

    def debounce(self, name: str, delay_seconds: float, callback: Callable[[], Any]) -> None:
        """
        Arm (or re-arm) a one-shot timer.

        Args:
            name: Timer name; a pending timer with the same name is cancelled
            delay_seconds: Quiet period before the callback fires
            callback: Zero-argument callable
        """
        with self._lock:
            if not self._running:
                return
            self._cancel_locked(name)

            def fire():
                with self._lock:
                    if self._timers.get(name) is not timer:
                        return
                    del self._timers[name]
                self._run(name, callback)

            timer = threading.Timer(delay_seconds, fire)
            timer.daemon = True
            self._timers[name] = timer
            timer.start()

        logger.debug(f"[SCHEDULER] Armed {name} in {delay_seconds}s")

    def every(
        self,
        name: str,
        interval_seconds: float,
        callback: Callable[[], Any],
        run_immediately: bool = False,
    ) -> None:
        """
        Start a repeating timer.

        Args:
            name: Timer name; an existing timer with the same name is replaced
            interval_seconds: Seconds between runs
            callback: Zero-argument callable
            run_immediately: Also run the callback once right away
        """
        with self._lock:
            if not self._running:
                return
            self._cancel_locked(name)
            self._periodic[name] = interval_seconds
            generation = object()
            self._generations[name] = generation

        if run_immediately:
            self._run(name, callback)

        self._schedule_next(name, interval_seconds, callback, generation)
        logger.info(f"[SCHEDULER] Started {name} with interval={interval_seconds}s")

    def _schedule_next(
        self,
        name: str,
        interval_seconds: float,
        callback: Callable[[], Any],
        generation: object,
    ) -> None:
        """Schedule the next run of a periodic timer."""

        def run_and_reschedule():
            with self._lock:
                if not self._running or self._generations.get(name) is not generation:
                    return
            self._run(name, callback)
            self._schedule_next(name, interval_seconds, callback, generation)

        with self._lock:
            if not self._running or self._generations.get(name) is not generation:
                return
            timer = threading.Timer(interval_seconds, run_and_reschedule)
            timer.daemon = True
            self._timers[name] = timer
            timer.start()

    def _run(self, name: str, callback: Callable[[], Any]) -> None:
        try:
            callback()
        except Exception as e:
            logger.error(f"[SCHEDULER] Timer {name} failed: {e}")
        self._fired[name] = datetime.now(timezone.utc)

    def _cancel_locked(self, name: str) -> bool:
        self._periodic.pop(name, None)
        self._generations.pop(name, None)
        timer = self._timers.pop(name, None)
        if timer:
            timer.cancel()
            return True
        return False

    def cancel(self, name: str) -> bool:
        """Cancel a pending timer. Returns False if nothing was pending."""
        with self._lock:
            return self._cancel_locked(name)

    def pending(self) -> List[str]:
        """Names of timers currently armed."""
        with self._lock:
            return sorted(self._timers)

    def shutdown(self) -> None:
        """Cancel every timer and refuse new ones."""
        with self._lock:
            self._running = False
            for name in list(self._timers):
                self._cancel_locked(name)
            self._periodic.clear()
            self._generations.clear()
        logger.info("[SCHEDULER] Stopped")

    def get_status(self) -> Dict[str, Any]:
        """Get scheduler status."""
        with self._lock:
            return {
                "running": self._running,
                "pending": sorted(self._timers),
                "periodic": dict(self._periodic),
                "last_fired": {k: v.isoformat() for k, v in self._fired.items()},
            }
