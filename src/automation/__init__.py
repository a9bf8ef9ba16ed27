"""MoodMash Automation Module.

Provides the named, cancellable timers that drive debounced recomputation,
write-behind persistence and periodic theme refresh.
"""

from .scheduler import TimerScheduler

__all__ = ["TimerScheduler"]
