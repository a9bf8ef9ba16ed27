"""
Mood Pattern Analysis Module.

Mines an ordered snapshot of mood entries for recurring patterns:

- Circadian: best/worst time of day by mean intensity
- Weekly: best/worst day of week by mean intensity
- Correlation: emotions that frequently sit next to each other
- Trend: recent half vs older half of the last 30 entries
- Trigger: note keywords that co-occur with one dominant emotion

All analyzers are pure functions over the same snapshot. Insufficient
data is reported by emitting nothing, never by raising. The snapshot is
expected newest-first; array adjacency is treated as temporal adjacency.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Dict, List, Sequence, Tuple

from .models import MoodEmotion, MoodEntry, Pattern, PatternType

logger = logging.getLogger(__name__)

MIN_ENTRIES_FOR_ANALYSIS = 5
MIN_ENTRIES_FOR_TREND = 7
TREND_WINDOW = 30
TREND_STABLE_SLOPE = 0.05

CIRCADIAN_MIN_SLOTS = 2
CIRCADIAN_MIN_CONFIDENCE = 0.2
WEEKLY_MIN_DAYS = 3
WEEKLY_MIN_CONFIDENCE = 0.15

CORRELATION_MIN_COUNT = 2
CORRELATION_MAX_RESULTS = 3
CORRELATION_COUNT_SCALE = 5
CORRELATION_MAX_CONFIDENCE = 0.8

TRIGGER_MIN_NOTES = 3
TRIGGER_MIN_OBSERVATIONS = 2
TRIGGER_MIN_CONFIDENCE = 0.6
TRIGGER_MIN_TOKEN_LENGTH = 4
TRIGGER_CANDIDATE_LIMIT = 5

TIME_SLOTS = ("morning", "afternoon", "evening", "night")
DAY_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)

_NON_ALPHA = re.compile(r"[^a-z]")


@dataclass
class BucketStats:
    """Running aggregate for one time-of-day slot or weekday."""

    name: str
    count: int = 0
    avg_intensity: float = 0.0
    emotion: Optional[MoodEmotion] = None  # first-seen, not modal

    def add(self, entry: MoodEntry) -> None:
        self.count += 1
        self.avg_intensity = (
            (self.avg_intensity * (self.count - 1)) + entry.intensity
        ) / self.count
        if self.emotion is None:
            self.emotion = entry.emotion


def time_slot_for_hour(hour: int) -> str:
    """Map an hour of day to morning/afternoon/evening/night."""
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def day_name_for(entry: MoodEntry) -> str:
    # datetime.weekday() is Monday=0; shift so Sunday=0
    return DAY_NAMES[(entry.created_at.weekday() + 1) % 7]


def _bucket(
    entries: Sequence[MoodEntry], names: Sequence[str], key
) -> List[BucketStats]:
    buckets = {name: BucketStats(name=name) for name in names}
    for entry in entries:
        buckets[key(entry)].add(entry)
    return [b for b in buckets.values() if b.count > 0]


def analyze_circadian_pattern(entries: Sequence[MoodEntry]) -> Optional[Pattern]:
    """Find the best and worst time of day by average intensity."""
    slots = _bucket(
        entries, TIME_SLOTS, lambda e: time_slot_for_hour(e.created_at.hour)
    )
    if len(slots) < CIRCADIAN_MIN_SLOTS:
        return None

    best = slots[0]
    for slot in slots[1:]:
        if slot.avg_intensity > best.avg_intensity:
            best = slot

    others = [s for s in slots if s is not best]
    worst = others[0]
    for slot in others[1:]:
        if slot.avg_intensity < worst.avg_intensity:
            worst = slot

    confidence = min(best.count, worst.count) / len(entries)
    if confidence < CIRCADIAN_MIN_CONFIDENCE:
        logger.debug(f"[PATTERNS] Circadian confidence too low: {confidence:.2f}")
        return None

    best_emotion, worst_emotion = best.emotion, worst.emotion

    return Pattern(
        type=PatternType.CIRCADIAN,
        title="Daily Energy Patterns",
        description=(
            f"You tend to feel most {best_emotion.label.lower()} during the "
            f"{best.name} and most {worst_emotion.label.lower()} during {worst.name}."
        ),
        confidence=confidence,
        evidence=[
            f"{best.count} entries show {best_emotion.emoji} {best_emotion.label} "
            f"(avg intensity: {best.avg_intensity:.1f}) during {best.name}",
            f"{worst.count} entries show {worst_emotion.emoji} {worst_emotion.label} "
            f"(avg intensity: {worst.avg_intensity:.1f}) during {worst.name}",
        ],
        suggestions=[
            f"Schedule {best_emotion.label}-inducing activities during {best.name}",
            f"Try relaxation techniques during {worst.name} to improve your mood",
            "Consider a consistent sleep schedule to stabilize circadian rhythm",
        ],
    )


def analyze_weekly_pattern(entries: Sequence[MoodEntry]) -> Optional[Pattern]:
    """Find the best and worst weekday by average intensity."""
    days = _bucket(entries, DAY_NAMES, day_name_for)
    if len(days) < WEEKLY_MIN_DAYS:
        return None

    ranked = sorted(days, key=lambda d: d.avg_intensity, reverse=True)
    best, worst = ranked[0], ranked[-1]

    confidence = min(best.count, worst.count) / len(entries)
    if confidence < WEEKLY_MIN_CONFIDENCE:
        logger.debug(f"[PATTERNS] Weekly confidence too low: {confidence:.2f}")
        return None

    return Pattern(
        type=PatternType.WEEKLY,
        title="Weekly Mood Cycles",
        description=(
            f"{best.name}s are your best days with average intensity of "
            f"{best.avg_intensity:.1f}, while {worst.name}s tend to be more "
            f"challenging at {worst.avg_intensity:.1f}."
        ),
        confidence=confidence,
        evidence=[
            f"{best.count} entries on {best.name}s show higher energy",
            f"{worst.count} entries on {worst.name}s show lower energy",
        ],
        suggestions=[
            f"Plan enjoyable activities for {worst.name}s to boost your mood",
            "Use best days for important tasks or social activities",
            "Consider what factors might be causing the mid-week slump",
        ],
    )


def _pair_key(a: MoodEmotion, b: MoodEmotion) -> Tuple[MoodEmotion, MoodEmotion]:
    first, second = sorted((a, b), key=lambda e: e.value)
    return first, second


def analyze_correlations(entries: Sequence[MoodEntry]) -> List[Pattern]:
    """Count unordered emotion pairs over adjacent entries."""
    pair_counts: Counter = Counter()
    for current, following in zip(entries, entries[1:]):
        pair_counts[_pair_key(current.emotion, following.emotion)] += 1

    significant = [
        (pair, count)
        for pair, count in pair_counts.most_common()
        if count >= CORRELATION_MIN_COUNT
    ][:CORRELATION_MAX_RESULTS]

    patterns = []
    for (first, second), count in significant:
        patterns.append(Pattern(
            type=PatternType.CORRELATION,
            title="Mood Connections",
            description=(
                f"When you feel {first.label.lower()}, you often follow up "
                f"with {second.label.lower()}."
            ),
            confidence=min(count / CORRELATION_COUNT_SCALE, CORRELATION_MAX_CONFIDENCE),
            evidence=[
                f"This transition occurred {count} times in your mood history",
                f"{first.emoji} → {second.emoji} is a common mood pattern",
            ],
            suggestions=[
                "Understanding this pattern can help you manage mood transitions",
                f"Consider what triggers lead from {first.label} to {second.label}",
            ],
        ))
    return patterns


def _mean_intensity(entries: Sequence[MoodEntry]) -> float:
    return sum(e.intensity for e in entries) / len(entries)


def analyze_trend(entries: Sequence[MoodEntry]) -> Optional[Pattern]:
    """Compare the recent half of the last 30 entries with the older half."""
    if len(entries) < MIN_ENTRIES_FOR_TREND:
        return None

    recent_entries = list(entries[:TREND_WINDOW])
    midpoint = len(recent_entries) // 2
    recent_avg = _mean_intensity(recent_entries[:midpoint])
    older_avg = _mean_intensity(recent_entries[midpoint:])
    slope = (recent_avg - older_avg) / midpoint

    if abs(slope) < TREND_STABLE_SLOPE:
        direction = "stable"
        title = "Stable Mood Pattern"
        description = "Your mood has been relatively stable over recent weeks."
        suggestions = [
            "Continue your current routines and activities",
            "Try new positive experiences to boost your mood further",
        ]
        movement = "remained steady"
    elif slope > 0:
        direction = "improving"
        title = "Positive Mood Trend"
        description = (
            "Your mood has been improving, with an average increase of "
            f"{slope * 10:.1f} points over recent entries."
        )
        suggestions = [
            "Great job! Keep doing what you're doing",
            "Consider what's working and try to maintain these factors",
            "Share your positive experiences with others",
        ]
        movement = "increased"
    else:
        direction = "declining"
        title = "Mood Needs Attention"
        description = (
            "Your mood has shown a slight declining trend recently. "
            f"Average intensity dropped by {abs(slope) * 10:.1f} points."
        )
        suggestions = [
            "Consider talking to a friend or professional",
            "Review recent events that might be affecting your mood",
            "Try activities that have helped in the past",
        ]
        movement = "decreased"

    logger.debug(f"[PATTERNS] Trend {direction}: slope={slope:.3f}")

    return Pattern(
        type=PatternType.TREND,
        title=title,
        description=description,
        confidence=min(len(recent_entries) / TREND_WINDOW, 1.0),
        evidence=[
            f"{len(recent_entries)} recent entries analyzed",
            f"Average mood {movement} from {older_avg:.1f} to {recent_avg:.1f}",
        ],
        suggestions=suggestions,
    )


@dataclass
class TriggerCandidate:
    keyword: str
    emotion: MoodEmotion
    count: int
    confidence: float


def _note_keywords(note: str) -> List[str]:
    words = (_NON_ALPHA.sub("", word) for word in note.lower().split())
    return [w for w in words if len(w) >= TRIGGER_MIN_TOKEN_LENGTH]


def find_trigger_candidates(entries: Sequence[MoodEntry]) -> List[TriggerCandidate]:
    """Rank note keywords that co-occur with a dominant emotion."""
    with_notes = [e for e in entries if e.note and len(e.note) > 3]
    if len(with_notes) < TRIGGER_MIN_NOTES:
        return []

    keyword_emotions: Dict[str, List[MoodEmotion]] = {}
    for entry in with_notes:
        for word in _note_keywords(entry.note):
            keyword_emotions.setdefault(word, []).append(entry.emotion)

    candidates = []
    for keyword, emotions in keyword_emotions.items():
        if len(emotions) < TRIGGER_MIN_OBSERVATIONS:
            continue
        emotion, dominant = Counter(emotions).most_common(1)[0]
        confidence = dominant / len(emotions)
        if confidence >= TRIGGER_MIN_CONFIDENCE:
            candidates.append(TriggerCandidate(keyword, emotion, len(emotions), confidence))

    candidates.sort(key=lambda c: c.count, reverse=True)
    return candidates[:TRIGGER_CANDIDATE_LIMIT]


def analyze_triggers(entries: Sequence[MoodEntry]) -> List[Pattern]:
    """Emit a single trigger pattern for the strongest note keyword."""
    candidates = find_trigger_candidates(entries)
    if not candidates:
        return []

    # Only the top-ranked keyword is surfaced
    top = candidates[0]
    emotion = top.emotion

    return [Pattern(
        type=PatternType.TRIGGER,
        title="Mood Themes Detected",
        description=(
            f'When you mention "{top.keyword}", you often feel {emotion.label.lower()}.'
        ),
        confidence=top.confidence,
        evidence=[
            f'"{top.keyword}" appeared in {top.count} entries',
            f"{top.confidence * 100:.0f}% of these entries showed {emotion.emoji} {emotion.label}",
        ],
        suggestions=[
            f'Reflect on how "{top.keyword}" affects your mood',
            "Consider keeping a journal about this topic",
            "Plan positive experiences related to this theme",
        ],
    )]


def insufficient_data_pattern(entry_count: int) -> Pattern:
    """Placeholder returned when there are too few entries to analyze."""
    return Pattern(
        type=PatternType.TREND,
        title="Need More Data",
        description="Keep logging your mood to unlock personalized pattern insights.",
        confidence=0.0,
        evidence=[
            f"Currently tracking {entry_count} entries. "
            f"Minimum {MIN_ENTRIES_FOR_ANALYSIS} entries needed for analysis."
        ],
        suggestions=["Log your mood regularly for at least a week"],
    )


def analyze_patterns(entries: Sequence[MoodEntry]) -> List[Pattern]:
    """
    Run every analyzer over a newest-first mood-entry snapshot.

    Args:
        entries: Ordered, read-only snapshot of mood entries

    Returns:
        Patterns in fixed order: circadian, weekly, correlations, trend,
        trigger. A single zero-confidence placeholder if there are fewer
        than five entries.
    """
    if len(entries) < MIN_ENTRIES_FOR_ANALYSIS:
        return [insufficient_data_pattern(len(entries))]

    patterns: List[Pattern] = []

    circadian = analyze_circadian_pattern(entries)
    if circadian:
        patterns.append(circadian)

    weekly = analyze_weekly_pattern(entries)
    if weekly:
        patterns.append(weekly)

    patterns.extend(analyze_correlations(entries))

    trend = analyze_trend(entries)
    if trend:
        patterns.append(trend)

    patterns.extend(analyze_triggers(entries))

    logger.info(
        f"[PATTERNS] Analyzed {len(entries)} entries: "
        f"{[p.type.value for p in patterns]}"
    )
    return patterns
