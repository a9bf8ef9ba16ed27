"""
Unit tests for the mood pattern analyzers.

These tests verify:
1. The dispatcher's insufficient-data placeholder and analyzer ordering
2. Circadian and weekly best/worst selection and confidence gating
3. Adjacent-pair emotion correlations
4. Recent-vs-older trend detection
5. Note keyword triggers

Usage:
    pytest tests/test_pattern_analyzer.py -v
"""
import re
import pytest
from datetime import datetime, timezone

from mood_analytics.models import MoodEmotion, MoodEntry, PatternType
from mood_analytics.pattern_analyzer import (
    analyze_circadian_pattern,
    analyze_correlations,
    analyze_patterns,
    analyze_trend,
    analyze_triggers,
    analyze_weekly_pattern,
    day_name_for,
    find_trigger_candidates,
    time_slot_for_hour,
)


def at(day: int, hour: int) -> datetime:
    """A time in January 2024 (the 7th is a Sunday)."""
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


# ============================================================================
# Model Tests
# ============================================================================


class TestMoodEntry:
    """Test mood entry validation."""

    @pytest.mark.parametrize("intensity", [0, 11, -3])
    def test_rejects_out_of_range_intensity(self, intensity):
        with pytest.raises(ValueError):
            MoodEntry(emotion="happy", intensity=intensity, created_at=at(7, 9))

    @pytest.mark.parametrize("intensity", [5.5, "5", True])
    def test_rejects_non_integer_intensity(self, intensity):
        with pytest.raises(ValueError):
            MoodEntry(emotion="happy", intensity=intensity, created_at=at(7, 9))

    def test_rejects_unknown_emotion(self):
        with pytest.raises(ValueError):
            MoodEntry(emotion="bored", intensity=5, created_at=at(7, 9))

    def test_updated_at_defaults_to_created_at(self, make_entry):
        entry = make_entry(created_at=at(7, 9))
        assert entry.updated_at == entry.created_at

    def test_with_updates_refreshes_timestamp(self, make_entry):
        entry = make_entry(created_at=at(7, 9))
        updated = entry.with_updates(intensity=9)

        assert updated.intensity == 9
        assert updated.id == entry.id
        assert updated.created_at == entry.created_at
        assert updated.updated_at > entry.updated_at

    def test_emotion_display_metadata(self):
        assert MoodEmotion.HAPPY.label == "Happy"
        assert MoodEmotion.STRESSED.emoji == "😣"


# ============================================================================
# Dispatcher Tests
# ============================================================================


class TestAnalyzePatterns:
    """Test the analyzer dispatcher."""

    @pytest.mark.parametrize("count", [0, 1, 4])
    def test_insufficient_data_placeholder(self, make_entry, count):
        """Fewer than five entries yield exactly one zero-confidence placeholder."""
        entries = [make_entry() for _ in range(count)]

        patterns = analyze_patterns(entries)

        assert len(patterns) == 1
        placeholder = patterns[0]
        assert placeholder.type == PatternType.TREND
        assert placeholder.title == "Need More Data"
        assert placeholder.confidence == 0
        assert placeholder.evidence == [
            f"Currently tracking {count} entries. Minimum 5 entries needed for analysis."
        ]

    def test_patterns_emitted_in_fixed_order(self, make_entry):
        """Circadian, then correlations, trend and trigger."""
        entries = []
        for i in range(10):
            if i % 2 == 0:
                entries.append(make_entry("happy", 8, at(7, 8), note="sunny walk"))
            else:
                entries.append(make_entry("sad", 3, at(7, 19)))

        patterns = analyze_patterns(entries)

        assert [p.type for p in patterns] == [
            PatternType.CIRCADIAN,
            PatternType.CORRELATION,
            PatternType.TREND,
            PatternType.TRIGGER,
        ]

    def test_confidence_always_in_unit_interval(self, make_entry):
        entries = [
            make_entry(emotion, (i % 10) + 1, at(7 + i % 7, (i * 5) % 24), note="long day at work")
            for i, emotion in enumerate(["happy", "sad", "calm", "stressed"] * 8)
        ]

        for pattern in analyze_patterns(entries):
            assert 0 <= pattern.confidence <= 1

    def test_reported_averages_stay_in_intensity_range(self, make_entry):
        """Mean intensities quoted in circadian and weekly text lie within 1..10."""
        entries = [
            make_entry(
                "happy" if i % 2 == 0 else "sad",
                10 if i % 2 == 0 else 1,
                at(7 + i % 3, 8 if i % 2 == 0 else 19),
            )
            for i in range(12)
        ]

        patterns = {p.type: p for p in analyze_patterns(entries)}
        circadian_text = " ".join(patterns[PatternType.CIRCADIAN].evidence)
        weekly_text = patterns[PatternType.WEEKLY].description

        circadian_means = {float(v) for v in re.findall(r"\d+\.\d", circadian_text)}
        weekly_means = {float(v) for v in re.findall(r"\d+\.\d", weekly_text)}

        assert circadian_means == {10.0, 1.0}
        assert weekly_means == {5.5}
        for mean in circadian_means | weekly_means:
            assert 1 <= mean <= 10

    def test_does_not_mutate_input(self, make_entry):
        entries = [make_entry("happy", i + 1, at(7, 8 + i)) for i in range(6)]
        snapshot = list(entries)

        analyze_patterns(entries)

        assert entries == snapshot


# ============================================================================
# Circadian Tests
# ============================================================================


class TestCircadianPattern:
    """Test best/worst time-of-day detection."""

    @pytest.mark.parametrize("hour,slot", [
        (4, "night"), (5, "morning"), (11, "morning"), (12, "afternoon"),
        (16, "afternoon"), (17, "evening"), (20, "evening"), (21, "night"), (0, "night"),
    ])
    def test_time_slot_boundaries(self, hour, slot):
        assert time_slot_for_hour(hour) == slot

    def test_best_and_worst_slots(self, make_entry):
        entries = (
            [make_entry("happy", 8, at(7, 8)) for _ in range(3)]
            + [make_entry("sad", 3, at(7, 19)) for _ in range(3)]
        )

        pattern = analyze_circadian_pattern(entries)

        assert pattern.type == PatternType.CIRCADIAN
        assert pattern.title == "Daily Energy Patterns"
        assert pattern.confidence == pytest.approx(0.5)
        assert pattern.description == (
            "You tend to feel most happy during the morning and most sad during evening."
        )
        assert pattern.evidence[0] == "3 entries show 😊 Happy (avg intensity: 8.0) during morning"
        assert pattern.evidence[1] == "3 entries show 😢 Sad (avg intensity: 3.0) during evening"

    def test_uneven_morning_evening_split(self, make_entry):
        """A lone afternoon entry neither wins nor counts towards confidence."""
        entries = [
            make_entry("happy", 8, at(7, 8)),
            make_entry("happy", 7, at(7, 8)),
            make_entry("sad", 3, at(7, 20)),
            make_entry("sad", 2, at(7, 20)),
            make_entry("calm", 5, at(7, 13)),
        ]

        pattern = analyze_circadian_pattern(entries)

        assert pattern.evidence == [
            "2 entries show 😊 Happy (avg intensity: 7.5) during morning",
            "2 entries show 😢 Sad (avg intensity: 2.5) during evening",
        ]
        assert pattern.confidence == pytest.approx(0.4)

    def test_worst_is_lowest_among_remaining_slots(self, make_entry):
        entries = (
            [make_entry("happy", 8, at(7, 8)) for _ in range(2)]
            + [make_entry("tired", 2, at(7, 14)) for _ in range(2)]
            + [make_entry("calm", 5, at(7, 23)) for _ in range(2)]
        )

        pattern = analyze_circadian_pattern(entries)

        assert "during the morning" in pattern.description
        assert "most tired during afternoon" in pattern.description
        assert pattern.confidence == pytest.approx(2 / 6)

    def test_tied_slots_never_coincide(self, make_entry):
        """On equal means the earlier slot is best and the other is worst."""
        entries = (
            [make_entry("happy", 5, at(7, 8)) for _ in range(2)]
            + [make_entry("calm", 5, at(7, 14)) for _ in range(2)]
        )

        pattern = analyze_circadian_pattern(entries)

        assert "most happy during the morning" in pattern.description
        assert "most calm during afternoon" in pattern.description

    def test_slot_emotion_is_first_seen(self, make_entry):
        entries = [
            make_entry("calm", 8, at(7, 8)),
            make_entry("happy", 8, at(7, 9)),
            make_entry("happy", 8, at(7, 10)),
            make_entry("sad", 2, at(7, 19)),
            make_entry("sad", 2, at(7, 20)),
        ]

        pattern = analyze_circadian_pattern(entries)

        assert "most calm during the morning" in pattern.description

    def test_requires_two_populated_slots(self, make_entry):
        entries = [make_entry("happy", i + 1, at(7, 8)) for i in range(6)]
        assert analyze_circadian_pattern(entries) is None

    def test_low_confidence_suppressed(self, make_entry):
        entries = (
            [make_entry("happy", 9, at(7, 8))]
            + [make_entry("sad", 3, at(7, 14)) for _ in range(9)]
        )
        assert analyze_circadian_pattern(entries) is None


# ============================================================================
# Weekly Tests
# ============================================================================


class TestWeeklyPattern:
    """Test best/worst weekday detection."""

    def test_day_names_start_on_sunday(self, make_entry):
        assert day_name_for(make_entry(created_at=at(7, 9))) == "Sunday"
        assert day_name_for(make_entry(created_at=at(8, 9))) == "Monday"
        assert day_name_for(make_entry(created_at=at(13, 9))) == "Saturday"

    def test_best_and_worst_days(self, make_entry):
        entries = (
            [make_entry("happy", 9, at(7, 9)) for _ in range(2)]
            + [make_entry("calm", 5, at(8, 9)) for _ in range(2)]
            + [make_entry("sad", 2, at(9, 9)) for _ in range(2)]
        )

        pattern = analyze_weekly_pattern(entries)

        assert pattern.type == PatternType.WEEKLY
        assert pattern.confidence == pytest.approx(2 / 6)
        assert pattern.description == (
            "Sundays are your best days with average intensity of 9.0, "
            "while Tuesdays tend to be more challenging at 2.0."
        )
        assert pattern.suggestions[0] == "Plan enjoyable activities for Tuesdays to boost your mood"

    def test_ties_keep_calendar_order(self, make_entry):
        entries = [make_entry("calm", 5, at(day, 9)) for day in (7, 8, 9) for _ in range(2)]

        pattern = analyze_weekly_pattern(entries)

        assert pattern.description.startswith("Sundays are your best days")
        assert "while Tuesdays tend to be" in pattern.description

    def test_requires_three_days(self, make_entry):
        entries = [make_entry("happy", 5, at(day, 9)) for day in (7, 8) for _ in range(3)]
        assert analyze_weekly_pattern(entries) is None

    def test_low_confidence_suppressed(self, make_entry):
        entries = (
            [make_entry("happy", 9, at(7, 9)), make_entry("calm", 5, at(8, 9))]
            + [make_entry("sad", 2, at(9, 9)) for _ in range(8)]
        )
        assert analyze_weekly_pattern(entries) is None


# ============================================================================
# Correlation Tests
# ============================================================================


class TestCorrelations:
    """Test adjacent emotion pair counting."""

    def test_unordered_pairs_counted_together(self, make_entry):
        entries = [make_entry(e) for e in ["sad", "happy", "sad", "happy", "sad"]]

        patterns = analyze_correlations(entries)

        assert len(patterns) == 1
        pattern = patterns[0]
        assert pattern.type == PatternType.CORRELATION
        assert pattern.description == "When you feel happy, you often follow up with sad."
        assert pattern.evidence[0] == "This transition occurred 4 times in your mood history"
        assert pattern.confidence == pytest.approx(0.8)

    def test_confidence_scales_with_count(self, make_entry):
        entries = [make_entry("calm") for _ in range(3)]

        patterns = analyze_correlations(entries)

        assert len(patterns) == 1
        assert patterns[0].confidence == pytest.approx(0.4)

    def test_pair_seen_twice_through_dispatcher(self, make_entry):
        """Happy and calm adjacent twice yield one correlation at 2/5 confidence."""
        entries = [make_entry(e) for e in ["happy", "calm", "happy", "sad", "angry"]]

        patterns = analyze_patterns(entries)

        assert [p.type for p in patterns] == [PatternType.CORRELATION]
        assert patterns[0].description == "When you feel calm, you often follow up with happy."
        assert patterns[0].confidence == pytest.approx(min(2 / 5, 0.8))

    def test_single_occurrence_ignored(self, make_entry):
        entries = [make_entry(e) for e in ["happy", "sad", "calm", "angry"]]
        assert analyze_correlations(entries) == []

    def test_at_most_three_ties_in_first_seen_order(self, make_entry):
        emotions = ["angry"] * 3 + ["calm"] * 3 + ["happy"] * 3 + ["sad"] * 3
        entries = [make_entry(e) for e in emotions]

        patterns = analyze_correlations(entries)

        assert [p.description for p in patterns] == [
            "When you feel angry, you often follow up with angry.",
            "When you feel calm, you often follow up with calm.",
            "When you feel happy, you often follow up with happy.",
        ]


# ============================================================================
# Trend Tests
# ============================================================================


class TestTrend:
    """Test recent-half vs older-half trend detection."""

    def _entries(self, make_entry, intensities):
        return [make_entry("calm", i) for i in intensities]

    def test_improving(self, make_entry):
        pattern = analyze_trend(self._entries(make_entry, [8] * 5 + [3] * 5))

        assert pattern.title == "Positive Mood Trend"
        assert "average increase of 10.0 points" in pattern.description
        assert pattern.evidence == [
            "10 recent entries analyzed",
            "Average mood increased from 3.0 to 8.0",
        ]
        assert pattern.confidence == pytest.approx(10 / 30)

    def test_declining(self, make_entry):
        pattern = analyze_trend(self._entries(make_entry, [2] * 5 + [6] * 5))

        assert pattern.title == "Mood Needs Attention"
        assert "dropped by 8.0 points" in pattern.description
        assert pattern.evidence[1] == "Average mood decreased from 6.0 to 2.0"

    def test_stable(self, make_entry):
        pattern = analyze_trend(self._entries(make_entry, [5] * 7))

        assert pattern.title == "Stable Mood Pattern"
        assert pattern.evidence[1] == "Average mood remained steady from 5.0 to 5.0"

    def test_small_slope_is_stable(self, make_entry):
        pattern = analyze_trend(self._entries(make_entry, [5] * 9 + [6]))
        assert pattern.title == "Stable Mood Pattern"

    def test_only_last_thirty_entries_considered(self, make_entry):
        pattern = analyze_trend(self._entries(make_entry, [5] * 30 + [10] * 10))

        assert pattern.title == "Stable Mood Pattern"
        assert pattern.confidence == pytest.approx(1.0)
        assert pattern.evidence[0] == "30 recent entries analyzed"

    def test_requires_seven_entries(self, make_entry):
        assert analyze_trend(self._entries(make_entry, [8, 8, 8, 1, 1, 1])) is None


# ============================================================================
# Trigger Tests
# ============================================================================


class TestTriggers:
    """Test note keyword triggers."""

    def _work_entries(self, make_entry):
        return [
            make_entry("stressed", 4, note="work deadline"),
            make_entry("stressed", 3, note="Work! Deadline."),
            make_entry("stressed", 2, note="work deadline again"),
            make_entry("happy", 8, note="work party"),
        ]

    def test_candidates_ranked_by_occurrences(self, make_entry):
        candidates = find_trigger_candidates(self._work_entries(make_entry))

        assert [c.keyword for c in candidates] == ["work", "deadline"]
        assert candidates[0].emotion == MoodEmotion.STRESSED
        assert candidates[0].count == 4
        assert candidates[0].confidence == pytest.approx(0.75)
        assert candidates[1].confidence == pytest.approx(1.0)

    def test_only_top_candidate_emitted(self, make_entry):
        patterns = analyze_triggers(self._work_entries(make_entry))

        assert len(patterns) == 1
        pattern = patterns[0]
        assert pattern.type == PatternType.TRIGGER
        assert pattern.description == 'When you mention "work", you often feel stressed.'
        assert pattern.evidence == [
            '"work" appeared in 4 entries',
            "75% of these entries showed 😣 Stressed",
        ]

    def test_short_and_rare_words_ignored(self, make_entry):
        entries = [
            make_entry("happy", note="the sun is out"),
            make_entry("sad", note="the sky is grey"),
            make_entry("calm", note="the sea is flat"),
        ]
        assert find_trigger_candidates(entries) == []

    def test_requires_three_notes(self, make_entry):
        entries = [
            make_entry("stressed", note="work deadline"),
            make_entry("stressed", note="work deadline"),
            make_entry("stressed", note="abc"),
            make_entry("stressed"),
        ]
        assert analyze_triggers(entries) == []
