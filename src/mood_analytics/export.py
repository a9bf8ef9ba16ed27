"""Mood entry export to CSV and JSON."""

import csv
import io
import json
from typing import Sequence

from .models import MoodEntry

CSV_HEADERS = ["Date", "Time", "Emotion", "Emoji", "Intensity", "Note", "Privacy", "Tags"]


def export_to_csv(entries: Sequence[MoodEntry]) -> str:
    """Render entries as CSV with one row per entry."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for entry in entries:
        created = entry.created_at
        writer.writerow([
            created.date().isoformat(),
            created.strftime("%H:%M:%S"),
            entry.emotion.label,
            entry.emotion.emoji,
            entry.intensity,
            entry.note or "",
            entry.privacy.value,
            ", ".join(entry.tags),
        ])
    return buffer.getvalue()


def export_to_json(entries: Sequence[MoodEntry]) -> str:
    """Render entries as an indented JSON list with ISO-8601 timestamps."""
    return json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)
