"""Mood pattern insight API routes.

Runs the pattern analyzers over a mood-entry snapshot supplied by the caller
and exports snapshots as CSV or JSON.
"""
import logging
from enum import Enum
from fastapi import APIRouter, Query
from fastapi.responses import Response

from mood_analytics.export import export_to_csv, export_to_json
from mood_analytics.pattern_analyzer import analyze_patterns

from ..models.insights import MoodSnapshot, PatternOut

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/insights", tags=["Insights"])


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


@router.post("/patterns", response_model=list[PatternOut])
async def get_patterns(snapshot: MoodSnapshot):
    """
    Analyze a snapshot of mood entries (newest first).

    Returns a single "Need More Data" finding when fewer than five entries
    are supplied.
    """
    entries = snapshot.to_entries()
    patterns = analyze_patterns(entries)
    log.info(f"[INSIGHTS] {len(patterns)} pattern(s) from {len(entries)} entries")
    return [PatternOut.from_pattern(p) for p in patterns]


@router.post("/export")
async def export_entries(
    snapshot: MoodSnapshot,
    format: ExportFormat = Query(ExportFormat.CSV, description="Export file format"),
):
    """Export a mood-entry snapshot as a downloadable file."""
    entries = snapshot.to_entries()
    if format == ExportFormat.JSON:
        content = export_to_json(entries)
        media_type = "application/json"
    else:
        content = export_to_csv(entries)
        media_type = "text/csv"

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="moodmash-export.{format.value}"'},
    )
