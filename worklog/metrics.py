"""Deterministic prediction metrics: counts, means and medians of pleasure/pain predictions, per ISO week."""

from __future__ import annotations

import logging
from datetime import date
from itertools import groupby
from typing import Optional, Sequence

from .models import (
    LogEntry,
    PredictionReport,
    PredictionStats,
    ReportSignature,
    WeeklyPredictionStats,
)
from .normalize import PARSER_VERSION, canonical_sha256, iso_week_label, parse_day_date_or

logger = logging.getLogger(__name__)

_COMPONENTS = ("predicted_pleasure", "predicted_pain", "actual_pleasure", "actual_pain")


def basic_stats(entries: Sequence[LogEntry]) -> PredictionStats:
    """
    Count, mean and median of each prediction component over entries that carry a prediction.
    Each component is sorted on its own, so the median tuple need not be one that was logged.
    Median is the element at len // 2 (the upper middle for even counts).
    """
    predictions = [e.prediction for e in entries if e.prediction is not None]
    if not predictions:
        return PredictionStats()

    n = len(predictions)
    fields: dict[str, float | int] = {"predictions": n}
    for name in _COMPONENTS:
        values = sorted(getattr(p, name) for p in predictions)
        fields[f"median_{name}"] = values[n // 2]
        fields[f"mean_{name}"] = sum(values) / n
    return PredictionStats(**fields)


def _week_key(entry: LogEntry, fallback_date: Optional[date]) -> tuple[int, int]:
    year, week, _ = parse_day_date_or(entry.date, fallback_date).isocalendar()
    return (year, week)


def weekly_stats(entries: Sequence[LogEntry], fallback_date: Optional[date] = None) -> list[WeeklyPredictionStats]:
    """
    Stats per contiguous run of entries in the same ISO week, newest week first.
    An unparseable entry date is fatal unless fallback_date is given.
    """
    weekly: list[WeeklyPredictionStats] = []
    for (year, week), run in groupby(entries, key=lambda e: _week_key(e, fallback_date)):
        run_entries = list(run)
        weekly.append(WeeklyPredictionStats(
            week=iso_week_label(year, week),
            iso_year=year,
            iso_week=week,
            stats=basic_stats(run_entries),
        ))
    weekly.sort(key=lambda w: (w.iso_year, w.iso_week), reverse=True)
    logger.debug("computed stats for %d weekly runs", len(weekly))
    return weekly


def prediction_report(entries: Sequence[LogEntry], fallback_date: Optional[date] = None) -> PredictionReport:
    report = PredictionReport(
        status="ok",
        weekly=weekly_stats(entries, fallback_date),
        totals=basic_stats(entries),
    )
    report.signature = ReportSignature(report_sha256=canonical_sha256(report), parser_version=PARSER_VERSION)
    return report
