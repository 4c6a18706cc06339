"""Ingest workflow: read log lines, classify, segment into days, fold into entries. Stateless."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Iterable, NamedTuple, Optional, Sequence

from .classify import classify_lines
from .errors import InvocationError
from .models import (
    ActionRecord,
    DayBucket,
    DayMarkerRecord,
    LogEntry,
    PredictionRecord,
    RawRecord,
    TimestampRecord,
)
from .normalize import parse_day_date

logger = logging.getLogger(__name__)


def read_log_lines(path: str | Path) -> list[str]:
    """
    Read the whole log into memory as a list of lines (line endings stripped).
    Lines that are not valid UTF-8 are skipped rather than failing the run.
    """
    p = Path(path)
    if not p.is_file():
        raise InvocationError(f"log file not found: {p}")
    lines: list[str] = []
    skipped = 0
    with open(p, "rb") as f:
        for raw in f:
            try:
                lines.append(raw.decode("utf-8").rstrip("\r\n"))
            except UnicodeDecodeError:
                skipped += 1
    if skipped:
        logger.debug("skipped %d undecodable lines in %s", skipped, p)
    return lines


def load_records(path: str | Path) -> list[RawRecord]:
    return classify_lines(read_log_lines(path))


def parse_records(content: str) -> list[RawRecord]:
    return classify_lines(content.splitlines())


# --- Day segmentation ---

def pair_slices(dates: Sequence[str], slices: Sequence[list[RawRecord]]) -> list[tuple[str, list[RawRecord]]]:
    """Zip marker dates with their slices. A count mismatch is a bug here, not bad input."""
    if len(dates) != len(slices):
        raise RuntimeError(f"{len(dates)} day markers but {len(slices)} day slices")
    return list(zip(dates, slices))


def segment_days(records: Sequence[RawRecord]) -> list[DayBucket]:
    """
    Split records at each day marker. Each slice is tagged with the date of the marker
    that opened it; whatever precedes the first marker is dropped.
    """
    dates: list[str] = []
    slices: list[list[RawRecord]] = [[]]
    for record in records:
        if isinstance(record, DayMarkerRecord):
            dates.append(record.date)
            slices.append([])
        else:
            slices[-1].append(record)
    slices.pop(0)  # pre-log junk
    days = [DayBucket(date=parse_day_date(d), records=tuple(s)) for d, s in pair_slices(dates, slices)]
    logger.debug("segmented %d records into %d days", len(records), len(days))
    return days


def filter_days(days: Iterable[DayBucket], start: date, end: date) -> list[DayBucket]:
    """Keep days within [start, end] (inclusive), oldest first. The log itself is newest first."""
    kept = [d for d in days if start <= d.date <= end]
    kept.reverse()
    return kept


# --- Entry reducer ---

class EntryState(NamedTuple):
    date: Optional[str] = None  # None until the first day marker
    pending: Optional[LogEntry] = None


def reduce_entry(state: EntryState, record: RawRecord) -> tuple[EntryState, Optional[LogEntry]]:
    """Fold one record into the entry state; return the new state and a finished entry, if any."""
    if isinstance(record, DayMarkerRecord):
        return EntryState(record.date, LogEntry(date=record.date)), state.pending
    if state.date is None:
        return state, None
    if isinstance(record, ActionRecord):
        link = record.link
        entry = LogEntry(date=state.date, description=record.text, url=link[1] if link else None)
        return EntryState(state.date, entry), state.pending
    if isinstance(record, TimestampRecord):
        return EntryState(state.date, state.pending.model_copy(update={"time": record})), None
    if isinstance(record, PredictionRecord):
        return EntryState(state.date, state.pending.model_copy(update={"prediction": record})), None
    return state, None


def build_entries(records: Iterable[RawRecord]) -> list[LogEntry]:
    """Day-scoped entries: each action with the timestamp and prediction logged after it."""
    state = EntryState()
    entries: list[LogEntry] = []
    for record in records:
        state, emitted = reduce_entry(state, record)
        if emitted is not None:
            entries.append(emitted)
    if state.pending is not None:
        entries.append(state.pending)
    logger.debug("built %d entries", len(entries))
    return entries
