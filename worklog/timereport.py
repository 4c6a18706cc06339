"""Time reporting: rebuild clocked sessions per day, round to half hours, total up for invoicing."""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, Union

from .errors import LogStructureError
from .ingest import filter_days
from .models import (
    ActionRecord,
    BilledSession,
    ClockInRecord,
    ClockOutRecord,
    DateRange,
    DayBucket,
    Expense,
    ExpenseRecord,
    InvoiceMeta,
    RawRecord,
    ReportSignature,
    Session,
    TimeReport,
    TimestampRecord,
)
from .normalize import PARSER_VERSION, canonical_sha256

logger = logging.getLogger(__name__)

DEFAULT_HOURLY_RATE = Decimal("200")

# Project filter: ALL_PROJECTS matches every clock marker, None only untagged ones,
# a string only markers tagged with exactly that string.
ALL_PROJECTS = object()
ProjectFilter = Union[str, None, object]


def project_matches(tag: Optional[str], project: ProjectFilter) -> bool:
    if project is ALL_PROJECTS:
        return True
    return tag == project


def _timestamp_at(records: Sequence[RawRecord], i: int) -> Optional[TimestampRecord]:
    if 0 <= i < len(records) and isinstance(records[i], TimestampRecord):
        return records[i]
    return None


def reconstruct_day(day: DayBucket, project: ProjectFilter = ALL_PROJECTS) -> tuple[list[Session], list[Expense]]:
    """
    Walk one day's records. A clock-in must be immediately followed by its timestamp. A
    clock-out takes the timestamp right before it, or right after it when the record before
    is not a timestamp or is the one that opened the session. Sessions close the same day.
    """
    records = day.records
    sessions: list[Session] = []
    expenses: list[Expense] = []
    clock_in: Optional[int] = None  # minute of day while a session is open
    opened_at = -1  # index of the timestamp that opened the session
    actions: list[str] = []

    for i, record in enumerate(records):
        if isinstance(record, ClockInRecord):
            if not project_matches(record.project, project):
                continue
            if clock_in is not None:
                raise LogStructureError("clock-in without clock-out", date=day.date)
            ts = _timestamp_at(records, i + 1)
            if ts is None:
                raise LogStructureError("clock-in not followed by timestamp", date=day.date)
            clock_in = ts.minute_of_day
            opened_at = i + 1
        elif isinstance(record, ClockOutRecord):
            if not project_matches(record.project, project):
                continue
            if clock_in is None:
                raise LogStructureError("clock-out without clock-in", date=day.date)
            ts = _timestamp_at(records, i - 1) if i - 1 != opened_at else None
            if ts is None:
                ts = _timestamp_at(records, i + 1)
            if ts is None:
                raise LogStructureError("clock-out not preceded by timestamp", date=day.date)
            minutes = ts.minute_of_day - clock_in
            if minutes <= 0:
                raise LogStructureError("clock-out less than clock-in", date=day.date)
            sessions.append(Session(date=day.date, minutes=minutes, actions=tuple(actions)))
            actions = []
            clock_in = None
            opened_at = -1
        elif isinstance(record, ActionRecord):
            if clock_in is not None:
                actions.append(record.text)
        elif isinstance(record, ExpenseRecord):
            expenses.append(Expense(date=day.date, cost=record.cost, description=record.description))

    if clock_in is not None:
        raise LogStructureError("clock-in without clock-out", date=day.date)
    return sessions, expenses


def reconstruct_sessions(
    days: Iterable[DayBucket],
    project: ProjectFilter = ALL_PROJECTS,
) -> tuple[list[Session], list[Expense]]:
    """Sessions and expenses for each day, in day order. Clock state never crosses days."""
    sessions: list[Session] = []
    expenses: list[Expense] = []
    for day in days:
        day_sessions, day_expenses = reconstruct_day(day, project)
        sessions.extend(day_sessions)
        expenses.extend(day_expenses)
    logger.debug("reconstructed %d sessions, %d expenses", len(sessions), len(expenses))
    return sessions, expenses


def round_to_half_hour(minutes: int) -> Decimal:
    """Hours rounded to the nearest half hour, halves rounded away from zero."""
    half_hours = (Decimal(minutes) / Decimal(30)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return half_hours / 2


def bill_sessions(sessions: Iterable[Session]) -> list[BilledSession]:
    return [
        BilledSession(date=s.date, hours=round_to_half_hour(s.minutes), actions=s.actions)
        for s in sessions
    ]


def build_time_report(
    days: Iterable[DayBucket],
    start: date,
    end: date,
    project: ProjectFilter = ALL_PROJECTS,
    hourly_rate: Decimal = DEFAULT_HOURLY_RATE,
    invoice: Optional[InvoiceMeta] = None,
) -> TimeReport:
    """Billable sessions and expenses for days in [start, end], with totals and amount due."""
    in_range = filter_days(days, start, end)
    sessions, expenses = reconstruct_sessions(in_range, project)
    billed = bill_sessions(sessions)

    total_hours = sum((s.hours for s in billed), Decimal("0"))
    total_expenses = sum((e.cost for e in expenses), Decimal("0"))
    report = TimeReport(
        status="ok",
        range=DateRange(start=start, end=end),
        sessions=billed,
        expenses=expenses,
        total_hours=total_hours,
        total_expenses=total_expenses,
        hourly_rate=hourly_rate,
        amount_due=hourly_rate * total_hours + total_expenses,
        invoice=invoice or InvoiceMeta(),
    )
    report.signature = ReportSignature(report_sha256=canonical_sha256(report), parser_version=PARSER_VERSION)
    return report
