"""Line classifier: one log line in, one typed record out.

Classification is an ordered list of recognizer rules; the first rule that
returns a record wins. Rules in RULES see the whole line. Once a line is known
to be a list item ("- ..."), the rules in ITEM_RULES see the trimmed item text,
and anything they don't recognize becomes an ActionRecord.

Two kinds of line are not data but fatal input errors: the unspaced typos
"clockin" / "clockout", and a line that starts like an expense but does not
follow the expense format.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Callable, Iterable, Optional

from .errors import LogFormatError
from .models import (
    ActionRecord,
    ClockInRecord,
    ClockOutRecord,
    DayMarkerRecord,
    ExpenseRecord,
    JunkRecord,
    PredictionRecord,
    RawRecord,
    TimestampRecord,
)
from .normalize import to_24_hour

logger = logging.getLogger(__name__)

Rule = Callable[[str], Optional[RawRecord]]

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2}) (AM|PM)")
_PREDICTION_RE = re.compile(r"^(\d+)/(\d+):(\d+)/(\d+)")
_EXPENSE_RE = re.compile(
    r"^expense:\s*\$(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)(\s*,\s*)(.*?)\s*$", re.IGNORECASE
)

_DAY_PREFIX = "# "
_ITEM_PREFIX = "- "


def project_tag(line: str) -> Optional[str]:
    """Text between the last '(' and the last ')' on the line, trimmed; None if absent or empty."""
    open_at = line.rfind("(")
    close_at = line.rfind(")")
    if open_at == -1 or close_at == -1 or close_at < open_at:
        return None
    return line[open_at + 1:close_at].strip() or None


# --- Whole-line rules ---

def typo_guard(line: str) -> Optional[RawRecord]:
    lower = line.lower()
    if "clockin" in lower or "clockout" in lower:
        raise LogFormatError("'clockin'/'clockout' typo, write 'clock in'/'clock out'", line=line)
    return None


def clock_marker(line: str) -> Optional[RawRecord]:
    lower = line.lower()
    if "clock in" in lower:
        return ClockInRecord(project=project_tag(line))
    if "clock out" in lower:
        return ClockOutRecord(project=project_tag(line))
    return None


def day_marker(line: str) -> Optional[RawRecord]:
    if line.startswith(_DAY_PREFIX):
        rest = line[len(_DAY_PREFIX):]
        if _DATE_RE.match(rest):
            return DayMarkerRecord(date=rest)
    return None


def not_an_item(line: str) -> Optional[RawRecord]:
    if not line.startswith(_ITEM_PREFIX):
        return JunkRecord(text=line)
    return None


# --- Item rules (text after "- ", trimmed) ---

def timestamp(text: str) -> Optional[RawRecord]:
    m = _TIME_RE.match(text)
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if not 1 <= hour <= 12 or minute > 59:
        raise LogFormatError("time out of range", line=text)
    return TimestampRecord(hour=to_24_hour(hour, m.group(3)), minute=minute)


def prediction(text: str) -> Optional[RawRecord]:
    m = _PREDICTION_RE.match(text)
    if not m:
        return None
    values = [int(g) for g in m.groups()]
    if any(v > 255 for v in values):
        raise LogFormatError("prediction values must be between 0 and 255", line=text)
    pr_pl, pr_pn, ac_pl, ac_pn = values
    return PredictionRecord(
        predicted_pleasure=pr_pl,
        predicted_pain=pr_pn,
        actual_pleasure=ac_pl,
        actual_pain=ac_pn,
    )


def expense(text: str) -> Optional[RawRecord]:
    if not text.lower().startswith("expense:"):
        return None
    m = _EXPENSE_RE.match(text)
    if not m or not m.group(3):
        raise LogFormatError("malformed expense, expected 'expense: $<amount>, <description>'", line=text)
    amount, separator, description = m.groups()
    # "$1,2000, x" would otherwise read as $1 for "2000, x"
    if separator == "," and description[0].isdigit():
        raise LogFormatError("ambiguous expense amount, group thousands as '$1,200.00'", line=text)
    return ExpenseRecord(cost=Decimal(amount.replace(",", "")), description=description)


RULES: tuple[Rule, ...] = (typo_guard, clock_marker, day_marker, not_an_item)
ITEM_RULES: tuple[Rule, ...] = (timestamp, prediction, expense)


def classify_line(line: str) -> RawRecord:
    """Classify one line of the log. Raises LogFormatError for fatal input errors."""
    for rule in RULES:
        record = rule(line)
        if record is not None:
            return record
    text = line[len(_ITEM_PREFIX):].strip()
    for rule in ITEM_RULES:
        record = rule(text)
        if record is not None:
            return record
    return ActionRecord(text=text)


def classify_lines(lines: Iterable[str]) -> list[RawRecord]:
    """Classify every line, attaching the 1-based line number to any fatal error."""
    records: list[RawRecord] = []
    for line_number, line in enumerate(lines, start=1):
        try:
            records.append(classify_line(line))
        except LogFormatError as exc:
            raise LogFormatError(exc.reason, line=line, line_number=line_number) from exc
    logger.debug("classified %d lines", len(records))
    return records
