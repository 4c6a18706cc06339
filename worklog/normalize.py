"""Normalization: day dates, 12-hour clock times, money amounts, canonical JSON hashing."""

from __future__ import annotations

import hashlib
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel

from .errors import LogStructureError

PARSER_VERSION = "1.0.0"

DATE_FORMAT = "%Y-%m-%d"


def parse_day_date(value: str) -> date:
    """Parse a day marker's YYYY-MM-DD date. Calendar-invalid dates are fatal."""
    s = (value or "").strip()
    try:
        return datetime.strptime(s, DATE_FORMAT).date()
    except ValueError as exc:
        raise LogStructureError(f"unparseable day marker date {s!r}") from exc


def parse_day_date_or(value: str, fallback: Optional[date]) -> date:
    """Like parse_day_date, but substitute `fallback` when one is configured."""
    if fallback is None:
        return parse_day_date(value)
    try:
        return datetime.strptime((value or "").strip(), DATE_FORMAT).date()
    except ValueError:
        return fallback


def to_24_hour(hour: int, am_pm: str) -> int:
    """12 AM -> 0, 12 PM -> 12, 2 PM -> 14."""
    if hour == 12:
        hour = 0
    if am_pm.upper() == "PM":
        hour += 12
    return hour


def parse_amount(value: str) -> Optional[Decimal]:
    """Return a Decimal for '12', '12.50', '$200'; None if not a finite number."""
    s = (value or "").strip().lstrip("$")
    if not s:
        return None
    try:
        amount = Decimal(s)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def iso_week_label(year: int, week: int) -> str:
    return f"{year}, wk {week}"


def canonical_sha256(model: BaseModel) -> str:
    """Stable SHA256 of a report's JSON (signature excluded)."""
    blob = model.model_dump_json(exclude={"signature"})
    return hashlib.sha256(blob.encode()).hexdigest()
