"""Pydantic models for worklog: classified log records, derived entries, reports and tool inputs."""

from __future__ import annotations

import re
from datetime import date as Date
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

_LINK_RE = re.compile(r"\[([^\]]*)\]\(([^)\s]*)\)")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Classified line records ---

class JunkRecord(_Frozen):
    kind: Literal["junk"] = "junk"
    text: str


class DayMarkerRecord(_Frozen):
    kind: Literal["day"] = "day"
    date: str  # lexically YYYY-MM-DD..., not calendar-checked


class ActionRecord(_Frozen):
    kind: Literal["action"] = "action"
    text: str

    @property
    def link(self) -> Optional[tuple[str, str]]:
        """First embedded Markdown link as (label, url), if any."""
        m = _LINK_RE.search(self.text)
        if not m:
            return None
        return (m.group(1), m.group(2))


class TimestampRecord(_Frozen):
    kind: Literal["time"] = "time"
    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


class PredictionRecord(_Frozen):
    kind: Literal["prediction"] = "prediction"
    predicted_pleasure: int = Field(ge=0, le=255)
    predicted_pain: int = Field(ge=0, le=255)
    actual_pleasure: int = Field(ge=0, le=255)
    actual_pain: int = Field(ge=0, le=255)


class ClockInRecord(_Frozen):
    kind: Literal["clock_in"] = "clock_in"
    project: Optional[str] = None


class ClockOutRecord(_Frozen):
    kind: Literal["clock_out"] = "clock_out"
    project: Optional[str] = None


class ExpenseRecord(_Frozen):
    kind: Literal["expense"] = "expense"
    cost: Decimal
    description: str


RawRecord = Annotated[
    Union[
        JunkRecord,
        DayMarkerRecord,
        ActionRecord,
        TimestampRecord,
        PredictionRecord,
        ClockInRecord,
        ClockOutRecord,
        ExpenseRecord,
    ],
    Field(discriminator="kind"),
]


# --- Derived structures ---

class DayBucket(_Frozen):
    """Records between one day marker and the next, tagged with the marker's date."""
    date: Date
    records: tuple[RawRecord, ...] = ()


class LogEntry(_Frozen):
    date: str  # as written on the day marker
    description: Optional[str] = None  # None for the entry opening a day
    url: Optional[str] = None
    prediction: Optional[PredictionRecord] = None
    time: Optional[TimestampRecord] = None


class Session(_Frozen):
    date: Date
    minutes: int
    actions: tuple[str, ...] = ()


class BilledSession(_Frozen):
    date: Date
    hours: Decimal  # rounded to the half hour
    actions: tuple[str, ...] = ()


class Expense(_Frozen):
    date: Date
    cost: Decimal
    description: str


# --- Prediction statistics ---

class PredictionStats(_Frozen):
    predictions: int = 0
    median_predicted_pleasure: int = 0
    median_predicted_pain: int = 0
    median_actual_pleasure: int = 0
    median_actual_pain: int = 0
    mean_predicted_pleasure: float = 0.0
    mean_predicted_pain: float = 0.0
    mean_actual_pleasure: float = 0.0
    mean_actual_pain: float = 0.0


class WeeklyPredictionStats(_Frozen):
    week: str  # "YYYY, wk N"
    iso_year: int
    iso_week: int
    stats: PredictionStats


# --- Report outputs ---

class IssueRecord(BaseModel):
    severity: Literal["warning", "blocking"]
    type: str
    location: str
    message: str
    raw_excerpt: Optional[str] = None


class ReportSignature(BaseModel):
    report_sha256: str
    parser_version: str


class DateRange(BaseModel):
    start: Date
    end: Date


class InvoiceMeta(BaseModel):
    self_name: str = ""
    email: Optional[str] = None
    client: Optional[str] = None
    invoice_no: Optional[int] = None
    issue_date: Optional[Date] = None
    due_date: Optional[Date] = None
    summary: Optional[str] = None  # free text for the TL;DR section


class PredictionReport(BaseModel):
    status: Literal["ok", "error"] = "ok"
    weekly: list[WeeklyPredictionStats] = Field(default_factory=list)
    totals: PredictionStats = Field(default_factory=PredictionStats)
    issues: list[IssueRecord] = Field(default_factory=list)
    signature: Optional[ReportSignature] = None


class TimeReport(BaseModel):
    status: Literal["ok", "error"] = "ok"
    range: DateRange
    sessions: list[BilledSession] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    total_hours: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    hourly_rate: Decimal = Decimal("200")
    amount_due: Decimal = Decimal("0")
    invoice: InvoiceMeta = Field(default_factory=InvoiceMeta)
    issues: list[IssueRecord] = Field(default_factory=list)
    signature: Optional[ReportSignature] = None


# --- Tool inputs (MCP server) ---

class LogSource(BaseModel):
    content: Optional[str] = None  # raw log text
    path: Optional[str] = None  # or a file to read


class PredictionReportInput(BaseModel):
    log: LogSource
    fallback_date: Optional[Date] = None


class TimeReportInput(BaseModel):
    log: LogSource
    range: DateRange
    project: Optional[str] = None
    all_projects: Optional[bool] = None  # unset: full-log mode only when no project key is sent
    hourly_rate: Optional[Decimal] = None
    invoice: Optional[InvoiceMeta] = None
