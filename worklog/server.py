"""MCP server: worklog.prediction_report and worklog.time_report over a log given inline or by path."""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from .config import configure_logging, load_settings
from .errors import InvocationError, WorklogError
from .ingest import build_entries, load_records, parse_records, segment_days
from .metrics import prediction_report
from .models import (
    IssueRecord,
    LogSource,
    PredictionReport,
    PredictionReportInput,
    RawRecord,
    TimeReport,
    TimeReportInput,
)
from .render import render_invoice, render_prediction_report
from .timereport import ALL_PROJECTS, build_time_report

logger = logging.getLogger(__name__)

mcp = FastMCP(name="worklog")


def _records(source: LogSource) -> list[RawRecord]:
    if source.content is not None:
        return parse_records(source.content)
    if source.path:
        return load_records(source.path)
    raise InvocationError("log needs either content or path")


def _issue(exc: WorklogError, location: str) -> IssueRecord:
    return IssueRecord(
        severity="blocking",
        type=type(exc).__name__,
        location=location,
        message=str(exc),
        raw_excerpt=getattr(exc, "line", None),
    )


def prediction_report_impl(payload: PredictionReportInput) -> PredictionReport:
    """Weekly and total prediction stats; fatal log errors come back as status=error."""
    try:
        fallback = payload.fallback_date or load_settings().fallback_date
        entries = build_entries(_records(payload.log))
        return prediction_report(entries, fallback)
    except WorklogError as exc:
        logger.info("prediction report failed: %s", exc)
        return PredictionReport(status="error", issues=[_issue(exc, "log")])


def time_report_impl(payload: TimeReportInput) -> TimeReport:
    """Billable sessions, expenses and totals for the range; fatal log errors come back as status=error."""
    all_projects = payload.all_projects
    if all_projects is None:
        all_projects = "project" not in payload.model_fields_set
    project = ALL_PROJECTS if all_projects else payload.project
    try:
        settings = load_settings()
        invoice = payload.invoice
        if invoice is not None and invoice.email is None:
            invoice = invoice.model_copy(update={"email": settings.email})
        days = segment_days(_records(payload.log))
        return build_time_report(
            days,
            payload.range.start,
            payload.range.end,
            project=project,
            hourly_rate=payload.hourly_rate if payload.hourly_rate is not None else settings.hourly_rate,
            invoice=invoice,
        )
    except WorklogError as exc:
        logger.info("time report failed: %s", exc)
        return TimeReport(status="error", range=payload.range, issues=[_issue(exc, "log")])


@mcp.tool(name="worklog.prediction_report")
def worklog_prediction_report(payload: dict) -> dict:
    """
    Pleasure/pain prediction accuracy from a work log. Provide `log`: { content } or { path }.
    Returns weekly stats (newest ISO week first), totals, and a rendered text summary.
    Optional `fallback_date` (YYYY-MM-DD) is used for entries whose day date does not parse.
    """
    inp = PredictionReportInput.model_validate(payload)
    result = prediction_report_impl(inp)
    out = result.model_dump(mode="json")
    if result.status == "ok":
        out["rendered"] = render_prediction_report(result)
    return out


@mcp.tool(name="worklog.time_report")
def worklog_time_report(payload: dict) -> dict:
    """
    Time report / invoice from a work log. Provide `log`: { content } or { path } and
    `range`: { start, end } (YYYY-MM-DD, inclusive). Without `project` every clocked session
    counts; `project` filters to that tag (project=null for untagged sessions only).
    all_projects=true ignores `project`.
    Optional hourly_rate and invoice { self_name, client, invoice_no, issue_date, due_date, summary }.
    Returns sessions rounded to half hours, expenses, totals, and the rendered Markdown invoice.
    """
    inp = TimeReportInput.model_validate(payload)
    result = time_report_impl(inp)
    out = result.model_dump(mode="json")
    if result.status == "ok":
        out["rendered"] = render_invoice(result)
    return out


def run() -> None:
    """Run the MCP server with stdio transport (default)."""
    configure_logging(load_settings().log_level)
    mcp.run()


if __name__ == "__main__":
    run()
