"""
Command line entry point.

    worklog LOGFILE pp
    worklog LOGFILE tr START END [RATE] [SELF_NAME] [PROJECT] [CLIENT] [INVOICE_NO] [ISSUE_DATE] [DUE_DATE]

PROJECT omitted reports every clocked session; '-' restricts it to untagged sessions.
Reports go to stdout, diagnostics to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from .config import Settings, configure_logging, load_settings
from .errors import InvocationError, WorklogError
from .ingest import build_entries, load_records, segment_days
from .metrics import prediction_report
from .models import InvoiceMeta
from .normalize import DATE_FORMAT, parse_amount
from .render import render_invoice, render_prediction_report
from .timereport import ALL_PROJECTS, build_time_report

logger = logging.getLogger(__name__)

UNTAGGED = "-"


def _date_arg(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def _rate_arg(value: str) -> Decimal:
    amount = parse_amount(value)
    if amount is None or amount < 0:
        raise argparse.ArgumentTypeError(f"expected an hourly rate, got {value!r}")
    return amount


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        raise InvocationError(f"{self.prog}: {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="worklog", description="Reports from a plain-text work log.")
    parser.add_argument("logfile", help="log file, newest day first")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    # accepted after the mode too; SUPPRESS keeps an absent flag from resetting the one above
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="debug logging")
    modes = parser.add_subparsers(dest="mode", required=True, parser_class=_Parser)

    modes.add_parser("pp", parents=[common], help="pleasure/pain prediction statistics")

    tr = modes.add_parser("tr", parents=[common], help="time report / invoice")
    tr.add_argument("start", type=_date_arg)
    tr.add_argument("end", type=_date_arg)
    tr.add_argument("rate", type=_rate_arg, nargs="?")
    tr.add_argument("self_name", nargs="?", default="")
    tr.add_argument("project", nargs="?")
    tr.add_argument("client", nargs="?")
    tr.add_argument("invoice_no", type=int, nargs="?")
    tr.add_argument("issue_date", type=_date_arg, nargs="?")
    tr.add_argument("due_date", type=_date_arg, nargs="?")
    return parser


def run_predictions(args: argparse.Namespace, settings: Settings) -> str:
    entries = build_entries(load_records(args.logfile))
    return render_prediction_report(prediction_report(entries, settings.fallback_date))


def run_time_report(args: argparse.Namespace, settings: Settings) -> str:
    if args.start > args.end:
        raise InvocationError(f"start date {args.start} is after end date {args.end}")
    if args.project is None:
        project = ALL_PROJECTS
    elif args.project == UNTAGGED:
        project = None
    else:
        project = args.project
    invoice = InvoiceMeta(
        self_name=args.self_name,
        email=settings.email,
        client=args.client,
        invoice_no=args.invoice_no,
        issue_date=args.issue_date,
        due_date=args.due_date,
    )
    days = segment_days(load_records(args.logfile))
    report = build_time_report(
        days,
        args.start,
        args.end,
        project=project,
        hourly_rate=args.rate if args.rate is not None else settings.hourly_rate,
        invoice=invoice,
    )
    return render_invoice(report)


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = load_settings()
        args = build_parser().parse_args(argv)
    except InvocationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    configure_logging("DEBUG" if args.verbose else settings.log_level)
    try:
        if args.mode == "pp":
            output = run_predictions(args, settings)
        else:
            output = run_time_report(args, settings)
    except InvocationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except WorklogError as exc:
        logger.debug("aborting", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0
