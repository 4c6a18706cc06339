#!/usr/bin/env python3
"""
Run sample logs through both reports. Uses the worklog package directly
(no MCP server needed). Usage: python scripts/run_samples.py [sample_dir]
"""
from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

# Project root = parent of scripts/
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from worklog.errors import WorklogError
from worklog.ingest import build_entries, load_records, segment_days
from worklog.metrics import prediction_report
from worklog.models import InvoiceMeta
from worklog.render import render_invoice, render_prediction_report
from worklog.timereport import ALL_PROJECTS, build_time_report


SAMPLES_DIR = ROOT / "samples"

# (file, project filter, expect an error)
SAMPLES = [
    ("worklog.md", "Nervos", False),
    ("worklog.md", None, False),
    ("worklog.md", ALL_PROJECTS, False),
    ("bad_clock_out.md", ALL_PROJECTS, True),
    ("typo.md", ALL_PROJECTS, True),
]

START, END = date(2021, 2, 1), date(2021, 2, 28)


def main() -> None:
    samples_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else SAMPLES_DIR
    if not samples_dir.is_dir():
        print(f"Not a directory: {samples_dir}")
        sys.exit(1)

    failures = 0
    for filename, project, expect_error in SAMPLES:
        path = samples_dir / filename
        if not path.exists():
            print(f"[SKIP] {filename} (file not found)")
            continue
        label = "all" if project is ALL_PROJECTS else repr(project)
        try:
            records = load_records(path)
            report = build_time_report(
                segment_days(records),
                START,
                END,
                project=project,
                invoice=InvoiceMeta(self_name="Sample"),
            )
            stats = prediction_report(build_entries(records))
        except WorklogError as e:
            status = "OK" if expect_error else "FAIL"
            failures += 0 if expect_error else 1
            print(f"[{status}] {filename} project={label}: error: {e}")
            continue
        status = "FAIL" if expect_error else "OK"
        failures += 1 if expect_error else 0
        print(f"[{status}] {filename} project={label}: sessions={len(report.sessions)} "
              f"hours={report.total_hours} expenses={report.total_expenses} due={report.amount_due}")
        print(render_invoice(report))
        print(render_prediction_report(stats))

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
