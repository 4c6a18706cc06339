"""Render reports as text: prediction summary, and a Markdown invoice ready for HTML conversion."""

from __future__ import annotations

from decimal import Decimal

from .models import PredictionStats, PredictionReport, TimeReport

STYLE = """
<style>
* {
  font-family: sans-serif;
  line-height: 1.3em;
}

body {
  padding: 1em;
}

table {
  border-collapse: collapse;
}

th, td {
  border: 1px solid black;
  padding: 0.2em 1em 0.2em 1em;
  vertical-align: top;
}

a, a:visited {
  color: blue;
}
</style>"""


def _stats_lines(stats: PredictionStats) -> list[str]:
    return [
        f"predictions: {stats.predictions}",
        "median prediction: {} pr_pl / {} pr_pn : {} ac_pl / {} ac_pn".format(
            stats.median_predicted_pleasure,
            stats.median_predicted_pain,
            stats.median_actual_pleasure,
            stats.median_actual_pain,
        ),
        "mean prediction: {:g} pr_pl / {:g} pr_pn : {:g} ac_pl / {:g} ac_pn".format(
            stats.mean_predicted_pleasure,
            stats.mean_predicted_pain,
            stats.mean_actual_pleasure,
            stats.mean_actual_pain,
        ),
    ]


def render_prediction_report(report: PredictionReport) -> str:
    out = ["Pleasure predicting", "===================", "", "Weekly", "------", ""]
    for week in report.weekly:
        out.append(week.week)
        out.extend(_stats_lines(week.stats))
        out.append("")
    out.extend(["", "Totals", "------", ""])
    out.extend(_stats_lines(report.totals))
    return "\n".join(out) + "\n"


def _money(amount: Decimal) -> str:
    return f"${amount:.2f}"


def render_invoice(report: TimeReport) -> str:
    """Markdown invoice. Action text (and any links in it) is passed through verbatim."""
    inv = report.invoice
    # Trailing double spaces are Markdown line breaks.
    out = ["<meta charset='utf-8'>", STYLE, "", f"# Invoice for {inv.self_name}", ""]
    out.append(f"name: {inv.self_name}  ")
    if inv.email:
        out.append(f"email: {inv.email}  ")
    if inv.client:
        out.append(f"client: {inv.client}  ")
    if inv.invoice_no is not None:
        out.append(f"invoice number: {inv.invoice_no}  ")
    out.append(f"reporting period: {report.range.start} - {report.range.end}  ")
    if inv.issue_date:
        out.append(f"issue date: {inv.issue_date}  ")
    if inv.due_date:
        out.append(f"due date: {inv.due_date}  ")
    out.append(f"total hours: {report.total_hours:.1f}  ")
    out.append(f"hourly rate: ${report.hourly_rate}  ")
    if report.total_expenses > 0:
        out.append(f"expenses: {_money(report.total_expenses)}  ")
    out.append(f"amount due: {_money(report.amount_due)}  ")
    out.append("")

    if inv.summary:
        out.extend(["## TL;DR", "", inv.summary, ""])

    out.extend([
        "## Details",
        "",
        "| Date | Hours | Detail |",
        "|:----:|:-----:|--------|",
    ])
    for s in report.sessions:
        out.append(f"| {s.date} | {s.hours:.1f} | {' <br> '.join(s.actions)} |")
    out.append("")

    if report.total_expenses > 0:
        out.extend([
            "## Expenses",
            "",
            "| Date | Cost | Detail |",
            "|:----:|:----:|--------|",
        ])
        for e in report.expenses:
            out.append(f"| {e.date} | {_money(e.cost)} | {e.description} |")
        out.append("")

    return "\n".join(out) + "\n"
