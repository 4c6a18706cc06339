"""Line classifier: record kinds, rule order, fatal input errors."""

from decimal import Decimal

import pytest

from worklog.classify import ITEM_RULES, RULES, classify_line, classify_lines, expense, prediction, project_tag, timestamp, typo_guard
from worklog.errors import LogFormatError
from worklog.models import (
    ActionRecord,
    ClockInRecord,
    ClockOutRecord,
    DayMarkerRecord,
    ExpenseRecord,
    JunkRecord,
    PredictionRecord,
    TimestampRecord,
)


@pytest.mark.parametrize("line", ["", "Some heading", "#2021-02-01", "# Notes", "-no space", "  - indented"])
def test_unrecognized_lines_are_junk(line: str) -> None:
    """Lines that are not items, day markers or clock phrases are junk, every time."""
    record = classify_line(line)
    assert isinstance(record, JunkRecord)
    assert classify_line(line) == record


def test_day_marker() -> None:
    record = classify_line("# 2021-02-01")
    assert record == DayMarkerRecord(date="2021-02-01")


def test_day_marker_is_only_lexically_checked() -> None:
    """Calendar validity is checked later, when days are segmented."""
    assert classify_line("# 2021-02-30") == DayMarkerRecord(date="2021-02-30")


@pytest.mark.parametrize(
    "line,hour,minute",
    [
        ("- 2:30 PM", 14, 30),
        ("- 12:00 AM", 0, 0),
        ("- 12:15 PM", 12, 15),
        ("- 9:05 AM", 9, 5),
        ("- 11:59 PM", 23, 59),
    ],
)
def test_timestamps_use_12_hour_clock(line: str, hour: int, minute: int) -> None:
    record = classify_line(line)
    assert record == TimestampRecord(hour=hour, minute=minute)
    assert record.minute_of_day == hour * 60 + minute


@pytest.mark.parametrize("line", ["- 13:00 PM", "- 0:30 PM", "- 0:00 AM", "- 9:60 AM"])
def test_timestamp_out_of_range_is_fatal(line: str) -> None:
    with pytest.raises(LogFormatError, match="out of range"):
        classify_line(line)


def test_prediction_quadruple() -> None:
    record = classify_line("- 3/1:4/0 went better than expected")
    assert record == PredictionRecord(predicted_pleasure=3, predicted_pain=1, actual_pleasure=4, actual_pain=0)


def test_prediction_values_are_bytes() -> None:
    with pytest.raises(LogFormatError, match="255"):
        classify_line("- 256/1:1/1")


def test_clock_in_and_out_case_insensitive() -> None:
    assert classify_line("- Clock in") == ClockInRecord(project=None)
    assert classify_line("- CLOCK OUT") == ClockOutRecord(project=None)
    assert classify_line("clock in, no dash needed") == ClockInRecord(project=None)


def test_clock_project_tag_from_last_parens() -> None:
    assert classify_line("- Clock in (Nervos)") == ClockInRecord(project="Nervos")
    assert classify_line("- Clock out (call with (someone)) ( Nervos )") == ClockOutRecord(project="Nervos")


@pytest.mark.parametrize("line,expected", [("no parens", None), ("empty ()", None), (") backwards (", None), ("(a) (b)", "b")])
def test_project_tag(line: str, expected: str | None) -> None:
    assert project_tag(line) == expected


def test_clock_phrase_wins_over_day_marker_and_items() -> None:
    """Clock phrases are recognized before any other rule."""
    assert isinstance(classify_line("# 2021-02-01 clock in"), ClockInRecord)
    assert isinstance(classify_line("- 9:00 AM clock out"), ClockOutRecord)


@pytest.mark.parametrize("line", ["- clockin", "- clockout (Nervos)", "forgot to clockout", "- Clockin", "- CLOCKOUT (Nervos)"])
def test_unspaced_clock_typo_is_fatal(line: str) -> None:
    with pytest.raises(LogFormatError, match="typo"):
        classify_line(line)


def test_expense() -> None:
    record = classify_line("- Expense: $12.50, lunch with client")
    assert record == ExpenseRecord(cost=Decimal("12.50"), description="lunch with client")
    assert classify_line("- expense:$5,coffee") == ExpenseRecord(cost=Decimal("5"), description="coffee")


@pytest.mark.parametrize("line", ["- expense: 12 lunch", "- expense: $abc, lunch", "- expense: $12,", "- Expense:"])
def test_malformed_expense_is_fatal(line: str) -> None:
    with pytest.raises(LogFormatError, match="expense"):
        classify_line(line)


def test_action_keeps_link_verbatim() -> None:
    record = classify_line("-   Did work [x](http://y)  ")
    assert record == ActionRecord(text="Did work [x](http://y)")
    assert record.link == ("x", "http://y")
    assert ActionRecord(text="plain").link is None


def test_classify_lines_reports_line_number() -> None:
    with pytest.raises(LogFormatError) as info:
        classify_lines(["# 2021-02-01", "- Clock in", "- clockout"])
    assert info.value.line_number == 3
    assert "line 3" in str(info.value)


def test_expense_with_thousands_separators() -> None:
    assert classify_line("- Expense: $1,200.00, laptop") == ExpenseRecord(cost=Decimal("1200.00"), description="laptop")
    assert classify_line("- expense: $12,345, rent") == ExpenseRecord(cost=Decimal("12345"), description="rent")


@pytest.mark.parametrize("line", ["- Expense: $1,2000, laptop", "- Expense: $1,200.00 laptop", "- expense: $5,2 coffees"])
def test_expense_amount_split_by_bare_comma_is_fatal(line: str) -> None:
    """A comma directly followed by digits is never taken as the description separator."""
    with pytest.raises(LogFormatError, match="ambiguous expense amount"):
        classify_line(line)


def test_rules_are_ordered_and_usable_alone() -> None:
    """Whole-line rules run first, typo guard leading; item rules see the text after '- '."""
    assert RULES[0] is typo_guard
    assert ITEM_RULES == (timestamp, prediction, expense)
    assert typo_guard("- Clock in") is None
    assert timestamp("9:00 AM") == TimestampRecord(hour=9, minute=0)
    assert expense("not an expense") is None
