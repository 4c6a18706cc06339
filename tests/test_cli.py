"""Command line: modes, argument errors, exit codes."""

import pytest

from worklog.cli import build_parser, main

LOG = """# 2021-02-01
- Clock in
- 9:00 AM
- Did work [x](http://y)
- 3/1:4/1
- Clock out
- 12:00 PM
"""


@pytest.fixture
def log_file(tmp_path, monkeypatch):
    for name in ("WORKLOG_HOURLY_RATE", "WORKLOG_EMAIL", "WORKLOG_FALLBACK_DATE", "WORKLOG_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "worklog.md"
    path.write_text(LOG, encoding="utf-8")
    return path


def test_predictions_mode(log_file, capsys) -> None:
    assert main([str(log_file), "pp"]) == 0
    out = capsys.readouterr().out
    assert "predictions: 1" in out


def test_time_report_mode(log_file, capsys) -> None:
    code = main([str(log_file), "tr", "2021-02-01", "2021-02-28", "150", "Me", "-", "ACME", "7"])
    assert code == 0
    out = capsys.readouterr().out
    assert "# Invoice for Me" in out
    assert "client: ACME  " in out
    assert "invoice number: 7  " in out
    assert "| 2021-02-01 | 3.0 | Did work [x](http://y) |" in out
    assert "amount due: $450.00  " in out


def test_time_report_rate_from_environment(log_file, capsys, monkeypatch) -> None:
    monkeypatch.setenv("WORKLOG_HOURLY_RATE", "50")
    monkeypatch.setenv("WORKLOG_EMAIL", "me@example.com")
    assert main([str(log_file), "tr", "2021-02-01", "2021-02-01"]) == 0
    out = capsys.readouterr().out
    assert "amount due: $150.00  " in out
    assert "email: me@example.com  " in out


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["{log}"],
        ["{log}", "xx"],
        ["{log}", "tr", "2021-02-01"],
        ["{log}", "tr", "2021-02-31", "2021-03-01"],
        ["{log}", "tr", "2021-02-01", "2021-02-28", "lots"],
        ["{log}", "tr", "2021-03-01", "2021-02-01"],
        ["missing.md", "pp"],
    ],
)
def test_invocation_errors_exit_2(log_file, capsys, argv) -> None:
    code = main([a.format(log=log_file) for a in argv])
    assert code == 2
    assert "error:" in capsys.readouterr().err


def test_structural_log_error_exits_1(tmp_path, capsys) -> None:
    path = tmp_path / "bad.md"
    path.write_text("# 2021-02-01\n- 9:00 AM\n- Clock out\n", encoding="utf-8")
    assert main([str(path), "tr", "2021-02-01", "2021-02-01"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "clock-out without clock-in on 2021-02-01" in captured.err


def test_typo_guard_exits_1(tmp_path, capsys) -> None:
    path = tmp_path / "typo.md"
    path.write_text("# 2021-02-01\n- clockin\n", encoding="utf-8")
    assert main([str(path), "pp"]) == 1
    assert "line 2" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv,verbose",
    [
        (["log.md", "pp"], False),
        (["-v", "log.md", "pp"], True),
        (["log.md", "pp", "-v"], True),
        (["log.md", "tr", "2021-02-01", "2021-02-01", "--verbose"], True),
    ],
)
def test_verbose_flag_before_or_after_mode(argv, verbose) -> None:
    assert build_parser().parse_args(argv).verbose is verbose


def test_verbose_after_mode_runs(log_file, capsys) -> None:
    assert main([str(log_file), "pp", "-v"]) == 0
    assert "predictions: 1" in capsys.readouterr().out
