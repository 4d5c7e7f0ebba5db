"""Tests for terminal output helpers."""

from __future__ import annotations

import io

import pytest

from sprintsuite import ux


def _tty() -> io.StringIO:
    stream = io.StringIO()
    stream.isatty = lambda: True  # type: ignore[method-assign]
    return stream


def test_colorize_on_tty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TERM", "xterm-256color")

    result = ux.colorize("test", ux.BOLD, ux.RED, stream=_tty())

    assert result == f"{ux.BOLD}{ux.RED}test{ux.RESET}"


@pytest.mark.parametrize("name, value", [("NO_COLOR", "1"), ("TERM", "dumb")])
def test_colorize_disabled_by_environment(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)
    assert ux.colorize("plain", ux.GREEN, stream=_tty()) == "plain"


def test_colorize_without_tty() -> None:
    assert ux.colorize("plain", ux.BLUE, stream=io.StringIO()) == "plain"


def test_prompt_label() -> None:
    assert ux.prompt_label("Sprint ID", stream=io.StringIO()) == "? Sprint ID: "


@pytest.mark.parametrize(
    "printer, marker",
    [
        (ux.print_success, "✓"),
        (ux.print_error, "✗"),
        (ux.print_warning, "⚠"),
        (ux.print_progress, "ℹ"),
    ],
)
def test_status_lines_carry_marker(printer, marker: str) -> None:
    stream = io.StringIO()
    printer("message", stream=stream)
    assert stream.getvalue() == f"{marker} message\n"


def test_quiet_progress_prints_nothing() -> None:
    stream = io.StringIO()
    ux.print_progress("Fetching sprints...", quiet=True, stream=stream)
    assert stream.getvalue() == ""


def test_print_hint_indents() -> None:
    stream = io.StringIO()
    ux.print_hint("Comma separated", stream=stream)
    assert stream.getvalue() == "  Comma separated\n"


def test_result_on_stdout_and_progress_on_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    ux.print_success("Issues added to the sprint 42")
    ux.print_progress("Adding issues to the sprint...")
    ux.print_error("failed")
    out, err = capsys.readouterr()
    assert out == "✓ Issues added to the sprint 42\n"
    assert "Adding issues" in err
    assert "failed" in err
