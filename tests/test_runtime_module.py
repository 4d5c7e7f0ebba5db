from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from sprintsuite import runtime
from sprintsuite.config import ConfigError, config_from_mapping
from sprintsuite.telemetry import SprintRun


def _loader_for(raw: dict[str, object]):
    def loader(path: str):
        return config_from_mapping(raw, source=path)

    return loader


def test_prepare_config_requires_config_attribute() -> None:
    args = SimpleNamespace(cmd="sprint")
    with pytest.raises(AttributeError):
        runtime.prepare_config(args)


def test_prepare_config_applies_overrides(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text("server: https://x\n")
    args = SimpleNamespace(
        config=str(path), server="https://jira.example.com", project=" core ", board=12
    )

    cfg = runtime.prepare_config(
        args, loader=_loader_for({"server": "https://old", "project": {"key": "OLD"}})
    )

    assert cfg.server == "https://jira.example.com"
    assert cfg.project_key == "CORE"
    assert cfg.board_id == 12


def test_prepare_config_without_file_uses_command_line(tmp_path: Path) -> None:
    args = SimpleNamespace(
        config=str(tmp_path / "missing.yaml"), server="https://jira.example.com", project="abc", board=None
    )

    def loader(path: str):
        raise AssertionError("loader must not run when the file is absent")

    cfg = runtime.prepare_config(args, loader=loader)
    assert cfg.server == "https://jira.example.com"
    assert cfg.project_key == "ABC"
    assert cfg.board_id is None


def test_prepare_config_rejects_missing_server(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text("project:\n  key: A\n")
    args = SimpleNamespace(config=str(path), server=None, project=None, board=None)

    with pytest.raises(ConfigError, match="No Jira server"):
        runtime.prepare_config(args, loader=_loader_for({"project": {"key": "A"}}))


def test_execute_command_records_run(monkeypatch: pytest.MonkeyPatch) -> None:
    recorded: list[tuple[SprintRun, int]] = []
    monkeypatch.setattr(
        runtime.telemetry, "emit", lambda cfg, run, code, dur: recorded.append((run, code))
    )

    def handler(run: SprintRun) -> int:
        run.sprint_id = "42"
        run.issue_count = 2
        return 0

    result = runtime.execute_command(handler, None, SprintRun(command="sprint-add"))

    assert result == 0
    run, code = recorded[0]
    assert code == 0
    assert (run.command, run.sprint_id, run.issue_count) == ("sprint-add", "42", 2)


def test_execute_command_records_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    codes: list[int] = []
    monkeypatch.setattr(runtime.telemetry, "emit", lambda cfg, run, code, dur: codes.append(code))

    def handler(run: SprintRun) -> int:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        runtime.execute_command(handler, None, SprintRun(command="sprint-add"))

    assert codes == [1]


def test_execute_command_records_system_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    codes: list[int] = []
    monkeypatch.setattr(runtime.telemetry, "emit", lambda cfg, run, code, dur: codes.append(code))

    def handler(run: SprintRun) -> int:
        raise SystemExit(2)

    with pytest.raises(SystemExit):
        runtime.execute_command(handler, None, SprintRun(command="sprint-add"))

    assert codes == [2]
