"""Runtime helpers for SprintSuite CLI orchestration."""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from sprintsuite import telemetry
from sprintsuite.config import ConfigError, SuiteConfig, config_from_mapping, load_config


class _HandlerCallable(Protocol):
    def __call__(self, run: telemetry.SprintRun) -> Any: ...


def _apply_overrides(cfg: SuiteConfig, args: Any) -> SuiteConfig:
    server = getattr(args, "server", None)
    if server:
        cfg.server = server
    project = getattr(args, "project", None)
    if project:
        cfg.project_key = project.strip().upper()
    board = getattr(args, "board", None)
    if board is not None:
        cfg.board_id = int(board)
    return cfg


def prepare_config(
    args: Any, *, loader: Callable[[str], SuiteConfig] = load_config
) -> SuiteConfig:
    """Load the config file and apply command-line overrides.

    A missing config file is tolerated when ``--server`` and ``--project``
    are both given on the command line.
    """
    if not hasattr(args, "config"):
        raise AttributeError("Command namespace is missing 'config' attribute")
    path = Path(args.config)
    if not path.exists() and getattr(args, "server", None) and getattr(args, "project", None):
        cfg = config_from_mapping({"server": args.server, "project": {"key": args.project}})
    else:
        cfg = loader(args.config)
    cfg = _apply_overrides(cfg, args)
    if not cfg.server:
        raise ConfigError("No Jira server configured; set 'server' in the config or pass --server")
    return cfg


def execute_command(
    handler: _HandlerCallable, cfg: SuiteConfig | None, run: telemetry.SprintRun
) -> int:
    """Run a command handler and record the run, whatever the outcome."""
    start = time.monotonic()
    exit_code = 1
    try:
        result = handler(run)
        exit_code = int(result) if result is not None else 0
    except SystemExit as exc:
        exit_code = int(exc.code or 0)
        raise
    finally:
        telemetry.emit(cfg, run, exit_code, max(0.0, time.monotonic() - start))
    return exit_code


__all__ = ["prepare_config", "execute_command"]
