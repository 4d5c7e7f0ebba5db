"""Opt-in local history of ``sprint add`` runs.

Each run appends one JSON line: how the sprint was chosen, which sprint,
how many issues were sent and how the run ended. Off unless the config sets
``telemetry.enabled`` or ``SPRINTSUITE_TELEMETRY=1``;
``SPRINTSUITE_TELEMETRY_PATH`` moves the file. Nothing is sent anywhere.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import SuiteConfig
from .logging import get_logger
from .resolution import ResolvedIntent

ENABLE_ENV_VAR = "SPRINTSUITE_TELEMETRY"
PATH_ENV_VAR = "SPRINTSUITE_TELEMETRY_PATH"
DEFAULT_STORE = Path("~/.sprintsuite/telemetry.jsonl")


@dataclass
class SprintRun:
    """What one command invocation did, filled in as it progresses."""

    command: str
    mode: str | None = None
    sprint_id: str | None = None
    issue_count: int = 0
    error_category: str | None = None

    def note_intent(self, intent: ResolvedIntent) -> None:
        self.mode = intent.mode.value
        self.sprint_id = intent.sprint_id
        self.issue_count = len(intent.item_keys)


def store_path(cfg: SuiteConfig | None) -> Path | None:
    """Where to append run records, or ``None`` when recording is off."""
    flag = os.environ.get(ENABLE_ENV_VAR)
    enabled = flag == "1" if flag is not None else bool(cfg and cfg.telemetry_enabled)
    if not enabled:
        return None
    override = os.environ.get(PATH_ENV_VAR)
    if override:
        return Path(override).expanduser()
    if cfg and cfg.telemetry_store_path:
        return Path(cfg.telemetry_store_path).expanduser()
    return DEFAULT_STORE.expanduser()


def emit(
    cfg: SuiteConfig | None,
    run: SprintRun,
    exit_code: int,
    duration_seconds: float,
) -> None:
    path = store_path(cfg)
    if path is None:
        return
    from sprintsuite import __version__  # noqa: PLC0415

    record: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        **asdict(run),
        "exit_code": int(exit_code),
        "duration_ms": int(duration_seconds * 1000),
        "version": __version__,
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, separators=(",", ":")) + "\n")
    except OSError as exc:
        # a broken history file must not fail the sprint update
        get_logger().debug(f"could not write run record to {path}: {exc}")


__all__ = ["SprintRun", "emit", "store_path"]
