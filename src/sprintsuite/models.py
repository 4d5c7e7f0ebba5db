from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class SelectionMode(str, Enum):
    """How the target sprint is chosen for one invocation."""

    EXPLICIT = "explicit"
    NEXT = "next"
    PREVIOUS = "prev"
    CURRENT = "current"

    @property
    def is_relative(self) -> bool:
        return self is not SelectionMode.EXPLICIT


@dataclass(frozen=True)
class SprintSummary:
    """A sprint as returned by the board sprint listing.

    Only ``id`` drives resolution; the rest is carried for logging and
    for callers that want to show what was picked.
    """

    id: int
    name: str = ""
    state: str = ""
    start_date: str | None = None
    end_date: str | None = None
    complete_date: str | None = None
    board_id: int | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SprintSummary:
        board = payload.get("originBoardId")
        return cls(
            id=int(payload["id"]),
            name=str(payload.get("name") or ""),
            state=str(payload.get("state") or ""),
            start_date=payload.get("startDate"),
            end_date=payload.get("endDate"),
            complete_date=payload.get("completeDate"),
            board_id=int(board) if isinstance(board, int) else None,
        )


@dataclass(frozen=True)
class PromptSpec:
    """One free-text question for the interactive fallback."""

    name: str
    message: str
    required: bool = True
    help: str | None = None


__all__ = ["PromptSpec", "SelectionMode", "SprintSummary"]
