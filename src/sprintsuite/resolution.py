"""Target resolution for ``sprint add``.

Decides which sprint and which issue keys an invocation acts on, from the
positional arguments, the relative-selection flags and (in relative mode)
a single board sprint query. Whatever is still missing afterwards is asked
for interactively. Nothing here mutates remote state; the caller receives
a frozen :class:`ResolvedIntent` and performs the add itself.

Pipeline::

    flags -> resolve_mode -> [fetch + resolve_sprint_id] -> partition
          -> normalize -> build_prompts -> prompter -> apply_answers
          -> ResolvedIntent
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from .config import DEFAULT_SPRINT_STATE
from .errors import (
    AmbiguousModeError,
    ItemLimitExceeded,
    PromptAborted,
    RemoteFetchEmpty,
    RemoteFetchError,
    ResolutionError,
    SprintSuiteError,
)
from .logging import get_logger
from .models import PromptSpec, SelectionMode, SprintSummary
from .normalize import split_issue_list
from .prompts import ask

SPRINT_FETCH_LIMIT = 50
MAX_ISSUES = 50

SPRINT_PROMPT = PromptSpec(name="sprint_id", message="Sprint ID")
ISSUES_PROMPT = PromptSpec(
    name="issues",
    message="Issues",
    help="Comma separated list of issues key to add. eg: ISSUE-1, ISSUE-2",
)

FetchSprints = Callable[[Sequence[int], str, int], Sequence[SprintSummary]]
Prompter = Callable[[Sequence[PromptSpec]], Mapping[str, str]]


@dataclass
class PendingIntent:
    """Resolution state while the pipeline is running."""

    sprint_id: str = ""
    item_keys: list[str] = field(default_factory=list)
    debug: bool = False

    def freeze(self, mode: SelectionMode) -> ResolvedIntent:
        return ResolvedIntent(
            sprint_id=self.sprint_id,
            item_keys=tuple(self.item_keys),
            debug=self.debug,
            mode=mode,
        )


@dataclass(frozen=True)
class ResolvedIntent:
    sprint_id: str
    item_keys: tuple[str, ...]
    debug: bool = False
    mode: SelectionMode = SelectionMode.EXPLICIT


def resolve_mode(next: bool = False, prev: bool = False, current: bool = False) -> SelectionMode:
    """Collapse the three relative flags into one mode; more than one is an error."""
    requested = [
        mode
        for mode, flag in (
            (SelectionMode.NEXT, next),
            (SelectionMode.PREVIOUS, prev),
            (SelectionMode.CURRENT, current),
        )
        if flag
    ]
    if len(requested) > 1:
        names = ", ".join(f"--{m.value}" for m in requested)
        raise AmbiguousModeError(f"Only one of --next, --prev, --current may be used (got {names})")
    return requested[0] if requested else SelectionMode.EXPLICIT


def resolve_sprint_id(mode: SelectionMode, candidates: Sequence[SprintSummary]) -> str:
    """Pick the sprint for a relative mode.

    The board query is already filtered by state, so the first entry stands
    in for the current/previous sprint and the last for the next one. This
    is a proxy, not a guarantee of exact adjacency.
    """
    if not mode.is_relative:
        raise ValueError("explicit mode takes the sprint ID from the arguments")
    if not candidates:
        raise RemoteFetchEmpty(f"No sprints found to resolve --{mode.value}")
    sprint = candidates[-1] if mode is SelectionMode.NEXT else candidates[0]
    return str(sprint.id)


def partition(mode: SelectionMode, args: Sequence[str]) -> tuple[str, list[str]]:
    """Split positional arguments into (sprint slot, issue references)."""
    if mode.is_relative:
        return "", list(args)
    if not args:
        return "", []
    return args[0], list(args[1:])


def build_prompts(intent: PendingIntent) -> tuple[PromptSpec, ...]:
    prompts: list[PromptSpec] = []
    if not intent.sprint_id:
        prompts.append(SPRINT_PROMPT)
    if not intent.item_keys:
        prompts.append(ISSUES_PROMPT)
    return tuple(prompts)


def apply_answers(intent: PendingIntent, answers: Mapping[str, str], project: str | None) -> None:
    """Fill only the fields that are still empty from prompt answers."""
    if not intent.sprint_id:
        intent.sprint_id = answers.get(SPRINT_PROMPT.name, "").strip()
    if not intent.item_keys:
        intent.item_keys = split_issue_list(project, answers.get(ISSUES_PROMPT.name, ""))


def _fetch_candidates(
    fetch_sprints: FetchSprints, board_id: int | None, state: str
) -> Sequence[SprintSummary]:
    if board_id is None:
        raise ResolutionError("A board ID is required to select a sprint with --next, --prev or --current")
    try:
        return fetch_sprints([board_id], state, SPRINT_FETCH_LIMIT)
    except SprintSuiteError:
        raise
    except Exception as exc:
        raise RemoteFetchError(f"Failed to fetch sprints for board {board_id}: {exc}") from exc


def resolve_intent(
    args: Sequence[str],
    *,
    project_key: str | None,
    board_id: int | None,
    fetch_sprints: FetchSprints,
    next: bool = False,
    prev: bool = False,
    current: bool = False,
    debug: bool = False,
    state: str | None = None,
    prompter: Prompter = ask,
) -> ResolvedIntent:
    logger = get_logger()
    mode = resolve_mode(next=next, prev=prev, current=current)
    intent = PendingIntent(debug=debug)

    if mode.is_relative:
        candidates = _fetch_candidates(fetch_sprints, board_id, state or DEFAULT_SPRINT_STATE)
        intent.sprint_id = resolve_sprint_id(mode, candidates)
        logger.debug(
            "resolved relative sprint",
            mode=mode.value,
            sprint_id=intent.sprint_id,
            candidates=len(candidates),
        )

    sprint_slot, refs = partition(mode, args)
    if not mode.is_relative:
        intent.sprint_id = sprint_slot.strip()
    # "ISSUE-1," and "A-1,A-2" are tolerated the same way as a prompted list
    intent.item_keys = [key for ref in refs for key in split_issue_list(project_key, ref)]

    prompts = build_prompts(intent)
    if prompts:
        logger.debug("prompting for missing fields", fields=[p.name for p in prompts])
        apply_answers(intent, prompter(prompts), project_key)

    if not intent.sprint_id:
        raise PromptAborted("No sprint ID given")
    if not intent.item_keys:
        raise PromptAborted("No issue keys given")
    if len(intent.item_keys) > MAX_ISSUES:
        raise ItemLimitExceeded(len(intent.item_keys), MAX_ISSUES)
    return intent.freeze(mode)


__all__ = [
    "ISSUES_PROMPT",
    "MAX_ISSUES",
    "SPRINT_FETCH_LIMIT",
    "SPRINT_PROMPT",
    "PendingIntent",
    "ResolvedIntent",
    "apply_answers",
    "build_prompts",
    "partition",
    "resolve_intent",
    "resolve_mode",
    "resolve_sprint_id",
]
