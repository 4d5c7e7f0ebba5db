"""Line-oriented prompt widget for the interactive fallback.

``ask`` executes an already-decided list of :class:`PromptSpec` and returns
the answers keyed by prompt name. Deciding *which* prompts to show is the
job of :func:`sprintsuite.resolution.build_prompts`.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TextIO

from .errors import PromptAborted
from .models import PromptSpec
from .ux import print_hint, print_warning, prompt_label

DEFAULT_ATTEMPTS = 3

Reader = Callable[[str], str]


def _read(reader: Reader, label: str, name: str) -> str:
    try:
        return reader(label)
    except EOFError as exc:
        raise PromptAborted(f"No input for '{name}' (end of input)") from exc
    except KeyboardInterrupt as exc:
        raise PromptAborted(f"Prompt for '{name}' interrupted") from exc


def ask(
    prompts: Sequence[PromptSpec],
    *,
    reader: Reader | None = None,
    stream: TextIO | None = None,
    attempts: int = DEFAULT_ATTEMPTS,
) -> dict[str, str]:
    read = reader or input
    answers: dict[str, str] = {}
    for prompt in prompts:
        label = prompt_label(prompt.message, stream=stream)
        if prompt.help:
            print_hint(prompt.help, stream=stream)
        for attempt in range(1, max(1, attempts) + 1):
            answer = _read(read, label, prompt.name).strip()
            if answer or not prompt.required:
                answers[prompt.name] = answer
                break
            if attempt < attempts:
                print_warning("Value is required", stream=stream)
        else:
            raise PromptAborted(f"No value given for '{prompt.message}' after {attempts} attempts")
    return answers


__all__ = ["DEFAULT_ATTEMPTS", "ask"]
