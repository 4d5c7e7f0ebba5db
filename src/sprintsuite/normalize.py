"""Issue key normalization.

Turns bare numbers or loosely typed references into canonical Jira issue
keys (``PROJECT-123``). Pure string transforms with no failure path: shapes
that are neither canonical nor numeric pass through and are left for the
remote system to reject.
"""

from __future__ import annotations

import re

ISSUE_KEY_PATTERN = re.compile(r"^(?P<namespace>[A-Za-z][A-Za-z0-9_]*)-(?P<number>\d+)$")


def normalize_issue_key(project: str | None, raw: str) -> str:
    """Return the canonical key for ``raw`` within ``project``.

    >>> normalize_issue_key("PROJ", "123")
    'PROJ-123'
    >>> normalize_issue_key("PROJ", " proj-123 ")
    'PROJ-123'
    """
    ref = raw.strip()
    match = ISSUE_KEY_PATTERN.match(ref)
    if match:
        return f"{match.group('namespace').upper()}-{match.group('number')}"
    if ref.isdigit() and project:
        return f"{project.strip().upper()}-{ref}"
    return ref


def split_issue_list(project: str | None, text: str) -> list[str]:
    """Split a comma separated answer into normalized keys, keeping order."""
    keys: list[str] = []
    for fragment in text.split(","):
        if not fragment.strip():
            continue
        keys.append(normalize_issue_key(project, fragment))
    return keys


__all__ = ["ISSUE_KEY_PATTERN", "normalize_issue_key", "split_issue_list"]
