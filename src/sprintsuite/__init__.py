"""SprintSuite - add Jira issues to board sprints from the command line.

High-level public API:

from sprintsuite import SprintSuite

suite = SprintSuite.from_config_path('sprint_suite.config.yaml')
intent = suite.resolve(['42', 'ISSUE-1', '2'])   # sprint 42, ISSUE-1 and ISSUE-2
suite.add(intent)

``resolve`` never mutates anything; it may prompt for a missing sprint ID or
issue list. ``add`` performs the single remote call.
"""

from __future__ import annotations

from .config import SuiteConfig, load_config
from .core import SprintSuite
from .models import SelectionMode, SprintSummary
from .normalize import normalize_issue_key
from .resolution import ResolvedIntent, resolve_intent

# Version constant (sync manually with pyproject)
__version__ = "0.1.0"

__all__ = [
    "load_config",
    "normalize_issue_key",
    "resolve_intent",
    "ResolvedIntent",
    "SelectionMode",
    "SprintSummary",
    "SprintSuite",
    "SuiteConfig",
    "__version__",
]
