"""SprintSuite CLI.

Subcommands:
  sprint add    -> add issues to a sprint (alias: sprint assign)

The sprint and issues may be given positionally, picked relative to the
board (--next / --prev / --current), or entered interactively when missing.
"""

from __future__ import annotations

import argparse
import os
from typing import Any

from sprintsuite.config import DEFAULT_CONFIG_FILE, ConfigError, SuiteConfig, parse_sprint_state
from sprintsuite.core import SprintSuite
from sprintsuite.errors import ItemLimitExceeded, SprintSuiteError, classify_error, redact
from sprintsuite.jira_client import JiraAPIError
from sprintsuite.logging import get_logger
from sprintsuite.normalize import split_issue_list
from sprintsuite.resolution import MAX_ISSUES, partition, resolve_mode
from sprintsuite.runtime import execute_command, prepare_config
from sprintsuite.telemetry import SprintRun
from sprintsuite.ux import print_error, print_progress, print_success

_MAX_HELP_WIDTH = 100

SPRINT_ADD_USAGE = "%(prog)s SPRINT_ID ISSUE-1 [...ISSUE-N] [options]"
SPRINT_ADD_ARGS_HELP = (
    "arguments:\n"
    "  SPRINT_ID             ID of the sprint on which you want to assign issues to, eg: 123\n"
    f"  ISSUE-1 [...ISSUE-N]  Key of the issues to add to the sprint (max {MAX_ISSUES} issues at once)\n"
    "\n"
    "example:\n"
    "  $ sprintsuite sprint add SPRINT_ID ISSUE-1 ISSUE-2"
)


class _HelpFormatter(argparse.RawDescriptionHelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(prog="sprintsuite", description="Jira sprint automation")
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output (env: SPRINTSUITE_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    sprint = sub.add_parser("sprint", help="Work with board sprints")
    sprint_sub = sprint.add_subparsers(
        dest="sprint_cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<action>",
    )

    add = sprint_sub.add_parser(
        "add",
        aliases=["assign"],
        help="Add issues to sprint",
        description="Add issues to sprint.",
        usage=SPRINT_ADD_USAGE,
        epilog=SPRINT_ADD_ARGS_HELP,
    )
    add.set_defaults(command="sprint-add")
    add.add_argument("args", nargs="*", metavar="ARG", help=argparse.SUPPRESS)
    relative = add.add_mutually_exclusive_group()
    relative.add_argument("--next", action="store_true", help="Add issues to the next planned sprint")
    relative.add_argument("--prev", action="store_true", help="Add issues to the previous sprint")
    relative.add_argument(
        "--current", action="store_true", help="Add issues to the current active sprint"
    )
    add.add_argument(
        "--state",
        help=(
            "Filter sprints by state when using --next/--prev/--current (comma separated). "
            'Valid values are future, active and closed. Defaults to "active,closed"'
        ),
    )
    add.add_argument("--debug", action="store_true", help="Log Jira requests and responses")
    add.add_argument("--config", default=DEFAULT_CONFIG_FILE)
    add.add_argument("--server", help="Override Jira server URL")
    add.add_argument("--project", help="Override project key used to complete bare issue numbers")
    add.add_argument("--board", type=int, help="Override board ID used for relative sprints")
    return p


def _is_quiet(args: argparse.Namespace) -> bool:
    return bool(getattr(args, "quiet", False)) or os.environ.get("SPRINTSUITE_QUIET") == "1"


def _report_failure(exc: BaseException, run: SprintRun) -> int:
    info = classify_error(exc)
    run.error_category = info.category
    get_logger().log_error(
        "sprint add failed", error=info.message, category=info.category, error_type=info.original_type
    )
    print_error(info.message)
    return 1


def _cmd_sprint_add(cfg: SuiteConfig, args: argparse.Namespace, run: SprintRun) -> int:
    quiet = _is_quiet(args)
    try:
        mode = resolve_mode(next=args.next, prev=args.prev, current=args.current)
        _, refs = partition(mode, args.args)
        given = sum(len(split_issue_list(None, ref)) for ref in refs)
        if given > MAX_ISSUES:
            raise ItemLimitExceeded(given, MAX_ISSUES)
        state = parse_sprint_state(args.state) if args.state else None

        suite = SprintSuite(cfg, debug=args.debug)
        if quiet and not args.debug:
            get_logger().set_level("ERROR")
        if mode.is_relative:
            print_progress("Fetching sprints...", quiet=quiet)
        intent = suite.resolve(
            args.args,
            next=args.next,
            prev=args.prev,
            current=args.current,
            state=state,
        )
        run.note_intent(intent)
        print_progress("Adding issues to the sprint...", quiet=quiet)
        suite.add(intent)
    except (SprintSuiteError, ConfigError, JiraAPIError) as exc:
        return _report_failure(exc, run)

    print_success(f"Issues added to the sprint {intent.sprint_id}\n{suite.browse_url}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "quiet", False) and os.environ.get("SPRINTSUITE_QUIET") == "1":
        args.quiet = True
    try:
        cfg = prepare_config(args)
    except ConfigError as exc:
        print_error(f"[config] {redact(str(exc))}")
        return 1
    handlers = {
        "sprint-add": lambda run: _cmd_sprint_add(cfg, args, run),
    }
    handler = handlers.get(getattr(args, "command", ""))
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return 1
    return execute_command(handler, cfg, SprintRun(command=args.command))


__all__ = ["main"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
