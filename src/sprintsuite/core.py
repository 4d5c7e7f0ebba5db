"""SprintSuite library facade.

Binds a :class:`SuiteConfig` to a sprint client and exposes the two steps
of ``sprint add``: resolving the target (no mutation) and applying it.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .config import SuiteConfig, load_config
from .env_auth import EnvAuthConfig, create_env_auth_manager
from .errors import RemoteMutationError, SprintSuiteError
from .jira_client import SprintClient, build_client, is_mock_mode
from .logging import StructuredLogger, configure_logging
from .models import SprintSummary
from .prompts import ask
from .resolution import Prompter, ResolvedIntent, resolve_intent


class SprintSuite:
    def __init__(
        self,
        cfg: SuiteConfig,
        *,
        client: SprintClient | None = None,
        debug: bool = False,
    ) -> None:
        self.cfg = cfg
        self.debug = debug
        self._logger: StructuredLogger = configure_logging(
            json_logging=cfg.logging_json_enabled,
            level="DEBUG" if debug else cfg.logging_level,
        )
        self._client = client

    @classmethod
    def from_config_path(cls, path: str | Path, **kwargs: object) -> SprintSuite:
        return cls(load_config(path), **kwargs)  # type: ignore[arg-type]

    @property
    def client(self) -> SprintClient:
        if self._client is None:
            auth = create_env_auth_manager(
                EnvAuthConfig(
                    load_dotenv=self.cfg.env_auth_load_dotenv,
                    dotenv_path=self.cfg.env_auth_dotenv_path,
                )
            )
            token = auth.get_token()
            if token is None and not is_mock_mode():
                hints = auth.get_authentication_recommendations()
                self._logger.warning("No Jira API token found; " + "; ".join(hints), hints=hints)
            self._client = build_client(
                server=self.cfg.server,
                token=token,
                login=self.cfg.login or auth.get_login(),
                auth_type=self.cfg.auth_type,
                debug=self.debug,
            )
        return self._client

    @property
    def browse_url(self) -> str:
        return self.cfg.browse_url()

    def fetch_sprints(
        self, board_ids: Sequence[int], state: str, limit: int
    ) -> Sequence[SprintSummary]:
        with self._logger.timed_operation("fetch_sprints", board_ids=list(board_ids), state=state):
            return self.client.sprints_in_boards(board_ids, state, limit)

    def resolve(
        self,
        args: Sequence[str],
        *,
        next: bool = False,
        prev: bool = False,
        current: bool = False,
        state: str | None = None,
        prompter: Prompter = ask,
    ) -> ResolvedIntent:
        intent = resolve_intent(
            args,
            project_key=self.cfg.project_key,
            board_id=self.cfg.board_id,
            fetch_sprints=self.fetch_sprints,
            next=next,
            prev=prev,
            current=current,
            debug=self.debug,
            state=state or self.cfg.sprint_state,
            prompter=prompter,
        )
        self._logger.log_sprint_action(
            "resolved", intent.sprint_id, intent.item_keys, mode=intent.mode.value
        )
        return intent

    def add(self, intent: ResolvedIntent) -> None:
        """Add the resolved issues to the sprint; one remote call, no retry here."""
        with self._logger.timed_operation("sprint_issues_add", sprint_id=intent.sprint_id):
            try:
                self.client.sprint_issues_add(intent.sprint_id, *intent.item_keys)
            except SprintSuiteError:
                raise
            except Exception as exc:
                raise RemoteMutationError(
                    f"Failed to add issues to sprint {intent.sprint_id}: {exc}"
                ) from exc
        self._logger.log_sprint_action("issues_added", intent.sprint_id, intent.item_keys)


__all__ = ["SprintSuite"]
