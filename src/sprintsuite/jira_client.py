from __future__ import annotations

import json
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import requests

from .logging import get_logger
from .models import SprintSummary
from .retry import RetryConfig, TransientHTTPError, is_transient_status, run_with_retries

AGILE_API_PATH = "/rest/agile/1.0"
USER_AGENT = "sprintsuite/0.1.0"
HTTP_ERROR_STATUS = 400
REQUEST_TIMEOUT = 30
MOCK_ENV_VAR = "SPRINTSUITE_MOCK"
MOCK_LOG_ENV_VAR = "SPRINTSUITE_MOCK_LOG"


class JiraAPIError(RuntimeError):
    """Raised when the Jira REST API returns an error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


class SprintClient(Protocol):  # pragma: no cover - interface only
    def sprints_in_boards(
        self, board_ids: Sequence[int], state: str, limit: int
    ) -> list[SprintSummary]: ...

    def sprint_issues_add(self, sprint_id: str, *issue_keys: str) -> None: ...


def _error_detail(text: str) -> str:
    """Pull Jira's errorMessages / errors out of a response body."""
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        return text.strip()[:200]
    if not isinstance(payload, dict):
        return ""
    parts: list[str] = [str(m) for m in payload.get("errorMessages") or []]
    errors = payload.get("errors")
    if isinstance(errors, dict):
        parts.extend(f"{k}: {v}" for k, v in errors.items())
    return "; ".join(parts)


@dataclass
class JiraClient:
    """Lightweight REST client for the Jira agile API."""

    server: str
    token: str | None
    login: str | None = None
    auth_type: str = "basic"
    debug: bool = False
    session: requests.Session | None = None
    retry_config: RetryConfig | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")
        self._session.headers.setdefault("Content-Type", "application/json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        if self.token:
            if self.auth_type == "bearer":
                self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
            else:
                self._session.auth = (self.login or "", self.token)
        self._logger = get_logger()

    # ---- REST helpers -------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.server.rstrip('/')}{AGILE_API_PATH}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        url = self._url(path)

        def _run() -> requests.Response:
            if self.debug:
                self._logger.debug(
                    f"--> {method} {url}", params=params or {}, body=json_body
                )
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                timeout=REQUEST_TIMEOUT,
            )
            if self.debug:
                self._logger.debug(
                    f"<-- {response.status_code} {method} {url}", body=response.text[:2000]
                )
            if is_transient_status(response.status_code):
                raise TransientHTTPError(
                    response.status_code,
                    retry_after=response.headers.get("Retry-After"),
                    response_text=response.text,
                )
            return response

        try:
            response = run_with_retries(_run, cfg=self.retry_config)
        except TransientHTTPError as exc:
            raise JiraAPIError(
                f"Jira API {method} {url} failed with {exc.status}",
                status=exc.status,
                response_text=exc.response_text,
            ) from exc
        except requests.RequestException as exc:
            raise JiraAPIError(f"Jira API {method} {url} failed: {exc}") from exc

        if response.status_code >= HTTP_ERROR_STATUS:
            detail = _error_detail(response.text)
            raise JiraAPIError(
                f"Jira API {method} {url} failed with {response.status_code}"
                + (f": {detail}" if detail else ""),
                status=response.status_code,
                response_text=response.text,
            )
        if response.text:
            try:
                return response.json()
            except ValueError:
                return response.text
        return None

    # ---- Sprint operations -------------------------------------------
    def sprints_in_board(self, board_id: int, state: str, limit: int) -> list[SprintSummary]:
        params: dict[str, Any] = {"maxResults": limit}
        if state:
            params["state"] = state
        data = self._request("GET", f"/board/{board_id}/sprint", params=params)
        values = data.get("values") if isinstance(data, dict) else None
        sprints: list[SprintSummary] = []
        for entry in values or []:
            if isinstance(entry, dict) and "id" in entry:
                sprints.append(SprintSummary.from_payload(entry))
        return sprints

    def sprints_in_boards(
        self, board_ids: Sequence[int], state: str, limit: int
    ) -> list[SprintSummary]:
        """Fetch sprints for each board in order, concatenated and capped at ``limit``."""
        out: list[SprintSummary] = []
        for board_id in board_ids:
            out.extend(self.sprints_in_board(board_id, state, limit))
        return out[:limit]

    def sprint_issues_add(self, sprint_id: str, *issue_keys: str) -> None:
        self._request(
            "POST", f"/sprint/{sprint_id}/issue", json_body={"issues": list(issue_keys)}
        )


MOCK_SPRINTS: tuple[tuple[int, str, str], ...] = (
    (10, "Sprint 10", "closed"),
    (20, "Sprint 20", "active"),
    (30, "Sprint 30", "future"),
)


class MockJiraClient:
    """Deterministic offline client used when SPRINTSUITE_MOCK=1."""

    def __init__(self, sprints: Iterable[SprintSummary] | None = None, log_path: str | None = None):
        self.logger = get_logger()
        self.sprints = list(sprints) if sprints is not None else [
            SprintSummary(id=sid, name=name, state=state) for sid, name, state in MOCK_SPRINTS
        ]
        self.fetches: list[tuple[tuple[int, ...], str, int]] = []
        self.additions: list[tuple[str, tuple[str, ...]]] = []
        self._log_path = Path(log_path) if log_path else None

    def sprints_in_boards(
        self, board_ids: Sequence[int], state: str, limit: int
    ) -> list[SprintSummary]:
        self.fetches.append((tuple(board_ids), state, limit))
        return list(self.sprints)[:limit]

    def sprint_issues_add(self, sprint_id: str, *issue_keys: str) -> None:
        self.logger.info(f"MOCK: add {len(issue_keys)} issues to sprint {sprint_id}")
        self.additions.append((sprint_id, tuple(issue_keys)))
        if self._log_path is not None:
            with self._log_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps({"sprint_id": sprint_id, "issues": list(issue_keys)}) + "\n")


def is_mock_mode() -> bool:
    return os.environ.get(MOCK_ENV_VAR) == "1"


def build_client(
    *,
    server: str,
    token: str | None,
    login: str | None = None,
    auth_type: str = "basic",
    debug: bool = False,
) -> SprintClient:
    if is_mock_mode():
        return MockJiraClient(log_path=os.environ.get(MOCK_LOG_ENV_VAR))
    return JiraClient(server=server, token=token, login=login, auth_type=auth_type, debug=debug)


__all__ = [
    "JiraAPIError",
    "JiraClient",
    "MockJiraClient",
    "SprintClient",
    "build_client",
    "is_mock_mode",
]
