"""Centralized retry / backoff helpers for the Jira transport.

Provides ``run_with_retries`` which encapsulates exponential backoff with
jitter for transient HTTP responses (429 and gateway errors). The
resolution core never retries; only the transport layer calls this.

Environment overrides:
  SPRINTSUITE_RETRY_ATTEMPTS (default 3)
  SPRINTSUITE_RETRY_BASE (seconds base, default 0.5)
  SPRINTSUITE_RETRY_MAX_SLEEP (cap in seconds, optional)

The caller supplies a thunk returning the desired result or raising
``TransientHTTPError``. Any other exception propagates immediately.
"""

from __future__ import annotations

import os
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from .logging import get_logger

T = TypeVar("T")

TRANSIENT_STATUSES = frozenset({429, 502, 503, 504})

_JITTER = random.SystemRandom()


class TransientHTTPError(RuntimeError):
    """A response whose status indicates the request may succeed if repeated."""

    def __init__(self, status: int, *, retry_after: str | None = None, response_text: str = ""):
        super().__init__(f"transient HTTP status {status}")
        self.status = status
        self.retry_after = retry_after
        self.response_text = response_text


def _parse_retry_after(value: str | None) -> float | None:
    """Return a positive number of seconds from a Retry-After header, if any."""
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return seconds if seconds > 0 else None


def _env_float(name: str, default: str) -> float:
    return float(os.environ.get(name, default))


@dataclass
class RetryConfig:
    attempts: int = field(default_factory=lambda: int(os.environ.get("SPRINTSUITE_RETRY_ATTEMPTS", "3")))
    base_sleep: float = field(default_factory=lambda: _env_float("SPRINTSUITE_RETRY_BASE", "0.5"))


def is_transient_status(status: int | None) -> bool:
    return status in TRANSIENT_STATUSES


def _compute_sleep(attempt: int, cfg: RetryConfig, retry_after: str | None) -> float:
    explicit = _parse_retry_after(retry_after)
    backoff = cfg.base_sleep * (2 ** (attempt - 1)) + _JITTER.uniform(0, 0.25)
    sleep_for: float = explicit if explicit is not None else backoff
    max_cap_env = os.environ.get("SPRINTSUITE_RETRY_MAX_SLEEP")
    if max_cap_env:
        try:
            cap = float(max_cap_env)
        except ValueError:
            return sleep_for
        if cap >= 0:
            sleep_for = min(sleep_for, cap)
    return sleep_for


def run_with_retries(
    fn: Callable[[], T],
    *,
    cfg: RetryConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    cfg = cfg or RetryConfig()
    attempts = max(1, cfg.attempts)
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except TransientHTTPError as exc:
            if attempt >= attempts:
                raise
            sleep_for = _compute_sleep(attempt, cfg, exc.retry_after)
            get_logger().warning(
                f"[retry] transient HTTP {exc.status}, attempt {attempt}/{attempts}, "
                f"sleeping {sleep_for:.2f}s"
            )
            sleep(sleep_for)
    raise RuntimeError("retry logic exited unexpectedly")  # pragma: no cover


__all__ = [
    "RetryConfig",
    "TransientHTTPError",
    "TRANSIENT_STATUSES",
    "is_transient_status",
    "run_with_retries",
]
