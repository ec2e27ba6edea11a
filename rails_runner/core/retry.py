"""Retry policy for the worker boot handshake."""

from __future__ import annotations

import time
from dataclasses import dataclass
from collections.abc import Callable

from .protocol import ResponseKind, RunnerResponse


@dataclass(slots=True)
class RetryPolicy:
    """Re-read budget while the worker is still booting."""

    max_retries: int = 5
    delay_seconds: float = 0.0


def read_with_retry(
    read: Callable[[], RunnerResponse],
    policy: RetryPolicy,
    on_retry: Callable[[int], None] | None = None,
) -> RunnerResponse:
    """Re-read while frames come back empty, then raise for framing failures.

    The request is never resent: the worker emits its ready frame on the same
    connection once it has booted.
    """
    response = read()
    retries = 0
    while response.kind is ResponseKind.EMPTY and retries < policy.max_retries:
        retries += 1
        if on_retry is not None:
            on_retry(retries)
        if policy.delay_seconds > 0:
            time.sleep(policy.delay_seconds)
        response = read()
    return response.raise_for_status()
