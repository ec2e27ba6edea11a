"""
Exception hierarchy for the runner client.

Provides:
- Base error class with error codes and categories
- Framing errors (incomplete / empty / malformed frames)
- Startup errors carrying the worker's captured stderr
- Safe error message formatting (no token leak from worker output)
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    PROTOCOL = "protocol"


class RunnerError(Exception):
    """Base exception for all runner client errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class IncompleteMessageError(RunnerError):
    """Stream ended before a complete frame header or body was read."""

    def __init__(self, message: str = "stream ended before a complete frame was read"):
        super().__init__(message, code="INCOMPLETE_MESSAGE", category=ErrorCategory.RECOVERABLE)


class EmptyMessageError(RunnerError):
    """Frame declared a zero (or missing) Content-Length."""

    def __init__(self, message: str = "frame carried no payload"):
        super().__init__(message, code="EMPTY_MESSAGE", category=ErrorCategory.RETRYABLE)


class MalformedFrameError(RunnerError):
    """Frame body could not be interpreted as a protocol response."""

    def __init__(self, message: str, body: bytes | None = None):
        details = {"body": body[:200].decode("utf-8", errors="replace")} if body else {}
        super().__init__(message, code="MALFORMED_FRAME", category=ErrorCategory.PROTOCOL, details=details)


class WorkerSpawnError(RunnerError):
    """The worker process could not be started."""

    def __init__(self, command: list[str], message: str):
        super().__init__(
            f"failed to spawn {' '.join(command)}: {message}",
            code="SPAWN_FAILED",
            details={"command": list(command)},
        )


class InitializationError(RunnerError):
    """The worker never completed its boot handshake."""

    def __init__(self, stderr: str = "", reason: str = "worker failed to boot"):
        message = f"{reason}: {stderr}" if stderr else reason
        super().__init__(message, code="INITIALIZATION_FAILED", details={"reason": reason})
        self.stderr = stderr


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"(postgres|mysql2?|redis)://[^\s]+", re.IGNORECASE),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove credentials from worker-provided text before it is logged."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized
