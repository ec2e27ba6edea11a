"""Utility functions for rails_runner."""

from rails_runner.utils.exceptions import (
    RunnerError,
    IncompleteMessageError,
    EmptyMessageError,
    MalformedFrameError,
    WorkerSpawnError,
    InitializationError,
    ErrorCategory,
    sanitize_error_message,
)

__all__ = [
    "RunnerError",
    "IncompleteMessageError",
    "EmptyMessageError",
    "MalformedFrameError",
    "WorkerSpawnError",
    "InitializationError",
    "ErrorCategory",
    "sanitize_error_message",
]
