"""Synchronous client for the Rails runner worker over framed stdio."""

from __future__ import annotations

import time
import weakref
from collections import deque
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger

from rails_runner.config.schema import RunnerConfig
from rails_runner.core.framing import FramedChannel
from rails_runner.core.protocol import ResponseKind, RunnerResponse
from rails_runner.core.retry import RetryPolicy, read_with_retry
from rails_runner.process.supervisor import WorkerHandle, is_alive, spawn_worker, terminate
from rails_runner.utils.exceptions import (
    EmptyMessageError,
    IncompleteMessageError,
    InitializationError,
    MalformedFrameError,
    sanitize_error_message,
)

# Failures the typed lookups turn into an absent result.
_FRAME_ERRORS = (IncompleteMessageError, EmptyMessageError, MalformedFrameError)


class ClientState(str, Enum):
    """Lifecycle of a runner client."""

    BOOTING = "booting"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


def _teardown_worker(handle: WorkerHandle, grace_seconds: float) -> None:
    if not is_alive(handle):
        return
    logger.warning("Rails runner is force killing the server (PID {})", handle.pid)
    # A shutdown notification may already be on its way
    time.sleep(grace_seconds)
    terminate(handle)


class RunnerClient:
    """
    Client for one Rails runner worker process.

    Spawns the worker on construction and blocks until its first frame
    arrives. Requests are strictly sequential: one frame out, one frame in.
    """

    def __init__(self, config: RunnerConfig | None = None, work_dir: str | Path | None = None):
        self.config = config or RunnerConfig()
        self.work_dir = Path(work_dir) if work_dir else Path.cwd()
        self._state = ClientState.BOOTING
        self._stderr_tail: deque[str] = deque(maxlen=self.config.stderr_buffer_lines)
        self._handle = spawn_worker(
            self.config.resolved_command(),
            cwd=str(self.work_dir),
            env=self.config.env,
        )
        self._channel = FramedChannel(
            reader=self._handle.stdout,
            writer=self._handle.stdin,
            max_frame_bytes=self.config.max_frame_bytes,
        )
        self._finalizer: weakref.finalize | None = None
        if self.config.register_exit_hook:
            self._finalizer = weakref.finalize(
                self, _teardown_worker, self._handle, self.config.exit_grace_seconds
            )
        self._boot()

    @property
    def state(self) -> ClientState:
        return ClientState.STOPPED if self.stopped() else self._state

    @property
    def pid(self) -> int:
        return self._handle.pid

    @property
    def stderr_output(self) -> str:
        """Worker stderr captured so far (bounded)."""
        self._drain_stderr()
        return "\n".join(self._stderr_tail)

    def _boot(self) -> None:
        logger.info("Rails runner booting server")
        policy = RetryPolicy(
            max_retries=self.config.max_retries,
            delay_seconds=self.config.retry_delay_seconds,
        )
        try:
            response = read_with_retry(self._channel.read_response, policy, on_retry=self._log_retry)
        except _FRAME_ERRORS as exc:
            raise self._initialization_failed(exc.message) from exc
        except Exception as exc:
            raise self._initialization_failed(f"unexpected boot failure: {exc}") from exc
        if response.kind is ResponseKind.ABSENT:
            raise self._initialization_failed("worker connection closed during boot")
        self._state = ClientState.READY
        logger.info("Finished booting Rails runner server")

    @staticmethod
    def _log_retry(attempt: int) -> None:
        logger.info("Rails runner is retrying initialize ({})", attempt)

    def _initialization_failed(self, reason: str) -> InitializationError:
        terminate(self._handle)
        stderr = self.stderr_output
        self._handle.close_streams()
        if self._finalizer is not None:
            self._finalizer.detach()
        return InitializationError(stderr=stderr, reason=reason)

    def _drain_stderr(self) -> None:
        text = self._handle.read_stderr()
        for line in text.splitlines():
            if line.strip():
                self._stderr_tail.append(line)
                logger.debug("[runner] {}", sanitize_error_message(line))

    def call(self, method: str, params: dict[str, Any] | None = None) -> RunnerResponse:
        """Send one request and return the tagged response."""
        if not self._channel.write_request(method, params):
            return RunnerResponse.absent()
        response = self._channel.read_response()
        self._drain_stderr()
        return response

    def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """Send one request and return its result, None when absent or errored.

        Raises IncompleteMessageError / EmptyMessageError on framing failures.
        """
        return self.call(method, params).raise_for_status().value()

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification; no response is read."""
        if not self._channel.write_request(method, params):
            logger.warning("Rails runner failed to send {}: server connection closed", method)

    def model(self, name: str) -> dict[str, Any] | None:
        try:
            return self.request("model", {"name": name})
        except _FRAME_ERRORS:
            logger.error("Rails runner failed to get model information: {}", self.stderr_output)
            return None

    def association_target_location(self, model_name: str, association_name: str) -> dict[str, Any] | None:
        try:
            return self.request(
                "association_target_location",
                {"model_name": model_name, "association_name": association_name},
            )
        except Exception as exc:
            logger.error("Rails runner failed with {}: {}", exc, self.stderr_output)
            return None

    def route_location(self, name: str) -> dict[str, Any] | None:
        try:
            return self.request("route_location", {"name": name})
        except _FRAME_ERRORS:
            logger.error("Rails runner failed to get route location: {}", self.stderr_output)
            return None

    def route(self, controller: str, action: str) -> dict[str, Any] | None:
        try:
            return self.request("route_info", {"controller": controller, "action": action})
        except _FRAME_ERRORS:
            logger.error("Rails runner failed to get route information: {}", self.stderr_output)
            return None

    def trigger_reload(self) -> None:
        logger.info("Reloading Rails application")
        if not self._channel.write_request("reload"):
            logger.warning("Rails runner failed to trigger reload")

    def shutdown(self) -> None:
        """Ask the worker to exit, then close all pipes. Idempotent."""
        if self._handle.streams_closed:
            return
        logger.info("Rails runner shutting down server")
        self._state = ClientState.SHUTTING_DOWN
        self._channel.write_request("shutdown")
        # Give the server a bit of time to exit
        time.sleep(self.config.shutdown_grace_seconds)
        self._drain_stderr()
        self._handle.close_streams()

    def stopped(self) -> bool:
        return self._handle.streams_closed and not is_alive(self._handle)

    def close(self) -> None:
        """Shut down and force kill the worker if it is still running."""
        self.shutdown()
        if self._finalizer is not None:
            self._finalizer()
        else:
            _teardown_worker(self._handle, self.config.exit_grace_seconds)

    def __enter__(self) -> RunnerClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
