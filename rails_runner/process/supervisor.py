"""Spawns and supervises the runner worker process."""

from __future__ import annotations

import contextlib
import os
import signal
import subprocess
from dataclasses import dataclass
from typing import IO, Any

from loguru import logger

from rails_runner.utils.exceptions import WorkerSpawnError


@dataclass(slots=True)
class WorkerHandle:
    """Worker process plus its three binary pipes."""

    process: subprocess.Popen[bytes]
    stdin: IO[bytes]
    stdout: IO[bytes]
    stderr: IO[bytes]
    stderr_nonblocking: bool = False

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def streams_closed(self) -> bool:
        return all(stream.closed for stream in (self.stdin, self.stdout, self.stderr))

    def close_streams(self) -> None:
        """Close all pipes; safe to call repeatedly."""
        for stream in (self.stdin, self.stdout, self.stderr):
            # stdin may still hold unflushed bytes for a dead worker
            with contextlib.suppress(OSError):
                stream.close()

    def read_stderr(self) -> str:
        """Drain whatever the worker has written to stderr so far."""
        if self.stderr.closed:
            return ""
        if not self.stderr_nonblocking and is_alive(self):
            return ""
        try:
            data = self.stderr.read()
        except (OSError, ValueError):
            return ""
        return data.decode("utf-8", errors="replace") if data else ""


def _isolate_session() -> None:
    # Runs in the child before exec. Keep the parent's group when not permitted.
    try:
        os.setsid()
    except OSError:
        with contextlib.suppress(OSError):
            os.setpgrp()


def _set_nonblocking(stream: IO[bytes]) -> bool:
    try:
        os.set_blocking(stream.fileno(), False)
    except (OSError, AttributeError, ValueError):
        return False
    return True


def spawn_worker(
    command: list[str],
    *,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> WorkerHandle:
    """Start the worker with stdin/stdout/stderr pipes in its own session."""
    merged_env = os.environ.copy()
    merged_env.update(env or {})
    kwargs: dict[str, Any] = {}
    if os.name == "nt":
        kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["preexec_fn"] = _isolate_session
    try:
        process = subprocess.Popen(
            list(command),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=merged_env,
            **kwargs,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise WorkerSpawnError(list(command), str(exc)) from exc
    if not process.stdin or not process.stdout or not process.stderr:
        process.kill()
        raise WorkerSpawnError(list(command), "worker stdio is unavailable")
    logger.debug("Spawned runner worker (PID {}): {}", process.pid, " ".join(command))
    return WorkerHandle(
        process=process,
        stdin=process.stdin,
        stdout=process.stdout,
        stderr=process.stderr,
        stderr_nonblocking=_set_nonblocking(process.stderr),
    )


def is_alive(handle: WorkerHandle) -> bool:
    return handle.process.poll() is None


def terminate(handle: WorkerHandle, wait_seconds: float = 1.0) -> None:
    """Force kill the worker. No-op when it has already exited."""
    process = handle.process
    if process.poll() is not None:
        return
    # Windows has no SIGKILL; Popen.kill() maps to TerminateProcess there
    kill_signal = getattr(signal, "SIGKILL", None)
    try:
        if kill_signal is not None:
            process.send_signal(kill_signal)
        else:
            process.kill()
    except ProcessLookupError:
        return
    with contextlib.suppress(subprocess.TimeoutExpired):
        process.wait(timeout=wait_seconds)
