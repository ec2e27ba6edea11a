"""Runner client used when the worker cannot be started."""

from __future__ import annotations

from typing import Any

from rails_runner.core.protocol import RunnerResponse

from .runner_client import ClientState


class NullClient:
    """Same surface as RunnerClient; never touches a process."""

    state = ClientState.STOPPED

    def call(self, method: str, params: dict[str, Any] | None = None) -> RunnerResponse:
        return RunnerResponse.absent()

    def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        return None

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        return None

    def model(self, name: str) -> dict[str, Any] | None:
        return None

    def association_target_location(self, model_name: str, association_name: str) -> dict[str, Any] | None:
        return None

    def route_location(self, name: str) -> dict[str, Any] | None:
        return None

    def route(self, controller: str, action: str) -> dict[str, Any] | None:
        return None

    def trigger_reload(self) -> None:
        return None

    def shutdown(self) -> None:
        # no-op
        return None

    def stopped(self) -> bool:
        return True

    def close(self) -> None:
        return None

    def __enter__(self) -> NullClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None
