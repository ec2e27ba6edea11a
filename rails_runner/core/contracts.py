"""Interface shared by the real and null runner clients."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .protocol import RunnerResponse


@runtime_checkable
class RunnerClientContract(Protocol):
    def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None: ...
    def call(self, method: str, params: dict[str, Any] | None = None) -> RunnerResponse: ...
    def notify(self, method: str, params: dict[str, Any] | None = None) -> None: ...
    def model(self, name: str) -> dict[str, Any] | None: ...
    def association_target_location(self, model_name: str, association_name: str) -> dict[str, Any] | None: ...
    def route_location(self, name: str) -> dict[str, Any] | None: ...
    def route(self, controller: str, action: str) -> dict[str, Any] | None: ...
    def trigger_reload(self) -> None: ...
    def shutdown(self) -> None: ...
    def stopped(self) -> bool: ...
