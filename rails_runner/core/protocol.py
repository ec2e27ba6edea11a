"""Request/response models for the runner wire protocol."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from rails_runner.utils.exceptions import EmptyMessageError, IncompleteMessageError


class ResponseKind(str, Enum):
    """Outcome of reading one frame from the worker."""

    RESULT = "result"
    ERROR = "error"
    ABSENT = "absent"
    EMPTY = "empty"
    INCOMPLETE = "incomplete"


@dataclass(slots=True)
class RunnerRequest:
    """Outbound request frame."""

    method: str
    params: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"method": self.method}
        if self.params is not None:
            payload["params"] = self.params
        return payload


@dataclass(slots=True, frozen=True)
class RunnerResponse:
    """Tagged response read from the worker."""

    kind: ResponseKind
    result: Any = None
    error: str | None = None

    @classmethod
    def of_result(cls, result: Any) -> RunnerResponse:
        return cls(kind=ResponseKind.RESULT, result=result)

    @classmethod
    def of_error(cls, message: str) -> RunnerResponse:
        return cls(kind=ResponseKind.ERROR, error=message)

    @classmethod
    def absent(cls) -> RunnerResponse:
        return cls(kind=ResponseKind.ABSENT)

    @classmethod
    def empty(cls) -> RunnerResponse:
        return cls(kind=ResponseKind.EMPTY)

    @classmethod
    def incomplete(cls) -> RunnerResponse:
        return cls(kind=ResponseKind.INCOMPLETE)

    @property
    def ok(self) -> bool:
        return self.kind is ResponseKind.RESULT

    def raise_for_status(self) -> RunnerResponse:
        """Raise for framing failures, return self otherwise."""
        if self.kind is ResponseKind.INCOMPLETE:
            raise IncompleteMessageError()
        if self.kind is ResponseKind.EMPTY:
            raise EmptyMessageError()
        return self

    def value(self) -> Any:
        """Result payload, or None for error/absent responses."""
        return self.result if self.ok else None
