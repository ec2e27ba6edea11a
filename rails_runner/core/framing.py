"""Content-Length framing for the runner stdio protocol."""

from __future__ import annotations

import json
import re
from typing import IO, Any

from loguru import logger

from rails_runner.utils.exceptions import MalformedFrameError, sanitize_error_message

from .protocol import RunnerRequest, RunnerResponse

HEADER_SEPARATOR = b"\r\n\r\n"
DEFAULT_MAX_FRAME_BYTES = 64 * 1024 * 1024
READ_CHUNK_SIZE = 65536
_CONTENT_LENGTH_RE = re.compile(rb"Content-Length: (\d+)", re.IGNORECASE)


def encode_request(method: str, params: dict[str, Any] | None = None) -> bytes:
    """Encode a request into one framed message."""
    body = json.dumps(RunnerRequest(method=method, params=params).to_payload(), ensure_ascii=False).encode("utf-8")
    return f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body


def parse_content_length(header: bytes) -> int:
    """Content-Length declared by a header block, 0 when missing."""
    match = _CONTENT_LENGTH_RE.search(header)
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError as exc:
        # More digits than int() will parse
        raise MalformedFrameError(f"unreadable Content-Length: {exc}") from exc


def decode_body(body: bytes) -> RunnerResponse:
    """Interpret a frame body as a result or a worker-reported error."""
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedFrameError(f"invalid JSON body: {exc}", body) from exc
    if not isinstance(payload, dict):
        raise MalformedFrameError("response body is not an object", body)
    if payload.get("error") is not None:
        message = str(payload["error"])
        logger.error("Rails runner error: {}", sanitize_error_message(message))
        return RunnerResponse.of_error(message)
    if "result" not in payload:
        raise MalformedFrameError("response body has no result field", body)
    return RunnerResponse.of_result(payload["result"])


class FramedChannel:
    """Reads and writes framed messages over a pair of binary streams."""

    def __init__(
        self,
        reader: IO[bytes],
        writer: IO[bytes],
        max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
    ):
        self._reader = reader
        self._writer = writer
        self._max_frame_bytes = max_frame_bytes

    def write_request(self, method: str, params: dict[str, Any] | None = None) -> bool:
        """Write one request frame. Returns False when the connection is gone."""
        frame = encode_request(method, params)
        try:
            self._writer.write(frame)
            self._writer.flush()
        except (OSError, ValueError):
            # The worker connection died
            return False
        return True

    def read_response(self) -> RunnerResponse:
        """Read and decode one response frame."""
        try:
            header = self._read_header()
            if header is None:
                return RunnerResponse.incomplete()
            length = parse_content_length(header)
            if length == 0:
                return RunnerResponse.empty()
            if length > self._max_frame_bytes:
                raise MalformedFrameError(
                    f"declared Content-Length {length} exceeds the {self._max_frame_bytes} byte limit"
                )
            body = self._read_exactly(length)
            if body is None:
                return RunnerResponse.incomplete()
        except (OSError, ValueError):
            # The worker connection died
            return RunnerResponse.absent()
        return decode_body(body)

    def decode(self) -> Any:
        """Read one frame, raising on incomplete or empty frames."""
        return self.read_response().raise_for_status().value()

    def _read_header(self) -> bytes | None:
        buf = bytearray()
        while not buf.endswith(HEADER_SEPARATOR):
            line = self._reader.readline()
            if not line:
                return None
            buf += line
        return bytes(buf)

    def _read_exactly(self, length: int) -> bytes | None:
        chunks: list[bytes] = []
        remaining = length
        while remaining > 0:
            chunk = self._reader.read(min(remaining, READ_CHUNK_SIZE))
            if not chunk:
                return None
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)
