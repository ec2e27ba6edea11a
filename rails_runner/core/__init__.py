"""Wire protocol types and helpers."""

from .contracts import RunnerClientContract
from .framing import FramedChannel, decode_body, encode_request, parse_content_length
from .protocol import ResponseKind, RunnerRequest, RunnerResponse
from .retry import RetryPolicy, read_with_retry

__all__ = [
    "RunnerClientContract",
    "FramedChannel",
    "ResponseKind",
    "RunnerRequest",
    "RunnerResponse",
    "RetryPolicy",
    "read_with_retry",
    "encode_request",
    "decode_body",
    "parse_content_length",
]
