"""Runner clients: the process-backed client and its null variant."""

from .factory import create_client
from .null_client import NullClient
from .runner_client import ClientState, RunnerClient

__all__ = ["ClientState", "NullClient", "RunnerClient", "create_client"]
