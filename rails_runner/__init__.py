"""
rails_runner - client for a long-lived Rails runner worker over framed stdio.
"""

__version__ = "0.3.0"

from rails_runner.client import ClientState, NullClient, RunnerClient, create_client
from rails_runner.core import RunnerClientContract, RunnerResponse, ResponseKind

__all__ = [
    "__version__",
    "ClientState",
    "NullClient",
    "RunnerClient",
    "RunnerClientContract",
    "RunnerResponse",
    "ResponseKind",
    "create_client",
]
