"""Worker process supervision."""

from .supervisor import WorkerHandle, is_alive, spawn_worker, terminate

__all__ = ["WorkerHandle", "is_alive", "spawn_worker", "terminate"]
