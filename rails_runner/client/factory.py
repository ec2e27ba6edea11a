"""Select the real or null runner client for a work directory."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from rails_runner.config.loader import load_config
from rails_runner.config.schema import RunnerConfig
from rails_runner.core.contracts import RunnerClientContract

from .null_client import NullClient
from .runner_client import RunnerClient

_DEGRADED_NOTICE = "Server dependent features will not be available"


def create_client(
    work_dir: str | Path | None = None,
    config: RunnerConfig | None = None,
) -> RunnerClientContract:
    """Start a runner client, falling back to NullClient. Never raises."""
    root = Path(work_dir) if work_dir else Path.cwd()
    try:
        cfg = config or load_config()
        if not (root / cfg.marker_file).exists():
            logger.warning("Rails runner failed to locate {} in the current directory: {}", cfg.marker_file, root)
            logger.warning(_DEGRADED_NOTICE)
            return NullClient()
        return RunnerClient(config=cfg, work_dir=root)
    except Exception as exc:
        logger.exception("Rails runner failed to initialize server: {}", exc)
        logger.warning(_DEGRADED_NOTICE)
        return NullClient()
