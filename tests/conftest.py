"""Pytest hooks and fixtures."""

import sys
from pathlib import Path

import pytest
from loguru import logger

from rails_runner.config.schema import RunnerConfig

FAKE_WORKER = Path(__file__).parent / "fixtures" / "fake_worker.py"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "posix_only: relies on POSIX sessions and signals",
    )


def pytest_collection_modifyitems(config, items):
    """Skip posix_only tests on Windows."""
    if sys.platform != "win32":
        return
    skip = pytest.mark.skip(reason="Requires POSIX process sessions")
    for item in items:
        if "posix_only" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def rails_app(tmp_path):
    """A work directory that looks like a Rails application root."""
    (tmp_path / "bin").mkdir()
    (tmp_path / "bin" / "rails").write_text("#!/usr/bin/env ruby\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def worker_config():
    """Build a RunnerConfig that launches the fake worker with extra flags."""

    def _make(*flags: str, **overrides) -> RunnerConfig:
        values = {
            "command": [sys.executable, str(FAKE_WORKER), *flags],
            "shutdown_grace_seconds": 0.2,
            "exit_grace_seconds": 0.0,
        }
        values.update(overrides)
        return RunnerConfig(**values)

    return _make


@pytest.fixture
def log_messages():
    """Collect loguru output emitted during the test."""
    messages: list[str] = []
    sink_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG", format="{message}")
    yield messages
    logger.remove(sink_id)
