"""Configuration schema using Pydantic."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rails_runner.core.framing import DEFAULT_MAX_FRAME_BYTES
from rails_runner.utils.exceptions import WorkerSpawnError

DEFAULT_MARKER_FILE = "bin/rails"


class RunnerConfig(BaseSettings):
    """Settings for spawning and talking to the runner worker."""
    command: list[str] = Field(default_factory=list)  # Explicit worker argv; overrides server_script
    server_script: str = ""  # Entry script passed to `rails runner`
    marker_file: str = DEFAULT_MARKER_FILE  # Must exist in the work dir for a real client
    max_retries: int = Field(default=5, ge=0)
    retry_delay_seconds: float = Field(default=0.0, ge=0)
    shutdown_grace_seconds: float = Field(default=0.5, ge=0)
    exit_grace_seconds: float = Field(default=0.5, ge=0)
    # Rails test runs manage the worker themselves
    register_exit_hook: bool = Field(default_factory=lambda: os.environ.get("RAILS_ENV") != "test")
    env: dict[str, str] = Field(default_factory=dict)  # Extra environment for the worker
    stderr_buffer_lines: int = Field(default=200, ge=1)
    max_frame_bytes: int = Field(default=DEFAULT_MAX_FRAME_BYTES, ge=1)  # Larger declared bodies are malformed

    model_config = SettingsConfigDict(
        env_prefix="RAILS_RUNNER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    def resolved_command(self) -> list[str]:
        """Worker argv: the explicit command, or `rails runner <script> start`."""
        if self.command:
            return list(self.command)
        argv = ["bundle", "exec", "rails", "runner", self.server_script, "start"]
        if not self.server_script.strip():
            raise WorkerSpawnError(argv, "no server_script or command configured")
        return argv
