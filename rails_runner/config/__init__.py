"""Configuration module for rails_runner."""

from rails_runner.config.loader import load_config, get_config_path
from rails_runner.config.schema import RunnerConfig

__all__ = ["RunnerConfig", "load_config", "get_config_path"]
