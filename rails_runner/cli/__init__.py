"""CLI module for rails_runner."""
