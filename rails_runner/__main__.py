"""
Entry point for running rails_runner as a module: python -m rails_runner
"""

from rails_runner.cli.commands import app

if __name__ == "__main__":
    app()
