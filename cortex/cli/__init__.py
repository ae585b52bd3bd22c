"""
CLI module for cortex.
"""

from cortex.cli.main import app


def cli():
    """Entry point for the CLI."""
    app()


__all__ = ["app", "cli"]
