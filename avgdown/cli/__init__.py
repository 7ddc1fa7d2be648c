"""CLI commands for avgdown.

This package provides the command-line interface for avgdown:
share sizing, position scanning, and saved preferences.
"""

from avgdown.cli.main import cli, main

__all__ = ["cli", "main"]
