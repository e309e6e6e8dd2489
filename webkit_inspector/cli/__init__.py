"""Command-line interface for WebKit Inspector."""

from .main import app, cli_main

__all__ = ["app", "cli_main"]
