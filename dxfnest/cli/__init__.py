"""Command-line interface for dxfnest."""

from dxfnest.cli.main import cli

__all__ = ["cli"]
