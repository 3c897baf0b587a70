"""
mamwrap command-line interface.

This package provides the CLI for wrapping iOS apps with the
Intune App Wrapping Tool.
"""

from mamwrap.cli.main import cli

__all__ = ["cli"]
