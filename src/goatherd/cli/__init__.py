"""CLI module - command-line access to the herd analytics."""

from goatherd.cli.herd import build_parser, cli, cli_main

__all__ = ["build_parser", "cli", "cli_main"]
