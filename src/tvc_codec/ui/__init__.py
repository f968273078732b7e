"""Command-line surface for tvc-codec."""

from tvc_codec.ui.cli import CLIError, build_parser, run_cli

__all__ = ["CLIError", "build_parser", "run_cli"]
