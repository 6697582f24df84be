"""Command-line front end for hashchain."""

from .repl import parse_int, run_repl

__all__ = ["parse_int", "run_repl"]
