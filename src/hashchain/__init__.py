"""Fixed-size chained hash map with a line-oriented REPL."""

from . import analysis, contracts, core
from .core import ChainedHashMap, Entry, weighted_char_hash

__all__ = [
    "analysis",
    "contracts",
    "core",
    "ChainedHashMap",
    "Entry",
    "weighted_char_hash",
]
