from .maps import DEFAULT_BUCKETS, ChainedHashMap, Destructor, weighted_char_hash
from .node import MAX_KEY_LENGTH, Entry, bound_key, find_tail, iter_chain, release

__all__ = [
    "ChainedHashMap",
    "Destructor",
    "Entry",
    "DEFAULT_BUCKETS",
    "MAX_KEY_LENGTH",
    "bound_key",
    "find_tail",
    "iter_chain",
    "release",
    "weighted_char_hash",
]
