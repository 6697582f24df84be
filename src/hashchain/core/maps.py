from __future__ import annotations

import json
import logging
import sys
from typing import Any, Callable, Dict, Iterator, List, Optional, TextIO, Tuple

from hashchain.contracts.error import AllocationError, BadInputError, InvariantError, PolicyError
from hashchain.core.node import MAX_KEY_LENGTH, Entry, bound_key, iter_chain, release

logger = logging.getLogger("hashchain")

DEFAULT_BUCKETS: int = 2

Destructor = Callable[[Any], None]


def weighted_char_hash(key: str) -> int:
    """Sum of each character's code point times its 1-based position."""

    n = 0
    weight = 1
    for ch in key:
        n += weight * ord(ch)
        weight += 1
    return n


def _json_friendly(value: Any) -> Any:
    """Return a JSON-serialisable representation of ``value``."""

    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return repr(value)


def _new_bucket_array(count: int) -> List[Optional[Entry]]:
    return [None] * count


class ChainedHashMap:
    """Fixed-size bucket array with singly-linked collision chains.

    The bucket count never changes after construction. Values are owned by
    the map only as far as the registered destructor goes: it is called on a
    value when ``set`` overwrites it and on every value still held when the
    map is destroyed. Without a destructor the map just drops its references.
    """

    __slots__ = ("N", "max_key_length", "_buckets", "_size", "_destructor")

    def __init__(self, buckets: int = DEFAULT_BUCKETS, *, max_key_length: int = MAX_KEY_LENGTH) -> None:
        if buckets < 1:
            raise BadInputError("buckets must be >= 1")
        if max_key_length < 1:
            raise BadInputError("max_key_length must be >= 1")
        try:
            table = _new_bucket_array(buckets)
        except MemoryError as exc:
            raise AllocationError(f"cannot allocate {buckets} buckets") from exc
        self.N = buckets
        self.max_key_length = max_key_length
        self._buckets: Optional[List[Optional[Entry]]] = table
        self._size = 0
        self._destructor: Optional[Destructor] = None
        logger.debug("Hash map created (buckets=%d, max_key_length=%d)", buckets, max_key_length)

    def __enter__(self) -> "ChainedHashMap":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.destroy()

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self._find(key) is not None

    @property
    def destroyed(self) -> bool:
        return self._buckets is None

    @property
    def destructor(self) -> Optional[Destructor]:
        return self._destructor

    def set_destructor(self, fn: Optional[Destructor]) -> None:
        self._destructor = fn

    def _table(self) -> List[Optional[Entry]]:
        if self._buckets is None:
            raise PolicyError("hash map has been destroyed")
        return self._buckets

    def _normalize(self, key: str) -> str:
        if not isinstance(key, str):
            raise TypeError(f"keys must be str, not {type(key).__name__}")
        return bound_key(key, self.max_key_length)

    def bucket_index(self, key: str) -> int:
        return weighted_char_hash(self._normalize(key)) % self.N

    def head(self, index: int) -> Optional[Entry]:
        return self._table()[index]

    def _new_entry(self, key: str, value: Any) -> Entry:
        try:
            return Entry.create(key, value, None, max_key_length=self.max_key_length)
        except MemoryError as exc:
            raise AllocationError(f"cannot allocate entry for key {key!r}") from exc

    def set(self, key: str, value: Any) -> "ChainedHashMap":
        table = self._table()
        key = self._normalize(key)
        idx = weighted_char_hash(key) % self.N
        cur = table[idx]
        if cur is None:
            table[idx] = self._new_entry(key, value)
            self._size += 1
            logger.debug("Inserted %r as head of bucket %d", key, idx)
            return self
        depth = 0
        while True:
            if cur.key == key:
                if self._destructor is not None:
                    self._destructor(cur.value)
                cur.value = value
                logger.debug("Overwrote %r in bucket %d (depth=%d)", key, idx, depth)
                return self
            if cur.next is None:
                cur.next = self._new_entry(key, value)
                self._size += 1
                logger.debug("Appended %r to bucket %d (depth=%d)", key, idx, depth + 1)
                return self
            cur = cur.next
            depth += 1

    def _find(self, key: str) -> Optional[Entry]:
        table = self._table()
        key = self._normalize(key)
        for entry in iter_chain(table[weighted_char_hash(key) % self.N]):
            if entry.key == key:
                return entry
        return None

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._find(key)
        return default if entry is None else entry.value

    def items(self) -> Iterator[Tuple[str, Any]]:
        for head in self._table():
            for entry in iter_chain(head):
                yield entry.key, entry.value

    def chain_lengths(self) -> List[int]:
        return [sum(1 for _ in iter_chain(head)) for head in self._table()]

    def max_chain_len(self) -> int:
        return max(self.chain_lengths(), default=0)

    def verify(self) -> int:
        """Check every chain is acyclic, correctly bucketed and duplicate-free.

        Returns the number of entries walked; raises ``InvariantError`` otherwise.
        """

        total = 0
        for idx, head in enumerate(self._table()):
            seen: set[str] = set()
            for entry in iter_chain(head):
                if total >= self._size:
                    raise InvariantError(f"bucket {idx} holds more entries than the map size {self._size}")
                if weighted_char_hash(entry.key) % self.N != idx:
                    raise InvariantError(f"key {entry.key!r} found in bucket {idx}")
                if entry.key in seen:
                    raise InvariantError(f"duplicate key {entry.key!r} in bucket {idx}")
                seen.add(entry.key)
                total += 1
        if total != self._size:
            raise InvariantError(f"walked {total} entries but size is {self._size}")
        return total

    def load_factor(self) -> float:
        return self._size / self.N

    def dump_lines(self) -> Iterator[str]:
        """Yield one line per entry, successors indented by their chain depth."""

        for idx, head in enumerate(self._table()):
            for depth, entry in enumerate(iter_chain(head)):
                yield f"{'  ' * depth}{idx}: {entry.key}: {entry.value}"

    def dump(self, stream: Optional[TextIO] = None) -> None:
        out = stream if stream is not None else sys.stdout
        for line in self.dump_lines():
            out.write(line + "\n")

    def snapshot(self) -> Dict[str, Any]:
        chains = []
        for idx, head in enumerate(self._table()):
            if head is None:
                continue
            chains.append(
                {
                    "bucket": idx,
                    "entries": [
                        {"key": entry.key, "value": _json_friendly(entry.value)}
                        for entry in iter_chain(head)
                    ],
                }
            )
        return {"buckets": self.N, "size": self._size, "chains": chains}

    def destroy(self) -> None:
        """Tear down every chain, handing each stored value to the destructor once."""

        table = self._buckets
        if table is None:
            return
        destructor = self._destructor
        # The map is already empty by the time any destructor runs.
        self._buckets = None
        self._size = 0
        first_error: Optional[Exception] = None
        released = 0
        for idx, head in enumerate(table):
            table[idx] = None
            cur = head
            while cur is not None:
                successor = cur.next
                release(cur)
                if destructor is not None:
                    try:
                        destructor(cur.value)
                    except Exception as exc:
                        if first_error is None:
                            first_error = exc
                        else:
                            logger.exception("Destructor failed during teardown")
                released += 1
                cur = successor
        logger.debug("Hash map destroyed (%d entries released)", released)
        if first_error is not None:
            raise first_error


__all__ = ["DEFAULT_BUCKETS", "ChainedHashMap", "Destructor", "weighted_char_hash"]
