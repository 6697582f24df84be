from __future__ import annotations

from typing import Any, Iterator, Optional

MAX_KEY_LENGTH: int = 1023


def bound_key(key: str, max_key_length: int = MAX_KEY_LENGTH) -> str:
    """Clip ``key`` to ``max_key_length`` characters; longer keys are not an error."""

    return key if len(key) <= max_key_length else key[:max_key_length]


class Entry:
    """One key/value pair in a bucket's collision chain."""

    __slots__ = ("key", "value", "next")

    def __init__(self, key: str, value: Any, next: Optional["Entry"] = None) -> None:
        self.key = key
        self.value = value
        self.next = next

    @classmethod
    def create(
        cls,
        key: str,
        value: Any,
        next: Optional["Entry"] = None,
        *,
        max_key_length: int = MAX_KEY_LENGTH,
    ) -> "Entry":
        return cls(bound_key(key, max_key_length), value, next)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Entry({self.key!r}, {self.value!r})"


def release(entry: Optional[Entry]) -> None:
    """Drop the entry's link to its successor.

    The value and the successors are left alone; the map decides what happens
    to those.
    """

    if entry is None:
        return
    entry.next = None


def find_tail(entry: Optional[Entry]) -> Optional[Entry]:
    cur = entry
    while cur is not None and cur.next is not None:
        cur = cur.next
    return cur


def iter_chain(entry: Optional[Entry]) -> Iterator[Entry]:
    cur = entry
    while cur is not None:
        yield cur
        cur = cur.next


__all__ = ["MAX_KEY_LENGTH", "Entry", "bound_key", "find_tail", "iter_chain", "release"]
