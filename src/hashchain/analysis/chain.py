"""Chain-walk tracing for the bucketed hash map."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from hashchain.core.maps import ChainedHashMap, _json_friendly, weighted_char_hash
from hashchain.core.node import bound_key, iter_chain

ChainTrace = Dict[str, Any]


def _walk(map_obj: ChainedHashMap, key: str) -> tuple[str, int, int, List[Dict[str, Any]], bool]:
    bounded = bound_key(key, map_obj.max_key_length)
    hashed = weighted_char_hash(bounded)
    bucket = hashed % map_obj.N
    path: List[Dict[str, Any]] = []
    found = False
    for step, entry in enumerate(iter_chain(map_obj.head(bucket))):
        matches = entry.key == bounded
        path.append(
            {
                "step": step,
                "key_repr": repr(entry.key),
                "value_repr": repr(entry.value),
                "matches": matches,
            }
        )
        if matches:
            found = True
            break
    return bounded, hashed, bucket, path, found


def trace_chain_get(map_obj: ChainedHashMap, key: str) -> ChainTrace:
    bounded, hashed, bucket, path, found = _walk(map_obj, key)
    if not path:
        terminal = "empty"
    elif found:
        terminal = "match"
    else:
        terminal = "end-of-chain"
    return {
        "operation": "get",
        "key_repr": repr(bounded),
        "hash": hashed,
        "bucket": bucket,
        "buckets": map_obj.N,
        "found": found,
        "terminal": terminal,
        "path": path,
    }


def trace_chain_set(map_obj: ChainedHashMap, key: str, value: Any) -> ChainTrace:
    """Describe what ``set`` would do for ``key`` without touching the map."""

    bounded, hashed, bucket, path, found = _walk(map_obj, key)
    if not path:
        terminal = "new-head"
    elif found:
        terminal = "update"
        path[-1]["action"] = "update"
    else:
        terminal = "append"
        path.append({"step": len(path), "action": "append", "key_repr": repr(bounded)})
    return {
        "operation": "set",
        "key_repr": repr(bounded),
        "value": _json_friendly(value),
        "hash": hashed,
        "bucket": bucket,
        "buckets": map_obj.N,
        "found": found,
        "terminal": terminal,
        "destructor_called": found and map_obj.destructor is not None,
        "path": path,
    }


def format_trace_lines(trace: ChainTrace) -> Sequence[str]:
    lines = [
        f"{trace['operation'].upper()} {trace['key_repr']}: "
        f"hash={trace['hash']} bucket={trace['bucket']}/{trace['buckets']}"
    ]
    for step in trace.get("path", []):
        action = step.get("action")
        if action == "append":
            lines.append(f"  [{step['step']}] append new entry")
            continue
        flag = "match" if step.get("matches") else "miss"
        suffix = f" -> {action}" if action else ""
        lines.append(f"  [{step['step']}] {step['key_repr']} = {step['value_repr']} ({flag}){suffix}")
    lines.append(f"  terminal: {trace['terminal']}")
    return lines


__all__ = ["ChainTrace", "format_trace_lines", "trace_chain_get", "trace_chain_set"]
