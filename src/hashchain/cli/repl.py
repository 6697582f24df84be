"""Line-oriented key/value loop driving a :class:`ChainedHashMap`."""

from __future__ import annotations

import json
import logging
import re
import sys
from typing import TextIO

from hashchain.analysis import format_trace_lines, trace_chain_set
from hashchain.config import ReplPolicy
from hashchain.contracts.error import AllocationError
from hashchain.core.maps import ChainedHashMap

logger = logging.getLogger("hashchain")

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_int(text: str) -> int:
    """Parse a leading signed integer the way ``atoi`` does; junk yields 0."""

    match = _LEADING_INT.match(text)
    if match is None:
        return 0
    value = int(match.group(1))
    return max(INT32_MIN, min(INT32_MAX, value))


def _prompt(stdout: TextIO, stdin: TextIO, text: str) -> str | None:
    stdout.write(text)
    stdout.flush()
    line = stdin.readline()
    if not line:
        return None
    return line[:-1] if line.endswith("\n") else line


def run_repl(
    hash_map: ChainedHashMap,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    policy: ReplPolicy | None = None,
    trace: bool = False,
    json_dump: bool = False,
) -> int:
    """Read key/value pairs until end of input; return how many were applied."""

    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    policy = policy or ReplPolicy()
    applied = 0

    while True:
        key = _prompt(stdout, stdin, policy.key_prompt)
        if key is None:
            break
        raw_value = _prompt(stdout, stdin, policy.value_prompt)
        if raw_value is None:
            break
        value = parse_int(raw_value)

        if trace:
            for line in format_trace_lines(trace_chain_set(hash_map, key, value)):
                stdout.write(line + "\n")
        try:
            hash_map.set(key, value)
        except AllocationError as exc:
            logger.warning("Dropped update for key %r: %s", key, exc)
        else:
            applied += 1

        if policy.dump_after_set:
            if json_dump:
                stdout.write(json.dumps(hash_map.snapshot(), ensure_ascii=False) + "\n")
            else:
                hash_map.dump(stdout)
        stdout.flush()

    logger.debug("REPL finished after %d updates", applied)
    return applied


__all__ = ["INT32_MAX", "INT32_MIN", "parse_int", "run_repl"]
