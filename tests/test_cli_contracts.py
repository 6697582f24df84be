from __future__ import annotations

import json

import pytest

from hashchain.contracts.error import (
    AllocationError,
    BadInputError,
    ErrorEnvelope,
    Exit,
    IOErrorEnvelope,
    InvariantError,
    PolicyError,
    guard_cli,
)


def test_envelope_omits_empty_hint() -> None:
    assert json.loads(ErrorEnvelope("Policy", "nope").to_json()) == {"error": "Policy", "detail": "nope"}
    with_hint = json.loads(ErrorEnvelope("Policy", "nope", hint="try again").to_json())
    assert with_hint["hint"] == "try again"


def test_allocation_error_is_a_memory_error() -> None:
    assert issubclass(AllocationError, MemoryError)


@pytest.mark.parametrize(
    ("exc", "code", "label"),
    [
        (AllocationError("oom"), Exit.ALLOCATION, "Allocation"),
        (BadInputError("bad"), Exit.BAD_INPUT, "BadInput"),
        (InvariantError("broken"), Exit.INVARIANT, "Invariant"),
        (PolicyError("destroyed"), Exit.POLICY, "Policy"),
        (IOErrorEnvelope("disk"), Exit.IO, "IO"),
        (FileNotFoundError("missing.toml"), Exit.IO, "FileNotFound"),
    ],
)
def test_guard_cli_maps_exceptions(
    exc: Exception, code: Exit, label: str, capsys: pytest.CaptureFixture[str]
) -> None:
    @guard_cli
    def handler() -> int:
        raise exc

    with pytest.raises(SystemExit) as excinfo:
        handler()
    assert excinfo.value.code == int(code)
    envelope = json.loads(capsys.readouterr().err.strip())
    assert envelope["error"] == label


def test_guard_cli_passes_through_results() -> None:
    @guard_cli
    def handler(value: int) -> int:
        return value * 2

    assert handler(21) == 42


def test_hint_is_forwarded(capsys: pytest.CaptureFixture[str]) -> None:
    @guard_cli
    def handler() -> int:
        raise BadInputError("buckets must be >= 1", hint="pass --buckets 2")

    with pytest.raises(SystemExit):
        handler()
    assert json.loads(capsys.readouterr().err.strip())["hint"] == "pass --buckets 2"
