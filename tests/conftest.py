import sys
from pathlib import Path
from typing import Any, Callable, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import


class RecordingDestructor:
    """Destructor stand-in that remembers every value it was handed."""

    def __init__(self) -> None:
        self.calls: List[Any] = []

    def __call__(self, value: Any) -> None:
        self.calls.append(value)


@pytest.fixture(name="destructor")
def destructor_fixture() -> RecordingDestructor:
    return RecordingDestructor()


@pytest.fixture(name="colliding_keys")
def colliding_keys_fixture() -> Callable[[int, int], List[str]]:
    """Return ``count`` distinct single-letter keys sharing one bucket out of ``buckets``."""

    from hashchain.core.maps import weighted_char_hash

    def pick(count: int, buckets: int = 2) -> List[str]:
        letters = [chr(c) for c in range(ord("a"), ord("z") + 1)]
        target = weighted_char_hash(letters[0]) % buckets
        keys = [k for k in letters if weighted_char_hash(k) % buckets == target]
        return keys[:count]

    return pick
