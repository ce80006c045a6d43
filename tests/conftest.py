# Showcase test scripts
from __future__ import annotations

import itertools
import sys
from pathlib import Path
from typing import Callable

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture()
def config_base(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("CONFIG_BASE", str(tmp_path))
    return tmp_path


@pytest.fixture()
def tick_clock() -> Callable[[], str]:
    """Strictly increasing ISO timestamps, one second apart."""
    counter = itertools.count()

    def clock() -> str:
        n = next(counter)
        return f"2025-01-01T00:{n // 60:02d}:{n % 60:02d}.000Z"

    return clock


@pytest.fixture()
def frozen_clock() -> Callable[[], str]:
    return lambda: "2025-01-01T00:00:00.000Z"


class FailingStorage:
    """Reads nothing, refuses every write."""

    def __init__(self, raise_on_write: bool = False) -> None:
        self.raise_on_write = raise_on_write

    def read(self, key: str) -> str | None:
        return None

    def write(self, key: str, raw: str) -> bool:
        if self.raise_on_write:
            raise OSError("quota exceeded")
        return False


@pytest.fixture()
def failing_storage() -> FailingStorage:
    return FailingStorage()
