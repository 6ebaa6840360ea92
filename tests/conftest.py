"""Fixtures for batchloader tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest


class RecordingFetch:
    """Synchronous fetch function that multiplies keys and records calls."""

    def __init__(self, factor: int = 10) -> None:
        """Initialize with the multiplication factor."""
        self.factor = factor
        self.calls: list[list[int]] = []

    def __call__(self, keys: list[int]) -> Sequence[int]:
        self.calls.append(list(keys))
        return [key * self.factor for key in keys]


@pytest.fixture
def recording_fetch() -> RecordingFetch:
    """Return a fetch function mapping each key to key * 10."""
    return RecordingFetch()


@pytest.fixture
def failing_fetch() -> Callable[[list[int]], list[int]]:
    """Return a fetch function that raises when -1 is requested."""

    def fetch(keys: list[int]) -> list[int]:
        if -1 in keys:
            raise ValueError("Invalid key -1")
        return [key * 10 for key in keys]

    return fetch
