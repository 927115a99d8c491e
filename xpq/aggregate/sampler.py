from __future__ import annotations

from typing import Generic, Iterable, List, Optional, TypeVar

import numpy as np

from xpq.errors import InvalidSampleSizeError

T = TypeVar("T")


def validate_sample_size(size: int) -> int:
    if size is None or int(size) < 0:
        raise InvalidSampleSizeError(f"Sample size must be >= 0, got {size}")
    return int(size)


class ReservoirSampler(Generic[T]):
    """
    Uniform fixed-size sample of a stream (Algorithm R).

    Every item of a stream of length ``n`` ends up in the reservoir with
    probability ``size / n``. The reservoir is returned in slot order, which is
    stream order only while fewer than ``size`` items have been seen.
    """

    def __init__(self, size: int, seed: Optional[int] = None):
        self.size = validate_sample_size(size)
        self._rng = np.random.default_rng(seed)
        self._reservoir: List[T] = []
        self._seen = 0

    @property
    def seen(self) -> int:
        return self._seen

    def add(self, item: T) -> None:
        self._seen += 1
        if self._seen <= self.size:
            self._reservoir.append(item)
            return
        if self.size == 0:
            return
        j = int(self._rng.integers(1, self._seen, endpoint=True))
        if j <= self.size:
            self._reservoir[j - 1] = item

    def extend(self, items: Iterable[T]) -> "ReservoirSampler[T]":
        for item in items:
            self.add(item)
        return self

    def result(self) -> List[T]:
        return list(self._reservoir)


def sample(items: Iterable[T], size: int, seed: Optional[int] = None) -> List[T]:
    """Draw ``min(size, n)`` items uniformly from ``items`` in one pass."""
    return ReservoirSampler(size, seed).extend(items).result()
