"""Identifier allocation.

Events, payloads, handlers and brokers each draw ids from their own
monotonically increasing sequence.  An :class:`IdAllocator` owns those
sequences so tests (or separate brokers) can use an isolated one.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterator


class IdAllocator:
    """Hands out ``1, 2, 3, ...`` per named sequence."""

    def __init__(self) -> None:
        self._sequences: dict[str, Iterator[int]] = {}

    def next_id(self, sequence: str) -> int:
        """Return the next id for *sequence*."""
        counter = self._sequences.get(sequence)
        if counter is None:
            counter = self._sequences[sequence] = itertools.count(1)
        return next(counter)


DEFAULT_ALLOCATOR = IdAllocator()
