"""Cross-reference ids for introspected elements.

Ids are a 64-bit hash of a caller-supplied seed and a process-wide counter.
Folding in the counter keeps identical seeds apart; distinct seeds are only
kept apart by the width of the hash. Collisions are possible in principle
and are not checked here (see ``stubsmith.resolve`` for detection).
"""

from __future__ import annotations

import hashlib
import itertools
import threading


class IdAllocator:
    """Issues element ids; safe to share between threads."""

    def __init__(self, start: int = 0) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self, seed: object) -> int:
        with self._lock:
            sequence = next(self._counter)
        digest = hashlib.blake2b(digest_size=8)
        digest.update(repr(seed).encode("utf-8"))
        digest.update(sequence.to_bytes(8, "little"))
        return int.from_bytes(digest.digest(), "little")


_DEFAULT_ALLOCATOR = IdAllocator()


def unique_element_id(seed: object) -> int:
    """Allocate an id from the process-wide allocator."""
    return _DEFAULT_ALLOCATOR.next_id(seed)


__all__ = ["IdAllocator", "unique_element_id"]
