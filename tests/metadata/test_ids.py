"""Tests for stubsmith.metadata.ids."""

from __future__ import annotations

import threading

from stubsmith.metadata.ids import IdAllocator, unique_element_id


def test_identical_seeds_get_distinct_ids() -> None:
    allocator = IdAllocator()
    ids = {allocator.next_id("same call site") for _ in range(500)}
    assert len(ids) == 500


def test_ids_fit_in_64_bits() -> None:
    allocator = IdAllocator()
    for seed in ("a", ("class", "Gadget"), 7):
        assert 0 <= allocator.next_id(seed) < 2**64


def test_allocation_is_reproducible_for_a_fresh_counter() -> None:
    assert IdAllocator().next_id("seed") == IdAllocator().next_id("seed")
    assert IdAllocator().next_id("seed") != IdAllocator(start=1).next_id("seed")


def test_concurrent_allocation_never_repeats() -> None:
    allocator = IdAllocator()
    results: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        local = [allocator.next_id("worker") for _ in range(250)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 1000
    assert len(set(results)) == 1000


def test_process_wide_allocator_advances() -> None:
    assert unique_element_id("module") != unique_element_id("module")
