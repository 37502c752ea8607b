"""Unit tests for the memory occupant pool."""

import threading

import pytest

from occupy.core.config import MemoryPoolConfig
from occupy.core.exceptions import AllocationError
from occupy.occupancy import memory_pool as memory_pool_module
from occupy.occupancy.memory_pool import MemoryPool

KiB = 1024


@pytest.fixture
def pool():
    return MemoryPool(MemoryPoolConfig(chunk_size_bytes=64 * KiB))


class TestMemoryPool:
    """Test memory pool accounting."""

    def test_initialization(self, pool):
        assert pool.total_bytes() == 0
        assert pool.chunk_count() == 0

    def test_grow_zero_is_noop(self, pool):
        assert pool.grow(0) == 0
        assert pool.chunk_count() == 0

    def test_grow_exact_total(self, pool):
        added = pool.grow(200 * KiB)

        assert added == 200 * KiB
        assert pool.total_bytes() == 200 * KiB
        # 64 + 64 + 64 + 8
        assert pool.chunk_count() == 4

    def test_grow_fills_pattern(self, pool):
        pool.grow(300)

        chunk = pool._chunks[0]
        assert chunk[0] == 0
        assert chunk[255] == 255
        assert chunk[256] == 0
        assert chunk[299] == 43

    def test_shrink_exact(self, pool):
        pool.grow(200 * KiB)

        released = pool.shrink(70 * KiB)

        assert released == 70 * KiB
        assert pool.total_bytes() == 130 * KiB
        assert sum(len(c) for c in pool._chunks) == pool.total_bytes()

    def test_shrink_truncates_straddling_chunk(self, pool):
        pool.grow(128 * KiB)

        pool.shrink(16 * KiB)

        assert pool.chunk_count() == 2
        assert len(pool._chunks[-1]) == 48 * KiB

    def test_shrink_is_lifo(self, pool):
        pool.grow(64 * KiB)
        first = pool._chunks[0]
        pool.grow(64 * KiB)

        pool.shrink(64 * KiB)

        assert pool.chunk_count() == 1
        assert pool._chunks[0] is first

    def test_shrink_clamps_to_held(self, pool):
        pool.grow(10 * KiB)

        assert pool.shrink(1024 * KiB) == 10 * KiB
        assert pool.total_bytes() == 0

    def test_shrink_empty(self, pool):
        assert pool.shrink(KiB) == 0

    def test_release_all(self, pool):
        pool.grow(500 * KiB)

        assert pool.release_all() == 500 * KiB
        assert pool.total_bytes() == 0
        assert pool.chunk_count() == 0

    def test_allocation_failure_keeps_earlier_chunks(self, pool, monkeypatch):
        calls = {"n": 0}
        real_fill = memory_pool_module.fill

        def flaky_fill(buffer):
            calls["n"] += 1
            if calls["n"] == 3:
                raise MemoryError()
            real_fill(buffer)

        monkeypatch.setattr(memory_pool_module, "fill", flaky_fill)

        with pytest.raises(AllocationError) as exc_info:
            pool.grow(256 * KiB)

        assert exc_info.value.allocated == 128 * KiB
        assert exc_info.value.requested == 256 * KiB
        assert pool.total_bytes() == 128 * KiB
        assert pool.chunk_count() == 2

    def test_concurrent_grow_serializes(self, pool):
        threads = [threading.Thread(target=pool.grow, args=(100 * KiB,)) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert pool.total_bytes() == 400 * KiB
        assert sum(len(c) for c in pool._chunks) == 400 * KiB
