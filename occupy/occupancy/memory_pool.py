"""Memory occupant pool."""

import gc
import logging
import threading
from typing import List

from occupy.core.config import MemoryPoolConfig
from occupy.core.exceptions import AllocationError
from occupy.occupancy.fill import fill
from occupy.utils.validation import format_bytes

logger = logging.getLogger(__name__)


class MemoryPool:
    """Holds committed byte chunks to raise resident memory."""

    def __init__(self, config: MemoryPoolConfig):
        self.chunk_size = config.chunk_size_bytes
        self._chunks: List[bytearray] = []
        self._total = 0
        self._lock = threading.Lock()

    def grow(self, nbytes: int) -> int:
        """Allocate nbytes more, in chunks of at most chunk_size.

        Returns the number of bytes added. Raises AllocationError if the
        interpreter refuses an allocation; chunks appended before the failure
        are kept.
        """
        if nbytes <= 0:
            return 0

        added = 0
        with self._lock:
            while added < nbytes:
                size = min(self.chunk_size, nbytes - added)
                try:
                    chunk = bytearray(size)
                    fill(chunk)
                except MemoryError as e:
                    logger.error(
                        f"Memory allocation failed after {format_bytes(added)}: {e!r}"
                    )
                    raise AllocationError(nbytes, added) from e

                self._chunks.append(chunk)
                self._total += size
                added += size

            total = self._total

        logger.info(f"Allocated {format_bytes(added)} (holding {format_bytes(total)})")
        return added

    def shrink(self, nbytes: int) -> int:
        """Release up to nbytes, newest chunks first.

        The chunk straddling the boundary is truncated in place. Returns the
        number of bytes released.
        """
        if nbytes <= 0:
            return 0

        released = 0
        with self._lock:
            target = min(nbytes, self._total)
            while released < target:
                chunk = self._chunks[-1]
                remaining = target - released
                if len(chunk) <= remaining:
                    self._chunks.pop()
                    released += len(chunk)
                else:
                    del chunk[len(chunk) - remaining:]
                    released += remaining
            self._total -= released
            total = self._total

        gc.collect()
        logger.info(f"Released {format_bytes(released)} (holding {format_bytes(total)})")
        return released

    def release_all(self) -> int:
        """Drop every chunk. Returns the number of bytes released."""
        with self._lock:
            released = self._total
            count = len(self._chunks)
            self._chunks = []
            self._total = 0

        gc.collect()
        if released:
            logger.info(f"Released all memory: {count} chunks, {format_bytes(released)}")
        return released

    def total_bytes(self) -> int:
        """Bytes currently held."""
        with self._lock:
            return self._total

    def chunk_count(self) -> int:
        """Number of chunks currently held."""
        with self._lock:
            return len(self._chunks)
