"""CPU spinner pool.

Spinners are separate processes so each can saturate a core. All spinners
of one start cycle share a generation number; stopping bumps the shared
counter and every spinner holding the old number exits on its next check.
"""

import logging
import multiprocessing as mp
import threading
import time
from enum import Enum
from typing import List

from occupy.core.config import CPUPoolConfig
from occupy.core.exceptions import ShutdownTimeoutError

logger = logging.getLogger(__name__)

# Workers start from non-main threads, so never fork
_context = mp.get_context("spawn")


class PoolState(Enum):
    """Spinner pool lifecycle."""
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


def spin(generation, token: int, check_interval: int):
    """Busy loop until the shared generation moves past token."""
    junk = 1.0
    count = 0
    while True:
        junk = junk * 1.0000001 + 1.0
        count += 1
        if count >= check_interval:
            if generation.value != token:
                return
            count = 0
            junk = 1.0


class CPUSpinnerPool:
    """Runs a configurable number of busy-loop worker processes."""

    def __init__(self, config: CPUPoolConfig):
        self.stop_timeout = config.stop_timeout_seconds
        self.check_interval = config.check_interval

        self._generation = _context.Value('q', 0)
        self._workers: List[mp.Process] = []
        self._desired = 0
        self._state = PoolState.STOPPED
        self._lock = threading.Lock()

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def desired_workers(self) -> int:
        return self._desired

    @property
    def generation(self) -> int:
        return self._generation.value

    def active_workers(self) -> int:
        """Count spinner processes that are still alive."""
        with self._lock:
            return sum(1 for worker in self._workers if worker.is_alive())

    def set_worker_count(self, count: int):
        """Converge the pool to count spinners.

        Any change restarts the pool under a fresh generation.
        """
        count = max(0, count)
        with self._lock:
            if count == self._desired:
                return

            previous = self._desired
            self._desired = count

            if self._state is PoolState.RUNNING:
                logger.info(f"Stopping CPU load ({previous} workers)")
                self._stop_workers()

            if count > 0:
                logger.info(f"Starting CPU load ({count} workers)")
                self._start_workers(count)

    def _start_workers(self, count: int):
        self._state = PoolState.STARTING
        token = self._generation.value

        for index in range(count):
            worker = _context.Process(
                target=spin,
                args=(self._generation, token, self.check_interval),
                name=f"occupy-spinner-{token}-{index}",
                daemon=True
            )
            worker.start()
            self._workers.append(worker)

        self._state = PoolState.RUNNING

    def _stop_workers(self):
        self._state = PoolState.STOPPING
        with self._generation.get_lock():
            self._generation.value += 1

        try:
            self._join_workers()
        except ShutdownTimeoutError as e:
            logger.warning(f"CPU load stop timed out, terminating stragglers: {e}")
            for worker in self._workers:
                if worker.is_alive():
                    worker.terminate()
            for worker in self._workers:
                worker.join(self.stop_timeout)

        self._workers = []
        self._state = PoolState.STOPPED

    def _join_workers(self):
        """Wait for every worker against one shared deadline."""
        deadline = time.monotonic() + self.stop_timeout
        for worker in self._workers:
            worker.join(max(0.0, deadline - time.monotonic()))

        stragglers = sum(1 for worker in self._workers if worker.is_alive())
        if stragglers:
            raise ShutdownTimeoutError(stragglers, self.stop_timeout)
