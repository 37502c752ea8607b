"""Occupancy controller: sampling loop and stop/cleanup protocol."""

import asyncio
import gc
import logging
import threading
from enum import Enum
from typing import Any, Dict, Optional

from occupy.core.config import SystemConfig
from occupy.core.exceptions import AllocationError, PaddingIOError, SamplingError
from occupy.core.interfaces import DiskSample, IResourceSampler, MemorySample
from occupy.occupancy.adjustment import Action, decide_cpu, decide_disk, decide_memory
from occupy.occupancy.cpu_pool import CPUSpinnerPool
from occupy.occupancy.disk_padding import DiskPaddingManager
from occupy.occupancy.memory_pool import MemoryPool
from occupy.occupancy.monitor import ResourceMonitor
from occupy.utils.validation import format_bytes

logger = logging.getLogger(__name__)


class ControllerState(Enum):
    """Controller lifecycle."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class OccupancyController:
    """Drives memory, CPU and disk occupancy toward the configured targets."""

    def __init__(
        self,
        config: SystemConfig,
        sampler: Optional[IResourceSampler] = None
    ):
        self.config = config
        self.targets = config.targets
        self.sampler = sampler or ResourceMonitor()
        self.core_count = config.cpu.resolved_core_count()

        self.memory_pool = MemoryPool(config.memory)
        self.cpu_pool = CPUSpinnerPool(config.cpu)
        self.disk_manager = DiskPaddingManager(config.disk)

        self._state = ControllerState.IDLE
        # asyncio events are created inside the running loop
        self._stop_requested: Optional[asyncio.Event] = None
        self._cleanup_done: Optional[asyncio.Event] = None
        self._cancelled = threading.Event()
        self._cleanup_started = False
        self._cleanup_passes = 0
        self._ticks = 0

        logger.info("Occupancy controller initialized")

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def cleanup_passes(self) -> int:
        return self._cleanup_passes

    def is_running(self) -> bool:
        """Check if the adjustment loop is active."""
        return self._state is ControllerState.RUNNING

    async def start(self):
        """Run the adjustment loop until stop() is called."""
        self._ensure_events()
        if self._state is not ControllerState.IDLE:
            logger.warning(f"Controller cannot start from state '{self._state.value}'")
            return

        self._state = ControllerState.RUNNING
        logger.info(
            f"Starting resource occupancy: memory {self.targets.memory_percent:.1f}%, "
            f"CPU {self.targets.cpu_percent:.1f}%, disk {self.targets.disk_percent:.1f}% "
            f"(interval {self.targets.interval_seconds}s)"
        )

        try:
            self.disk_manager.ensure_work_dir()
        except PaddingIOError as e:
            logger.error(f"Disk padding unavailable: {e}")

        tick = None
        try:
            while not await self._wait_for_stop(self.targets.interval_seconds):
                tick = asyncio.ensure_future(self._tick())
                try:
                    await asyncio.shield(tick)
                except Exception as e:
                    logger.error(f"Adjustment tick failed: {e}", exc_info=True)
            logger.info("Stop requested, leaving adjustment loop")
        finally:
            self._signal_stop()
            if tick is not None and not tick.done():
                # Pool work already handed to a thread must land before cleanup
                await asyncio.gather(tick, return_exceptions=True)
            await self._cleanup()

    async def stop(self) -> bool:
        """Request shutdown and wait for cleanup.

        Safe to call repeatedly and concurrently. Returns False if cleanup did
        not finish within the configured timeout.
        """
        self._ensure_events()

        if self._state is ControllerState.IDLE:
            await self._cleanup()
            return True

        self._signal_stop()

        timeout = self.config.controller.stop_timeout_seconds
        try:
            await asyncio.wait_for(self._cleanup_done.wait(), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Cleanup did not finish within {timeout:.0f}s, giving up")
            return False

        return True

    async def get_status(self) -> Dict[str, Any]:
        """Snapshot of controller and pool state."""
        def collect() -> Dict[str, Any]:
            return {
                "state": self._state.value,
                "targets": {
                    "memory_percent": self.targets.memory_percent,
                    "cpu_percent": self.targets.cpu_percent,
                    "disk_percent": self.targets.disk_percent,
                },
                "memory_bytes": self.memory_pool.total_bytes(),
                "memory_chunks": self.memory_pool.chunk_count(),
                "cpu_workers": self.cpu_pool.active_workers(),
                "padding_files": len(self.disk_manager.owned_files()),
                "ticks": self._ticks,
            }

        return await asyncio.to_thread(collect)

    def _ensure_events(self):
        if self._stop_requested is None:
            self._stop_requested = asyncio.Event()
            self._cleanup_done = asyncio.Event()

    def _signal_stop(self):
        self._cancelled.set()
        self._stop_requested.set()

    def _stop_pending(self) -> bool:
        return self._cancelled.is_set()

    async def _wait_for_stop(self, timeout: float) -> bool:
        """Sleep up to timeout seconds. True if a stop arrived meanwhile."""
        if self._stop_requested.is_set():
            return True
        try:
            await asyncio.wait_for(self._stop_requested.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def _tick(self):
        """Sample, decide and apply one round of adjustments."""
        self._ticks += 1

        try:
            memory = await asyncio.to_thread(self.sampler.sample_memory)
            if self._stop_pending():
                return
            cpu = await asyncio.to_thread(self.sampler.sample_cpu)
        except SamplingError as e:
            logger.warning(f"Skipping adjustment: {e}")
            return

        if self._stop_pending():
            return

        # A broken padding directory only takes disk out of the loop
        try:
            disk = await asyncio.to_thread(
                self.sampler.sample_disk, str(self.disk_manager.work_dir)
            )
        except SamplingError as e:
            logger.warning(f"Skipping disk adjustment: {e}")
            disk = None

        if self._stop_pending():
            return

        disk_usage = f"{disk.used_percent:.1f}%" if disk is not None else "unavailable"
        logger.info(
            f"Current usage: memory {memory.used_percent:.1f}%, "
            f"CPU {cpu:.1f}%, disk {disk_usage}"
        )

        # Disk first: writes perturb page cache and CPU readings
        if disk is not None:
            await asyncio.to_thread(self._adjust_disk, disk)

        if await self._wait_for_stop(self.config.controller.settle_delay_seconds):
            return

        try:
            memory = await asyncio.to_thread(self.sampler.sample_memory)
        except SamplingError as e:
            logger.warning(f"Skipping CPU and memory adjustment: {e}")
            return

        if self._stop_pending():
            return

        await asyncio.to_thread(self._adjust_cpu, cpu)

        if self._stop_pending():
            return

        await asyncio.to_thread(self._adjust_memory, memory)

    def _adjust_disk(self, sample: DiskSample):
        decision = decide_disk(sample.used_percent, self.targets.disk_percent, sample.total_bytes)

        if decision.action is Action.GROW:
            logger.info(f"Disk below target, padding {format_bytes(decision.amount)}")
            try:
                self.disk_manager.grow(decision.amount, self._stop_pending)
            except PaddingIOError as e:
                logger.error(f"Disk padding failed: {e}")
        elif decision.action is Action.SHRINK:
            logger.info("Disk above target, removing padding files")
            self.disk_manager.shrink_all()

    def _adjust_cpu(self, percent: float):
        decision = decide_cpu(percent, self.targets.cpu_percent, self.core_count)

        if decision.action is not Action.NOOP:
            self.cpu_pool.set_worker_count(decision.amount)

    def _adjust_memory(self, sample: MemorySample):
        decision = decide_memory(
            sample.used_percent,
            self.targets.memory_percent,
            sample.total_bytes,
            self.memory_pool.total_bytes()
        )

        if decision.action is Action.GROW:
            try:
                self.memory_pool.grow(decision.amount)
            except AllocationError as e:
                logger.warning(f"Memory grow cut short: {e}")
        elif decision.action is Action.SHRINK and decision.amount > 0:
            logger.info(
                f"Memory at {sample.used_percent:.1f}% exceeds target "
                f"{self.targets.memory_percent:.1f}%, releasing {format_bytes(decision.amount)}"
            )
            self.memory_pool.shrink(decision.amount)

    async def _cleanup(self):
        """Release everything exactly once, then mark the controller stopped."""
        self._ensure_events()
        if self._cleanup_started:
            await self._cleanup_done.wait()
            return

        self._cleanup_started = True
        self._state = ControllerState.STOPPING
        self._signal_stop()

        try:
            await asyncio.to_thread(self._release_all)
        finally:
            self._state = ControllerState.STOPPED
            self._cleanup_done.set()

    def _release_all(self):
        self._cleanup_passes += 1
        logger.info("Releasing all occupied resources...")

        steps = (
            ("CPU load", lambda: self.cpu_pool.set_worker_count(0)),
            ("memory", self.memory_pool.release_all),
            ("padding files", self.disk_manager.cleanup),
        )
        for name, step in steps:
            try:
                step()
            except Exception as e:
                logger.error(f"Failed to release {name}: {e}", exc_info=True)

        gc.collect()
        logger.info("Resource cleanup complete")
