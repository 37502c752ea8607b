"""Resource occupancy engine.

The controller samples memory, CPU and disk on an interval and drives three
pools toward the targets:

- MemoryPool: committed bytearray chunks, released newest first
- CPUSpinnerPool: busy-loop processes, restarted per generation
- DiskPaddingManager: padding files in a working directory

Decisions come from the pure functions in occupy.occupancy.adjustment, with
a hysteresis band around every target to prevent oscillation.

Usage:
    from occupy.occupancy import OccupancyController
    from occupy.core.config import SystemConfig

    controller = OccupancyController(SystemConfig())
    task = asyncio.create_task(controller.start())
    ...
    await controller.stop()  # releases everything
"""

from occupy.occupancy.adjustment import Action, Decision
from occupy.occupancy.controller import OccupancyController, ControllerState
from occupy.occupancy.cpu_pool import CPUSpinnerPool, PoolState
from occupy.occupancy.disk_padding import DiskPaddingManager
from occupy.occupancy.memory_pool import MemoryPool
from occupy.occupancy.monitor import ResourceMonitor

__all__ = [
    "Action",
    "Decision",
    "OccupancyController",
    "ControllerState",
    "CPUSpinnerPool",
    "PoolState",
    "DiskPaddingManager",
    "MemoryPool",
    "ResourceMonitor",
]


def create_occupancy_controller(config, sampler=None) -> OccupancyController:
    """Factory function to create a configured occupancy controller.

    Args:
        config: SystemConfig with targets and pool settings
        sampler: Optional IResourceSampler (defaults to psutil)

    Returns:
        Configured OccupancyController (not started)
    """
    return OccupancyController(config, sampler)
