"""
occupy - Adaptive resource occupancy engine.

Holds memory, spins CPU workers and writes disk padding so that measured
system utilization converges toward configured targets, and releases all
of it on shutdown.

Usage:
    from occupy import OccupancyController, load_config

    config = load_config()
    controller = OccupancyController(config)
    # See main.py for signal wiring
"""

__version__ = "1.0.0"
__license__ = "MIT"

from occupy.core import (
    SystemConfig,
    ResourceTarget,
    load_config,
    validate_config,
)
from occupy.occupancy import OccupancyController, ControllerState
from occupy.utils import setup_logging

__all__ = [
    "__version__",
    "__license__",

    # Core
    "SystemConfig",
    "ResourceTarget",
    "load_config",
    "validate_config",

    # Engine
    "OccupancyController",
    "ControllerState",

    # Utilities
    "setup_logging",
]


def get_version() -> str:
    """Get the current version of occupy."""
    return __version__
