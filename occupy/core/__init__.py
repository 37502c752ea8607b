"""Core components shared by the occupancy engine.

- Configuration loading and validation
- Sampling interface and data models
- Error taxonomy

Usage:
    from occupy.core import SystemConfig, load_config, IResourceSampler
"""

from occupy.core.config import (
    SystemConfig,
    ResourceTarget,
    MemoryPoolConfig,
    CPUPoolConfig,
    DiskPaddingConfig,
    ControllerConfig,
    load_config,
    validate_config,
    with_overrides,
)
from occupy.core.interfaces import (
    MemorySample,
    DiskSample,
    IResourceSampler,
)
from occupy.core.exceptions import (
    OccupyError,
    SamplingError,
    AllocationError,
    PaddingIOError,
    ShutdownTimeoutError,
)

__all__ = [
    # Configuration
    "SystemConfig",
    "ResourceTarget",
    "MemoryPoolConfig",
    "CPUPoolConfig",
    "DiskPaddingConfig",
    "ControllerConfig",
    "load_config",
    "validate_config",
    "with_overrides",

    # Interfaces & Models
    "MemorySample",
    "DiskSample",
    "IResourceSampler",

    # Errors
    "OccupyError",
    "SamplingError",
    "AllocationError",
    "PaddingIOError",
    "ShutdownTimeoutError",
]


def create_default_config() -> SystemConfig:
    """Create a default system configuration."""
    return SystemConfig()
