"""Interface definitions for the sampling collaborator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class MemorySample:
    """System-wide memory reading."""
    used_percent: float
    total_bytes: int


@dataclass
class DiskSample:
    """Filesystem reading for one path."""
    used_percent: float
    total_bytes: int


class IResourceSampler(ABC):
    """Synchronous source of utilization readings.

    Implementations raise SamplingError when a reading is unavailable.
    """

    @abstractmethod
    def sample_memory(self) -> MemorySample:
        """Get memory utilization and capacity."""
        pass

    @abstractmethod
    def sample_cpu(self) -> float:
        """Get aggregate CPU utilization percentage."""
        pass

    @abstractmethod
    def sample_disk(self, path: str) -> DiskSample:
        """Get utilization and capacity of the filesystem holding path."""
        pass
