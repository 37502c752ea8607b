"""System resource sampling."""

import logging

import psutil

from occupy.core.exceptions import SamplingError
from occupy.core.interfaces import DiskSample, IResourceSampler, MemorySample

logger = logging.getLogger(__name__)


class ResourceMonitor(IResourceSampler):
    """Samples memory, CPU and disk utilization through psutil."""

    def __init__(self, cpu_sample_seconds: float = 0.1):
        self.cpu_sample_seconds = cpu_sample_seconds

    def sample_memory(self) -> MemorySample:
        """Get memory utilization and capacity."""
        try:
            mem = psutil.virtual_memory()
        except (psutil.Error, OSError) as e:
            raise SamplingError(f"Memory sampling failed: {e}") from e
        return MemorySample(used_percent=float(mem.percent), total_bytes=int(mem.total))

    def sample_cpu(self) -> float:
        """Get CPU utilization percentage."""
        try:
            return float(psutil.cpu_percent(interval=self.cpu_sample_seconds))
        except (psutil.Error, OSError) as e:
            raise SamplingError(f"CPU sampling failed: {e}") from e

    def sample_disk(self, path: str) -> DiskSample:
        """Get utilization and capacity of the filesystem holding path."""
        try:
            usage = psutil.disk_usage(path)
        except (psutil.Error, OSError) as e:
            raise SamplingError(f"Disk sampling failed for {path}: {e}") from e
        return DiskSample(used_percent=float(usage.percent), total_bytes=int(usage.total))

    def get_system_summary(self, path: str = "/") -> str:
        """Get human-readable system summary."""
        mem = psutil.virtual_memory()
        disk = psutil.disk_usage(path)
        cpu_util = self.sample_cpu()

        return f"""
System Resources:
- CPU: {cpu_util:.0f}% ({psutil.cpu_count(logical=True)} logical cores)
- RAM: {mem.percent:.0f}% ({mem.used / (1024**3):.1f}GB / {mem.total / (1024**3):.1f}GB)
- Disk ({path}): {disk.percent:.0f}% ({disk.used / (1024**3):.1f}GB / {disk.total / (1024**3):.1f}GB)
"""
