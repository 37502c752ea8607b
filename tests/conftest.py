"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path
import tempfile
import shutil

from occupy.core.config import (
    SystemConfig,
    ResourceTarget,
    MemoryPoolConfig,
    CPUPoolConfig,
    DiskPaddingConfig,
    ControllerConfig,
)

KiB = 1024
MiB = 1024 * KiB


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def test_config(temp_data_dir):
    """Create test configuration with small pool sizes."""
    return SystemConfig(
        debug_mode=True,
        log_level="DEBUG",
        log_dir=None,
        targets=ResourceTarget(
            memory_percent=50.0,
            cpu_percent=30.0,
            disk_percent=40.0,
            interval_seconds=0.2
        ),
        memory=MemoryPoolConfig(chunk_size_bytes=1 * MiB),
        cpu=CPUPoolConfig(core_count=2, stop_timeout_seconds=3.0, check_interval=1000),
        disk=DiskPaddingConfig(
            work_dir=str(temp_data_dir / "padding"),
            write_chunk_bytes=16 * KiB,
            max_file_bytes=64 * KiB
        ),
        controller=ControllerConfig(settle_delay_seconds=0.0, stop_timeout_seconds=10.0),
    )
