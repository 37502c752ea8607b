"""Configuration models and loading."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional
from pathlib import Path
import logging
import os
import tempfile

import yaml
from dotenv import load_dotenv

from occupy.utils.validation import parse_duration, validate_percent

logger = logging.getLogger(__name__)

MiB = 1024 * 1024
GiB = 1024 * MiB


@dataclass(frozen=True)
class ResourceTarget:
    """Target utilization per resource, fixed for a controller's lifetime."""
    memory_percent: float = 50.0
    cpu_percent: float = 30.0
    disk_percent: float = 40.0
    interval_seconds: float = 5.0


@dataclass
class MemoryPoolConfig:
    """Memory occupant pool configuration."""
    chunk_size_bytes: int = 100 * MiB


@dataclass
class CPUPoolConfig:
    """CPU spinner pool configuration."""
    core_count: int = 0  # 0 = all logical cores
    stop_timeout_seconds: float = 3.0
    check_interval: int = 5000

    def resolved_core_count(self) -> int:
        """Number of logical cores the pool may occupy."""
        if self.core_count > 0:
            return self.core_count
        return os.cpu_count() or 1


@dataclass
class DiskPaddingConfig:
    """Disk padding configuration."""
    work_dir: Optional[str] = None  # None = OS temp directory
    write_chunk_bytes: int = 10 * MiB
    max_file_bytes: int = 5 * GiB
    file_prefix: str = "occupy_pad_"

    def resolved_work_dir(self) -> str:
        """Directory that holds the padding files."""
        return self.work_dir or tempfile.gettempdir()


@dataclass
class ControllerConfig:
    """Tick loop and shutdown timing."""
    settle_delay_seconds: float = 0.5
    stop_timeout_seconds: float = 60.0


@dataclass
class SystemConfig:
    """Main system configuration."""
    debug_mode: bool = False
    log_level: str = "INFO"
    log_dir: Optional[str] = "data/logs"

    targets: ResourceTarget = field(default_factory=ResourceTarget)
    memory: MemoryPoolConfig = field(default_factory=MemoryPoolConfig)
    cpu: CPUPoolConfig = field(default_factory=CPUPoolConfig)
    disk: DiskPaddingConfig = field(default_factory=DiskPaddingConfig)
    controller: ControllerConfig = field(default_factory=ControllerConfig)


def _apply_yaml(config: SystemConfig, data: Dict[str, Any], targets: Dict[str, float]):
    """Copy recognised keys from a parsed YAML document."""
    resources = data.get("resources") or {}
    for key in ("memory_percent", "cpu_percent", "disk_percent"):
        if key in resources:
            targets[key] = float(resources[key])

    monitoring = data.get("monitoring") or {}
    if "interval" in monitoring:
        targets["interval_seconds"] = parse_duration(monitoring["interval"])
    if "log_level" in monitoring:
        config.log_level = str(monitoring["log_level"]).upper()
    if monitoring.get("verbose"):
        config.debug_mode = True

    memory = data.get("memory") or {}
    if "chunk_size_mb" in memory:
        config.memory.chunk_size_bytes = int(float(memory["chunk_size_mb"]) * MiB)

    cpu = data.get("cpu") or {}
    if "load_threads" in cpu:
        config.cpu.core_count = int(cpu["load_threads"])

    disk = data.get("disk") or {}
    if disk.get("temp_dir"):
        config.disk.work_dir = str(disk["temp_dir"])
    if "write_chunk_mb" in disk:
        config.disk.write_chunk_bytes = int(float(disk["write_chunk_mb"]) * MiB)
    if "max_file_size_gb" in disk:
        config.disk.max_file_bytes = int(float(disk["max_file_size_gb"]) * GiB)


def load_config(config_path: Optional[str] = None) -> SystemConfig:
    """Load configuration from .env, an optional YAML file and the environment.

    Precedence, lowest first: dataclass defaults, YAML file, environment.
    """
    load_dotenv()

    config = SystemConfig()
    defaults = ResourceTarget()
    targets = {
        "memory_percent": defaults.memory_percent,
        "cpu_percent": defaults.cpu_percent,
        "disk_percent": defaults.disk_percent,
        "interval_seconds": defaults.interval_seconds,
    }

    # YAML file
    path = Path(config_path or os.getenv("OCCUPY_CONFIG", "config.yaml"))
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        _apply_yaml(config, data, targets)
        logger.debug(f"Loaded configuration file {path}")
    elif config_path:
        logger.warning(f"Configuration file not found: {path}")

    # Environment overrides
    config.debug_mode = os.getenv("DEBUG_MODE", str(config.debug_mode)).lower() == "true"
    config.log_level = os.getenv("LOG_LEVEL", config.log_level)

    targets["memory_percent"] = float(
        os.getenv("OCCUPY_MEMORY_PERCENT", str(targets["memory_percent"]))
    )
    targets["cpu_percent"] = float(
        os.getenv("OCCUPY_CPU_PERCENT", str(targets["cpu_percent"]))
    )
    targets["disk_percent"] = float(
        os.getenv("OCCUPY_DISK_PERCENT", str(targets["disk_percent"]))
    )
    if os.getenv("OCCUPY_INTERVAL"):
        targets["interval_seconds"] = parse_duration(os.getenv("OCCUPY_INTERVAL"))

    config.disk.work_dir = os.getenv("OCCUPY_TEMP_DIR") or config.disk.work_dir

    config.targets = ResourceTarget(**targets)
    return config


def with_overrides(
    config: SystemConfig,
    memory_percent: Optional[float] = None,
    cpu_percent: Optional[float] = None,
    disk_percent: Optional[float] = None,
    interval_seconds: Optional[float] = None,
    work_dir: Optional[str] = None
) -> SystemConfig:
    """Return a copy of config with the given (non-None) values applied."""
    changes = {
        name: value for name, value in (
            ("memory_percent", memory_percent),
            ("cpu_percent", cpu_percent),
            ("disk_percent", disk_percent),
            ("interval_seconds", interval_seconds),
        ) if value is not None
    }
    disk = replace(config.disk, work_dir=work_dir) if work_dir else config.disk
    return replace(config, targets=replace(config.targets, **changes), disk=disk)


def validate_config(config: SystemConfig) -> List[str]:
    """Validate configuration and return errors."""
    errors = []

    # Targets
    targets = config.targets
    for name in ("memory_percent", "cpu_percent", "disk_percent"):
        value = getattr(targets, name)
        if not validate_percent(value):
            errors.append(f"{name} must be between 0 and 100 (got {value})")

    if targets.interval_seconds <= 0:
        errors.append("interval must be greater than zero")

    # Pools
    if config.memory.chunk_size_bytes <= 0:
        errors.append("memory chunk size must be positive")

    if config.cpu.core_count < 0:
        errors.append("cpu core_count must be zero (all cores) or positive")

    if config.cpu.stop_timeout_seconds <= 0:
        errors.append("cpu stop timeout must be positive")

    if config.cpu.check_interval <= 0:
        errors.append("cpu check interval must be positive")

    if config.disk.write_chunk_bytes <= 0:
        errors.append("disk write chunk size must be positive")

    if config.disk.max_file_bytes < config.disk.write_chunk_bytes:
        errors.append(
            f"disk max file size ({config.disk.max_file_bytes}) "
            f"must be at least the write chunk size ({config.disk.write_chunk_bytes})"
        )

    if not config.disk.file_prefix:
        errors.append("disk file prefix must not be empty")

    # Controller
    if config.controller.settle_delay_seconds < 0:
        errors.append("settle delay must not be negative")

    if config.controller.stop_timeout_seconds <= 0:
        errors.append("stop timeout must be positive")

    return errors
