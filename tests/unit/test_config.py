"""Unit tests for configuration loading and validation."""

import dataclasses

import pytest

from occupy.core.config import (
    GiB,
    MiB,
    ResourceTarget,
    SystemConfig,
    load_config,
    validate_config,
    with_overrides,
)
from occupy.core import create_default_config
from occupy.utils.validation import ValidationError, parse_duration

ENV_VARS = (
    "OCCUPY_MEMORY_PERCENT",
    "OCCUPY_CPU_PERCENT",
    "OCCUPY_DISK_PERCENT",
    "OCCUPY_INTERVAL",
    "OCCUPY_TEMP_DIR",
    "OCCUPY_CONFIG",
    "LOG_LEVEL",
    "DEBUG_MODE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def yaml_file(temp_data_dir):
    path = temp_data_dir / "occupy.yaml"
    path.write_text(
        "resources:\n"
        "  memory_percent: 60\n"
        "  cpu_percent: 25.5\n"
        "  disk_percent: 10\n"
        "monitoring:\n"
        "  interval: 1m30s\n"
        "  log_level: warning\n"
        "memory:\n"
        "  chunk_size_mb: 50\n"
        "cpu:\n"
        "  load_threads: 3\n"
        "disk:\n"
        "  temp_dir: /var/tmp/occupy\n"
        "  write_chunk_mb: 4\n"
        "  max_file_size_gb: 1\n"
    )
    return path


class TestResourceTarget:

    def test_defaults(self):
        target = ResourceTarget()
        assert (target.memory_percent, target.cpu_percent, target.disk_percent) == (50.0, 30.0, 40.0)
        assert target.interval_seconds == 5.0

    def test_immutable(self):
        target = ResourceTarget()
        with pytest.raises(dataclasses.FrozenInstanceError):
            target.memory_percent = 10.0


class TestLoadConfig:

    def test_yaml_values(self, yaml_file):
        config = load_config(str(yaml_file))

        assert config.targets == ResourceTarget(60.0, 25.5, 10.0, 90.0)
        assert config.log_level == "WARNING"
        assert config.memory.chunk_size_bytes == 50 * MiB
        assert config.cpu.core_count == 3
        assert config.disk.work_dir == "/var/tmp/occupy"
        assert config.disk.write_chunk_bytes == 4 * MiB
        assert config.disk.max_file_bytes == 1 * GiB

    def test_environment_overrides_yaml(self, yaml_file, monkeypatch):
        monkeypatch.setenv("OCCUPY_MEMORY_PERCENT", "70")
        monkeypatch.setenv("OCCUPY_INTERVAL", "500ms")
        monkeypatch.setenv("OCCUPY_TEMP_DIR", "/scratch")
        monkeypatch.setenv("DEBUG_MODE", "true")

        config = load_config(str(yaml_file))

        assert config.targets.memory_percent == 70.0
        assert config.targets.cpu_percent == 25.5
        assert config.targets.interval_seconds == pytest.approx(0.5)
        assert config.disk.work_dir == "/scratch"
        assert config.debug_mode is True

    def test_missing_file_uses_defaults(self, temp_data_dir):
        config = load_config(str(temp_data_dir / "absent.yaml"))

        assert config.targets == ResourceTarget()
        assert config.disk.work_dir is None

    def test_bad_interval_raises(self, temp_data_dir, monkeypatch):
        monkeypatch.setenv("OCCUPY_INTERVAL", "soon")

        with pytest.raises(ValidationError):
            load_config(str(temp_data_dir / "absent.yaml"))


class TestWithOverrides:

    def test_applies_given_values_only(self):
        config = SystemConfig()

        updated = with_overrides(config, cpu_percent=80.0, work_dir="/tmp/pad")

        assert updated.targets.cpu_percent == 80.0
        assert updated.targets.memory_percent == config.targets.memory_percent
        assert updated.disk.work_dir == "/tmp/pad"
        assert config.targets.cpu_percent == 30.0
        assert config.disk.work_dir is None


class TestValidateConfig:

    def test_default_config_is_valid(self):
        assert validate_config(create_default_config()) == []

    def test_out_of_range_percent(self):
        config = SystemConfig(targets=ResourceTarget(memory_percent=120.0, disk_percent=-1.0))

        errors = validate_config(config)

        assert len(errors) == 2
        assert any("memory_percent" in e for e in errors)
        assert any("disk_percent" in e for e in errors)

    def test_non_positive_interval(self):
        config = SystemConfig(targets=ResourceTarget(interval_seconds=0))

        assert any("interval" in e for e in validate_config(config))

    def test_file_cap_below_chunk(self):
        config = SystemConfig()
        config.disk.max_file_bytes = 1024
        config.disk.write_chunk_bytes = 4096

        assert any("max file size" in e for e in validate_config(config))


class TestParseDuration:

    @pytest.mark.parametrize("text,seconds", [
        ("5s", 5.0),
        ("500ms", 0.5),
        ("1m", 60.0),
        ("1h", 3600.0),
        ("1m30s", 90.0),
        ("2.5s", 2.5),
        ("10", 10.0),
        (3, 3.0),
    ])
    def test_valid(self, text, seconds):
        assert parse_duration(text) == pytest.approx(seconds)

    @pytest.mark.parametrize("text", ["", "5x", "s5", "1m fast"])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_duration(text)
