from pathlib import Path

import pytest

from memmonitor.config.config_loader import ConfigLoader
from memmonitor.config.monitor_config import MonitorConfig


def write_config(directory, base, env=None):
    (directory / "config.yaml").write_text(base, encoding="utf-8")
    if env is not None:
        name, content = env
        (directory / f"config_{name}.yaml").write_text(content, encoding="utf-8")
    return directory


class TestConfigLoader:

    def test_packaged_defaults(self):
        config = ConfigLoader().build_monitor_config()

        assert config.interval_seconds == 1.0
        assert config.threshold_bytes == 20 * 1024 * 1024
        assert config.max_duration_seconds == 0
        assert config.csv_logging_enabled is False
        assert config.csv_path == Path("memory-usage.csv")
        assert config.alert_script is None
        assert config.monitors_self

    def test_packaged_dev_environment(self):
        loader = ConfigLoader(env="dev")
        config = loader.build_monitor_config()

        assert config.interval_seconds == 0.5
        assert config.csv_logging_enabled is True
        assert loader.log_file == Path("logs/memmonitor-dev.log")

    def test_env_file_overrides_base(self, tmp_path):
        write_config(tmp_path, "interval: 2\nthreshold_mb: 50\n", ("ci", "threshold_mb: 5\n"))

        config = ConfigLoader(tmp_path, env="ci").build_monitor_config()

        assert config.interval_seconds == 2.0
        assert config.threshold_bytes == 5 * 1024 * 1024

    def test_explicit_overrides_win_and_none_is_ignored(self, tmp_path):
        write_config(tmp_path, "interval: 2\nthreshold_mb: 50\nlog: false\n")

        config = ConfigLoader(tmp_path).build_monitor_config(
            target_command=["sleep", "1"], interval=0.25, threshold_mb=None, log=True, csv_path="out.csv",
        )

        assert config.interval_seconds == 0.25
        assert config.threshold_bytes == 50 * 1024 * 1024
        assert config.csv_logging_enabled is True
        assert config.csv_path == Path("out.csv")
        assert config.target_command == ("sleep", "1")
        assert not config.monitors_self

    def test_empty_file_uses_builtin_defaults(self, tmp_path):
        write_config(tmp_path, "")

        config = ConfigLoader(tmp_path).build_monitor_config()

        assert config == MonitorConfig()

    def test_invalid_interval_rejected(self, tmp_path):
        write_config(tmp_path, "interval: 0\n")

        with pytest.raises(ValueError):
            ConfigLoader(tmp_path).build_monitor_config()

    def test_missing_env_file(self, tmp_path):
        write_config(tmp_path, "interval: 1\n")

        with pytest.raises(FileNotFoundError):
            ConfigLoader(tmp_path, env="nope")


class TestMonitorConfig:

    def test_is_immutable(self):
        config = MonitorConfig()
        with pytest.raises(AttributeError):
            config.interval_seconds = 5

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"interval_seconds": 0},
            {"interval_seconds": -1},
            {"threshold_bytes": -1},
            {"max_duration_seconds": -1},
            {"target_command": []},
        ],
    )
    def test_out_of_range_values(self, kwargs):
        with pytest.raises(ValueError):
            MonitorConfig(**kwargs)
