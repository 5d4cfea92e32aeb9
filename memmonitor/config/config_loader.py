"""
Configuration loader for monitoring sessions.

This module provides the ConfigLoader class for loading monitor defaults
from YAML files and combining them with command-line overrides.
"""
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from memmonitor.config.monitor_config import MonitorConfig
from memmonitor.util.format_utils import mb_to_bytes

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config_yaml"


class ConfigLoader:

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH, env: str = None):
        self.config_path = Path(config_path)
        self.env = env
        self.config_data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load monitor defaults from YAML.
        Supports environment-specific overrides via config_<env>.yaml

        Returns:
            dict: merged settings
        """
        base_config_file = self.config_path / "config.yaml"
        with open(base_config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if self.env:
            env_config_file = self.config_path / f"config_{self.env}.yaml"
            with open(env_config_file, "r", encoding="utf-8") as f:
                env_data = yaml.safe_load(f) or {}
                # Environment values win over the base file
                data.update(env_data)

        return data

    @property
    def log_file(self) -> Optional[Path]:
        log_file = self.config_data.get("log_file")
        return Path(log_file) if log_file else None

    def build_monitor_config(
        self,
        target_command: Optional[Sequence[str]] = None,
        **overrides: Any,
    ) -> MonitorConfig:
        """
        Build an immutable MonitorConfig from the loaded defaults.

        Args:
            target_command: argv of the command to supervise, None to monitor
                the current process
            **overrides: explicit values keyed like the YAML file; None
                values are ignored so unset CLI options keep the defaults

        Raises:
            ValueError: If a resulting value is out of range
        """
        settings = dict(self.config_data)
        settings.update({k: v for k, v in overrides.items() if v is not None})

        return MonitorConfig(
            interval_seconds=float(settings.get("interval", 1.0)),
            threshold_bytes=mb_to_bytes(int(settings.get("threshold_mb", 20))),
            max_duration_seconds=int(settings.get("duration", 0)),
            csv_logging_enabled=bool(settings.get("log", False)),
            csv_path=Path(settings.get("csv_path") or "memory-usage.csv"),
            target_command=list(target_command) if target_command else None,
            alert_script=settings.get("alert_script") or None,
            terminate_timeout_seconds=float(settings.get("terminate_timeout", 5.0)),
            drain_timeout_seconds=float(settings.get("drain_timeout", 5.0)),
        )
