# monitorcore/config/loader.py
"""
Configuration Loader

Loads configuration from YAML files with code defaults as fallback.

Design principle:
- Code = truth (has all defaults)
- YAML = input parameters (optional)
- System works without YAML
- Deep immutability (nested containers are frozen)
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Optional, TypeVar

import yaml

from ..core.errors import ConfigError
from ..core.runner import RunnerConfig
from .sections import (
    ChannelSection,
    LoggingSection,
    MonitorSection,
    RunnerSection,
    SectionConfig,
)

DEFAULT_CONFIG_PATH = Path.home() / ".monitorcore" / "config.yml"

S = TypeVar("S", bound=SectionConfig)


def _freeze(value: Any) -> Any:
    """Recursively freeze dicts/lists (dict -> MappingProxyType, list -> tuple)"""
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class MonitorConfig:
    """
    Unified monitor configuration.

    All fields have code defaults - YAML is optional.
    """

    monitor: MonitorSection = field(default_factory=MonitorSection)
    runner: RunnerSection = field(default_factory=RunnerSection)
    channel: ChannelSection = field(default_factory=ChannelSection)
    logging: LoggingSection = field(default_factory=LoggingSection)

    @classmethod
    def default(cls) -> "MonitorConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MonitorConfig":
        config = cls.default()
        if not data:
            return config
        if not isinstance(data, dict):
            raise ConfigError(message="configuration root must be a mapping")

        return cls(
            monitor=_merge_section(config.monitor, data.get("monitor"), "monitor"),
            runner=_merge_section(config.runner, data.get("runner"), "runner"),
            channel=_merge_section(config.channel, data.get("channel"), "channel"),
            logging=_merge_section(config.logging, data.get("logging"), "logging"),
        )

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "MonitorConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML file. If None, tries ~/.monitorcore/config.yml
                and falls back to code defaults when it does not exist.

        Raises:
            ConfigError: explicit path missing, unreadable or invalid YAML
        """
        return cls.from_dict(_load_yaml(config_path))

    def runner_config(self) -> RunnerConfig:
        return RunnerConfig(
            announce_steps=self.runner.announce_steps,
            step_timeout_s=self.runner.step_timeout_s,
            exit_message=self.runner.exit_message,
            history_limit=self.runner.history_limit,
        )

    def with_overrides(self, **sections: SectionConfig) -> "MonitorConfig":
        return replace(self, **sections)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "monitor": self.monitor.to_dict(),
            "runner": self.runner.to_dict(),
            "channel": self.channel.to_dict(),
            "logging": self.logging.to_dict(),
        }


def _load_yaml(config_path: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """Load YAML file; a missing default file is not an error"""
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return None
        path = DEFAULT_CONFIG_PATH
    else:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(message=f"config file not found: {path}", details={"path": str(path)})

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(
            message=f"cannot load config file {path}: {e}",
            details={"path": str(path)},
            cause=e,
        ) from e

    if data is not None and not isinstance(data, dict):
        raise ConfigError(message=f"config file {path} must contain a mapping", details={"path": str(path)})
    return data


def _merge_section(default_instance: S, yaml_data: Any, name: str) -> S:
    """Merge one YAML section into its default instance"""
    if yaml_data is None:
        return default_instance
    if not isinstance(yaml_data, dict):
        raise ConfigError(message=f"section '{name}' must be a mapping", details={"section": name})

    known = {f.name for f in fields(default_instance)}
    unknown = sorted(set(yaml_data) - known)
    if unknown:
        raise ConfigError(
            message=f"unknown key(s) in section '{name}': {', '.join(unknown)}",
            details={"section": name, "keys": unknown},
        )

    values = {k: _freeze(v) for k, v in yaml_data.items()}
    return replace(default_instance, **values)


def load_config(config_path: Optional[Path] = None) -> MonitorConfig:
    """
    Load monitor configuration.

    Note:
        - Without a path, a missing ~/.monitorcore/config.yml yields code defaults
        - Configuration is deeply immutable (nested containers frozen)
    """
    return MonitorConfig.from_yaml(config_path)


__all__ = [
    "MonitorConfig",
    "load_config",
    "DEFAULT_CONFIG_PATH",
]
