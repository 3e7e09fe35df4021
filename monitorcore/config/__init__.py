# monitorcore/config/__init__.py
"""
monitorcore configuration

Design principles:
1. Code has defaults, YAML is input parameters (YAML can be deleted)
2. One frozen section per concern (monitor, runner, channel, logging)
3. Validation returns issues instead of raising, except for unreadable files
"""

from .sections import (
    SectionConfig,
    MonitorSection,
    RunnerSection,
    ChannelSection,
    LoggingSection,
)
from .loader import MonitorConfig, load_config, DEFAULT_CONFIG_PATH
from .validator import validate_config, ConfigIssue, log_level

__all__ = [
    "SectionConfig",
    "MonitorSection",
    "RunnerSection",
    "ChannelSection",
    "LoggingSection",
    "MonitorConfig",
    "load_config",
    "DEFAULT_CONFIG_PATH",
    "validate_config",
    "ConfigIssue",
    "log_level",
]
