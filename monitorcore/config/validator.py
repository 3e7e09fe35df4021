# monitorcore/config/validator.py
"""
Configuration Validator

Validates configuration for illegal/misleading combinations.
Returns structured issues with level (warn/error), path, message, hint.
"""

from typing import List, Literal
from dataclasses import dataclass
import logging

from .loader import MonitorConfig


_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class ConfigIssue:
    """
    Configuration validation issue

    Structured output for CLI/logging.
    """
    level: Literal["warn", "error"]
    path: str  # e.g., "runner.step_timeout_s"
    message: str
    hint: str = ""

    def __str__(self) -> str:
        hint_str = f"\n   Hint: {self.hint}" if self.hint else ""
        return f"{self.level.upper()} [{self.path}] {self.message}{hint_str}"


def validate_config(config: MonitorConfig) -> List[ConfigIssue]:
    """
    Validate configuration for illegal/misleading combinations.

    Returns:
        List of issues (warn/error level)
    """
    issues = []
    monitor, runner, channel = config.monitor, config.runner, config.channel

    if not isinstance(monitor.steps, tuple) or not all(isinstance(s, str) for s in monitor.steps):
        issues.append(ConfigIssue(
            level="error",
            path="monitor.steps",
            message="steps must be a list of import paths",
            hint="e.g. steps: ['monitorcore.presets:test_monitor']",
        ))
    elif not monitor.steps and not monitor.entry_points:
        issues.append(ConfigIssue(
            level="warn",
            path="monitor.steps",
            message="no step providers configured; every requested step will fail with STEP_NOT_FOUND",
            hint="Add a provider to monitor.steps or set monitor.entry_points=true",
        ))

    timeout = runner.step_timeout_s
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            issues.append(ConfigIssue(
                level="error",
                path="runner.step_timeout_s",
                message=f"step_timeout_s must be a number, got {timeout!r}",
            ))
        elif timeout <= 0:
            issues.append(ConfigIssue(
                level="error",
                path="runner.step_timeout_s",
                message=f"step_timeout_s must be positive, got {timeout}",
                hint="Remove the key to disable the step watchdog",
            ))

    limit = runner.history_limit
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        issues.append(ConfigIssue(
            level="error",
            path="runner.history_limit",
            message=f"history_limit must be a positive integer, got {limit!r}",
        ))

    if channel.factory and channel.script:
        issues.append(ConfigIssue(
            level="warn",
            path="channel.script",
            message="script is only used by the scripted channel and is ignored with a custom factory",
        ))

    if not isinstance(channel.script, tuple) or not all(isinstance(s, str) for s in channel.script):
        issues.append(ConfigIssue(
            level="error",
            path="channel.script",
            message="script must be a list of step names",
        ))

    if str(config.logging.level).upper() not in _LOG_LEVELS:
        issues.append(ConfigIssue(
            level="error",
            path="logging.level",
            message=f"Invalid log level: '{config.logging.level}'",
            hint=f"Use one of: {', '.join(sorted(_LOG_LEVELS))}",
        ))

    return issues


def log_level(config: MonitorConfig) -> int:
    return getattr(logging, str(config.logging.level).upper(), logging.INFO)


__all__ = [
    "ConfigIssue",
    "validate_config",
    "log_level",
]
