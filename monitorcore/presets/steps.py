# monitorcore/presets/steps.py
"""
Test monitor steps.

Small steps that exercise every reporting path of the harness; the
orchestrator's integration suite runs them against a live monitor.
"""

from __future__ import annotations

import sys

from ..core.reporting import Reporter
from ..core.steps import StepRegistry


def test_monitor(registry: StepRegistry, reporter: Reporter) -> None:
    """Register TestLogging, Error and PrintStderr."""

    @registry.step("TestLogging", description="Emit one log line per level, then a time")
    async def test_logging() -> None:
        await reporter.log_debug("Test Logging: DEBUG")
        await reporter.log_info("Test Logging: INFO")
        await reporter.log_error("Test Logging: ERROR")
        await reporter.send_time(2.0)

    @registry.step("Error", description="Always fails")
    async def error() -> None:
        raise RuntimeError("Error!")

    @registry.step("PrintStderr", description="Write to stderr, then report OK")
    async def print_stderr() -> None:
        print("This is a line on stderr", file=sys.stderr)
        await reporter.send_ok()


def minimal_monitor(registry: StepRegistry, reporter: Reporter) -> None:
    """Register TestLogging only."""

    @registry.step("TestLogging", description="Emit one log line per level, then a time")
    async def test_logging() -> None:
        await reporter.log_debug("Test Logging: DEBUG")
        await reporter.log_info("Test Logging: INFO")
        await reporter.log_error("Test Logging: ERROR")
        await reporter.send_time(2.0)
