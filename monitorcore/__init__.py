# monitorcore/__init__.py
"""
monitorcore - monitor-step execution harness

A monitor process connects to an orchestrator through a ProtocolChannel,
performs the handshake, then runs the steps the orchestrator asks for one
at a time and reports their outcome until the orchestrator ends the
session.

Basic usage:

    >>> from monitorcore import StepRegistry, StepRunner, Reporter, ScriptedChannel
    >>> channel = ScriptedChannel(["Ping"])
    >>> reporter = Reporter(channel)
    >>> registry = StepRegistry()
    >>> @registry.step("Ping")
    ... async def ping():
    ...     async with reporter.timed():
    ...         await do_ping()
    >>> summary = asyncio.run(StepRunner(channel, registry, reporter=reporter).run())
    >>> summary.exit_code
    0

Real deployments plug in their own ProtocolChannel implementation
(see ``monitorcore run --channel``).
"""

__version__ = "0.1.0"

from .core.step import Step, StepOutcome, StepStatus, SessionSummary
from .core.steps import StepRegistry
from .core.channel import ProtocolChannel, ScriptedChannel, ChannelCall, CLEANUP, TEARDOWN
from .core.reporting import Reporter
from .core.runner import StepRunner, RunnerConfig, RunnerState
from .core.errors import (
    MonitorError,
    FatalSessionError,
    ProtocolTransportError,
    StepExecutionError,
    StepNotFound,
)

__all__ = [
    "__version__",

    # Steps
    "Step",
    "StepOutcome",
    "StepStatus",
    "SessionSummary",
    "StepRegistry",

    # Channel
    "ProtocolChannel",
    "ScriptedChannel",
    "ChannelCall",
    "CLEANUP",
    "TEARDOWN",

    # Runner / reporting
    "Reporter",
    "StepRunner",
    "RunnerConfig",
    "RunnerState",

    # Errors
    "MonitorError",
    "FatalSessionError",
    "ProtocolTransportError",
    "StepExecutionError",
    "StepNotFound",
]
