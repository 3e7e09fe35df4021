# monitorcore/api/monitor.py
"""
Monitor API - wire a registry, a channel and a runner from configuration.

    >>> monitor = build_monitor(load_config())
    >>> summary = asyncio.run(monitor.run())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import ChannelSection, MonitorConfig, MonitorSection
from ..core.channel import ChannelCall, ProtocolChannel, ScriptedChannel
from ..core.errors import ConfigError
from ..core.reporting import Reporter
from ..core.runner import OnConfig, StepRunner
from ..core.step import SessionSummary
from ..core.steps import StepRegistry, load_entry_points
from ..utils.loading import import_object

logger = logging.getLogger(__name__)


@dataclass
class Monitor:
    config: MonitorConfig
    channel: ProtocolChannel
    registry: StepRegistry
    reporter: Reporter
    runner: StepRunner

    async def run(self) -> SessionSummary:
        """Run one session; the channel is closed afterwards whatever happens."""
        logger.info("Monitor %s starting with %d step(s)", self.config.monitor.name, len(self.registry))
        try:
            return await self.runner.run()
        finally:
            await self.channel.close()


def build_channel(
    section: ChannelSection,
    *,
    echo: Optional[Callable[[ChannelCall], None]] = None,
) -> ProtocolChannel:
    if not section.factory:
        return ScriptedChannel(section.script, echo=echo)

    factory = import_object(section.factory)
    if not callable(factory):
        raise ConfigError(message=f"channel factory '{section.factory}' is not callable")

    channel = factory(section)
    if not isinstance(channel, ProtocolChannel):
        raise ConfigError(
            message=f"channel factory '{section.factory}' returned {type(channel).__name__}, expected a ProtocolChannel",
            details={"factory": section.factory},
        )
    return channel


def register_providers(registry: StepRegistry, reporter: Reporter, section: MonitorSection) -> None:
    for path in section.steps:
        provider = import_object(path)
        if not callable(provider):
            raise ConfigError(message=f"step provider '{path}' is not callable", details={"path": path})
        provider(registry, reporter)
        logger.debug("Loaded step provider %s", path)

    if section.entry_points:
        load_entry_points(registry, reporter)


def build_monitor(
    config: MonitorConfig,
    *,
    echo: Optional[Callable[[ChannelCall], None]] = None,
    on_config: Optional[OnConfig] = None,
) -> Monitor:
    channel = build_channel(config.channel, echo=echo)
    reporter = Reporter(channel)
    registry = StepRegistry()
    register_providers(registry, reporter, config.monitor)

    runner = StepRunner(
        channel,
        registry,
        reporter=reporter,
        config=config.runner_config(),
        on_config=on_config,
    )
    return Monitor(
        config=config,
        channel=channel,
        registry=registry,
        reporter=reporter,
        runner=runner,
    )
