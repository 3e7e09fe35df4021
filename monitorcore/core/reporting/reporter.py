# monitorcore/core/reporting/reporter.py
from __future__ import annotations

import logging
import math
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from ..channel import ProtocolChannel
from ..errors import StepExecutionError, normalize_step_error

logger = logging.getLogger(__name__)


class Reporter:
    """
    Typed reporting layer over a ProtocolChannel.

    Every call is awaited on the channel before returning, so reports
    reach the orchestrator in the order they were issued. Each call is
    also mirrored to the local logger.

    The reporter remembers whether the current step already sent a
    completion signal (time, ok or error); the runner uses that to decide
    whether it still owes the orchestrator an explicit OK.
    """

    def __init__(self, channel: ProtocolChannel) -> None:
        self.channel = channel
        self._completion_sent = False
        self._error_sent = False
        self._current_step: Optional[str] = None

    # ---- per-step bookkeeping ----

    def begin_step(self, name: str) -> None:
        self._current_step = name
        self._completion_sent = False
        self._error_sent = False

    def end_step(self) -> None:
        self._current_step = None

    @property
    def completion_sent(self) -> bool:
        return self._completion_sent

    @property
    def error_sent(self) -> bool:
        return self._error_sent

    @property
    def current_step(self) -> Optional[str]:
        return self._current_step

    # ---- logs ----

    async def log_debug(self, msg: str) -> None:
        logger.debug(msg)
        await self.channel.log_debug(str(msg))

    async def log_info(self, msg: str) -> None:
        logger.info(msg)
        await self.channel.log_info(str(msg))

    async def log_error(self, msg: str) -> None:
        logger.error(msg)
        await self.channel.log_error(str(msg))

    # ---- metrics / completion ----

    async def send_time(self, seconds: float) -> None:
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            raise ValueError(f"send_time expects a number of seconds, got {seconds!r}")
        if not math.isfinite(seconds) or seconds < 0:
            raise ValueError(f"send_time expects a finite non-negative duration, got {seconds!r}")
        logger.debug("step %s time %.3fs", self._current_step, seconds)
        self._completion_sent = True
        await self.channel.send_time(float(seconds))

    async def send_ok(self) -> None:
        logger.debug("step %s ok", self._current_step)
        self._completion_sent = True
        await self.channel.send_ok()

    async def send_error(self, err: Any) -> StepExecutionError:
        error = normalize_step_error(err, step_name=self._current_step)
        logger.warning("step %s failed: %s", error.step_name, error)
        self._completion_sent = True
        self._error_sent = True
        await self.channel.send_error(error)
        return error

    @asynccontextmanager
    async def timed(self) -> AsyncIterator[None]:
        """
        Measure the wrapped block and report it with send_time.

            >>> async with reporter.timed():
            ...     await client.ping()
        """
        t0 = time.perf_counter()
        yield
        await self.send_time(time.perf_counter() - t0)
