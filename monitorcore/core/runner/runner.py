# monitorcore/core/runner/runner.py
"""
StepRunner - the monitor's control loop.

    UNSTARTED -> HANDSHAKING -> AWAITING_STEP <-> EXECUTING_STEP
                      |               |
                   FAILED        TERMINATING -> EXITED

The runner performs the handshake once, then pulls step names from the
channel and executes them strictly one at a time until the channel
returns None. Step failures (unknown name, exception, watchdog timeout)
are reported with send_error and never leave the per-step boundary.
A failed handshake is the only session-fatal condition.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Optional

from ..channel import ProtocolChannel
from ..errors import (
    FatalSessionError,
    MonitorError,
    ProtocolTransportError,
    StepExecutionError,
    codes,
    normalize_step_error,
)
from ..reporting import Reporter
from ..step import (
    CleanupHandler,
    SESSION_HISTORY_LIMIT,
    SessionSummary,
    Step,
    StepOutcome,
    StepStatus,
    TeardownHandler,
    noop_handler,
    utc_now_iso,
)
from ..steps import StepRegistry
from .lifecycle import RunnerState, Transition, can_transition

logger = logging.getLogger(__name__)


DEFAULT_EXIT_MESSAGE = "Orchestrator asked to exit, all done"

OnConfig = Callable[[Any], Optional[Awaitable[None]]]


def _drop_tracebacks(exc: Optional[BaseException]) -> None:
    """Outcomes outlive the step; keep them from pinning the body's frames."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        exc.__traceback__ = None
        exc = exc.__cause__ or exc.__context__


@dataclass
class RunnerConfig:
    announce_steps: bool = True             # log "Starting step <name>" to the channel
    step_timeout_s: Optional[float] = None  # watchdog; None = a hung step blocks the loop
    exit_message: str = DEFAULT_EXIT_MESSAGE
    history_limit: int = SESSION_HISTORY_LIMIT   # outcomes kept in the summary


class StepRunner:
    """
    Drives one session over a channel it owns exclusively.

    Args:
        channel: Orchestrator protocol channel
        registry: Steps this monitor can run; frozen when run() starts
        reporter: Reporting facade; built over ``channel`` when omitted.
            Steps must report through the same instance.
        config: Runner options
        on_config: Called with the orchestrator configuration during the
            handshake (sync or async). A failure here is fatal.
    """

    def __init__(
        self,
        channel: ProtocolChannel,
        registry: StepRegistry,
        *,
        reporter: Optional[Reporter] = None,
        config: Optional[RunnerConfig] = None,
        on_config: Optional[OnConfig] = None,
    ) -> None:
        self.channel = channel
        self.registry = registry
        self.reporter = reporter or Reporter(channel)
        self.config = config or RunnerConfig()
        self._on_config = on_config

        self.orchestrator_config: Any = None
        # two transitions per step, plus the handshake and exit ones
        self.transitions: Deque[Transition] = deque(maxlen=2 * self.config.history_limit + 4)
        self._state = RunnerState.UNSTARTED

        self._cleanup_handler: CleanupHandler = noop_handler
        self._teardown_handler: TeardownHandler = noop_handler

    # ---- public API ----

    @property
    def state(self) -> RunnerState:
        return self._state

    def on_cleanup(self, handler: Optional[CleanupHandler]) -> None:
        """Replace the handler passed along with the next get_step call."""
        self._cleanup_handler = handler or noop_handler

    def on_teardown(self, handler: Optional[TeardownHandler]) -> None:
        self._teardown_handler = handler or noop_handler

    async def run(self) -> SessionSummary:
        if self._state != RunnerState.UNSTARTED:
            raise MonitorError(
                message=f"run() called in state {self._state.value}",
                error_code=codes.INVALID_STATE,
                phase="runner",
            )

        self.registry.freeze()
        await self._handshake()

        summary = SessionSummary(
            orchestrator_config=self.orchestrator_config,
            history_limit=self.config.history_limit,
        )
        while True:
            name = await self._next_step()
            if name is None:
                break
            summary.record(await self._execute_step(name))

        self._transition(RunnerState.TERMINATING)
        await self._report(self.reporter.log_info, self.config.exit_message)
        self._transition(RunnerState.EXITED)

        summary.exit_code = 0
        logger.info(
            "Session finished: %d step(s) executed, %d failed",
            summary.executed,
            summary.failed,
        )
        return summary

    # ---- phases ----

    async def _handshake(self) -> None:
        self._transition(RunnerState.HANDSHAKING)
        try:
            await self.channel.handshake(self._config_callback)
        except Exception as e:
            self._transition(RunnerState.FAILED)
            logger.error("Handshake failed: %s", e)
            raise FatalSessionError(
                message=f"Handshake failed: {e}",
                details={"exception_type": type(e).__name__},
                cause=e,
            ) from e
        self._transition(RunnerState.AWAITING_STEP)

    async def _config_callback(self, config: Any) -> None:
        self.orchestrator_config = config
        if self._on_config is not None:
            result = self._on_config(config)
            if inspect.isawaitable(result):
                await result

    async def _next_step(self) -> Optional[str]:
        try:
            return await self.channel.get_step(self._cleanup_handler, self._teardown_handler)
        except Exception as e:
            self._transition(RunnerState.FAILED)
            raise ProtocolTransportError(
                message=f"get_step failed: {e}",
                details={"exception_type": type(e).__name__},
                cause=e,
            ) from e

    async def _execute_step(self, name: str) -> StepOutcome:
        self._transition(RunnerState.EXECUTING_STEP, step=name)
        started_at = utc_now_iso()
        t0 = time.perf_counter()
        self.reporter.begin_step(name)

        try:
            if self.config.announce_steps:
                await self._report(self.reporter.log_debug, f"Starting step {name}")

            error: Optional[StepExecutionError] = None
            try:
                step = self.registry.resolve(name)
                await self._invoke(step)
            except Exception as e:
                error = normalize_step_error(e, step_name=name)

            reported = self.reporter.completion_sent
            if error is not None and reported:
                # one completion signal per step; the orchestrator already has it
                logger.warning(
                    "Step %s failed after reporting its own completion: %s", name, error.message
                )
            elif error is not None:
                await self._report(self.reporter.send_error, error)
            elif not reported:
                await self._report(self.reporter.send_ok)
        finally:
            self.reporter.end_step()

        if error is not None:
            _drop_tracebacks(error)
        failed = error is not None or self.reporter.error_sent
        outcome = StepOutcome(
            step_name=name,
            status=StepStatus.FAIL if failed else StepStatus.OK,
            started_at=started_at,
            duration_ms=int((time.perf_counter() - t0) * 1000),
            error=error,
            reported=reported,
        )
        self._transition(RunnerState.AWAITING_STEP, step=name)
        return outcome

    async def _invoke(self, step: Step) -> None:
        timeout = self.config.step_timeout_s
        if timeout is None:
            await step.execute()
            return

        task = asyncio.ensure_future(step.execute())
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if not done:
            task.cancel()
            try:
                await task
            except (asyncio.CancelledError, Exception):
                pass
            raise StepExecutionError.timeout(step.name, timeout)
        # the body's own exceptions, TimeoutError included, propagate unchanged
        task.result()

    # ---- internals ----

    async def _report(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> None:
        """Runner-issued channel calls: a failure here means the channel is gone."""
        try:
            await fn(*args)
        except Exception as e:
            self._transition(RunnerState.FAILED)
            raise ProtocolTransportError(
                message=f"channel call failed: {e}",
                details={"exception_type": type(e).__name__},
                cause=e,
            ) from e

    def _transition(self, dst: RunnerState, *, step: Optional[str] = None) -> None:
        src = self._state
        if not can_transition(src, dst):
            raise MonitorError(
                message=f"illegal runner transition {src.value} -> {dst.value}",
                error_code=codes.INVALID_STATE,
                phase="runner",
            )
        self._state = dst
        self.transitions.append(Transition(src=src, dst=dst, ts=utc_now_iso(), step=step))
        logger.debug("runner %s -> %s%s", src.value, dst.value, f" ({step})" if step else "")
