# monitorcore/core/step/step.py
from __future__ import annotations

import inspect
import functools
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Optional

from ..errors import StepExecutionError


StepBody = Callable[[], Awaitable[None]]
CleanupHandler = Callable[[], Awaitable[None]]
TeardownHandler = Callable[[], Awaitable[None]]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def noop_handler() -> None:
    return None


def ensure_async(fn: Callable[[], Any]) -> StepBody:
    """
    Wrap a plain zero-argument callable so it can be awaited like a step body.
    Coroutine functions are returned unchanged.
    """
    if inspect.iscoroutinefunction(fn):
        return fn

    @functools.wraps(fn)
    async def _wrapper() -> None:
        result = fn()
        if inspect.isawaitable(result):
            await result

    return _wrapper


@dataclass(frozen=True)
class Step:
    """
    A named, zero-argument, asynchronous unit of work.
    """
    name: str
    body: StepBody
    description: str = ""

    async def execute(self) -> None:
        await self.body()


class StepStatus(str, Enum):
    OK = "ok"
    FAIL = "fail"


@dataclass
class StepOutcome:
    """
    Result of executing one step. Lives only until it is reported,
    then stays in the session history.
    """
    step_name: str
    status: StepStatus
    started_at: str
    duration_ms: int
    error: Optional[StepExecutionError] = None
    reported: bool = False  # body sent its own completion signal

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.OK

SESSION_HISTORY_LIMIT = 100


class SessionSummary:
    """
    Handshake-to-termination record of one session.

    Counters cover the whole session; only the most recent ``history_limit``
    outcomes are kept.
    """

    def __init__(self, orchestrator_config: Any = None, history_limit: int = SESSION_HISTORY_LIMIT) -> None:
        self.orchestrator_config = orchestrator_config
        self.outcomes: Deque[StepOutcome] = deque(maxlen=history_limit)
        self.executed = 0
        self.failed = 0
        self.exit_code = 0

    def record(self, outcome: StepOutcome) -> None:
        self.executed += 1
        if not outcome.ok:
            self.failed += 1
        self.outcomes.append(outcome)
