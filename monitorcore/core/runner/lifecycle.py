# monitorcore/core/runner/lifecycle.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional


class RunnerState(str, Enum):
    UNSTARTED = "UNSTARTED"
    HANDSHAKING = "HANDSHAKING"
    AWAITING_STEP = "AWAITING_STEP"
    EXECUTING_STEP = "EXECUTING_STEP"
    TERMINATING = "TERMINATING"
    EXITED = "EXITED"
    FAILED = "FAILED"


ALLOWED_TRANSITIONS: Dict[RunnerState, FrozenSet[RunnerState]] = {
    RunnerState.UNSTARTED: frozenset({RunnerState.HANDSHAKING}),
    RunnerState.HANDSHAKING: frozenset({RunnerState.AWAITING_STEP, RunnerState.FAILED}),
    RunnerState.AWAITING_STEP: frozenset(
        {RunnerState.EXECUTING_STEP, RunnerState.TERMINATING, RunnerState.FAILED}
    ),
    RunnerState.EXECUTING_STEP: frozenset({RunnerState.AWAITING_STEP, RunnerState.FAILED}),
    RunnerState.TERMINATING: frozenset({RunnerState.EXITED, RunnerState.FAILED}),
    RunnerState.EXITED: frozenset(),
    RunnerState.FAILED: frozenset(),
}


def can_transition(src: RunnerState, dst: RunnerState) -> bool:
    return dst in ALLOWED_TRANSITIONS[src]


@dataclass(frozen=True)
class Transition:
    """One state change, kept in the runner's history."""
    src: RunnerState
    dst: RunnerState
    ts: str
    step: Optional[str] = None
