# monitorcore/core/runner/__init__.py
"""
Core runner types for monitorcore.

This package defines the components responsible for:
- Driving the handshake and the step loop
- Tracking the runner state machine

No side effects on import.
"""

from .runner import StepRunner, RunnerConfig, OnConfig, DEFAULT_EXIT_MESSAGE
from .lifecycle import RunnerState, Transition, ALLOWED_TRANSITIONS, can_transition

__all__ = [
    "StepRunner",
    "RunnerConfig",
    "OnConfig",
    "DEFAULT_EXIT_MESSAGE",
    "RunnerState",
    "Transition",
    "ALLOWED_TRANSITIONS",
    "can_transition",
]
