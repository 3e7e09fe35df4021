# monitorcore/core/step/__init__.py
"""
Core step types for monitorcore.

This package defines the basic building blocks for expressing
executable monitor steps and their outcomes.

No side effects on import.
"""

from .step import (
    Step,
    StepBody,
    StepStatus,
    StepOutcome,
    SessionSummary,
    SESSION_HISTORY_LIMIT,
    CleanupHandler,
    TeardownHandler,
    ensure_async,
    noop_handler,
    utc_now_iso,
)

__all__ = [
    "Step",
    "StepBody",
    "StepStatus",
    "StepOutcome",
    "SessionSummary",
    "SESSION_HISTORY_LIMIT",
    "CleanupHandler",
    "TeardownHandler",
    "ensure_async",
    "noop_handler",
    "utc_now_iso",
]
