# monitorcore/core/errors/__init__.py
"""
Core error types for monitorcore.

This package defines the components responsible for:
- Representing errors
- Categorizing errors (session-fatal vs. per-step)
- Normalizing arbitrary step failures

No side effects on import.
"""

from . import codes
from .exceptions import (
    MonitorError,
    FatalSessionError,
    ProtocolTransportError,
    StepExecutionError,
    StepNotFound,
    DuplicateStepError,
    RegistryFrozenError,
    ConfigError,
    normalize_step_error,
)

__all__ = [
    "codes",
    "MonitorError",
    "FatalSessionError",
    "ProtocolTransportError",
    "StepExecutionError",
    "StepNotFound",
    "DuplicateStepError",
    "RegistryFrozenError",
    "ConfigError",
    "normalize_step_error",
]
