# monitorcore/core/errors/exceptions.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from . import codes


def _safe_str(x: Any) -> str:
    try:
        return str(x)
    except Exception:
        return "<unstringifiable>"


def _normalize_error_code(code: Any) -> str:
    """
    Keep error_code stable and finite.
    Unknown codes are downgraded to UNKNOWN so reports keep a fixed taxonomy.
    """
    c = _safe_str(code or codes.UNKNOWN).strip() or codes.UNKNOWN
    if c in codes.KNOWN_CODES:
        return c
    return codes.UNKNOWN


@dataclass
class MonitorError(Exception):
    """
    Base exception for everything the monitor harness raises on purpose.
    """
    message: str
    error_code: str = codes.UNKNOWN
    error_type: str = "MONITOR_ERROR"
    phase: str = "unknown"              # handshake / resolve / execute / transport / config
    details: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        self.error_code = _normalize_error_code(self.error_code)
        super().__init__(self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    @property
    def is_fatal(self) -> bool:
        return self.error_code in codes.SESSION_FATAL_CODES

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "type": self.error_type,
            "error_code": self.error_code,
            "message": self.message,
            "phase": self.phase,
            "details": self.details,
        }
        if self.cause is not None:
            out["cause"] = f"{type(self.cause).__name__}: {_safe_str(self.cause)}"
        return out


@dataclass
class FatalSessionError(MonitorError):
    """Handshake failure. The session cannot proceed into the step loop."""
    error_code: str = codes.HANDSHAKE_FAILED
    error_type: str = "FATAL_SESSION_ERROR"
    phase: str = "handshake"


@dataclass
class ProtocolTransportError(MonitorError):
    """Failure inside the channel itself while the step loop is running."""
    error_code: str = codes.TRANSPORT_FAILED
    error_type: str = "TRANSPORT_ERROR"
    phase: str = "transport"


@dataclass
class StepExecutionError(MonitorError):
    """
    A step failed. Recovered at the per-step boundary and reported to
    the orchestrator through send_error; the session keeps going.
    """
    error_code: str = codes.STEP_RAISED
    error_type: str = "STEP_ERROR"
    phase: str = "execute"
    step_name: Optional[str] = None

    @classmethod
    def timeout(cls, step_name: str, timeout_s: float) -> "StepExecutionError":
        return cls(
            message=f"Step '{step_name}' timed out after {timeout_s:g}s",
            error_code=codes.TIMEOUT,
            details={"timeout_s": timeout_s},
            step_name=step_name,
        )


@dataclass
class StepNotFound(StepExecutionError):
    error_code: str = codes.STEP_NOT_FOUND
    phase: str = "resolve"

    @classmethod
    def for_name(cls, name: str) -> "StepNotFound":
        return cls(message=f"Step not found: {name}", step_name=name)


@dataclass
class DuplicateStepError(MonitorError):
    error_code: str = codes.STEP_ALREADY_REGISTERED
    error_type: str = "REGISTRY_ERROR"
    phase: str = "register"


@dataclass
class RegistryFrozenError(MonitorError):
    error_code: str = codes.REGISTRY_FROZEN
    error_type: str = "REGISTRY_ERROR"
    phase: str = "register"


@dataclass
class ConfigError(MonitorError):
    error_code: str = codes.CONFIG_INVALID
    error_type: str = "CONFIG_ERROR"
    phase: str = "config"


def normalize_step_error(value: Any, step_name: Optional[str] = None) -> StepExecutionError:
    """
    Turn whatever a step produced on failure into a StepExecutionError.

    - StepExecutionError: returned as is (step_name filled in when missing)
    - other exceptions: message is str(exc), or the class name when empty
    - anything else (strings, dicts, ...): message is str(value)
    """
    if isinstance(value, StepExecutionError):
        if value.step_name is None:
            value.step_name = step_name
        return value

    if isinstance(value, MonitorError):
        return StepExecutionError(
            message=value.message,
            error_code=value.error_code,
            details=dict(value.details),
            cause=value,
            step_name=step_name,
        )

    if isinstance(value, BaseException):
        message = _safe_str(value).strip() or type(value).__name__
        return StepExecutionError(
            message=message,
            details={"exception_type": type(value).__name__},
            cause=value,
            step_name=step_name,
        )

    return StepExecutionError(
        message=_safe_str(value),
        details={"value_type": type(value).__name__},
        step_name=step_name,
    )
