# monitorcore/config/sections.py
"""
Configuration sections

One frozen dataclass per top-level YAML section. Every field has a code
default, so the harness runs without any YAML at all.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple

from ..core.runner import DEFAULT_EXIT_MESSAGE
from ..core.step import SESSION_HISTORY_LIMIT


def _thaw(value: Any) -> Any:
    """Inverse of the loader's freezing, for serialization"""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (tuple, list)):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class SectionConfig:
    """Base configuration for all sections."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, SectionConfig):
                result[f.name] = value.to_dict()
            elif isinstance(value, (tuple, Mapping)):
                result[f.name] = _thaw(value)
            elif isinstance(value, (str, int, float, bool, type(None))):
                result[f.name] = value
            else:
                result[f.name] = str(value)
        return result


@dataclass(frozen=True)
class MonitorSection(SectionConfig):
    """
    name: Monitor name, used in logs
    steps: Import paths of step providers (``module:attr``)
    entry_points: Also load providers from the "monitorcore.steps" entry point group
    """

    name: str = "monitor"
    steps: Tuple[str, ...] = ("monitorcore.presets:test_monitor",)
    entry_points: bool = False


@dataclass(frozen=True)
class RunnerSection(SectionConfig):
    announce_steps: bool = True
    step_timeout_s: Optional[float] = None
    exit_message: str = DEFAULT_EXIT_MESSAGE
    history_limit: int = SESSION_HISTORY_LIMIT


@dataclass(frozen=True)
class ChannelSection(SectionConfig):
    """
    factory: Import path of ``(ChannelSection) -> ProtocolChannel``.
        None runs against the in-process ScriptedChannel.
    script: Steps the ScriptedChannel plays back
    options: Free-form settings for the factory
    """

    factory: Optional[str] = None
    script: Tuple[str, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LoggingSection(SectionConfig):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
