# monitorcore/core/channel/__init__.py
"""
Channel layer: the orchestrator protocol contract and an in-process
scripted implementation.

No side effects on import.
"""

from .base import ProtocolChannel, ConfigCallback
from .scripted import ScriptedChannel, ChannelCall, CLEANUP, TEARDOWN

__all__ = [
    "ProtocolChannel",
    "ConfigCallback",
    "ScriptedChannel",
    "ChannelCall",
    "CLEANUP",
    "TEARDOWN",
]
