# monitorcore/api/__init__.py

from .monitor import Monitor, build_monitor, build_channel, register_providers

__all__ = [
    "Monitor",
    "build_monitor",
    "build_channel",
    "register_providers",
]
