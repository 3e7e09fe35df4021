# monitorcore/presets/__init__.py
"""
Presets - ready-made step providers

A step provider is a callable ``(registry, reporter) -> None``.
"""

from .steps import test_monitor, minimal_monitor

__all__ = [
    "test_monitor",
    "minimal_monitor",
]
