# monitorcore/core/__init__.py
"""
Core components: steps, registry, channel contract, reporting, runner.

No side effects on import.
"""
