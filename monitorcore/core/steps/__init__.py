# monitorcore/core/steps/__init__.py

from .registry import StepRegistry
from .plugins import load_entry_points, STEP_ENTRY_POINT_GROUP

__all__ = [
    "StepRegistry",
    "load_entry_points",
    "STEP_ENTRY_POINT_GROUP",
]
