# monitorcore/core/reporting/__init__.py

from .reporter import Reporter

__all__ = ["Reporter"]
