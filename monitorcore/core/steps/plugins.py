# monitorcore/core/steps/plugins.py
"""
Plugin System: load step providers via entry_points.

A step provider is a callable ``(registry, reporter) -> None`` that
registers its steps. Third-party packages expose providers under the
"monitorcore.steps" entry point group:

```toml
[project.entry-points."monitorcore.steps"]
my_monitor = "my_plugin.steps:register"
```

Providers that fail to load are logged and skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List
import importlib.metadata
import logging

from .registry import StepRegistry

if TYPE_CHECKING:
    from ..reporting import Reporter


STEP_ENTRY_POINT_GROUP = "monitorcore.steps"

logger = logging.getLogger(__name__)


def load_entry_points(
    registry: StepRegistry,
    reporter: "Reporter",
    group: str = STEP_ENTRY_POINT_GROUP,
) -> List[str]:
    """
    Discover step providers and let each register into ``registry``.

    Returns:
        Names of the entry points that loaded successfully
    """
    loaded: List[str] = []

    for ep in importlib.metadata.entry_points(group=group):
        try:
            provider = ep.load()
        except Exception as e:
            logger.warning(
                f"Failed to load step provider '{ep.name}' from '{ep.value}': {e}",
                exc_info=True,
            )
            continue

        if not callable(provider):
            logger.warning(f"Step provider '{ep.name}' from '{ep.value}' is not callable. Skipping.")
            continue

        try:
            provider(registry, reporter)
        except Exception as e:
            logger.warning(f"Step provider '{ep.name}' failed to register: {e}", exc_info=True)
            continue

        loaded.append(ep.name)
        logger.info(f"Loaded step provider: {ep.name} from {ep.value}")

    return loaded
